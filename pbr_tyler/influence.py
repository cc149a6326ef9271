"""
Influence Fields.

An influence field says how strongly a tile's content should win at each
pixel when it competes with other tiles. Every role starts from the same
radial falloff: close to 1 around the tile center, 0 towards the border.
"""

import logging

import torch

logger = logging.getLogger(__name__)

# Inner radius divisor per falloff profile.
FALLOFF_PROFILES = {
    "standard": 8,
    "wide": 32,
}


def radial_distance(width: int, height: int, device="cpu") -> torch.Tensor:
    """Euclidean distance of every pixel from the integer tile center."""
    ys = torch.arange(height, device=device, dtype=torch.float32) - (height // 2)
    xs = torch.arange(width, device=device, dtype=torch.float32) - (width // 2)
    yy, xx = torch.meshgrid(ys, xs, indexing="ij")
    return torch.sqrt(xx ** 2 + yy ** 2)


def radial_falloff(width: int, height: int, sharpness: float, profile: str = "standard", device="cpu") -> torch.Tensor:
    """
    Radial influence falloff.

    Args:
        width: Tile width (also drives the ramp radii)
        height: Tile height
        sharpness: Exponent applied to the ramp; raising it concentrates
            high influence around the center
        profile: "standard" (inner radius width/8) or "wide" (width/32)

    Returns:
        (height, width) field in [0, 1]
    """
    if profile not in FALLOFF_PROFILES:
        raise ValueError(f"Unknown falloff profile: '{profile}'. Available: {list(FALLOFF_PROFILES)}")
    if sharpness < 0:
        raise ValueError(f"sharpness must be >= 0, got {sharpness}")

    inner = width / FALLOFF_PROFILES[profile]
    outer = width / 2.0
    span = max(outer - inner, 1e-6)

    ramp = torch.clamp(radial_distance(width, height, device) / span, 0.0, 1.0)
    return torch.pow(1.0 - ramp, sharpness)


def influence_base(width: int, height: int, sharpness: float, profile: str = "standard", device="cpu") -> torch.Tensor:
    return radial_falloff(width, height, sharpness, profile, device)


def influence_corner(width: int, height: int, sharpness: float, profile: str = "standard", device="cpu") -> torch.Tensor:
    return radial_falloff(width, height, sharpness, profile, device)


def influence_edge(width: int, height: int, sharpness: float, profile: str = "standard", device="cpu") -> torch.Tensor:
    return radial_falloff(width, height, sharpness, profile, device)


def influence_empty(width: int, height: int, device="cpu") -> torch.Tensor:
    """No claim anywhere; used for composite buffers filled by later copies."""
    return torch.zeros((height, width), device=device)


INFLUENCE_ROLES = {
    "base": influence_base,
    "corner": influence_corner,
    "edge": influence_edge,
}


def make_influence(role: str, width: int, height: int, sharpness: float, profile: str = "standard", device="cpu") -> torch.Tensor:
    if role not in INFLUENCE_ROLES:
        raise ValueError(f"Unknown tile role: '{role}'. Available roles: {list(INFLUENCE_ROLES)}")

    logger.debug(f"Influence field '{role}' {width}x{height} (sharpness={sharpness}, profile={profile})")
    return INFLUENCE_ROLES[role](width, height, sharpness, profile, device)
