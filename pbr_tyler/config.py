"""
Run configuration for the tiling pipeline.
"""

import random
from dataclasses import asdict, dataclass
from typing import Optional

from .influence import FALLOFF_PROFILES

CONVENTION_NAMES = ("2x2", "3x1")


@dataclass
class TylerConfig:
    """
    Tuning parameters for one run.

    Attributes:
        convention: Atlas layout, "2x2" (base, corner, two edge sources) or
            "3x1" (base, corner, edge source side by side)
        sharpness: Influence falloff exponent; higher concentrates each tile's
            claim around its center
        noise: Perturb influence fields with fractal noise
        noise_strength: How much noise replaces the radial falloff (0..1)
        height_noise_strength: Noise mixed into the height used for layering
            decisions (0 disables)
        epsilon: Width of the comparison band; larger gives softer transitions
        blur: Blur the blend weight fields
        seed: Master noise seed. None draws a fresh one every run.
        falloff_profile: "standard" (inner radius width/8) or "wide" (width/32)
        noise_frequency: Noise cycles per tile width
        noise_octaves: Fractal layers
        noise_gain: Amplitude multiplier per octave
        noise_lacunarity: Frequency multiplier per octave
    """

    convention: str = "2x2"
    sharpness: float = 0.125
    noise: bool = True
    noise_strength: float = 0.8
    height_noise_strength: float = 0.0
    epsilon: float = 0.03
    blur: bool = True
    seed: Optional[int] = None
    falloff_profile: str = "standard"
    noise_frequency: float = 1.5
    noise_octaves: int = 8
    noise_gain: float = 0.5
    noise_lacunarity: float = 2.0

    def __post_init__(self):
        if self.convention not in CONVENTION_NAMES:
            raise ValueError(f"Unknown atlas convention: '{self.convention}'. Available: {list(CONVENTION_NAMES)}")
        if self.sharpness < 0:
            raise ValueError(f"sharpness must be >= 0, got {self.sharpness}")
        if not 0.0 <= self.noise_strength <= 1.0:
            raise ValueError(f"noise_strength must be within [0, 1], got {self.noise_strength}")
        if not 0.0 <= self.height_noise_strength <= 1.0:
            raise ValueError(f"height_noise_strength must be within [0, 1], got {self.height_noise_strength}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be > 0, got {self.epsilon}")
        if self.falloff_profile not in FALLOFF_PROFILES:
            raise ValueError(f"Unknown falloff profile: '{self.falloff_profile}'. Available: {list(FALLOFF_PROFILES)}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be >= 0, got {self.seed}")

    def resolve_seed(self) -> int:
        """The configured seed, or a fresh random one."""
        if self.seed is not None:
            return self.seed
        return random.randrange(2 ** 31)

    def to_dict(self) -> dict:
        return asdict(self)
