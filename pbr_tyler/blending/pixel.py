"""
Per-pixel blend primitives.

Every function accepts plain floats or torch tensors so the same code drives
single pixel checks and whole-tile vectorised passes.
"""

import logging
from typing import Optional, Union

import torch

from ..pbr_map import CHANNELS, VECTOR_CHANNELS, PBRMap

logger = logging.getLogger(__name__)

Number = Union[float, torch.Tensor]


def mix(a, b, f):
    """Linear interpolation from a (f=0) to b (f=1). No gamma handling."""
    return b * f + a * (1.0 - f)


def factor_eps(a: Number, b: Number, eps: float) -> Number:
    """
    Smooth comparison of a against b.

    1 when a clearly exceeds b (by more than eps), 0 when it is clearly below,
    and a linear ramp across the band [-eps, eps] in between.
    """
    dist = a - b

    if isinstance(dist, torch.Tensor):
        ones = torch.ones_like(dist)
        zeros = torch.zeros_like(dist)
        if eps <= 0:
            return torch.where(dist > 0, ones, torch.where(dist < 0, zeros, ones * 0.5))
        ramp = (dist + eps) / (2.0 * eps)
        return torch.where(dist > eps, ones, torch.where(dist < -eps, zeros, ramp))

    if dist > eps:
        return 1.0
    if dist < -eps:
        return 0.0
    if eps <= 0:
        return 0.5
    return (dist + eps) / (2.0 * eps)


def factor_eps_top(a: Number, b: Number, eps: float) -> Number:
    """One-sided factor_eps: anything at or below b is a hard 0."""
    dist = a - b

    if isinstance(dist, torch.Tensor):
        ones = torch.ones_like(dist)
        zeros = torch.zeros_like(dist)
        if eps <= 0:
            return torch.where(dist > 0, ones, zeros)
        return torch.where(dist > eps, ones, torch.where(dist < 0, zeros, dist / eps))

    if dist > eps:
        return 1.0
    if dist < 0 or eps <= 0:
        return 0.0
    return dist / eps


def adjusted_height(f: Number, h: Number) -> Number:
    """Height pre-combined with the tile's own influence."""
    return h * f + (1.0 - f) * (f * h)


def blend_factor(f1: Number, f2: Number, h1: Number, h2: Number, eps: float = 0.01) -> Number:
    """
    How strongly tile 1 should replace tile 2 at a pixel.

    Saturated influence short-circuits: f1 == 1 always wins, f1 == 0 never
    does. Otherwise the adjusted heights of both tiles are compared.
    """
    if isinstance(f1, torch.Tensor):
        compared = factor_eps(adjusted_height(f1, h1), adjusted_height(f2, h2), eps)
        compared = torch.as_tensor(compared, dtype=f1.dtype, device=f1.device).expand_as(f1)
        return torch.where(
            f1 == 1.0,
            torch.ones_like(f1),
            torch.where(f1 == 0.0, torch.zeros_like(f1), compared),
        )

    if f1 == 1.0:
        return 1.0
    if f1 == 0.0:
        return 0.0
    return factor_eps(adjusted_height(f1, h1), adjusted_height(f2, h2), eps)


def copy_pixel(
    src: PBRMap,
    dst: PBRMap,
    src_f: Optional[torch.Tensor],
    dst_f: Optional[torch.Tensor],
    src_idx,
    dst_idx,
    blend_f: Number = 1.0,
    copy_influence: bool = True,
) -> None:
    """
    Copy or mix pixels of src into dst, in place.

    Indices are flat pixel indices (an int, a slice or an index tensor), the
    same set of positions on both sides. blend_f is a scalar or a tensor with
    one factor per addressed pixel:

    - blend_f <= 0: destination untouched
    - blend_f == 1: exact overwrite of every channel
    - otherwise:    every channel interpolated with the same factor

    When copy_influence is set the influence value follows the same rule.
    """
    src_pixels = src.flat()
    dst_pixels = dst.flat()

    if not isinstance(blend_f, torch.Tensor):
        if blend_f <= 0.0:
            return

        for name in CHANNELS:
            if blend_f == 1.0:
                dst_pixels[name][dst_idx] = src_pixels[name][src_idx]
            else:
                dst_pixels[name][dst_idx] = mix(dst_pixels[name][dst_idx], src_pixels[name][src_idx], blend_f)

        if copy_influence and src_f is not None and dst_f is not None:
            src_inf = src_f.view(-1)
            dst_inf = dst_f.view(-1)
            if blend_f == 1.0:
                dst_inf[dst_idx] = src_inf[src_idx]
            else:
                dst_inf[dst_idx] = mix(dst_inf[dst_idx], src_inf[src_idx], blend_f)
        return

    factor = blend_f.reshape(-1).to(dst.h.dtype)

    def _apply(current: torch.Tensor, incoming: torch.Tensor, fac: torch.Tensor) -> torch.Tensor:
        blended = mix(current, incoming, fac)
        blended = torch.where(fac == 1.0, incoming, blended)
        return torch.where(fac <= 0.0, current, blended)

    for name in CHANNELS:
        current = dst_pixels[name][dst_idx]
        incoming = src_pixels[name][src_idx]
        fac = factor.unsqueeze(-1) if name in VECTOR_CHANNELS else factor
        dst_pixels[name][dst_idx] = _apply(current, incoming, fac)

    if copy_influence and src_f is not None and dst_f is not None:
        src_inf = src_f.view(-1)
        dst_inf = dst_f.view(-1)
        dst_inf[dst_idx] = _apply(dst_inf[dst_idx], src_inf[src_idx], factor)
