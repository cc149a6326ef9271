"""
Seam Blending Module for PBR Tyler.

Available blending modes:
- pairwise: one source composited onto a destination by influence and height
- priority: up to four candidates ranked per pixel and composited in rank order

Shared building blocks live next to the blenders:
- pixel: mix, copy_pixel, blend_factor and the epsilon-banded comparisons
- gaussian: toroidal 5x5 blur for weight fields
- noise: fractal gradient noise and the influence/height perturbations
"""

from .base import SeamBlender
from .pairwise import PairwiseBlender
from .priority import PriorityBlender

BLENDERS = {
    "pairwise": PairwiseBlender,
    "priority": PriorityBlender,
}


def get_blender(mode: str, epsilon: float = 0.03, **kwargs):
    """
    Factory function to create a blender instance.

    Args:
        mode: Blending algorithm name (pairwise, priority)
        epsilon: Width of the comparison band
        **kwargs: Additional arguments passed to specific blenders
            - blur: smooth weight fields (both)
            - pairwise: propagate_influence

    Returns:
        SeamBlender instance
    """
    if mode not in BLENDERS:
        available = list(BLENDERS.keys())
        raise ValueError(f"Unknown blend mode: '{mode}'. Available modes: {available}")

    return BLENDERS[mode](epsilon, **kwargs)


def get_available_blend_modes() -> list:
    """Return list of available blend mode names."""
    return list(BLENDERS.keys())


__all__ = [
    "SeamBlender",
    "get_blender",
    "get_available_blend_modes",
    "PairwiseBlender",
    "PriorityBlender",
]
