"""
Toroidal Gaussian Blur.

Smooths scalar weight fields with a small fixed 5x5 kernel. Sampling wraps
around both axes because the working tile repeats: the pixel left of
column 0 is the last column.
"""

import math

import torch
import torch.nn.functional as F

KERNEL_RADIUS = 2
KERNEL_SIGMA = 0.83

_kernel_cache = {}


def gaussian_weight(x: int, y: int, std_dev: float) -> float:
    """2D gaussian evaluated at an integer offset, clamped to [0, 1]."""
    a = 1.0 / (2.0 * math.pi * std_dev * std_dev)
    b = (x * x + y * y) / (2.0 * std_dev * std_dev)
    return min(max(a * math.exp(-b), 0.0), 1.0)


def gaussian_kernel(radius: int = KERNEL_RADIUS, sigma: float = KERNEL_SIGMA) -> torch.Tensor:
    """Square kernel of sampled gaussian weights, normalised to sum to 1."""
    cache_key = (radius, sigma)
    if cache_key in _kernel_cache:
        return _kernel_cache[cache_key]

    offsets = range(-radius, radius + 1)
    kernel = torch.tensor(
        [[gaussian_weight(dx, dy, sigma) for dx in offsets] for dy in offsets],
        dtype=torch.float32,
    )
    kernel = kernel / kernel.sum()
    _kernel_cache[cache_key] = kernel
    return kernel


def blur_map(field: torch.Tensor, radius: int = KERNEL_RADIUS, sigma: float = KERNEL_SIGMA) -> torch.Tensor:
    """
    Blur a (H, W) weight field with wrap-around addressing.

    Args:
        field: Scalar field, one value per tile pixel
        radius: Kernel half size (2 gives the 5x5 kernel)
        sigma: Gaussian standard deviation in pixels

    Returns:
        New (H, W) tensor; the input is left untouched
    """
    if field.dim() != 2:
        raise ValueError(f"blur_map expects a 2D field, got shape {tuple(field.shape)}")

    height, width = field.shape
    if height < radius or width < radius:
        raise ValueError(f"Field {width}x{height} is too small for a kernel radius of {radius}")

    kernel = gaussian_kernel(radius, sigma).to(device=field.device, dtype=field.dtype)
    kernel = kernel.unsqueeze(0).unsqueeze(0)

    x = field.unsqueeze(0).unsqueeze(0)
    x = F.pad(x, (radius, radius, radius, radius), mode="circular")
    out = F.conv2d(x, kernel)

    return out.squeeze(0).squeeze(0)
