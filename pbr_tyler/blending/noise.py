"""
Noise-Based Perturbation.

Coherent fractal gradient noise used to break up the perfectly radial
influence fields (and optionally the height used for layering decisions),
so the seams between tiles do not follow circles.
"""

import logging
import math

import torch

from ..pbr_map import PBRMap

logger = logging.getLogger(__name__)


class FractalNoise:
    def __init__(
        self,
        frequency: float = 1.5,
        octaves: int = 8,
        gain: float = 0.5,
        lacunarity: float = 2.0,
    ):
        """
        Initialize the noise source.

        Args:
            frequency: Noise cycles across one tile width (scaled by 1 / width)
            octaves: Layers of detail
            gain: Amplitude multiplier per octave
            lacunarity: Frequency multiplier per octave
        """
        if frequency <= 0:
            raise ValueError(f"frequency must be > 0, got {frequency}")
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        if gain <= 0:
            raise ValueError(f"gain must be > 0, got {gain}")
        if lacunarity <= 0:
            raise ValueError(f"lacunarity must be > 0, got {lacunarity}")

        self.frequency = frequency
        self.octaves = octaves
        self.gain = gain
        self.lacunarity = lacunarity

    def _smoothstep(self, t: torch.Tensor) -> torch.Tensor:
        t = torch.clamp(t, 0.0, 1.0)
        return t * t * (3 - 2 * t)

    def _perlin_2d(self, x: torch.Tensor, y: torch.Tensor, seed: int) -> torch.Tensor:
        generator = torch.Generator().manual_seed(seed)

        x0 = x.floor().long()
        y0 = y.floor().long()
        cols = int(x0.max().item()) + 2
        rows = int(y0.max().item()) + 2

        # One random unit gradient per lattice point.
        angles = torch.rand((rows, cols), generator=generator) * (2 * math.pi)
        grad_x = torch.cos(angles).to(x.device)
        grad_y = torch.sin(angles).to(x.device)

        def corner(ix: torch.Tensor, iy: torch.Tensor) -> torch.Tensor:
            return grad_x[iy, ix] * (x - ix.float()) + grad_y[iy, ix] * (y - iy.float())

        u = self._smoothstep(x - x0.float())
        v = self._smoothstep(y - y0.float())

        top = corner(x0, y0) * (1 - u) + corner(x0 + 1, y0) * u
        bottom = corner(x0, y0 + 1) * (1 - u) + corner(x0 + 1, y0 + 1) * u

        # Gradient noise peaks at sqrt(0.5); rescale to roughly [-1, 1].
        return (top * (1 - v) + bottom * v) * math.sqrt(2.0)

    def _fbm_2d(self, x: torch.Tensor, y: torch.Tensor, seed: int) -> torch.Tensor:
        result = torch.zeros_like(x)

        amplitude = 1.0
        total = 0.0
        frequency = 1.0

        for octave in range(self.octaves):
            result += amplitude * self._perlin_2d(x * frequency, y * frequency, seed=seed + octave * 1000)
            total += amplitude
            amplitude *= self.gain
            frequency *= self.lacunarity

        return torch.clamp(result / total, -1.0, 1.0)

    def sample(self, width: int, height: int, seed: int, device="cpu") -> torch.Tensor:
        """
        Noise evaluated at every integer pixel coordinate of a tile.

        Returns:
            (height, width) field in [0, 1]
        """
        scale = self.frequency / width
        ys = torch.arange(height, device=device, dtype=torch.float32) * scale
        xs = torch.arange(width, device=device, dtype=torch.float32) * scale
        yy, xx = torch.meshgrid(ys, xs, indexing="ij")

        raw = self._fbm_2d(xx, yy, seed)
        return raw * 0.5 + 0.5

    def __repr__(self) -> str:
        return (
            f"FractalNoise(frequency={self.frequency}, octaves={self.octaves}, "
            f"gain={self.gain}, lacunarity={self.lacunarity})"
        )


def _check_strength(strength: float) -> None:
    if not 0.0 <= strength <= 1.0:
        raise ValueError(f"noise strength must be within [0, 1], got {strength}")


def apply_influence_noise(field: torch.Tensor, noise: torch.Tensor, strength: float) -> torch.Tensor:
    """
    Mix noise into an influence field in place.

    The noisy value is weighted back by the field itself, so pixels the tile
    fully owns (influence 1) stay at 1.
    """
    _check_strength(strength)
    if noise.shape != field.shape:
        raise ValueError(f"Noise shape {tuple(noise.shape)} does not match field shape {tuple(field.shape)}")

    noisy = torch.clamp(field * (1.0 - strength) + strength * noise, 0.0, 1.0)
    field.copy_(torch.clamp(field + (1.0 - field) * noisy, 0.0, 1.0))
    return field


def apply_height_noise(pbr: PBRMap, noise: torch.Tensor, strength: float) -> torch.Tensor:
    """Derive the perturbed height channel (hn) from h. h itself is untouched."""
    _check_strength(strength)
    if noise.shape != pbr.h.shape:
        raise ValueError(f"Noise shape {tuple(noise.shape)} does not match map shape {tuple(pbr.h.shape)}")

    noisy = torch.clamp(pbr.h * (1.0 - strength) + strength * noise, 0.0, 1.0)
    pbr.hn.copy_(torch.clamp(pbr.h + (1.0 - pbr.h) * noisy, 0.0, 1.0))
    return pbr.hn


def tile_seeds(count: int, seed: int) -> list:
    """Independent per-tile seeds drawn from one master seed."""
    generator = torch.Generator().manual_seed(seed)
    return torch.randint(0, 2 ** 31 - 1, (count,), generator=generator).tolist()
