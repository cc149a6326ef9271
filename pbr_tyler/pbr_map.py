"""
PBR map container.

A PBRMap holds every channel of one texture set as float tensors laid out
over the same (height, width) grid:

- d:  diffuse colour, (H, W, 4), 0..1
- n:  normal vector, (H, W, 3), -1..1
- h:  raw height, (H, W), 0..1
- hn: noise perturbed height, (H, W), 0..1 (starts as a copy of h)
- r:  roughness, (H, W), 0..1
- m:  metalness, (H, W), 0..1

Pixel (x, y) lives at flat index y * width + x in every channel, see flat().
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import torch

CHANNELS = ("d", "n", "h", "hn", "r", "m")
VECTOR_CHANNELS = {"d": 4, "n": 3}


class PBRMap:
    def __init__(
        self,
        d: torch.Tensor,
        n: torch.Tensor,
        h: torch.Tensor,
        r: torch.Tensor,
        m: torch.Tensor,
        hn: Optional[torch.Tensor] = None,
    ):
        if h.dim() != 2:
            raise ValueError(f"height channel must be 2D (H, W), got shape {tuple(h.shape)}")

        height, width = h.shape
        if hn is None:
            hn = h.clone()

        expected = {
            "d": (height, width, 4),
            "n": (height, width, 3),
            "h": (height, width),
            "hn": (height, width),
            "r": (height, width),
            "m": (height, width),
        }
        given = {"d": d, "n": n, "h": h, "hn": hn, "r": r, "m": m}
        for name, tensor in given.items():
            if tuple(tensor.shape) != expected[name]:
                raise ValueError(
                    f"Channel '{name}' has shape {tuple(tensor.shape)}, expected {expected[name]}"
                )

        self.d = d.float().contiguous()
        self.n = n.float().contiguous()
        self.h = h.float().contiguous()
        self.hn = hn.float().contiguous()
        self.r = r.float().contiguous()
        self.m = m.float().contiguous()

    @classmethod
    def allocate(cls, width: int, height: int, device="cpu") -> "PBRMap":
        """Blank map: opaque black diffuse, zero normals and scalars."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Map size must be positive, got {width}x{height}")

        d = torch.zeros((height, width, 4), device=device)
        d[..., 3] = 1.0
        return cls(
            d=d,
            n=torch.zeros((height, width, 3), device=device),
            h=torch.zeros((height, width), device=device),
            r=torch.zeros((height, width), device=device),
            m=torch.zeros((height, width), device=device),
        )

    @classmethod
    def from_images(cls, diffuse: torch.Tensor, normal: torch.Tensor, hrm: torch.Tensor) -> "PBRMap":
        """
        Build a map from decoded images in 0..1.

        Args:
            diffuse: (H, W, 3) or (H, W, 4) colour. A missing alpha becomes 1.
            normal: (H, W, >=3) encoded normal, remapped to -1..1.
            hrm: (H, W, >=3) packed height, roughness, metalness.
        """
        shapes = {tuple(img.shape[:2]) for img in (diffuse, normal, hrm)}
        if len(shapes) != 1:
            raise ValueError(f"Channel images differ in size: {sorted(shapes)}")

        diffuse = diffuse.float()
        if diffuse.shape[-1] == 3:
            alpha = torch.ones(diffuse.shape[:2] + (1,), dtype=diffuse.dtype, device=diffuse.device)
            diffuse = torch.cat([diffuse, alpha], dim=-1)

        hrm = hrm.float()
        return cls(
            d=diffuse[..., :4],
            n=normal[..., :3].float() * 2.0 - 1.0,
            h=hrm[..., 0],
            r=hrm[..., 1],
            m=hrm[..., 2],
        )

    def to_images(self) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """Inverse of from_images: (diffuse RGBA, normal RGB, hrm RGB), all 0..1."""
        length = torch.linalg.vector_norm(self.n, dim=-1, keepdim=True)
        normal = torch.where(length > 0, self.n / length.clamp(min=1e-8), self.n)
        normal = (normal + 1.0) * 0.5
        hrm = torch.stack([self.h, self.r, self.m], dim=-1)
        return self.d.clamp(0.0, 1.0), normal.clamp(0.0, 1.0), hrm.clamp(0.0, 1.0)

    @property
    def height(self) -> int:
        return self.h.shape[0]

    @property
    def width(self) -> int:
        return self.h.shape[1]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def channel(self, name: str) -> torch.Tensor:
        return getattr(self, name)

    def flat(self) -> Dict[str, torch.Tensor]:
        """Views of every channel indexed by flat pixel index (writes go through)."""
        pixels = self.width * self.height
        views = {}
        for name in CHANNELS:
            tensor = self.channel(name)
            if name in VECTOR_CHANNELS:
                views[name] = tensor.view(pixels, VECTOR_CHANNELS[name])
            else:
                views[name] = tensor.view(pixels)
        return views

    def clone(self) -> "PBRMap":
        return PBRMap(
            d=self.d.clone(),
            n=self.n.clone(),
            h=self.h.clone(),
            r=self.r.clone(),
            m=self.m.clone(),
            hn=self.hn.clone(),
        )

    def __repr__(self) -> str:
        return f"PBRMap(width={self.width}, height={self.height})"


@dataclass
class Tile:
    """A working PBR map together with its influence field."""

    pbr: PBRMap
    influence: torch.Tensor

    def __post_init__(self):
        if tuple(self.influence.shape) != (self.pbr.height, self.pbr.width):
            raise ValueError(
                f"Influence field shape {tuple(self.influence.shape)} does not match "
                f"map size {(self.pbr.height, self.pbr.width)}"
            )
        self.influence = self.influence.float().contiguous()

    def clone(self) -> "Tile":
        return Tile(self.pbr.clone(), self.influence.clone())
