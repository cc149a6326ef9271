"""
Abstract Base Class for Seam Blending Strategies.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

import torch

from ..pbr_map import Tile
from .gaussian import blur_map


class SeamBlender(ABC):
    def __init__(self, epsilon: float = 0.03, blur: bool = True):
        if epsilon <= 0:
            raise ValueError(f"epsilon must be > 0, got {epsilon}")

        self.epsilon = epsilon
        self.blur = blur

    @abstractmethod
    def blend_weights(self, dst: Tile, sources: Sequence[Tile]) -> List[torch.Tensor]:
        """One (H, W) weight field per source tile."""

    @abstractmethod
    def blend(self, dst: Tile, sources: Sequence[Tile]) -> Tile:
        """Composite sources onto dst in place and return dst."""

    def smooth(self, weights: torch.Tensor) -> torch.Tensor:
        return blur_map(weights) if self.blur else weights

    def _check_shapes(self, dst: Tile, sources: Sequence[Tile]) -> None:
        for index, tile in enumerate(sources):
            if tile.pbr.size != dst.pbr.size:
                raise ValueError(
                    f"Source {index} is {tile.pbr.width}x{tile.pbr.height}, "
                    f"destination is {dst.pbr.width}x{dst.pbr.height}"
                )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(epsilon={self.epsilon}, blur={self.blur})"
