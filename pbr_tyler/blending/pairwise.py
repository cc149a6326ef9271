"""
Pairwise Seam Blending.

Composites one source tile onto a destination tile. The weight at each pixel
comes from blend_factor: saturated influence decides outright, otherwise
the tiles' influence-adjusted heights are compared within the epsilon band.
"""

import logging
from typing import List, Sequence

import torch

from ..pbr_map import Tile
from .base import SeamBlender
from .pixel import blend_factor, copy_pixel

logger = logging.getLogger(__name__)


class PairwiseBlender(SeamBlender):
    def __init__(self, epsilon: float = 0.03, blur: bool = True, propagate_influence: bool = True):
        """
        Initialize pairwise blender.

        Args:
            epsilon: Width of the height comparison band
            blur: Smooth the weight field before compositing
            propagate_influence: Mix the source influence into the destination field too
        """
        super().__init__(epsilon, blur)
        self.propagate_influence = propagate_influence

    def blend_weights(self, dst: Tile, sources: Sequence[Tile]) -> List[torch.Tensor]:
        src = self._single_source(sources)
        weights = blend_factor(src.influence, dst.influence, src.pbr.hn, dst.pbr.hn, self.epsilon)
        return [self.smooth(weights)]

    def blend(self, dst: Tile, sources: Sequence[Tile]) -> Tile:
        src = self._single_source(sources)
        self._check_shapes(dst, [src])

        logger.debug("Create blend map.")
        (weights,) = self.blend_weights(dst, [src])

        logger.debug("Mix in pixels.")
        everything = slice(None)
        copy_pixel(
            src.pbr,
            dst.pbr,
            src.influence,
            dst.influence,
            everything,
            everything,
            weights.reshape(-1),
            copy_influence=self.propagate_influence,
        )
        return dst

    def blend_pair(self, src: Tile, dst: Tile) -> Tile:
        return self.blend(dst, [src])

    def _single_source(self, sources: Sequence[Tile]) -> Tile:
        if len(sources) != 1:
            raise ValueError(f"PairwiseBlender blends exactly one source, got {len(sources)}")
        return sources[0]

    def __repr__(self) -> str:
        return (
            f"PairwiseBlender(epsilon={self.epsilon}, blur={self.blur}, "
            f"propagate_influence={self.propagate_influence})"
        )
