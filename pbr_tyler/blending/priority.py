"""
Priority Ranked N-way Seam Blending.

Up to four candidate tiles compete for every pixel. Candidates are ranked
by their influence-adjusted height; each one then claims a share of what
the higher ranked candidates left over, in proportion to how decisively it
beats the next candidate down:

    weight_j = (1 - sum(weight_0 .. weight_j-1)) * factor_eps(s_j, s_j+1) ** 0.25

The lowest candidate is compared against a floor of 0. After optional
blurring, weights are normalized per pixel so they sum to 1, with the
denominator clamped away from zero:

    Final_Weight = Weight / max(Sum(Weight), ε)

Compositing starts from a full copy of the first (base) candidate and then
paints the candidates from the lowest rank up, so the top ranked candidate
is applied last.
"""

import logging
from typing import List, Sequence, Tuple

import torch

from ..pbr_map import CHANNELS, VECTOR_CHANNELS, PBRMap, Tile
from .base import SeamBlender
from .pixel import adjusted_height, copy_pixel, factor_eps

logger = logging.getLogger(__name__)


class PriorityBlender(SeamBlender):
    """
    N-way blender; the first source is the base layer and is also a
    candidate for the ranking.
    """

    max_sources = 4

    def __init__(self, epsilon: float = 0.03, blur: bool = True):
        """
        Initialize priority blender.

        Args:
            epsilon: Width of the rank comparison band
            blur: Blur every candidate's weight field before normalizing
        """
        super().__init__(epsilon, blur)
        self._epsilon = 1e-8

    def _rank(self, sources: Sequence[Tile]) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Per-pixel candidate order, best first.

        Returns:
            order (N, H, W) candidate indices, plus scores and influence in that order
        """
        scores = torch.stack([adjusted_height(tile.influence, tile.pbr.hn) for tile in sources])
        influence = torch.stack([tile.influence for tile in sources])

        # Two stable sorts: score decides, influence breaks ties, then source order.
        _, by_influence = torch.sort(influence, dim=0, descending=True, stable=True)
        _, by_score = torch.sort(torch.gather(scores, 0, by_influence), dim=0, descending=True, stable=True)
        order = torch.gather(by_influence, 0, by_score)

        return order, torch.gather(scores, 0, order), torch.gather(influence, 0, order)

    def ranked_weights(self, sorted_scores: torch.Tensor, sorted_influence: torch.Tensor) -> torch.Tensor:
        """
        Raw weights per rank position.

        Args:
            sorted_scores: (N, H, W) adjusted heights, descending along dim 0
            sorted_influence: (N, H, W) matching influence values

        Returns:
            (N, H, W) weights, rank 0 first
        """
        count = sorted_scores.shape[0]
        floor = torch.zeros_like(sorted_scores[0])
        ones = torch.ones_like(floor)

        weights = torch.zeros_like(sorted_scores)
        claimed = torch.zeros_like(floor)

        for j in range(count):
            below = sorted_scores[j + 1] if j + 1 < count else floor
            factor = torch.sqrt(torch.sqrt(factor_eps(sorted_scores[j], below, self.epsilon)))

            # Saturated influence decides outright, as in blend_factor.
            factor = torch.where(sorted_influence[j] == 1.0, ones, factor)
            factor = torch.where(sorted_influence[j] == 0.0, floor, factor)

            weights[j] = (1.0 - claimed) * factor
            claimed = claimed + weights[j]

        return weights

    def _weights_and_order(self, sources: Sequence[Tile]) -> Tuple[torch.Tensor, torch.Tensor]:
        order, sorted_scores, sorted_influence = self._rank(sources)
        ranked = self.ranked_weights(sorted_scores, sorted_influence)

        weights = torch.zeros_like(ranked).scatter_(0, order, ranked)

        if self.blur:
            for index in range(weights.shape[0]):
                logger.debug(f"Blur blend map {index + 1}")
                weights[index] = self.smooth(weights[index])

        total = weights.sum(dim=0, keepdim=True)
        weights = weights / total.clamp(min=self._epsilon)
        return weights, order

    def blend_weights(self, dst: Tile, sources: Sequence[Tile]) -> List[torch.Tensor]:
        self._check_sources(dst, sources)
        weights, _ = self._weights_and_order(sources)
        return list(weights.unbind(0))

    def blend(self, dst: Tile, sources: Sequence[Tile]) -> Tile:
        self._check_sources(dst, sources)

        logger.debug("Compute blend factors.")
        weights, order = self._weights_and_order(sources)

        logger.debug("Mix in pixels.")
        stacks = {name: torch.stack([tile.pbr.channel(name) for tile in sources]) for name in CHANNELS}
        everything = slice(None)

        copy_pixel(sources[0].pbr, dst.pbr, None, None, everything, everything, 1.0, copy_influence=False)

        for rank in reversed(range(len(sources))):
            pick = order[rank].unsqueeze(0)
            layer = self._gather_layer(stacks, pick)
            factor = torch.gather(weights, 0, pick).squeeze(0)
            copy_pixel(layer, dst.pbr, None, None, everything, everything, factor.reshape(-1), copy_influence=False)

        return dst

    def _gather_layer(self, stacks: dict, pick: torch.Tensor) -> PBRMap:
        """Per-pixel selection of one candidate's channels."""
        channels = {}
        for name, stack in stacks.items():
            if name in VECTOR_CHANNELS:
                index = pick.unsqueeze(-1).expand(1, *stack.shape[1:])
            else:
                index = pick
            channels[name] = torch.gather(stack, 0, index).squeeze(0)
        return PBRMap(**channels)

    def _check_sources(self, dst: Tile, sources: Sequence[Tile]) -> None:
        if not 1 <= len(sources) <= self.max_sources:
            raise ValueError(f"PriorityBlender takes 1 to {self.max_sources} sources, got {len(sources)}")
        self._check_shapes(dst, sources)
