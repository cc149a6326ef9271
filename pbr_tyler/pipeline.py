"""
Tiling Pipeline.

Turns an oversized PBR capture into one seamless tile. The capture holds a
base tile plus separately rendered corner and edge sources. Those sources
are mirrored so their seamless centers sit on the tile border, then blended
over the base:

1. Size working tiles from the atlas and convention
2. Build role influence fields
3. Extract the working sources from the atlas
4. Perturb influence (and optionally height) with per-tile noise
5. Build the corner and edge composites
6. Blend seams (4-way priority for 2x2, pairwise chain for 3x1)
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .blending import get_blender
from .blending.noise import FractalNoise, apply_height_noise, apply_influence_noise, tile_seeds
from .config import TylerConfig
from .influence import influence_empty, make_influence
from .pbr_map import PBRMap, Tile
from .regions import copy_from_wide_map, swap_halves_horizontal, swap_halves_vertical, swap_quadrants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AtlasConvention:
    """Layout of the source roles inside the atlas, in tile units."""

    name: str
    columns: int
    rows: int
    blend_mode: str
    # role -> (column, row) of the region in the atlas
    regions: Tuple[Tuple[str, Tuple[int, int]], ...]

    def tile_size(self, atlas_width: int, atlas_height: int) -> Tuple[int, int]:
        width = atlas_width // self.columns
        height = atlas_height // self.rows
        if width < 2 or height < 2:
            raise ValueError(
                f"Atlas {atlas_width}x{atlas_height} is too small for the {self.name} convention"
            )
        return width, height


CONVENTIONS: Dict[str, AtlasConvention] = {
    "2x2": AtlasConvention(
        name="2x2",
        columns=2,
        rows=2,
        blend_mode="priority",
        regions=(
            ("base", (0, 0)),
            ("corner", (1, 0)),
            ("edge_ud", (0, 1)),
            ("edge_lr", (1, 1)),
        ),
    ),
    "3x1": AtlasConvention(
        name="3x1",
        columns=3,
        rows=1,
        blend_mode="pairwise",
        regions=(
            ("base", (0, 0)),
            ("corner", (1, 0)),
            ("edge", (2, 0)),
        ),
    ),
}

ROLE_INFLUENCE = {
    "base": "base",
    "corner": "corner",
    "edge": "edge",
    "edge_ud": "edge",
    "edge_lr": "edge",
}


def get_convention(name: str) -> AtlasConvention:
    if name not in CONVENTIONS:
        raise ValueError(f"Unknown atlas convention: '{name}'. Available: {list(CONVENTIONS)}")
    return CONVENTIONS[name]


def build_influence_fields(convention: AtlasConvention, width: int, height: int, config: TylerConfig, device="cpu") -> dict:
    logger.info("- Create influence maps.")
    return {
        role: make_influence(ROLE_INFLUENCE[role], width, height, config.sharpness, config.falloff_profile, device)
        for role, _ in convention.regions
    }


def extract_sources(atlas: PBRMap, convention: AtlasConvention, width: int, height: int, fields: dict) -> dict:
    logger.info("- Split into working sources.")
    sources = {}
    for role, (column, row) in convention.regions:
        tile = PBRMap.allocate(width, height, device=atlas.h.device)
        copy_from_wide_map(atlas, tile, column * width, row * height)
        sources[role] = Tile(tile, fields[role])
    return sources


def perturb_sources(sources: dict, config: TylerConfig, seed: int) -> None:
    """Independently seeded noise for every source tile, in place."""
    if not config.noise and config.height_noise_strength <= 0:
        return

    logger.info(f"- Apply noise (seed={seed}).")
    noise = FractalNoise(
        frequency=config.noise_frequency,
        octaves=config.noise_octaves,
        gain=config.noise_gain,
        lacunarity=config.noise_lacunarity,
    )
    seeds = tile_seeds(2 * len(sources), seed)

    for index, (role, tile) in enumerate(sources.items()):
        width, height = tile.pbr.size
        device = tile.pbr.h.device
        if config.noise:
            logger.debug(f"Influence noise for '{role}' (seed={seeds[2 * index]})")
            apply_influence_noise(tile.influence, noise.sample(width, height, seeds[2 * index], device), config.noise_strength)
        if config.height_noise_strength > 0:
            logger.debug(f"Height noise for '{role}' (seed={seeds[2 * index + 1]})")
            apply_height_noise(tile.pbr, noise.sample(width, height, seeds[2 * index + 1], device), config.height_noise_strength)


def _empty_tile(width: int, height: int, device) -> Tile:
    return Tile(PBRMap.allocate(width, height, device=device), influence_empty(width, height, device))


def build_corners(corner_source: Tile) -> Tile:
    logger.info("- Copy corners to corners temp.")
    width, height = corner_source.pbr.size
    return swap_quadrants(corner_source, _empty_tile(width, height, corner_source.pbr.h.device))


def build_edges_ud(edge_source: Tile) -> Tile:
    logger.info("- Copy edges to u,d edge temp.")
    width, height = edge_source.pbr.size
    return swap_halves_vertical(edge_source, _empty_tile(width, height, edge_source.pbr.h.device))


def build_edges_lr(edge_source: Tile) -> Tile:
    logger.info("- Copy edges to l,r edge temp.")
    width, height = edge_source.pbr.size
    return swap_halves_horizontal(edge_source, _empty_tile(width, height, edge_source.pbr.h.device))


class TylingPipeline:
    """
    Fixed stage sequence for one atlas -> tile run.

    Usage:
        pipeline = TylingPipeline(TylerConfig(convention="2x2", seed=7))
        tile = pipeline.run(atlas)
    """

    def __init__(self, config: TylerConfig = None):
        self.config = config or TylerConfig()
        self.convention = get_convention(self.config.convention)
        self.blender = get_blender(self.convention.blend_mode, self.config.epsilon, blur=self.config.blur)

    def run(self, atlas: PBRMap) -> PBRMap:
        width, height = self.convention.tile_size(atlas.width, atlas.height)
        logger.info(f"Atlas {atlas.width}x{atlas.height} -> tile w=[{width}] h=[{height}] ({self.convention.name})")

        fields = build_influence_fields(self.convention, width, height, self.config, device=atlas.h.device)
        sources = extract_sources(atlas, self.convention, width, height, fields)
        del fields

        perturb_sources(sources, self.config, self.config.resolve_seed())

        if self.convention.name == "2x2":
            result = self._seams_2x2(sources)
        else:
            result = self._seams_3x1(sources)

        logger.info("- Tiling done.")
        return result.pbr

    def _seams_2x2(self, sources: dict) -> Tile:
        corners = build_corners(sources.pop("corner"))
        edges_ud = build_edges_ud(sources.pop("edge_ud"))
        edges_lr = build_edges_lr(sources.pop("edge_lr"))
        base = sources.pop("base")

        logger.info("- Blend edges and corners over base (4 way).")
        width, height = base.pbr.size
        device = base.pbr.h.device
        # The blend starts by copying the base over the whole destination.
        dst = Tile(PBRMap.allocate(width, height, device=device), influence_empty(width, height, device))
        candidates: List[Tile] = [base, edges_ud, edges_lr, corners]
        self.blender.blend(dst, candidates)
        return dst

    def _seams_3x1(self, sources: dict) -> Tile:
        seams = build_corners(sources.pop("corner"))
        edge_source = sources.pop("edge")
        edges_ud = build_edges_ud(edge_source)
        edges_lr = build_edges_lr(edge_source)
        del edge_source

        logger.info("- Blend edges into corners temp.")
        self.blender.blend(seams, [edges_ud])
        del edges_ud
        self.blender.blend(seams, [edges_lr])
        del edges_lr

        logger.info("- Blend seams over base.")
        base = sources.pop("base")
        self.blender.blend(base, [seams])
        return base


def run_pipeline(atlas: PBRMap, config: TylerConfig = None) -> PBRMap:
    """Convenience wrapper: one atlas in, one seamless tile out."""
    return TylingPipeline(config).run(atlas)
