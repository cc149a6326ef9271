"""
Region Extraction.

Slices working tiles out of the oversized atlas and moves rectangular chunks
between tiles. All copies here establish initial content, so they are full
replacements rather than blends.
"""

import logging
from typing import Optional

import torch

from .blending.pixel import copy_pixel
from .geometry import Point, Rect, tile_index, wide_index
from .pbr_map import PBRMap, Tile

logger = logging.getLogger(__name__)


def _grid(width: int, height: int, device) -> tuple:
    ys = torch.arange(height, device=device)
    xs = torch.arange(width, device=device)
    yy, xx = torch.meshgrid(ys, xs, indexing="ij")
    return xx.reshape(-1), yy.reshape(-1)


def _check_window(wide: PBRMap, tile: PBRMap, x_offset: int, y_offset: int) -> None:
    window = Rect(x_offset, y_offset, tile.width, tile.height)
    if not window.fits_in(wide.width, wide.height):
        raise ValueError(
            f"Tile window {window} falls outside the {wide.width}x{wide.height} atlas"
        )


def copy_from_wide_map(wide: PBRMap, tile: PBRMap, x_offset: int, y_offset: int) -> PBRMap:
    """Fill every pixel of tile from the atlas window starting at (x_offset, y_offset)."""
    _check_window(wide, tile, x_offset, y_offset)
    logger.debug(f"Copy from wide map at offset ({x_offset}, {y_offset}), tile {tile.width}x{tile.height}")

    xs, ys = _grid(tile.width, tile.height, tile.h.device)
    src_idx = wide_index(xs, ys, x_offset, y_offset, wide.width)
    dst_idx = tile_index(xs, ys, tile.width)
    copy_pixel(wide, tile, None, None, src_idx, dst_idx, 1.0, copy_influence=False)
    return tile


def paste_to_wide_map(tile: PBRMap, wide: PBRMap, x_offset: int, y_offset: int) -> PBRMap:
    """Write a tile back into the atlas window it was extracted from."""
    _check_window(wide, tile, x_offset, y_offset)

    xs, ys = _grid(tile.width, tile.height, tile.h.device)
    src_idx = tile_index(xs, ys, tile.width)
    dst_idx = wide_index(xs, ys, x_offset, y_offset, wide.width)
    copy_pixel(tile, wide, None, None, src_idx, dst_idx, 1.0, copy_influence=False)
    return wide


def copy_chunk(
    src: PBRMap,
    dst: PBRMap,
    src_f: Optional[torch.Tensor],
    dst_f: Optional[torch.Tensor],
    from_rect: Rect,
    to_point: Point,
) -> PBRMap:
    """Copy a rectangle of src to the same-sized rectangle of dst placed at to_point."""
    to_rect = Rect(to_point.x, to_point.y, from_rect.w, from_rect.h)
    if not from_rect.fits_in(src.width, src.height):
        raise ValueError(f"Source rect {from_rect} falls outside the {src.width}x{src.height} tile")
    if not to_rect.fits_in(dst.width, dst.height):
        raise ValueError(f"Destination rect {to_rect} falls outside the {dst.width}x{dst.height} tile")

    logger.debug(f"Copy chunk from={from_rect} to={to_point}")

    rx, ry = _grid(from_rect.w, from_rect.h, dst.h.device)
    src_idx = tile_index(rx + from_rect.x, ry + from_rect.y, src.width)
    dst_idx = tile_index(rx + to_point.x, ry + to_point.y, dst.width)
    copy_pixel(src, dst, src_f, dst_f, src_idx, dst_idx, 1.0, copy_influence=True)
    return dst


def _halves(size: int) -> tuple:
    first = size // 2
    return first, size - first


def swap_quadrants(src: Tile, dst: Tile) -> Tile:
    """
    Move each quadrant of src to the diagonally opposite corner of dst.

    The source center lands on the four tile corners and its middle lines
    on the tile borders.
    """
    hw, rw = _halves(src.pbr.width)
    hh, rh = _halves(src.pbr.height)

    moves = [
        (Rect(hw, hh, rw, rh), Point(0, 0)),
        (Rect(0, hh, hw, rh), Point(rw, 0)),
        (Rect(0, 0, hw, hh), Point(rw, rh)),
        (Rect(hw, 0, rw, hh), Point(0, rh)),
    ]
    for from_rect, to_point in moves:
        copy_chunk(src.pbr, dst.pbr, src.influence, dst.influence, from_rect, to_point)
    return dst


def swap_halves_vertical(src: Tile, dst: Tile) -> Tile:
    """Upper half of src goes to the bottom of dst and vice versa."""
    w = src.pbr.width
    hh, rh = _halves(src.pbr.height)

    copy_chunk(src.pbr, dst.pbr, src.influence, dst.influence, Rect(0, 0, w, hh), Point(0, rh))
    copy_chunk(src.pbr, dst.pbr, src.influence, dst.influence, Rect(0, hh, w, rh), Point(0, 0))
    return dst


def swap_halves_horizontal(src: Tile, dst: Tile) -> Tile:
    """Left half of src goes to the right of dst and vice versa."""
    h = src.pbr.height
    hw, rw = _halves(src.pbr.width)

    copy_chunk(src.pbr, dst.pbr, src.influence, dst.influence, Rect(0, 0, hw, h), Point(rw, 0))
    copy_chunk(src.pbr, dst.pbr, src.influence, dst.influence, Rect(hw, 0, rw, h), Point(0, 0))
    return dst
