"""
Geometry helpers shared by the region extractor and the blenders.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def fits_in(self, width: int, height: int) -> bool:
        return self.x >= 0 and self.y >= 0 and self.right <= width and self.bottom <= height


def tile_index(x, y, width: int):
    """Flat pixel index inside a tile of the given width.

    Works on ints as well as integer tensors of coordinates.
    """
    return y * width + x


def wide_index(x, y, x_offset: int, y_offset: int, src_width: int):
    """Flat pixel index into a wide atlas for tile pixel (x, y) placed at an offset."""
    return (y + y_offset) * src_width + (x + x_offset)
