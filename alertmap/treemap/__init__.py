"""
AlertMap Treemap

Squarified treemap layout and the tile helpers used by renderers.
"""

from alertmap.treemap.squarify import node_weight, squarify, worst_aspect_ratio
from alertmap.treemap.tiles import (
    OverflowTile,
    TileSize,
    collapse_overflow,
    inset,
    is_overflow,
    max_visible_leaves,
    tile_label,
    tile_size_class,
)

__all__ = [
    "squarify",
    "node_weight",
    "worst_aspect_ratio",
    "OverflowTile",
    "TileSize",
    "collapse_overflow",
    "inset",
    "is_overflow",
    "max_visible_leaves",
    "tile_label",
    "tile_size_class",
]
