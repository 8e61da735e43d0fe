"""
Treemap tiles

Helpers between the layout and the renderer: collapsing long leaf lists
into a single "+N more" tile, tile labels, size classes and gutters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Sequence

from alertmap.grouping.fields import UNKNOWN
from alertmap.types import AlertRecord, GroupNode, NodeType, TreemapRect

OVERFLOW_WEIGHT = 2

# (max nodes at the level, share of leaves kept visible)
_VISIBLE_SHARE = (
    (30, 1.0),
    (60, 0.8),
    (100, 0.6),
    (200, 0.4),
)
_MIN_VISIBLE_SHARE = 0.3


@dataclass
class OverflowTile:
    """Stand-in for the leaves that did not fit at one level."""
    alerts: List[AlertRecord] = field(default_factory=list)
    weight: int = OVERFLOW_WEIGHT
    type: str = field(default="overflow", init=False)

    @property
    def label(self) -> str:
        return f"+{len(self.alerts)} more"


def is_overflow(node: Any) -> bool:
    return isinstance(node, OverflowTile)


def max_visible_leaves(leaf_count: int, group_count: int) -> int:
    """How many leaves stay visible at a level with this many nodes."""
    total = leaf_count + group_count
    for limit, share in _VISIBLE_SHARE:
        if total <= limit:
            return int(leaf_count * share)
    return int(leaf_count * _MIN_VISIBLE_SHARE)


def collapse_overflow(nodes: Sequence[GroupNode]) -> List[Any]:
    """
    Replace excess leaves at one level with an OverflowTile.

    Groups come first, then the visible leaves in their original order,
    then the overflow tile. Levels that fit are returned unchanged.
    """
    groups = [n for n in nodes if n.type is NodeType.GROUP]
    leaf_nodes = [n for n in nodes if n.type is NodeType.LEAF]

    visible = max_visible_leaves(len(leaf_nodes), len(groups))
    if visible <= 0 or len(leaf_nodes) <= visible:
        return list(nodes)

    hidden = leaf_nodes[visible:]
    overflow = OverflowTile(alerts=[leaf.alert for leaf in hidden])
    return [*groups, *leaf_nodes[:visible], overflow]


def tile_label(node: Any) -> str:
    """Text painted on a tile."""
    if is_overflow(node):
        return node.label
    if node.type is NodeType.LEAF:
        return node.alert.alert_name or UNKNOWN

    value = (node.value or "").strip()
    if not value or value.lower() == UNKNOWN.lower():
        return UNKNOWN
    return value[0].upper() + value[1:]


class TileSize(str, Enum):
    """How much detail a tile has room for."""
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"


def tile_size_class(rect: TreemapRect) -> TileSize:
    if rect.width > 120 and rect.height > 80:
        return TileSize.LARGE
    if rect.width > 60 and rect.height > 40:
        return TileSize.MEDIUM
    return TileSize.SMALL


def inset(rect: TreemapRect, gutter: float = 1.0) -> TreemapRect:
    """Shrink a rectangle by ``gutter`` on every side, never below zero."""
    return TreemapRect(
        x=rect.x + gutter,
        y=rect.y + gutter,
        width=max(0.0, rect.width - 2 * gutter),
        height=max(0.0, rect.height - 2 * gutter),
        node=rect.node,
    )
