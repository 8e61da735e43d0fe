"""
Squarified treemap layout.

Packs a sibling list of weighted nodes into a rectangle, growing one row at
a time along the longer side of the remaining space and keeping each row
only as long as its worst aspect ratio does not get worse.
"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Sequence, Tuple

import structlog

from alertmap.grouping.aggregate import count
from alertmap.types import Bounds, TreemapRect

logger = structlog.get_logger(__name__)

WeightFn = Callable[[Any], float]


def node_weight(node: Any, min_weight: int = 1) -> float:
    """Layout weight of a node: its leaf count, floored at ``min_weight``."""
    explicit = getattr(node, "weight", None)
    if explicit is not None:
        return max(min_weight, explicit)
    return max(min_weight, count(node))


def _aspect(size: float, thickness: float) -> float:
    if size <= 0 or thickness <= 0:
        return math.inf
    return max(thickness / size, size / thickness)


def worst_aspect_ratio(
    row_max: float,
    row_min: float,
    row_weight: float,
    remaining_weight: float,
    length: float,
    side: float,
) -> float:
    """
    Worst aspect ratio of a candidate row.

    The row spans ``side`` and is ``row_weight / remaining_weight * length``
    thick. Each member's size along ``side`` is proportional to its weight,
    so the extremes come from the heaviest and lightest members.
    """
    thickness = row_weight / remaining_weight * length
    return max(
        _aspect(row_max / row_weight * side, thickness),
        _aspect(row_min / row_weight * side, thickness),
    )


def squarify(
    nodes: Sequence[Any],
    bounds: Bounds,
    weight: WeightFn = node_weight,
) -> List[TreemapRect]:
    """
    Lay ``nodes`` out inside ``bounds``.

    Args:
        nodes: Sibling nodes; their order is not changed.
        bounds: Target rectangle.
        weight: Node weight function, at least 1 per node.

    Returns:
        Rectangles in placement order (heaviest first). Empty when there
        are no nodes or the bounds have no area.
    """
    if not nodes or bounds.is_empty:
        return []

    weighted: List[Tuple[Any, float]] = [(node, float(weight(node))) for node in nodes]
    # Stable: equal weights keep their grouping order
    weighted.sort(key=lambda item: item[1], reverse=True)

    remaining_weight = sum(w for _, w in weighted)
    if remaining_weight <= 0:
        return []

    x, y = bounds.x, bounds.y
    width, height = bounds.width, bounds.height
    results: List[TreemapRect] = []
    start = 0

    while start < len(weighted):
        wide = width >= height
        side = height if wide else width
        length = width if wide else height

        # Grow the row while the worst aspect ratio does not increase
        row_end = start
        row_weight = 0.0
        best = math.inf
        test_weight = 0.0
        for i in range(start, len(weighted)):
            test_weight += weighted[i][1]
            worst = worst_aspect_ratio(
                weighted[start][1], weighted[i][1],
                test_weight, remaining_weight, length, side,
            )
            if worst <= best:
                best = worst
                row_end = i + 1
                row_weight = test_weight
            else:
                break

        if row_end == start:
            row_end = start + 1
            row_weight = weighted[start][1]

        thickness = min(length, row_weight / remaining_weight * length)
        offset = 0.0

        for node, w in weighted[start:row_end]:
            size = w / row_weight * side
            if wide:
                rect = TreemapRect(x=x, y=y + offset, width=thickness, height=size, node=node)
            else:
                rect = TreemapRect(x=x + offset, y=y, width=size, height=thickness, node=node)
            results.append(rect)
            offset += size

        if wide:
            x += thickness
            width = max(0.0, width - thickness)
        else:
            y += thickness
            height = max(0.0, height - thickness)

        remaining_weight -= row_weight
        start = row_end

        if remaining_weight <= 0 and start < len(weighted):
            # Only reachable through float drift; give the rest no area
            logger.debug("Treemap weight exhausted early", unplaced=len(weighted) - start)
            for node, _ in weighted[start:]:
                results.append(TreemapRect(x=x, y=y, width=0.0, height=0.0, node=node))
            break

    return results
