"""
Grouping Engine

Partitions a flat alert collection into a tree of Group/Leaf nodes, one tree
level per dimension. Groups keep the order in which their values were first
seen in the input, so regrouping a stably ordered input yields a stably
ordered tree without sorting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Union

import structlog

from alertmap.grouping.fields import UNKNOWN, FieldExtractor
from alertmap.types import AlertRecord, Group, GroupNode, Leaf, NodeType

logger = structlog.get_logger(__name__)

Extractor = Callable[[AlertRecord, str], str]


def dedupe_dimensions(dimensions: Sequence[str]) -> List[str]:
    """Drop repeated and blank dimension names, keeping first occurrences."""
    seen: Set[str] = set()
    result: List[str] = []
    for dimension in dimensions:
        if not dimension or dimension in seen:
            if dimension:
                logger.warning("Duplicate grouping dimension ignored", dimension=dimension)
            continue
        seen.add(dimension)
        result.append(dimension)
    return result


def group_alerts(
    alerts: Iterable[AlertRecord],
    dimensions: Sequence[str],
    extractor: Optional[Extractor] = None,
    unknown_label: Optional[str] = None,
) -> List[GroupNode]:
    """
    Group alerts by ``dimensions`` in order.

    Args:
        alerts: Alerts in display order.
        dimensions: Dimension names, outermost first.
        extractor: ``(alert, dimension) -> value``; defaults to a plain
            FieldExtractor.
        unknown_label: Bucket for empty extractor results; defaults to the
            extractor's own ``unknown_label`` when it has one.

    Returns:
        Top-level nodes. With no dimensions, one Leaf per alert.
    """
    if extractor is None:
        extractor = FieldExtractor(unknown_label=unknown_label or UNKNOWN)
    if unknown_label is None:
        unknown_label = getattr(extractor, "unknown_label", UNKNOWN)
    return _group(list(alerts), dedupe_dimensions(dimensions), extractor, unknown_label)


def _group(
    alerts: List[AlertRecord],
    dimensions: List[str],
    extractor: Extractor,
    unknown_label: str,
) -> List[GroupNode]:
    if not dimensions:
        return [Leaf(alert) for alert in alerts]

    dimension, rest = dimensions[0], dimensions[1:]

    # Values in first-seen order
    order: List[str] = []
    buckets: Dict[str, List[AlertRecord]] = {}

    for alert in alerts:
        value = extractor(alert, dimension) or unknown_label
        bucket = buckets.get(value)
        if bucket is None:
            bucket = buckets[value] = []
            order.append(value)
        bucket.append(alert)

    nodes: List[GroupNode] = []
    for value in order:
        children = _group(buckets[value], rest, extractor, unknown_label)
        nodes.append(Group(
            key=dimension,
            value=value,
            children=children,
            count=_child_total(children),
        ))
    return nodes


def _child_total(children: Sequence[GroupNode]) -> int:
    return sum(1 if c.type is NodeType.LEAF else c.count for c in children)


def group_path_key(path: Sequence[Group]) -> str:
    """Stable key for a group given its ancestors and itself."""
    return "/".join(f"{g.key}:{g.value}" for g in path)


@dataclass
class GroupRow:
    """Header row for a group in a flattened table view."""
    node: Group
    path_key: str
    depth: int
    expanded: bool
    type: NodeType = field(default=NodeType.GROUP, init=False)


@dataclass
class LeafRow:
    """Alert row in a flattened table view."""
    alert: AlertRecord
    depth: int
    type: NodeType = field(default=NodeType.LEAF, init=False)


FlatRow = Union[GroupRow, LeafRow]


def flatten_groups(
    nodes: Sequence[GroupNode],
    expanded: Set[str],
) -> List[FlatRow]:
    """
    Flatten a tree into table rows.

    Group headers are always emitted; their children only when the group's
    path key is in ``expanded``.
    """
    rows: List[FlatRow] = []
    _flatten(nodes, expanded, [], rows)
    return rows


def _flatten(
    nodes: Sequence[GroupNode],
    expanded: Set[str],
    path: List[Group],
    rows: List[FlatRow],
) -> None:
    depth = len(path)
    for node in nodes:
        if node.type is NodeType.LEAF:
            rows.append(LeafRow(alert=node.alert, depth=depth))
            continue

        key = group_path_key(path + [node])
        is_open = key in expanded
        rows.append(GroupRow(node=node, path_key=key, depth=depth, expanded=is_open))
        if is_open:
            _flatten(node.children, expanded, path + [node], rows)
