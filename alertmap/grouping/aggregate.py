"""
Aggregator

Bottom-up folds over the grouping tree. Nothing here mutates the tree, so
the same nodes can be queried with and without the active filter.

``is_dismissed`` (every descendant dismissed) and the active filter's
pruning (any active descendant) are separate predicates on purpose: a group
with one live alert among many dismissed ones is neither dismissed nor
fully active.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Tuple

from alertmap.types import AlertRecord, GroupNode, NodeType


class Severity(IntEnum):
    """Ordinal severity rank; higher is worse."""
    NONE = 0
    WARNING = 1
    HIGH = 2
    CRITICAL = 3


_SEVERITY_RANKS = {
    "critical": Severity.CRITICAL,
    "p1": Severity.CRITICAL,
    "high": Severity.HIGH,
    "p2": Severity.HIGH,
    "warning": Severity.WARNING,
    "medium": Severity.WARNING,
    "p3": Severity.WARNING,
}


def alert_severity(alert: AlertRecord) -> Severity:
    """Rank an alert from its ``severity`` (or ``priority``) tag."""
    tags = alert.tags or {}
    raw = tags.get("severity") or tags.get("priority") or ""
    return _SEVERITY_RANKS.get(str(raw).strip().lower(), Severity.NONE)


def count(node: GroupNode) -> int:
    """Total leaves under ``node``."""
    if node.type is NodeType.LEAF:
        return 1
    return sum(count(child) for child in node.children)


def active_count(node: GroupNode) -> int:
    """Leaves under ``node`` that are not dismissed and firing."""
    if node.type is NodeType.LEAF:
        return 1 if node.alert.is_active else 0
    return sum(active_count(child) for child in node.children)


def severity(node: GroupNode) -> Severity:
    """A group is as severe as its worst descendant."""
    if node.type is NodeType.LEAF:
        return alert_severity(node.alert)
    return max((severity(child) for child in node.children), default=Severity.NONE)


def is_dismissed(node: GroupNode) -> bool:
    """Leaf: dismissed or not firing. Group: all children dismissed."""
    if node.type is NodeType.LEAF:
        return not node.alert.is_active
    return all(is_dismissed(child) for child in node.children)


def is_active(node: GroupNode) -> bool:
    """True when at least one descendant is active."""
    return active_count(node) > 0


def total_count(nodes: Iterable[GroupNode]) -> int:
    return sum(count(node) for node in nodes)


def total_active_count(nodes: Iterable[GroupNode]) -> int:
    return sum(active_count(node) for node in nodes)


def totals(nodes: Iterable[GroupNode]) -> Tuple[int, int]:
    """Return ``(total_alerts, total_active_alerts)`` for a sibling list."""
    nodes = list(nodes)
    return total_count(nodes), total_active_count(nodes)


def leaves(nodes: Iterable[GroupNode]) -> Iterable[AlertRecord]:
    """Yield every alert under ``nodes`` in tree order."""
    for node in nodes:
        if node.type is NodeType.LEAF:
            yield node.alert
        else:
            yield from leaves(node.children)


def summarize(node: GroupNode) -> dict:
    """Aggregate statistics for one node, for display chrome."""
    return {
        "count": count(node),
        "active_count": active_count(node),
        "severity": int(severity(node)),
        "dismissed": is_dismissed(node),
    }
