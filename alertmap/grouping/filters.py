"""
Alert filters

- Active filter: prunes a grouping tree down to branches with active alerts
- Search and field filters applied to the flat alert list before grouping
- Sorting of the flat alert list
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from alertmap.types import AlertRecord, GroupNode, NodeType


def filter_active(nodes: Sequence[GroupNode]) -> List[GroupNode]:
    """
    Copy of ``nodes`` keeping only active leaves and non-empty groups.

    Each kept group's ``count`` becomes its active-only total. The input
    tree is left untouched.
    """
    filtered: List[GroupNode] = []

    for node in nodes:
        if node.type is NodeType.LEAF:
            if node.alert.is_active:
                filtered.append(node)
            continue

        children = filter_active(node.children)
        if children:
            filtered.append(replace(
                node,
                children=children,
                count=sum(1 if c.type is NodeType.LEAF else c.count for c in children),
            ))

    return filtered


# === Flat alert filters ===

def search_alerts(alerts: Sequence[AlertRecord], term: str) -> List[AlertRecord]:
    """Case-insensitive substring search over name, status, tag, summary and type."""
    if not term or not term.strip():
        return list(alerts)

    needle = term.strip().lower()

    def matches(alert: AlertRecord) -> bool:
        haystack = (
            alert.alert_name,
            alert.status,
            alert.tag or "",
            alert.summary or "",
            alert.type or "",
        )
        return any(needle in value.lower() for value in haystack)

    return [alert for alert in alerts if matches(alert)]


def filter_by_fields(
    alerts: Sequence[AlertRecord],
    filters: Mapping[str, Sequence[str]],
    service_name_getter: Optional[Callable[[AlertRecord], str]] = None,
) -> List[AlertRecord]:
    """
    Keep alerts whose field values are in the allowed lists.

    Unknown fields are ignored and empty value lists do not filter.
    """
    active_filters = {f: set(v) for f, v in filters.items() if v}
    if not active_filters:
        return list(alerts)

    def field_value(alert: AlertRecord, name: str) -> Optional[str]:
        if name == "status":
            return "Dismissed" if alert.is_dismissed else "Firing"
        if name == "type":
            return alert.type or "Custom"
        if name == "tag":
            return alert.tag or ""
        if name == "alertName":
            return alert.alert_name or ""
        if name == "serviceName" and service_name_getter is not None:
            return service_name_getter(alert)
        return None

    result = []
    for alert in alerts:
        keep = True
        for name, allowed in active_filters.items():
            value = field_value(alert, name)
            if value is None:
                continue
            if value not in allowed:
                keep = False
                break
        if keep:
            result.append(alert)
    return result


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _timestamp(value: str) -> float:
    if not value:
        return 0.0
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


_SORT_KEYS: Dict[str, Callable[[AlertRecord], object]] = {
    "alertName": lambda a: (a.alert_name or "").lower(),
    "status": lambda a: "dismissed" if a.is_dismissed else "firing",
    "tag": lambda a: (a.tag or "").lower(),
    "summary": lambda a: (a.summary or "").lower(),
    "startsAt": lambda a: _timestamp(a.starts_at),
    "type": lambda a: (a.type or "").lower(),
}


def sort_alerts(
    alerts: Sequence[AlertRecord],
    sort_field: str,
    direction: SortDirection = SortDirection.ASC,
) -> List[AlertRecord]:
    """Stable sort of a copy of ``alerts``; unknown fields keep input order."""
    key = _SORT_KEYS.get(sort_field)
    if key is None:
        return list(alerts)
    return sorted(alerts, key=key, reverse=SortDirection(direction) is SortDirection.DESC)
