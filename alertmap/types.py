"""
AlertMap Types

Dataclasses for alert records, the grouping tree, treemap rectangles and
navigation breadcrumbs.

The grouping tree is a tagged union: every node carries an explicit ``type``
discriminant (``NodeType.LEAF`` or ``NodeType.GROUP``) so folds can branch on
it directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import structlog

logger = structlog.get_logger(__name__)


class AlertStatus(str, Enum):
    """Alert statuses the engine gives meaning to."""
    FIRING = "firing"
    RESOLVED = "resolved"


class NodeType(str, Enum):
    """Discriminant for grouping tree nodes."""
    LEAF = "leaf"
    GROUP = "group"


# camelCase keys used by the dashboard API, mapped to attribute names
_RECORD_FIELDS = {
    "id": "id",
    "alertName": "alert_name",
    "alert_name": "alert_name",
    "type": "type",
    "tag": "tag",
    "status": "status",
    "isDismissed": "is_dismissed",
    "is_dismissed": "is_dismissed",
    "startsAt": "starts_at",
    "starts_at": "starts_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "createdAt": "created_at",
    "created_at": "created_at",
    "summary": "summary",
    "alertUrl": "alert_url",
    "alert_url": "alert_url",
    "runbookUrl": "runbook_url",
    "runbook_url": "runbook_url",
    "tags": "tags",
}


@dataclass(frozen=True)
class AlertRecord:
    """A single alert as supplied by the data-fetch layer. Read-only."""
    id: str
    alert_name: str = ""
    type: str = ""
    tag: str = ""
    status: str = AlertStatus.FIRING.value
    is_dismissed: bool = False
    starts_at: str = ""
    updated_at: str = ""
    created_at: str = ""
    summary: Optional[str] = None
    alert_url: str = ""
    runbook_url: Optional[str] = None

    # Severity/priority and arbitrary label keys
    tags: Mapping[str, str] = field(default_factory=dict)

    # Fields not modelled above, kept for derived dimensions
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        """Active means not dismissed and currently firing."""
        return not self.is_dismissed and self.status == AlertStatus.FIRING.value

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a modelled attribute or an extra field by name."""
        attr = _RECORD_FIELDS.get(name, name)
        if attr in self.__dataclass_fields__:
            return getattr(self, attr)
        return self.extra.get(name, default)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AlertRecord":
        """Build a record from an API payload (camelCase or snake_case)."""
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}

        for key, value in data.items():
            attr = _RECORD_FIELDS.get(key)
            if attr is None:
                extra[key] = value
            else:
                values[attr] = value

        tags = values.get("tags") or {}
        if not isinstance(tags, Mapping):
            logger.warning(
                "Ignoring malformed alert tags",
                alert_id=values.get("id"),
                tags_type=type(tags).__name__,
            )
            tags = {}
        values["tags"] = {str(k): "" if v is None else str(v) for k, v in tags.items()}
        values["is_dismissed"] = _as_bool(values.get("is_dismissed", False))
        raw_id = values.get("id")
        values["id"] = "" if raw_id is None else str(raw_id)

        for attr in ("alert_name", "type", "tag", "status", "starts_at",
                     "updated_at", "created_at", "alert_url"):
            if values.get(attr) is None:
                values.pop(attr, None)

        return cls(extra=extra, **values)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "alertName": self.alert_name,
            "type": self.type,
            "tag": self.tag,
            "status": self.status,
            "isDismissed": self.is_dismissed,
            "startsAt": self.starts_at,
            "updatedAt": self.updated_at,
            "summary": self.summary,
            "tags": dict(self.tags),
        }


_TRUE_STRINGS = {"true", "1", "yes", "on"}


def _as_bool(value: Any) -> bool:
    """Payload booleans may arrive as strings; only truthy spellings count."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


# === Grouping tree ===

@dataclass
class Leaf:
    """Terminal node wrapping exactly one alert."""
    alert: AlertRecord
    type: NodeType = field(default=NodeType.LEAF, init=False)


@dataclass
class Group:
    """All alerts sharing ``value`` for dimension ``key``."""
    key: str
    value: str
    children: List["GroupNode"] = field(default_factory=list)
    count: int = 0
    type: NodeType = field(default=NodeType.GROUP, init=False)

    @property
    def identity(self) -> Tuple[str, str]:
        """Identity that survives a tree rebuild."""
        return (self.key, self.value)


GroupNode = Union[Leaf, Group]


def is_leaf(node: GroupNode) -> bool:
    return node.type is NodeType.LEAF


def is_group(node: GroupNode) -> bool:
    return node.type is NodeType.GROUP


# === Layout ===

@dataclass(frozen=True)
class Bounds:
    """Axis-aligned layout rectangle."""
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass
class TreemapRect:
    """Placement of one node inside the layout bounds."""
    x: float
    y: float
    width: float
    height: float
    node: Any  # GroupNode or an overflow tile; not owned

    @property
    def area(self) -> float:
        return self.width * self.height

    def overlaps(self, other: "TreemapRect", tolerance: float = 1e-9) -> bool:
        """True when the two rectangles share a region of positive area."""
        dx = min(self.x + self.width, other.x + other.width) - max(self.x, other.x)
        dy = min(self.y + self.height, other.y + other.height) - max(self.y, other.y)
        return dx > tolerance and dy > tolerance

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


# === Navigation ===

@dataclass(frozen=True)
class Breadcrumb:
    """A group the user drilled into."""
    label: str
    node: Group


NavigationState = Tuple[Breadcrumb, ...]
