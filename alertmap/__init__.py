"""
AlertMap - Grouped alerts treemap engine

Turns a flat alert snapshot into a navigable treemap:
- Hierarchical grouping by selectable dimensions
- Bottom-up count, activity and severity aggregation
- Active-only filtering
- Squarified treemap layout
- Breadcrumb drill-down navigation

Usage:
    from alertmap import GroupedAlertsView, AlertRecord, Bounds

    view = GroupedAlertsView(
        alerts=[AlertRecord.from_dict(a) for a in payload],
        dimensions=["tag", "status"],
        bounds=Bounds(width=1200, height=800),
        on_alert_open=open_details,
    )
    snapshot = view.snapshot()
"""

__version__ = "1.0.0"

from alertmap.config import AlertMapConfig, get_config
from alertmap.grouping import FieldExtractor, filter_active, group_alerts
from alertmap.navigation import NavigationController
from alertmap.treemap import squarify
from alertmap.types import (
    AlertRecord,
    AlertStatus,
    Bounds,
    Breadcrumb,
    Group,
    GroupNode,
    Leaf,
    NodeType,
    TreemapRect,
)
from alertmap.view import GroupedAlertsView, ViewSnapshot

__all__ = [
    "AlertMapConfig",
    "get_config",
    "AlertRecord",
    "AlertStatus",
    "Bounds",
    "Breadcrumb",
    "Group",
    "GroupNode",
    "Leaf",
    "NodeType",
    "TreemapRect",
    "FieldExtractor",
    "group_alerts",
    "filter_active",
    "squarify",
    "NavigationController",
    "GroupedAlertsView",
    "ViewSnapshot",
    "__version__",
]
