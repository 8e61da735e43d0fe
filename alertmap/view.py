"""
Grouped Alerts View

Host-facing facade over the engine:

    alerts -> group_alerts -> (filter_active) -> navigation -> squarify

The grouping tree is rebuilt in full whenever the alerts, the dimensions or
the value getter change; the layout is recomputed only when the visible
level or the bounds change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, List, Optional, Sequence, Tuple

import structlog

from alertmap.config import AlertMapConfig, get_config
from alertmap.grouping.aggregate import total_active_count, total_count
from alertmap.grouping.engine import dedupe_dimensions, group_alerts
from alertmap.grouping.fields import FieldExtractor, ValueResolver
from alertmap.grouping.filters import filter_active
from alertmap.navigation import AlertCallback, NavigationController, OverflowCallback
from alertmap.treemap.squarify import node_weight, squarify
from alertmap.treemap.tiles import collapse_overflow
from alertmap.types import AlertRecord, Bounds, Breadcrumb, GroupNode, TreemapRect

logger = structlog.get_logger(__name__)

DimensionsCallback = Callable[[List[str]], None]


@dataclass
class ViewSnapshot:
    """Everything the renderer and the header chrome need for one frame."""
    rects: List[TreemapRect] = field(default_factory=list)
    breadcrumbs: List[Breadcrumb] = field(default_factory=list)
    dimensions: List[str] = field(default_factory=list)
    total_alerts: int = 0  # At the visible level
    total_active_alerts: int = 0  # Across the whole tree

    @property
    def all_clear(self) -> bool:
        return self.total_active_alerts == 0

    def to_dict(self) -> dict:
        return {
            "dimensions": self.dimensions,
            "breadcrumbs": [crumb.label for crumb in self.breadcrumbs],
            "total_alerts": self.total_alerts,
            "total_active_alerts": self.total_active_alerts,
            "all_clear": self.all_clear,
        }


class GroupedAlertsView:
    """
    Grouped alerts treemap view state.

    Args:
        alerts: Current alert snapshot, in display order.
        dimensions: Grouping dimensions; the configured default when empty.
        value_getter: Resolver for derived dimensions such as serviceName.
        bounds: Available screen space.
        active_only: Show only branches with active alerts.
        on_alert_open: Called with the alert when a leaf tile is clicked.
        on_dimensions_change: Called with the new list on change_dimensions.
        config: Overrides the global configuration.
        on_overflow_open: Called with the hidden alerts when a "+N more" tile
            is clicked (only produced with ``layout.overflow_enabled``).
    """

    def __init__(
        self,
        alerts: Sequence[AlertRecord] = (),
        dimensions: Optional[Sequence[str]] = None,
        value_getter: Optional[ValueResolver] = None,
        bounds: Optional[Bounds] = None,
        active_only: bool = False,
        on_alert_open: Optional[AlertCallback] = None,
        on_dimensions_change: Optional[DimensionsCallback] = None,
        config: Optional[AlertMapConfig] = None,
        on_overflow_open: Optional[OverflowCallback] = None,
    ):
        self.config = config or get_config()
        self.on_dimensions_change = on_dimensions_change

        self._alerts: Tuple[AlertRecord, ...] = tuple(alerts)
        self._dimensions: List[str] = self._effective_dimensions(dimensions)
        self._value_getter = value_getter
        self._bounds = bounds or Bounds(width=0, height=0)
        self._active_only = active_only

        self._full_tree: List[GroupNode] = []
        self._tree: List[GroupNode] = []
        self._generation = 0
        self._layout_key: Optional[tuple] = None
        self._layout: List[TreemapRect] = []

        self.navigation = NavigationController(
            on_alert_open=on_alert_open,
            on_overflow_open=on_overflow_open,
        )
        self._rebuild()
        self.navigation.reset(self._tree)

    # === Inputs ===

    @property
    def dimensions(self) -> List[str]:
        return list(self._dimensions)

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def active_only(self) -> bool:
        return self._active_only

    @property
    def tree(self) -> List[GroupNode]:
        """Tree the user navigates (active-only when that filter is on)."""
        return list(self._tree)

    def set_alerts(self, alerts: Sequence[AlertRecord]) -> None:
        """New alert snapshot; keeps the drill-down path when it still exists."""
        alerts = tuple(alerts)
        if alerts == self._alerts:
            return
        self._alerts = alerts
        self._rebuild()
        self.navigation.refresh(self._tree)

    def set_value_getter(self, value_getter: Optional[ValueResolver]) -> None:
        if value_getter is self._value_getter:
            return
        self._value_getter = value_getter
        self._rebuild()
        self.navigation.refresh(self._tree)

    def change_dimensions(self, dimensions: Sequence[str]) -> None:
        """Regroup by new dimensions; navigation always returns to root."""
        self._dimensions = self._effective_dimensions(dimensions)
        logger.info("Grouping dimensions changed", dimensions=self._dimensions)

        if self.on_dimensions_change is not None:
            self.on_dimensions_change(list(self._dimensions))

        self._rebuild()
        self.navigation.reset(self._tree)

    def set_active_only(self, active_only: bool) -> None:
        if active_only == self._active_only:
            return
        self._active_only = active_only
        self._tree = filter_active(self._full_tree) if active_only else list(self._full_tree)
        self._generation += 1
        self.navigation.refresh(self._tree)

    def resize(self, bounds: Bounds) -> None:
        self._bounds = bounds

    # === Interaction ===

    def click(self, node: Any) -> None:
        self.navigation.click(node)

    def click_breadcrumb(self, index: int) -> bool:
        return self.navigation.click_breadcrumb(index)

    def click_home(self) -> None:
        self.navigation.click_home()

    # === Output ===

    def layout(self) -> List[TreemapRect]:
        """Rectangles for the visible level, memoised on level and bounds."""
        key = (
            self._generation,
            tuple(id(crumb.node) for crumb in self.navigation.state),
            self._bounds,
        )
        if key == self._layout_key:
            return list(self._layout)

        visible = self.navigation.visible_nodes
        if self.config.layout.overflow_enabled:
            visible = collapse_overflow(visible)

        weight = partial(node_weight, min_weight=self.config.layout.min_weight)
        self._layout = squarify(visible, self._bounds, weight=weight)
        self._layout_key = key
        return list(self._layout)

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(
            rects=self.layout(),
            breadcrumbs=self.navigation.breadcrumbs,
            dimensions=self.dimensions,
            total_alerts=total_count(self.navigation.visible_nodes),
            total_active_alerts=total_active_count(self._full_tree),
        )

    # === Internals ===

    def _effective_dimensions(self, dimensions: Optional[Sequence[str]]) -> List[str]:
        dims = dedupe_dimensions(dimensions or [])
        return dims or list(self.config.grouping.default_dimensions)

    def _rebuild(self) -> None:
        extractor = FieldExtractor(
            resolver=self._value_getter,
            unknown_label=self.config.grouping.unknown_label,
            tag_key_prefix=self.config.grouping.tag_key_prefix,
        )
        self._full_tree = group_alerts(
            self._alerts, self._dimensions, extractor,
            unknown_label=self.config.grouping.unknown_label,
        )
        self._tree = filter_active(self._full_tree) if self._active_only else list(self._full_tree)
        self._generation += 1

        logger.debug(
            "Rebuilt alert grouping tree",
            alerts=len(self._alerts),
            dimensions=self._dimensions,
            top_level_groups=len(self._tree),
        )
