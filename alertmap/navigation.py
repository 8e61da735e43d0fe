"""
Navigation Controller

Breadcrumb stack over a grouping tree. An empty stack is the root view
(the top-level groups); every drill-down pushes the group that was opened.
Clicking a leaf never navigates; it hands the alert to the host.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

import structlog

from alertmap.treemap.tiles import OverflowTile, is_overflow
from alertmap.types import (
    AlertRecord, Breadcrumb, Group, GroupNode, NavigationState, NodeType,
)

logger = structlog.get_logger(__name__)

AlertCallback = Callable[[AlertRecord], None]
OverflowCallback = Callable[[List[AlertRecord]], None]


class NavigationController:
    """
    Drill-down state for the grouped alerts view.

    Transitions:
    - click_leaf: opens the alert via ``on_alert_open``; no state change
    - overflow tile click: opens the hidden alerts via ``on_overflow_open``
    - click_group: pushes the group
    - click_breadcrumb: truncates the stack to the clicked crumb
    - click_home / reset: back to the root view
    - refresh: remaps the stack onto a rebuilt tree by (key, value) path
    """

    def __init__(
        self,
        tree: Optional[Sequence[GroupNode]] = None,
        on_alert_open: Optional[AlertCallback] = None,
        on_overflow_open: Optional[OverflowCallback] = None,
    ):
        self._tree: List[GroupNode] = list(tree or [])
        self._stack: List[Breadcrumb] = []
        self.on_alert_open = on_alert_open
        self.on_overflow_open = on_overflow_open

    # === State ===

    @property
    def state(self) -> NavigationState:
        return tuple(self._stack)

    @property
    def breadcrumbs(self) -> List[Breadcrumb]:
        return list(self._stack)

    @property
    def is_root(self) -> bool:
        return not self._stack

    @property
    def tree(self) -> List[GroupNode]:
        return list(self._tree)

    @property
    def visible_nodes(self) -> List[GroupNode]:
        """Sibling list currently on screen."""
        if not self._stack:
            return list(self._tree)
        return list(self._stack[-1].node.children)

    @property
    def path(self) -> List[tuple]:
        """(key, value) identities of the drilled groups, outermost first."""
        return [crumb.node.identity for crumb in self._stack]

    # === Transitions ===

    def click(self, node: Any) -> None:
        """Dispatch a tile click by node type."""
        node_type = getattr(node, "type", None)
        if node_type is NodeType.LEAF:
            self.click_leaf(node)
        elif node_type is NodeType.GROUP:
            self.click_group(node)
        elif is_overflow(node):
            self.click_overflow(node)
        else:
            logger.debug("Ignoring click on non-navigable tile", tile_type=str(node_type))

    def click_leaf(self, node: GroupNode) -> None:
        """Open the leaf's alert. Not a navigation transition."""
        if node.type is not NodeType.LEAF:
            logger.warning("click_leaf called with a group", key=node.key, value=node.value)
            return
        if self.on_alert_open is not None:
            self.on_alert_open(node.alert)

    def click_overflow(self, tile: OverflowTile) -> None:
        """Hand the alerts hidden behind a "+N more" tile to the host."""
        if self.on_overflow_open is None:
            logger.debug("No handler for overflow tile", hidden=len(tile.alerts))
            return
        self.on_overflow_open(list(tile.alerts))

    def click_group(self, node: GroupNode) -> bool:
        """Drill into ``node``. Returns False when the click is ignored."""
        if node.type is not NodeType.GROUP or not node.children:
            logger.debug("Ignoring drill-down on node without children")
            return False

        self._stack.append(Breadcrumb(label=node.value, node=node))
        logger.debug("Drilled down", key=node.key, value=node.value, depth=len(self._stack))
        return True

    def click_breadcrumb(self, index: int) -> bool:
        """Keep ``stack[0..index]`` inclusive. Returns False for a bad index."""
        if index < 0 or index >= len(self._stack):
            logger.warning("Breadcrumb index out of range", index=index, depth=len(self._stack))
            return False

        del self._stack[index + 1:]
        return True

    def click_home(self) -> None:
        self._stack.clear()

    def reset(self, tree: Optional[Sequence[GroupNode]] = None) -> None:
        """Return to the root view, optionally over a new tree."""
        if tree is not None:
            self._tree = list(tree)
        self._stack.clear()

    def refresh(self, tree: Sequence[GroupNode]) -> bool:
        """
        Swap in a rebuilt tree, keeping the user's place if it still exists.

        Returns False when the drilled path vanished and navigation was
        reset to the root.
        """
        path = self.path
        self._tree = list(tree)

        remapped: List[Breadcrumb] = []
        nodes: Sequence[GroupNode] = self._tree
        for crumb, identity in zip(self._stack, path):
            match = _find_group(nodes, identity)
            if match is None:
                logger.info(
                    "Drill-down path no longer exists, resetting to root",
                    missing_key=identity[0],
                    missing_value=identity[1],
                )
                self._stack.clear()
                return False
            remapped.append(Breadcrumb(label=crumb.label, node=match))
            nodes = match.children

        self._stack = remapped
        return True


def _find_group(nodes: Sequence[GroupNode], identity: tuple) -> Optional[Group]:
    for node in nodes:
        if node.type is NodeType.GROUP and node.identity == identity and node.children:
            return node
    return None
