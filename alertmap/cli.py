"""
AlertMap Command Line Interface

Groups an alert snapshot from a JSON file and prints the grouping tree or
the treemap layout of one level.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog

from alertmap.config import AlertMapConfig, get_config, set_config
from alertmap.exceptions import AlertMapError, AlertRecordError
from alertmap.grouping.aggregate import summarize
from alertmap.grouping.fields import normalize_group_value
from alertmap.logs import setup_logging
from alertmap.treemap.tiles import inset, is_overflow, tile_label
from alertmap.types import AlertRecord, Bounds, GroupNode, NodeType
from alertmap.view import GroupedAlertsView

logger = structlog.get_logger(__name__)


def load_alerts(path: Path) -> List[AlertRecord]:
    """Read alerts from a JSON list, or an object with an ``alerts`` list."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise AlertRecordError("file not found", source=str(path)) from e
    except json.JSONDecodeError as e:
        raise AlertRecordError(f"invalid JSON: {e}", source=str(path)) from e

    if isinstance(data, dict):
        data = data.get("alerts")
    if not isinstance(data, list):
        raise AlertRecordError("expected a list of alerts", source=str(path))

    alerts = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise AlertRecordError(f"alert #{index} is not an object", source=str(path))
        alerts.append(AlertRecord.from_dict(item))
    return alerts


def tree_to_dict(node: GroupNode) -> dict:
    """Serializable view of a node with its aggregates."""
    if node.type is NodeType.LEAF:
        return {"type": "leaf", "id": node.alert.id, "name": node.alert.alert_name, **summarize(node)}
    return {
        "type": "group",
        "key": node.key,
        "value": node.value,
        **summarize(node),
        "children": [tree_to_dict(child) for child in node.children],
    }


def rect_to_dict(rect: Any, gutter: float = 0.0) -> dict:
    data = rect.to_dict()
    data["inner"] = inset(rect, gutter).to_dict()
    node = rect.node
    data["label"] = tile_label(node)
    if is_overflow(node):
        data["type"] = "overflow"
        data["hidden"] = len(node.alerts)
    elif node.type is NodeType.LEAF:
        data["type"] = "leaf"
        data["id"] = node.alert.id
    else:
        data["type"] = "group"
        data["key"] = node.key
        data["value"] = node.value
        data["count"] = node.count
    return data


def _dimensions(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [d.strip() for d in raw.split(",") if d.strip()]


def cmd_groups(args: argparse.Namespace) -> int:
    view = GroupedAlertsView(
        alerts=load_alerts(args.file),
        dimensions=_dimensions(args.group_by),
        active_only=args.active_only,
    )
    snapshot = view.snapshot()
    output = {
        **snapshot.to_dict(),
        "groups": [tree_to_dict(node) for node in view.tree],
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    view = GroupedAlertsView(
        alerts=load_alerts(args.file),
        dimensions=_dimensions(args.group_by),
        bounds=Bounds(width=args.width, height=args.height),
        active_only=args.active_only,
    )

    unknown = view.config.grouping.unknown_label
    for value in args.drill or []:
        wanted = normalize_group_value(value, unknown)
        match = next(
            (n for n in view.navigation.visible_nodes
             if n.type is NodeType.GROUP and normalize_group_value(n.value, unknown) == wanted),
            None,
        )
        if match is None:
            print(f"Error: no group '{value}' at this level", file=sys.stderr)
            return 1
        view.click(match)

    snapshot = view.snapshot()
    output = {
        **snapshot.to_dict(),
        "rects": [rect_to_dict(rect, view.config.layout.gutter) for rect in snapshot.rects],
    }
    print(json.dumps(output, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="alertmap",
        description="Group alerts and lay them out as a squarified treemap",
    )
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    groups_parser = subparsers.add_parser("groups", help="Print the grouping tree")
    groups_parser.add_argument("file", type=Path, help="Alerts JSON file")
    groups_parser.add_argument("--group-by", help="Comma-separated dimensions")
    groups_parser.add_argument("--active-only", action="store_true", help="Only active alerts")

    layout_parser = subparsers.add_parser("layout", help="Print treemap rectangles")
    layout_parser.add_argument("file", type=Path, help="Alerts JSON file")
    layout_parser.add_argument("--group-by", help="Comma-separated dimensions")
    layout_parser.add_argument("--width", type=float, default=1200.0)
    layout_parser.add_argument("--height", type=float, default=800.0)
    layout_parser.add_argument("--active-only", action="store_true", help="Only active alerts")
    layout_parser.add_argument(
        "--drill", action="append", metavar="VALUE",
        help="Drill into the group with this value (repeatable)",
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.config:
            set_config(AlertMapConfig.from_file(args.config))
        config = get_config()
        setup_logging(args.log_level or config.log_level.value, json_output=config.json_logs)

        commands = {
            "groups": cmd_groups,
            "layout": cmd_layout,
        }
        return commands[args.command](args)
    except AlertMapError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
