"""
Field Extractor

Resolves a grouping dimension to a string value for one alert.

Built-in dimensions map to record fields. ``tagKey:<name>`` dimensions read
the alert's tag map. Derived dimensions such as ``serviceName`` are not
present on the record (alerts link to services by upstream tag matching), so
they are delegated to an injected resolver.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import structlog

from alertmap.types import AlertRecord

logger = structlog.get_logger(__name__)

UNKNOWN = "Unknown"
TAG_KEY_PREFIX = "tagKey:"

# Dimensions that are never read from the record itself
DERIVED_DIMENSIONS = frozenset({"serviceName"})

_ALIASES = {
    "alert_name": "alertName",
    "starts_at": "startsAt",
    "updated_at": "updatedAt",
    "service_name": "serviceName",
}

ValueResolver = Callable[[AlertRecord, str], str]


def normalize_group_value(value: Any, unknown: str = UNKNOWN) -> str:
    """Trim and lower-case a field value; blanks become ``unknown``."""
    if value is None or value is False:
        return unknown
    normalized = str(value).strip().lower()
    if not normalized or normalized == unknown.lower():
        return unknown
    return normalized


def tag_key_dimension(tag_key: str, prefix: str = TAG_KEY_PREFIX) -> str:
    """Build the dimension name that groups by a tag key."""
    return f"{prefix}{tag_key}"


def canonical_dimension(dimension: str) -> str:
    return _ALIASES.get(dimension, dimension)


class FieldExtractor:
    """
    Maps (alert, dimension) to a group value.

    Args:
        resolver: Optional override consulted for derived dimensions.
        unknown_label: Canonical bucket for missing values.
        tag_key_prefix: Prefix marking tag-key dimensions.
    """

    def __init__(
        self,
        resolver: Optional[ValueResolver] = None,
        unknown_label: str = UNKNOWN,
        tag_key_prefix: str = TAG_KEY_PREFIX,
    ):
        self.resolver = resolver
        self.unknown_label = unknown_label
        self.tag_key_prefix = tag_key_prefix

        self._builtins: Dict[str, Callable[[AlertRecord], str]] = {
            "status": self._status,
            "alertName": self._alert_name,
        }

    def __call__(self, alert: AlertRecord, dimension: str) -> str:
        return self.resolve(alert, dimension)

    def resolve(self, alert: AlertRecord, dimension: str) -> str:
        """Resolve ``dimension`` for ``alert``; never raises."""
        dimension = canonical_dimension(dimension)

        if dimension.startswith(self.tag_key_prefix):
            tag_key = dimension[len(self.tag_key_prefix):]
            if not tag_key:
                return self.unknown_label
            tags = alert.tags or {}
            return self._normalize(tags.get(tag_key))

        if dimension in DERIVED_DIMENSIONS:
            return self._derived(alert, dimension)

        builtin = self._builtins.get(dimension)
        if builtin is not None:
            return builtin(alert)

        return self._normalize(alert.get(dimension))

    def _status(self, alert: AlertRecord) -> str:
        return "Dismissed" if alert.is_dismissed else "Firing"

    def _alert_name(self, alert: AlertRecord) -> str:
        return alert.alert_name or self.unknown_label

    def _derived(self, alert: AlertRecord, dimension: str) -> str:
        if self.resolver is None:
            return self.unknown_label

        try:
            value = self.resolver(alert, dimension)
        except Exception as e:
            logger.warning(
                "Value resolver failed, using unknown bucket",
                dimension=dimension,
                alert_id=alert.id,
                error=str(e),
            )
            return self.unknown_label

        return self._normalize(value)

    def _normalize(self, value: Any) -> str:
        return normalize_group_value(value, self.unknown_label)


def service_name_resolver(
    service_names: Dict[Any, str],
    service_id_getter: Callable[[AlertRecord], Any],
) -> ValueResolver:
    """
    Build a resolver for the ``serviceName`` dimension.

    ``service_id_getter`` returns the owning service id for an alert (or
    ``None``); ids are looked up in ``service_names``.
    """

    def resolve(alert: AlertRecord, dimension: str) -> str:
        service_id = service_id_getter(alert)
        if service_id is None:
            return UNKNOWN
        return service_names.get(service_id, UNKNOWN)

    return resolve


def alert_service_id(alert: AlertRecord) -> Optional[int]:
    """
    Extract the owning service id from an alert.

    Prefers an explicit ``serviceId`` field, otherwise parses ids shaped
    like ``prefix:<serviceId>:suffix``.
    """
    explicit = alert.extra.get("serviceId")
    if explicit is not None:
        try:
            return int(explicit)
        except (TypeError, ValueError):
            return None

    parts = alert.id.split(":")
    if len(parts) >= 2 and parts[1].isdigit():
        return int(parts[1])
    return None
