"""Shared fixtures for AlertMap tests."""

import itertools

import pytest

from alertmap.config import reset_config
from alertmap.types import AlertRecord

_ids = itertools.count(1)


def make_alert(
    tag: str = "db",
    status: str = "firing",
    sev: str = None,
    dismissed: bool = False,
    name: str = None,
    type: str = "Grafana",
    **extra,
) -> AlertRecord:
    """Build an alert with sensible defaults."""
    alert_id = extra.pop("id", None) or f"alert-{next(_ids)}"
    tags = dict(extra.pop("tags", {}))
    if sev is not None:
        tags["severity"] = sev
    return AlertRecord(
        id=alert_id,
        alert_name=name or f"Alert {alert_id}",
        type=type,
        tag=tag,
        status=status,
        is_dismissed=dismissed,
        starts_at=extra.pop("starts_at", "2024-01-01T00:00:00Z"),
        summary=extra.pop("summary", None),
        tags=tags,
        extra=extra,
    )


@pytest.fixture
def alert_factory():
    return make_alert


@pytest.fixture
def example_alerts():
    """db: two firing alerts (critical, low); web: one resolved alert."""
    return [
        make_alert(tag="db", status="firing", sev="critical"),
        make_alert(tag="db", status="firing", sev="low"),
        make_alert(tag="web", status="resolved"),
    ]


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()
