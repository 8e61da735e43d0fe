"""
AlertMap Configuration and CLI Tests

Tests cover: settings defaults, environment overrides, validation, JSON
config files, alert file loading and the command line interface.
"""

import json

import pytest


# =============================================================================
# Configuration Tests
# =============================================================================

class TestConfig:
    """Test AlertMap configuration."""

    def test_defaults(self):
        """Test default settings."""
        from alertmap.config import AlertMapConfig, LogLevel

        config = AlertMapConfig()

        assert config.log_level == LogLevel.INFO
        assert config.grouping.default_dimensions == ["type"]
        assert config.grouping.unknown_label == "Unknown"
        assert config.layout.min_weight == 1
        assert not config.layout.overflow_enabled

    def test_environment_overrides(self, monkeypatch):
        """Test ALERTMAP_ environment variables, including nested ones."""
        from alertmap.config import AlertMapConfig, LogLevel

        monkeypatch.setenv("ALERTMAP_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ALERTMAP_LAYOUT__GUTTER", "2.5")

        config = AlertMapConfig()

        assert config.log_level == LogLevel.DEBUG
        assert config.layout.gutter == 2.5

    def test_validation(self):
        """Test invalid values are rejected."""
        from pydantic import ValidationError

        from alertmap.config import GroupingConfig, LayoutConfig

        with pytest.raises(ValidationError):
            LayoutConfig(min_weight=0)
        with pytest.raises(ValidationError):
            LayoutConfig(gutter=-1)
        with pytest.raises(ValidationError):
            GroupingConfig(default_dimensions=[""])

    def test_file_round_trip(self, tmp_path):
        """Test saving and loading a JSON config file."""
        from alertmap.config import AlertMapConfig, GroupingConfig

        path = tmp_path / "conf" / "alertmap.json"
        config = AlertMapConfig(grouping=GroupingConfig(default_dimensions=["tag", "status"]))

        config.to_file(path)
        loaded = AlertMapConfig.from_file(path)

        assert loaded.grouping.default_dimensions == ["tag", "status"]

    def test_file_errors(self, tmp_path):
        """Test missing and malformed config files raise ConfigError."""
        from alertmap.config import AlertMapConfig
        from alertmap.exceptions import ConfigError

        with pytest.raises(ConfigError):
            AlertMapConfig.from_file(tmp_path / "missing.json")

        bad = tmp_path / "bad.json"
        bad.write_text('{"layout": {"min_weight": 0}}')
        with pytest.raises(ConfigError):
            AlertMapConfig.from_file(bad)

    def test_global_config(self):
        """Test get/set/reset of the global instance."""
        from alertmap.config import AlertMapConfig, get_config, reset_config, set_config

        custom = AlertMapConfig(json_logs=True)
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config() is not custom


# =============================================================================
# CLI Tests
# =============================================================================

ALERTS = [
    {"id": "g:1:a", "alertName": "DB down", "type": "Grafana", "tag": "db",
     "status": "firing", "isDismissed": False, "tags": {"severity": "critical"}},
    {"id": "g:1:b", "alertName": "DB slow", "type": "Grafana", "tag": "db",
     "status": "firing", "isDismissed": False, "tags": {"severity": "low"}},
    {"id": "g:2:c", "alertName": "Web 5xx", "type": "GCP", "tag": "web",
     "status": "resolved", "isDismissed": False},
]


@pytest.fixture
def alerts_file(tmp_path):
    path = tmp_path / "alerts.json"
    path.write_text(json.dumps(ALERTS))
    return path


class TestCLI:
    """Test the alertmap command line."""

    def test_load_alerts(self, tmp_path, alerts_file):
        """Test loading lists and wrapped lists of alerts."""
        from alertmap.cli import load_alerts

        assert [a.alert_name for a in load_alerts(alerts_file)] == ["DB down", "DB slow", "Web 5xx"]

        wrapped = tmp_path / "wrapped.json"
        wrapped.write_text(json.dumps({"alerts": ALERTS[:1]}))
        assert len(load_alerts(wrapped)) == 1

    @pytest.mark.parametrize("content", ['{"alerts": 3}', "[1, 2]", "not json"])
    def test_load_alerts_errors(self, tmp_path, content):
        """Test malformed alert files raise AlertRecordError."""
        from alertmap.cli import load_alerts
        from alertmap.exceptions import AlertRecordError

        path = tmp_path / "broken.json"
        path.write_text(content)

        with pytest.raises(AlertRecordError):
            load_alerts(path)

    def test_groups_command(self, alerts_file, capsys):
        """Test the groups command prints the tree with aggregates."""
        from alertmap.cli import main

        assert main(["groups", str(alerts_file), "--group-by", "tag"]) == 0

        output = json.loads(capsys.readouterr().out)
        db, web = output["groups"]
        assert (db["value"], db["count"], db["active_count"], db["severity"]) == ("db", 2, 2, 3)
        assert web["dismissed"] is True
        assert output["total_active_alerts"] == 2

    def test_groups_active_only(self, alerts_file, capsys):
        """Test --active-only prunes inactive groups."""
        from alertmap.cli import main

        assert main(["groups", str(alerts_file), "--group-by", "tag", "--active-only"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert [g["value"] for g in output["groups"]] == ["db"]

    def test_layout_command(self, alerts_file, capsys):
        """Test the layout command prints rectangles for a drilled level."""
        from alertmap.cli import main

        code = main([
            "layout", str(alerts_file), "--group-by", "tag",
            "--width", "400", "--height", "300", "--drill", "db",
        ])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["breadcrumbs"] == ["db"]
        assert [r["type"] for r in output["rects"]] == ["leaf", "leaf"]
        assert sum(r["width"] * r["height"] for r in output["rects"]) == pytest.approx(120000)

        rect = output["rects"][0]
        assert rect["inner"]["x"] == pytest.approx(rect["x"] + 1.0)
        assert rect["inner"]["width"] == pytest.approx(rect["width"] - 2.0)

    @pytest.mark.parametrize("value", ["DB", " Db "])
    def test_layout_drill_ignores_case(self, alerts_file, capsys, value):
        """Test --drill matches group values the way they were grouped."""
        from alertmap.cli import main

        assert main(["layout", str(alerts_file), "--group-by", "tag", "--drill", value]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["breadcrumbs"] == ["db"]

    def test_groups_malformed_tags(self, tmp_path, capsys):
        """Test an alert whose tags are not an object still groups."""
        from alertmap.cli import main

        path = tmp_path / "alerts.json"
        path.write_text(json.dumps([
            {"id": "x", "alertName": "Disk", "tag": "db", "tags": "critical",
             "status": "firing", "isDismissed": "false"},
        ]))

        assert main(["groups", str(path), "--group-by", "tag"]) == 0

        output = json.loads(capsys.readouterr().out)
        (db,) = output["groups"]
        assert (db["value"], db["active_count"], db["severity"]) == ("db", 1, 0)

    def test_layout_unknown_drill(self, alerts_file, capsys):
        """Test drilling into a missing group fails."""
        from alertmap.cli import main

        assert main(["layout", str(alerts_file), "--group-by", "tag", "--drill", "nope"]) == 1
        assert "no group 'nope'" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """Test a missing alerts file is reported, not raised."""
        from alertmap.cli import main

        assert main(["groups", str(tmp_path / "none.json")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_no_command(self, capsys):
        """Test running without a command prints help."""
        from alertmap.cli import main

        assert main([]) == 1
