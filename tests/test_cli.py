# ==============================================================================
# Tests for the listenstats CLI
# ==============================================================================
"""
Tests for the listenstats command tree and the `listeners` command.

Help output uses the real app from listenstats.app. The `listeners` command
runs against the in-memory store from conftest; PostgreSQL, the user agent
classifier and the GeoIP locator are patched out in listenstats.cli.listeners.
"""

import csv
import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from listenstats.app import app
from listenstats.core.exceptions import UpstreamUnavailable
from listenstats.core.models import ListenerEvent, LocalMount

runner = CliRunner()


# ==============================================================================
# Help
# ==============================================================================


class TestHelp:
    """Tests for --help output."""

    def test_root(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Station listener reports" in result.output
        for cmd in ["listeners", "config", "db", "status"]:
            assert cmd in result.output, f"Missing command: {cmd}"

    def test_listeners(self):
        result = runner.invoke(app, ["listeners", "--help"])
        assert result.exit_code == 0
        for option in ["--start", "--end", "--format", "--output", "--locale"]:
            assert option in result.output

    def test_db(self):
        result = runner.invoke(app, ["db", "--help"])
        assert result.exit_code == 0
        assert "init" in result.output


# ==============================================================================
# listeners
# ==============================================================================


@pytest.fixture()
def patched_cli(store, station, classifier, geolocator, settings):
    """Wire the listeners command to the in-memory collaborators."""
    store.get_station = lambda short_name: station if short_name == station.short_name else None
    store.events = [
        ListenerEvent(
            listener_hash="a",
            ip="8.8.8.8",
            user_agent="VLC/3.0",
            mount=LocalMount(mount_id=1),
            timestamp_start=100,
            timestamp_end=200,
        ),
        ListenerEvent(
            listener_hash="a",
            ip="8.8.8.8",
            user_agent="VLC/3.0",
            mount=LocalMount(mount_id=1),
            timestamp_start=150,
            timestamp_end=300,
        ),
    ]
    repo_cm = MagicMock()
    repo_cm.__enter__.return_value = store

    with (
        patch("listenstats.cli.listeners.get_settings", return_value=settings),
        patch("listenstats.cli.listeners.setup_logging"),
        patch("listenstats.cli.listeners.PostgreSQLListenerRepository", return_value=repo_cm),
        patch("listenstats.cli.listeners.UserAgentClassifier", return_value=classifier),
        patch("listenstats.cli.listeners.GeoIP2Locator", return_value=geolocator),
    ):
        yield repo_cm


class TestListenersCommand:
    """Tests for `listenstats listeners`."""

    def test_json(self, patched_cli, geolocator):
        result = runner.invoke(
            app, ["listeners", "testfm", "-s", "1970-01-01 00:00", "-e", "1970-01-01 00:16"]
        )

        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert len(rows) == 1
        assert rows[0]["connected_time"] == 200
        assert geolocator.closed

    def test_no_unique(self, patched_cli):
        result = runner.invoke(
            app,
            ["listeners", "testfm", "-s", "1970-01-01 00:00", "-e", "1970-01-01 00:16", "--no-unique"],
        )

        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 2

    def test_csv(self, patched_cli, tmp_path):
        output = tmp_path / "report.csv"
        result = runner.invoke(
            app,
            ["listeners", "testfm", "-s", "1970-01-01 00:00", "-f", "csv", "-o", str(output)],
        )

        assert result.exit_code == 0, result.output
        with output.open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "IP"
        assert len(rows) == 2

    def test_station_not_found(self, patched_cli, geolocator):
        result = runner.invoke(app, ["listeners", "nosuchfm"])
        assert result.exit_code == 1
        assert "not found" in result.output
        assert geolocator.closed

    def test_unknown_format_prints_json(self, patched_cli):
        result = runner.invoke(app, ["listeners", "testfm", "-f", "xml"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 1

    def test_database_unavailable(self, patched_cli):
        patched_cli.__enter__.side_effect = UpstreamUnavailable("Cannot connect to PostgreSQL")
        result = runner.invoke(app, ["listeners", "testfm"])
        assert result.exit_code == 1
        assert "Cannot connect" in result.output


# ==============================================================================
# status
# ==============================================================================


class TestStatusCommand:
    """Tests for `listenstats status`."""

    @staticmethod
    def _status(reachable=True, schema_ready=True, geoip=False):
        return {
            "postgresql": {
                "reachable": reachable,
                "schema": "listenstats",
                "schema_ready": schema_ready,
            },
            "geoip": {"configured": geoip, "database_path": None},
        }

    def test_box(self):
        with patch("listenstats.cli.status.collect_status", return_value=self._status()):
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "LISTENSTATS STATUS" in result.output
        assert "PostgreSQL" in result.output
        assert "not configured (locations show N/A)" in result.output

    def test_unreachable_exits_1(self):
        status = self._status(reachable=False, schema_ready=False)
        with patch("listenstats.cli.status.collect_status", return_value=status):
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert "listenstats db init" in result.output

    def test_json(self):
        with patch("listenstats.cli.status.collect_status", return_value=self._status()):
            result = runner.invoke(app, ["status", "--json"])

        assert json.loads(result.stdout)["postgresql"]["reachable"] is True
