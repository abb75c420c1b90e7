# ==============================================================================
# Tests for ListenerAggregator
# ==============================================================================
"""
Tests for listenstats.core.aggregator.ListenerAggregator.

Tests cover:
- Unique mode: merging by hash, union-duration, first-seen ordering
- Raw mode: one row per connection in input order
- Live windows: every row runs to now
- Historical clamping bounds
- One classifier and one geolocation call per produced row
- Idempotence, stream failures, time budget
"""

import time

import pytest

from listenstats.core.aggregator import ListenerAggregator
from listenstats.core.exceptions import (
    ConfigurationError,
    ExecutionTimeExceeded,
    UpstreamUnavailable,
)
from listenstats.core.intervals import Interval
from listenstats.core.models import ListenerEvent, LocalMount, RemoteMount

# ==============================================================================
# Helpers
# ==============================================================================


def _event(listener_hash="a", start=100, end=200, ip="1.2.3.4", user_agent="VLC/3.0", mount=None):
    return ListenerEvent(
        listener_hash=listener_hash,
        ip=ip,
        user_agent=user_agent,
        mount=mount,
        timestamp_start=start,
        timestamp_end=end,
    )


# ==============================================================================
# Unique mode
# ==============================================================================


class TestUniqueMode:
    """Tests for merging connections by listener hash."""

    def test_overlapping_reconnects_merge(self, enricher, historical_window):
        """Two overlapping connections of one listener form one row."""
        events = [_event("a", 100, 200), _event("a", 150, 300)]

        records = ListenerAggregator(enricher).aggregate(events, historical_window, unique=True)

        assert len(records) == 1
        record = records[0]
        assert record.intervals == (Interval(100, 200), Interval(150, 300))
        assert record.connected_on == 100
        assert record.connected_until == 300
        assert record.connected_time == 200

    def test_one_row_per_hash(self, enricher, historical_window):
        events = [
            _event("a", 100, 200),
            _event("b", 110, 400),
            _event("a", 500, 600),
            _event("c", 600, 700),
            _event("b", 650, 800),
        ]

        records = ListenerAggregator(enricher).aggregate(events, historical_window)

        hashes = [r.hash for r in records]
        assert sorted(hashes) == ["a", "b", "c"]
        assert len(hashes) == len(set(hashes))

    def test_first_seen_order(self, enricher, historical_window):
        """Rows come out in the order each hash first appeared."""
        events = [_event("z", 100, 200), _event("a", 110, 200), _event("z", 300, 400)]

        records = ListenerAggregator(enricher).aggregate(events, historical_window)

        assert [r.hash for r in records] == ["z", "a"]

    def test_bounds_and_disjoint_seconds(self, enricher, historical_window):
        events = [_event("a", 100, 200), _event("a", 500, 650)]

        record = ListenerAggregator(enricher).aggregate(events, historical_window)[0]

        assert record.connected_on == 100
        assert record.connected_until == 650
        assert record.connected_time == 250

    def test_representative_is_first_event(self, enricher, historical_window):
        """ip and user agent come from the first connection of the listener."""
        events = [
            _event("a", 100, 200, ip="1.1.1.1", user_agent="First/1.0"),
            _event("a", 300, 400, ip="2.2.2.2", user_agent="Second/1.0"),
        ]

        record = ListenerAggregator(enricher).aggregate(events, historical_window)[0]

        assert record.ip == "1.1.1.1"
        assert record.user_agent == "First/1.0"
        assert record.client == "First"

    def test_enriched_once_per_listener(self, enricher, classifier, geolocator, historical_window):
        """Repeated connections do not repeat the external lookups."""
        events = [_event("a", 100 + i, 200 + i) for i in range(10)] + [_event("b", 500, 600)]

        ListenerAggregator(enricher).aggregate(events, historical_window)

        assert len(classifier.calls) == 2
        assert len(geolocator.calls) == 2

    def test_empty_stream(self, enricher, historical_window):
        assert ListenerAggregator(enricher).aggregate([], historical_window) == []


# ==============================================================================
# Raw mode
# ==============================================================================


class TestRawMode:
    """Tests for one row per connection."""

    def test_rows_per_connection(self, enricher, historical_window):
        events = [_event("a", 100, 200), _event("a", 150, 300)]

        records = ListenerAggregator(enricher).aggregate(events, historical_window, unique=False)

        assert len(records) == 2
        assert [r.connected_time for r in records] == [100, 150]
        assert [r.intervals for r in records] == [
            (Interval(100, 200),),
            (Interval(150, 300),),
        ]

    def test_input_order_kept(self, enricher, historical_window):
        events = [_event("b", 100, 200), _event("a", 120, 200), _event("b", 130, 200)]

        records = ListenerAggregator(enricher).aggregate(events, historical_window, unique=False)

        assert [r.hash for r in records] == ["b", "a", "b"]

    def test_enriched_per_row(self, enricher, classifier, historical_window):
        events = [_event("a", 100, 200), _event("a", 150, 300)]

        ListenerAggregator(enricher).aggregate(events, historical_window, unique=False)

        assert len(classifier.calls) == 2

    def test_malformed_interval_passes_through(self, enricher, historical_window):
        """An end before the start yields a negative duration, not an error."""
        records = ListenerAggregator(enricher).aggregate(
            [_event("a", 300, 200)], historical_window, unique=False
        )
        assert records[0].connected_time == -100


# ==============================================================================
# Windows
# ==============================================================================


class TestLiveWindow:
    """Tests for live aggregation."""

    def test_open_connection_runs_to_now(self, enricher, live_window):
        record = ListenerAggregator(enricher).aggregate([_event("a", 50, 0)], live_window)[0]

        assert record.connected_on == 50
        assert record.connected_until == 1000
        assert record.connected_time == 950

    @pytest.mark.parametrize("unique", [True, False])
    def test_every_row_ends_at_now(self, enricher, live_window, unique):
        """Recorded ends are ignored in live mode, even closed ones."""
        events = [_event("a", 50, 0), _event("b", 60, 70), _event("a", 900, 950)]

        records = ListenerAggregator(enricher).aggregate(events, live_window, unique=unique)

        assert records
        assert all(r.connected_until == live_window.now for r in records)


class TestHistoricalClamping:
    """Tests for clamping to the historical window."""

    def test_intervals_inside_window(self, enricher, historical_window):
        events = [
            _event("a", -500, 100),
            _event("b", 900, 0),
            _event("c", 950, 5000),
            _event("a", 990, 2000),
        ]

        for unique in (True, False):
            records = ListenerAggregator(enricher).aggregate(
                events, historical_window, unique=unique
            )
            for record in records:
                for interval in record.intervals:
                    assert interval.start >= historical_window.start
                    assert interval.end <= historical_window.end

    def test_open_connection_ends_at_window_end(self, enricher, historical_window):
        record = ListenerAggregator(enricher).aggregate([_event("a", 900, 0)], historical_window)[0]
        assert record.connected_until == historical_window.end
        assert record.connected_time == 100


# ==============================================================================
# Enrichment fields
# ==============================================================================


class TestEnrichmentFields:
    """Tests for the enrichment carried into records."""

    def test_local_mount(self, enricher, historical_window):
        record = ListenerAggregator(enricher).aggregate(
            [_event(mount=LocalMount(mount_id=1))], historical_window
        )[0]
        assert record.mount_is_local is True
        assert record.mount_name == "Main Stream"

    def test_remote_mount(self, enricher, historical_window):
        record = ListenerAggregator(enricher).aggregate(
            [_event(mount=RemoteMount(remote_id=7))], historical_window
        )[0]
        assert record.mount_is_local is False
        assert record.mount_name == "Relay One"

    def test_no_mount(self, enricher, historical_window):
        record = ListenerAggregator(enricher).aggregate([_event()], historical_window)[0]
        assert record.mount_name == ""

    def test_unknown_client(self, enricher, historical_window):
        record = ListenerAggregator(enricher).aggregate(
            [_event(user_agent="unknown-agent")], historical_window
        )[0]
        assert record.client == "Unknown"

    def test_missing_mount_name_aborts(self, enricher, historical_window):
        with pytest.raises(ConfigurationError):
            ListenerAggregator(enricher).aggregate(
                [_event(mount=LocalMount(mount_id=99))], historical_window
            )


# ==============================================================================
# Failure and repeatability
# ==============================================================================


class TestAggregateBehavior:
    """Tests for idempotence and aborts."""

    def test_idempotent(self, enricher, historical_window):
        events = [_event("a", 100, 200), _event("b", 150, 300), _event("a", 250, 400)]
        aggregator = ListenerAggregator(enricher)

        first = aggregator.aggregate(events, historical_window)
        second = aggregator.aggregate(events, historical_window)

        assert first == second

    def test_stream_failure_wrapped(self, enricher, historical_window):
        """A failing event source aborts with UpstreamUnavailable."""

        def broken_stream():
            yield _event("a", 100, 200)
            raise ConnectionError("server closed the connection")

        with pytest.raises(UpstreamUnavailable, match="server closed"):
            ListenerAggregator(enricher).aggregate(broken_stream(), historical_window)

    def test_report_errors_not_rewrapped(self, enricher, historical_window):
        def stream():
            raise ConfigurationError("bad station")
            yield  # pragma: no cover

        with pytest.raises(ConfigurationError):
            ListenerAggregator(enricher).aggregate(stream(), historical_window)

    def test_deadline_exceeded(self, enricher, historical_window):
        events = [_event("a", 100, 200)]
        with pytest.raises(ExecutionTimeExceeded):
            ListenerAggregator(enricher).aggregate(
                events, historical_window, deadline=time.monotonic() - 1
            )

    def test_deadline_not_reached(self, enricher, historical_window):
        records = ListenerAggregator(enricher).aggregate(
            [_event()], historical_window, deadline=time.monotonic() + 60
        )
        assert len(records) == 1
