# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- In-memory implementations of the collaborator ABCs that count their calls
- A station, live and historical windows, and a ready-made enricher
- Settings that never touch the real environment's PostgreSQL or GeoIP
"""

from collections.abc import Iterator

import pytest

from listenstats.base.enrichment import DeviceClassifier, GeoLocator
from listenstats.base.repositories import ListenerRepository, NameLookup
from listenstats.core.enricher import ListenerEnricher
from listenstats.core.models import (
    DeviceInfo,
    ListenerEvent,
    LocationInfo,
    Station,
    Window,
    WindowMode,
)
from listenstats.utils.config import Settings


class FakeListenerStore(ListenerRepository, NameLookup):
    """Listener repository over a list, with fixed mount/relay names."""

    def __init__(self, events=None, mount_names=None, remote_names=None):
        self.events = list(events or [])
        self.mount_names = {1: "Main Stream"} if mount_names is None else mount_names
        self.remote_names = {7: "Relay One"} if remote_names is None else remote_names
        self.queries: list[tuple[Station, Window]] = []

    def connect(self) -> None:
        pass

    def query_listeners(self, station: Station, window: Window) -> Iterator[ListenerEvent]:
        self.queries.append((station, window))
        yield from self.events

    def close(self) -> None:
        pass

    def get_mount_names(self, station: Station) -> dict[int, str]:
        return dict(self.mount_names)

    def get_remote_names(self, station: Station) -> dict[int, str]:
        return dict(self.remote_names)


class CountingClassifier(DeviceClassifier):
    """Treats agents containing "Mobile" as mobile; unknown agents get no client."""

    def __init__(self):
        self.calls: list[str] = []

    def parse(self, user_agent: str) -> DeviceInfo:
        self.calls.append(user_agent)
        if not user_agent or user_agent == "unknown-agent":
            return DeviceInfo(client=None, is_mobile=False)
        return DeviceInfo(client=user_agent.split("/")[0], is_mobile="Mobile" in user_agent)


class CountingGeoLocator(GeoLocator):
    """Succeeds for public-looking IPs and fails for 10.x addresses."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def lookup(self, ip: str, locale: str) -> LocationInfo:
        self.calls.append((ip, locale))
        if ip.startswith("10."):
            return LocationInfo.failure("Internal/Reserved IP")
        return LocationInfo(
            status="success", country="Canada", region="Ontario", city="Toronto"
        )


@pytest.fixture()
def station():
    return Station(id=1, short_name="testfm", timezone="UTC")


@pytest.fixture()
def historical_window():
    """Window covering epoch seconds [0, 1000]."""
    return Window(
        mode=WindowMode.HISTORICAL,
        start=0,
        end=1000,
        now=5000,
        label="1970-01-01_00-00-00_to_1970-01-01_00-16-40",
        timezone="UTC",
    )


@pytest.fixture()
def live_window():
    """Live window resolved at now=1000."""
    return Window(
        mode=WindowMode.LIVE,
        start=1000,
        end=1000,
        now=1000,
        label="live",
        timezone="UTC",
    )


@pytest.fixture()
def classifier():
    return CountingClassifier()


@pytest.fixture()
def geolocator():
    return CountingGeoLocator()


@pytest.fixture()
def store():
    return FakeListenerStore()


@pytest.fixture()
def enricher(store, classifier, geolocator):
    return ListenerEnricher(
        mount_names=store.mount_names,
        remote_names=store.remote_names,
        classifier=classifier,
        geolocator=geolocator,
        locale="en_US",
    )


@pytest.fixture()
def settings(tmp_path):
    """Settings with a per-test temp dir for CSV exports."""
    settings = Settings()
    settings.report.temp_dir = tmp_path / "exports"
    return settings
