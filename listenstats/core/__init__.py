# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic of the listener report.

This module contains:
- Domain models (ListenerEvent, Window, ListenerRecord, ...)
- Interval arithmetic (clamping, union-duration)
- Window resolution
- The error taxonomy

The aggregator, enricher and exporter live in their own modules
(core.aggregator, core.enricher, core.exporter) and take their collaborators
as arguments; nothing here opens a connection.
"""

from listenstats.core.exceptions import (
    ConfigurationError,
    ExecutionTimeExceeded,
    InvalidTimeRange,
    ListenerReportError,
    UpstreamUnavailable,
)
from listenstats.core.intervals import Interval, union_seconds
from listenstats.core.models import (
    DeviceInfo,
    ListenerEvent,
    ListenerRecord,
    LocalMount,
    LocationInfo,
    MountInfo,
    RemoteMount,
    Station,
    Window,
    WindowMode,
)
from listenstats.core.window import resolve_window

__all__ = [
    "ConfigurationError",
    "DeviceInfo",
    "ExecutionTimeExceeded",
    "Interval",
    "InvalidTimeRange",
    "ListenerEvent",
    "ListenerRecord",
    "ListenerReportError",
    "LocalMount",
    "LocationInfo",
    "MountInfo",
    "RemoteMount",
    "Station",
    "UpstreamUnavailable",
    "Window",
    "WindowMode",
    "resolve_window",
    "union_seconds",
]
