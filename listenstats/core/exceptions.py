# ==============================================================================
# Listener Report Errors
# ==============================================================================
"""
Error taxonomy for the listener report.

Every error aborts the whole request; no partial report is ever returned.
Each class carries the HTTP-style status code the report action responds with.
"""


class ListenerReportError(Exception):
    """Base class for all listener report failures."""

    status_code = 500
    code = "report_error"


class InvalidTimeRange(ListenerReportError):
    """The requested start/end could not be parsed or is not a valid range."""

    status_code = 400
    code = "invalid_time_range"


class ConfigurationError(ListenerReportError):
    """Station data is inconsistent: an unknown timezone, or a listener
    referencing a mount or remote relay with no display name."""

    status_code = 500
    code = "configuration_error"


class UpstreamUnavailable(ListenerReportError):
    """The event source, device classifier or geolocator failed."""

    status_code = 503
    code = "upstream_unavailable"


class ExecutionTimeExceeded(ListenerReportError):
    """The report did not finish within its execution-time budget."""

    status_code = 504
    code = "execution_time_exceeded"
