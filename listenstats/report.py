# ==============================================================================
# Listener Report Action
# ==============================================================================
"""
Request-level entry point of the listener report.

Takes a station and the request's query parameters and returns a response:
- 200 with a list of JSON-ready listener rows (format=json, default)
- 200 with a CSV file download (format=csv)
- 4xx/5xx with an error body, mapped from core.exceptions

Query parameters:
    start   Start date/time; absent or empty for a live report
    end     End date/time; defaults to start
    unique  "false" lists every connection; anything else merges by listener
    format  "csv" for a download; anything else returns JSON
"""

import logging
import time
from collections.abc import Mapping
from datetime import datetime
from typing import NamedTuple

from listenstats.base.enrichment import DeviceClassifier, GeoLocator
from listenstats.base.repositories import ListenerRepository, NameLookup
from listenstats.core.aggregator import ListenerAggregator
from listenstats.core.enricher import ListenerEnricher
from listenstats.core.exceptions import ListenerReportError
from listenstats.core.exporter import FileDownload, export_csv, to_api_rows
from listenstats.core.models import Station
from listenstats.core.window import resolve_window
from listenstats.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

FORMAT_JSON = "json"
FORMAT_CSV = "csv"


class ReportResponse(NamedTuple):
    """Outcome of a report request, independent of the HTTP framework."""

    status_code: int
    body: list | dict | None = None
    download: FileDownload | None = None

    @property
    def is_download(self) -> bool:
        return self.download is not None

    @classmethod
    def error(cls, exc: ListenerReportError) -> "ReportResponse":
        return cls(
            status_code=exc.status_code,
            body={"success": False, "code": exc.code, "message": str(exc)},
        )


def parse_unique(value: str | None) -> bool:
    """Only the literal "false" disables merging by listener hash."""
    return value != "false"


def parse_format(value: str | None) -> str:
    """Only the literal "csv" selects the CSV download; anything else is JSON."""
    return FORMAT_CSV if value == FORMAT_CSV else FORMAT_JSON


class ListenersReport:
    """
    Builds listener reports for a station.

    One instance can serve many requests; all per-request state is local to
    handle().
    """

    def __init__(
        self,
        listeners: ListenerRepository,
        names: NameLookup,
        classifier: DeviceClassifier,
        geolocator: GeoLocator,
        settings: Settings | None = None,
    ):
        """
        Initialize the report.

        Args:
            listeners: Connected listener repository
            names: Mount and relay display names
            classifier: User agent classifier
            geolocator: IP geolocator
            settings: Application settings. If None, uses get_settings().
        """
        self._listeners = listeners
        self._names = names
        self._classifier = classifier
        self._geolocator = geolocator
        self._settings = settings or get_settings()

    def handle(
        self,
        station: Station,
        params: Mapping[str, str],
        locale: str | None = None,
        now: datetime | None = None,
    ) -> ReportResponse:
        """
        Run a report and map failures to error responses.

        Args:
            station: Station to report on
            params: Query parameters (start, end, unique, format)
            locale: Request locale; defaults to REPORT_DEFAULT_LOCALE
            now: Current instant, defaults to the wall clock

        Returns:
            ReportResponse
        """
        try:
            return self.run(station, params, locale=locale, now=now)
        except ListenerReportError as e:
            if e.status_code >= 500:
                logger.error("Listener report for %s failed: %s", station.short_name, e)
            else:
                logger.info("Rejected listener report for %s: %s", station.short_name, e)
            return ReportResponse.error(e)

    def run(
        self,
        station: Station,
        params: Mapping[str, str],
        locale: str | None = None,
        now: datetime | None = None,
    ) -> ReportResponse:
        """
        Run a report, raising ListenerReportError on failure.

        See handle() for arguments.
        """
        report_settings = self._settings.report
        deadline = time.monotonic() + report_settings.long_execution_seconds

        fmt = parse_format(params.get("format"))
        unique = parse_unique(params.get("unique"))
        window = resolve_window(params.get("start"), params.get("end"), station.timezone, now=now)

        logger.info(
            "Listener report: station=%s window=%s unique=%s format=%s",
            station.short_name,
            window.label,
            unique,
            fmt,
        )

        enricher = ListenerEnricher.for_station(
            station,
            self._names,
            self._classifier,
            self._geolocator,
            locale or report_settings.default_locale,
        )
        aggregator = ListenerAggregator(enricher)
        records = aggregator.aggregate(
            self._listeners.query_listeners(station, window),
            window,
            unique=unique,
            deadline=deadline,
        )

        if fmt == FORMAT_CSV:
            download = export_csv(records, station, window, report_settings.temp_dir)
            return ReportResponse(status_code=200, download=download)

        return ReportResponse(status_code=200, body=to_api_rows(records))
