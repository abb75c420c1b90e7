# ==============================================================================
# Listener Report Export
# ==============================================================================
"""
Render report rows as JSON-ready dicts or as a CSV download.

CSV layout (fixed, 13 columns):
    IP, Start Time, End Time, Seconds Connected, User Agent, Client,
    Is Mobile, Mount Type, Mount Name, Location, Country, Region, City
"""

import csv
import logging
import tempfile
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, TextIO
from zoneinfo import ZoneInfo

from listenstats.core.exceptions import UpstreamUnavailable
from listenstats.core.models import ListenerRecord, Station, Window

logger = logging.getLogger(__name__)

CSV_MIME_TYPE = "text/csv"

CSV_HEADER = [
    "IP",
    "Start Time",
    "End Time",
    "Seconds Connected",
    "User Agent",
    "Client",
    "Is Mobile",
    "Mount Type",
    "Mount Name",
    "Location",
    "Country",
    "Region",
    "City",
]


class FileDownload(NamedTuple):
    """A file to be sent to the client as an attachment."""

    path: Path
    filename: str
    mime_type: str


def to_api_rows(records: Sequence[ListenerRecord]) -> list[dict]:
    """Serialize report rows for JSON consumers."""
    return [record.to_api_dict() for record in records]


def csv_filename(station: Station, window: Window) -> str:
    """Download filename, e.g. ``mystation_listeners_live.csv``."""
    return f"{station.short_name}_listeners_{window.label}.csv"


def _iso_time(timestamp: int, tz: ZoneInfo) -> str:
    return datetime.fromtimestamp(timestamp, tz).isoformat()


def csv_row(record: ListenerRecord, tz: ZoneInfo) -> list:
    """Flatten one report row into the 13 CSV columns."""
    row = [
        record.ip,
        _iso_time(record.connected_on, tz),
        _iso_time(record.connected_until, tz),
        record.connected_time,
        record.user_agent,
        record.client,
        "True" if record.is_mobile else "False",
    ]

    if record.mount_name == "":
        row += ["Unknown", "Unknown"]
    else:
        row += ["Local" if record.mount_is_local else "Remote", record.mount_name]

    location = record.location
    if location.is_success:
        row += [
            f"{location.region}, {location.country}",
            location.country,
            location.region,
            location.city,
        ]
    else:
        row += [location.message or "N/A", "", "", ""]

    return row


def write_csv(records: Sequence[ListenerRecord], sink: TextIO, tz_name: str) -> int:
    """
    Write the CSV report to an open text sink.

    Args:
        records: Report rows
        sink: Writable text handle (opened with newline="")
        tz_name: Station timezone for the Start/End columns

    Returns:
        Number of data rows written
    """
    tz = ZoneInfo(tz_name)
    writer = csv.writer(sink)
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow(csv_row(record, tz))
    return len(records)


def export_csv(
    records: Sequence[ListenerRecord],
    station: Station,
    window: Window,
    temp_dir: Path | None = None,
) -> FileDownload:
    """
    Write the CSV report to a temporary file.

    The caller owns the file and is responsible for removing it once sent.
    A partially written file is removed before the error is raised.

    Returns:
        FileDownload describing the temporary file and its download name

    Raises:
        UpstreamUnavailable: If the file cannot be created or written
    """
    filename = csv_filename(station, window)
    path: Path | None = None

    try:
        if temp_dir is not None:
            temp_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            mode="w",
            newline="",
            encoding="utf-8",
            suffix=f"_{filename}",
            dir=temp_dir,
            delete=False,
        ) as f:
            path = Path(f.name)
            rows = write_csv(records, f, station.timezone)
    except OSError as e:
        if path is not None:
            path.unlink(missing_ok=True)
        raise UpstreamUnavailable(f"Failed to write CSV export: {e}") from e

    logger.info("Wrote %d listener rows to %s", rows, path)
    return FileDownload(path=path, filename=filename, mime_type=CSV_MIME_TYPE)
