# ==============================================================================
# Report Window Resolution
# ==============================================================================
"""
Turn the report's start/end query values into a concrete window.

- No start: a live window, start == end == now, labelled "live".
- Otherwise: a historical window in the station's timezone with the start
  floored to :00 seconds and the end forced to :59 seconds.
"""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from listenstats.core.exceptions import ConfigurationError, InvalidTimeRange
from listenstats.core.models import Window, WindowMode

LIVE_LABEL = "live"
LABEL_FORMAT = "%Y-%m-%d_%H-%M-%S"


def _station_tz(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown station timezone: {tz_name!r}") from e


def parse_station_time(value: str, tz: ZoneInfo) -> datetime:
    """
    Parse a date/time string in the station timezone.

    Naive values are taken as station-local; values carrying an offset are
    converted to the station timezone.

    Raises:
        InvalidTimeRange: If the value is not a recognizable date/time
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidTimeRange(f"Invalid date/time: {value!r}") from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def resolve_window(
    start: str | None,
    end: str | None,
    tz_name: str,
    now: datetime | None = None,
) -> Window:
    """
    Resolve the report window from query values.

    Args:
        start: Start date/time, absent or empty for a live report
        end: End date/time, defaults to ``start`` when absent or empty
        tz_name: Station timezone (IANA name)
        now: Current instant, defaults to the wall clock

    Returns:
        The resolved Window

    Raises:
        InvalidTimeRange: On unparseable values or end < start
        ConfigurationError: If the station timezone is unknown
    """
    tz = _station_tz(tz_name)
    now_ts = int((now or datetime.now(tz)).timestamp())

    if not start:
        return Window(
            mode=WindowMode.LIVE,
            start=now_ts,
            end=now_ts,
            now=now_ts,
            label=LIVE_LABEL,
            timezone=tz_name,
        )

    start_dt = parse_station_time(start, tz).replace(second=0, microsecond=0)
    end_dt = parse_station_time(end or start, tz).replace(second=59, microsecond=0)

    if end_dt < start_dt:
        raise InvalidTimeRange(
            f"End {end_dt.isoformat()} is before start {start_dt.isoformat()}"
        )

    return Window(
        mode=WindowMode.HISTORICAL,
        start=int(start_dt.timestamp()),
        end=int(end_dt.timestamp()),
        now=now_ts,
        label=f"{start_dt.strftime(LABEL_FORMAT)}_to_{end_dt.strftime(LABEL_FORMAT)}",
        timezone=tz_name,
    )
