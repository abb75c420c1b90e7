# ==============================================================================
# Connection Intervals
# ==============================================================================
"""
Half-open connection intervals in epoch seconds and the arithmetic on them.

Pure functions only - no I/O, no clocks. Used by the aggregator to clamp raw
listener connections to the requested window and to total the seconds a
listener was connected without double-counting overlaps.
"""

from collections.abc import Iterable
from typing import NamedTuple


class Interval(NamedTuple):
    """A connection interval ``[start, end)`` in epoch seconds."""

    start: int
    end: int

    @property
    def seconds(self) -> int:
        """Length of the interval (negative for malformed data)."""
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


def clamp_live(timestamp_start: int, now: int) -> Interval:
    """
    Interval attributable to a live window.

    A live connection counts from its own start up to ``now``, whatever its
    recorded end is.
    """
    return Interval(timestamp_start, now)


def clamp_historical(
    timestamp_start: int,
    timestamp_end: int,
    window_start: int,
    window_end: int,
) -> Interval:
    """
    Intersect a raw connection with a historical window.

    Args:
        timestamp_start: Connection start (epoch seconds)
        timestamp_end: Connection end, or 0 while still connected
        window_start: First second of the window
        window_end: Last second of the window

    Returns:
        The clamped interval. No overlap check is done here; rows that do not
        overlap the window are filtered out by the event source.
    """
    start = max(timestamp_start, window_start)
    if timestamp_end == 0 or timestamp_end > window_end:
        end = window_end
    else:
        end = timestamp_end
    return Interval(start, end)


def union_seconds(intervals: Iterable[Interval]) -> int:
    """
    Total seconds covered by the union of ``intervals``.

    Overlapping and adjacent intervals are merged before summing, so time
    covered twice by two connections of the same listener counts once.
    Negative-length intervals contribute their (negative) length unmerged.
    """
    total = 0
    cur_start: int | None = None
    cur_end = 0

    for interval in sorted(intervals):
        if interval.end < interval.start:
            total += interval.seconds
            continue
        if cur_start is None:
            cur_start, cur_end = interval
        elif interval.start <= cur_end:
            cur_end = max(cur_end, interval.end)
        else:
            total += cur_end - cur_start
            cur_start, cur_end = interval

    if cur_start is not None:
        total += cur_end - cur_start
    return total


def interval_bounds(intervals: Iterable[Interval], now: int) -> tuple[int, int]:
    """
    Earliest start and latest end over ``intervals``.

    The start is seeded with ``now`` and the end with 0, so an empty sequence
    yields ``(now, 0)``.
    """
    first = now
    last = 0
    for interval in intervals:
        first = min(first, interval.start)
        last = max(last, interval.end)
    return first, last
