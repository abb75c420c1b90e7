# ==============================================================================
# Listener Aggregator - Session Reconstruction
# ==============================================================================
"""
Rebuild per-listener sessions from raw connection rows.

This module contains the domain logic of the listener report:
- Clamping each connection to the report window
- Raw mode: one report row per connection
- Unique mode: one report row per listener hash, with every clamped
  interval of that listener merged into it
- Computing connected_on / connected_until / connected_time

State lives in a dict local to a single ``aggregate()`` call; the aggregator
itself holds no per-report state and can be reused across reports.
"""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from listenstats.core.enricher import EnrichedListener, ListenerEnricher
from listenstats.core.exceptions import (
    ExecutionTimeExceeded,
    ListenerReportError,
    UpstreamUnavailable,
)
from listenstats.core.intervals import (
    Interval,
    clamp_historical,
    clamp_live,
    interval_bounds,
    union_seconds,
)
from listenstats.core.models import ListenerEvent, ListenerRecord, Window

logger = logging.getLogger(__name__)


@dataclass
class _PendingListener:
    """A listener seen during the stream whose intervals are still growing."""

    event: ListenerEvent
    details: EnrichedListener
    intervals: list[Interval] = field(default_factory=list)


class ListenerAggregator:
    """
    Listener session aggregation.

    Consumes listener connections in timestamp_start order and produces
    ListenerRecords. Enrichment is delegated to a ListenerEnricher and runs
    once per produced record.
    """

    def __init__(self, enricher: ListenerEnricher):
        """
        Initialize the aggregator.

        Args:
            enricher: Resolves mount, device and location for new records
        """
        self._enricher = enricher

    @staticmethod
    def clamp(event: ListenerEvent, window: Window) -> Interval:
        """
        Interval of ``event`` attributable to ``window``.

        Live windows run every connection up to ``window.now`` regardless of
        its recorded end; historical windows intersect with [start, end].
        """
        if window.is_live:
            return clamp_live(event.timestamp_start, window.now)
        return clamp_historical(
            event.timestamp_start,
            event.timestamp_end,
            window.start,
            window.end,
        )

    @staticmethod
    def build_record(
        event: ListenerEvent,
        details: EnrichedListener,
        intervals: list[Interval],
        now: int,
    ) -> ListenerRecord:
        """
        Finalize a report row from its representative event and intervals.

        Args:
            event: First connection seen for this row
            details: Enrichment result for the event
            intervals: Every clamped interval contributing to this row
            now: Window's resolution instant, seeds connected_on

        Returns:
            The ListenerRecord with derived fields computed
        """
        connected_on, connected_until = interval_bounds(intervals, now)
        mount = details.mount

        return ListenerRecord(
            ip=event.ip,
            user_agent=event.user_agent,
            hash=event.listener_hash,
            client=details.client,
            is_mobile=details.is_mobile,
            mount_is_local=mount.is_local if mount else False,
            mount_name=mount.name if mount else "",
            location=details.location,
            intervals=tuple(intervals),
            connected_on=connected_on,
            connected_until=connected_until,
            connected_time=union_seconds(intervals),
        )

    def aggregate(
        self,
        events: Iterable[ListenerEvent],
        window: Window,
        unique: bool = True,
        deadline: float | None = None,
    ) -> list[ListenerRecord]:
        """
        Aggregate listener connections into report rows.

        Args:
            events: Connections ordered by timestamp_start, already filtered
                    to the window by the event source
            window: Resolved report window
            unique: Merge connections sharing a listener hash into one row
            deadline: Optional time.monotonic() value after which the report
                      is abandoned

        Returns:
            Report rows. Raw mode keeps input order; unique mode keeps the
            order in which each hash was first seen.

        Raises:
            ExecutionTimeExceeded: If ``deadline`` passes mid-stream
            UpstreamUnavailable: If the event source or a lookup fails
            ConfigurationError: If a mount or relay has no display name
        """
        records: list[ListenerRecord] = []
        by_hash: dict[str, _PendingListener] = {}
        event_count = 0

        iterator = iter(events)
        while True:
            try:
                event = next(iterator)
            except StopIteration:
                break
            except ListenerReportError:
                raise
            except Exception as e:
                raise UpstreamUnavailable(f"Listener stream failed: {e}") from e

            if deadline is not None and time.monotonic() > deadline:
                raise ExecutionTimeExceeded(
                    f"Listener report exceeded its time budget after {event_count:,} connections"
                )

            event_count += 1
            interval = self.clamp(event, window)

            if not unique:
                details = self._enricher.enrich(event)
                records.append(self.build_record(event, details, [interval], window.now))
                continue

            # Existing listener: extend its intervals, no new lookups
            pending = by_hash.get(event.listener_hash)
            if pending is not None:
                pending.intervals.append(interval)
                continue

            by_hash[event.listener_hash] = _PendingListener(
                event=event,
                details=self._enricher.enrich(event),
                intervals=[interval],
            )

        if unique:
            records = [
                self.build_record(p.event, p.details, p.intervals, window.now)
                for p in by_hash.values()
            ]

        logger.info(
            "Aggregated %s connections into %s listeners (window=%s, unique=%s)",
            f"{event_count:,}",
            f"{len(records):,}",
            window.label,
            unique,
        )
        return records
