# ==============================================================================
# PostgreSQL Repository Implementations
# ==============================================================================
"""
PostgreSQL implementation of the listener repository interfaces.

Provides:
- PostgreSQLListenerRepository: Batched listener reads, mount/relay display
  names, and station lookup over a single connection
"""

import logging
from collections.abc import Iterator

import psycopg2

from listenstats.base.repositories import ListenerRepository, NameLookup
from listenstats.core.exceptions import UpstreamUnavailable
from listenstats.core.models import ListenerEvent, Station, Window, mount_ref_from_ids
from listenstats.utils.config import Settings, get_settings
from listenstats.utils.db import add_connect_timeout
from listenstats.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_light

logger = logging.getLogger(__name__)

LISTENER_COLUMNS = (
    "listener_hash, listener_ip, listener_user_agent, mount_id, remote_id, "
    "timestamp_start, timestamp_end"
)


def row_to_event(row: tuple) -> ListenerEvent:
    """Convert a listeners row (LISTENER_COLUMNS order) to a ListenerEvent."""
    listener_hash, ip, user_agent, mount_id, remote_id, ts_start, ts_end = row
    return ListenerEvent(
        listener_hash=listener_hash,
        ip=ip,
        user_agent=user_agent or "",
        mount=mount_ref_from_ids(mount_id, remote_id),
        timestamp_start=ts_start,
        timestamp_end=ts_end or 0,
    )


class PostgreSQLListenerRepository(ListenerRepository, NameLookup):
    """
    PostgreSQL implementation of ListenerRepository and NameLookup.

    Listener rows are read through a named (server-side) cursor and fetched
    ``batch_size`` rows at a time, so memory does not grow with the number of
    connections in the window.
    """

    def __init__(self, settings: Settings | None = None, batch_size: int | None = None):
        """
        Initialize the listener repository.

        Args:
            settings: Application settings. If None, uses get_settings().
            batch_size: Rows per fetch. Defaults to REPORT_BATCH_SIZE.
        """
        self._settings = settings or get_settings()
        self._conn: psycopg2.extensions.connection | None = None
        self._schema = self._settings.postgres.schema_name
        self._batch_size = batch_size or self._settings.report.batch_size

    @property
    def schema(self) -> str:
        """Get the database schema name."""
        return self._schema

    def connect(self) -> None:
        """Establish connection to PostgreSQL (3 attempts)."""

        @retry_light(POSTGRES_RETRY_EXCEPTIONS, logger)
        def _connect() -> psycopg2.extensions.connection:
            return psycopg2.connect(add_connect_timeout(self._settings.postgres.connection_string))

        try:
            self._conn = _connect()
        except psycopg2.Error as e:
            raise UpstreamUnavailable(f"Cannot connect to PostgreSQL: {e}") from e
        self._conn.set_session(readonly=True)
        logger.info("PostgreSQLListenerRepository connected (schema=%s)", self._schema)

    def _require_conn(self) -> psycopg2.extensions.connection:
        if self._conn is None:
            raise RuntimeError("PostgreSQL connection not established. Call connect() first.")
        return self._conn

    def get_station(self, short_name: str) -> Station | None:
        """Look up a station by its short name."""
        conn = self._require_conn()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT id, short_name, timezone FROM {self._schema}.stations "
                    "WHERE short_name = %s",
                    (short_name,),
                )
                row = cur.fetchone()
            conn.rollback()
        except psycopg2.Error as e:
            raise UpstreamUnavailable(f"Station lookup failed: {e}") from e

        if row is None:
            return None
        return Station(id=row[0], short_name=row[1], timezone=row[2] or "UTC")

    def _fetch_names(self, sql: str, station: Station) -> dict[int, str]:
        conn = self._require_conn()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (station.id,))
                rows = cur.fetchall()
            conn.rollback()
        except psycopg2.Error as e:
            raise UpstreamUnavailable(f"Display name lookup failed: {e}") from e
        return {row_id: name for row_id, name in rows}

    def get_mount_names(self, station: Station) -> dict[int, str]:
        """Mount id -> display name (falls back to the mount path)."""
        return self._fetch_names(
            f"""
            SELECT id, COALESCE(NULLIF(display_name, ''), name)
            FROM {self._schema}.station_mounts
            WHERE station_id = %s
            """,
            station,
        )

    def get_remote_names(self, station: Station) -> dict[int, str]:
        """Remote relay id -> display name (falls back to the relay URL)."""
        return self._fetch_names(
            f"""
            SELECT id, COALESCE(NULLIF(display_name, ''), url)
            FROM {self._schema}.station_remotes
            WHERE station_id = %s
            """,
            station,
        )

    def query_listeners(self, station: Station, window: Window) -> Iterator[ListenerEvent]:
        """
        Stream listener connections for a window, oldest first.

        Live windows select connections that are still open; historical
        windows select connections overlapping [window.start, window.end].

        Raises:
            UpstreamUnavailable: If the query or a fetch fails
        """
        conn = self._require_conn()

        if window.is_live:
            where = "station_id = %(station_id)s AND timestamp_end = 0"
        else:
            where = (
                "station_id = %(station_id)s "
                "AND timestamp_start < %(time_end)s "
                "AND (timestamp_end = 0 OR timestamp_end > %(time_start)s)"
            )
        params = {
            "station_id": station.id,
            "time_start": window.start,
            "time_end": window.end,
        }

        fetched = 0
        try:
            with conn.cursor(name="listenstats_listeners") as cur:
                cur.itersize = self._batch_size
                cur.execute(
                    f"SELECT {LISTENER_COLUMNS} FROM {self._schema}.listeners "
                    f"WHERE {where} ORDER BY timestamp_start ASC, id ASC",
                    params,
                )
                while True:
                    rows = cur.fetchmany(self._batch_size)
                    if not rows:
                        break
                    fetched += len(rows)
                    logger.debug("Fetched %d listener rows (total=%d)", len(rows), fetched)
                    for row in rows:
                        yield row_to_event(row)
        except psycopg2.Error as e:
            raise UpstreamUnavailable(f"Listener query failed after {fetched} rows: {e}") from e
        finally:
            try:
                conn.rollback()
            except psycopg2.Error as e:
                logger.warning("Error ending read transaction: %s", e)

    def close(self) -> None:
        """Close connection and release resources."""
        if self._conn:
            try:
                self._conn.close()
                logger.info("PostgreSQLListenerRepository connection closed")
            except Exception as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self._conn = None

    def __enter__(self) -> "PostgreSQLListenerRepository":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
