# ==============================================================================
# Database Utilities
# ==============================================================================
"""
Database utility functions for the listener store.

Provides schema initialization and connection checks.
Includes retry logic with exponential backoff for network resilience.
"""

import logging
from pathlib import Path

import psycopg2
from jinja2 import Template

from listenstats.utils.config import Settings, get_settings
from listenstats.utils.paths import get_init_sql_path
from listenstats.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_standard

logger = logging.getLogger(__name__)

# Connection timeout
CONNECT_TIMEOUT = 10


def add_connect_timeout(conn_string: str) -> str:
    """Add connect_timeout to connection string if not present."""
    if "connect_timeout" not in conn_string:
        separator = "&" if "?" in conn_string else "?"
        return f"{conn_string}{separator}connect_timeout={CONNECT_TIMEOUT}"
    return conn_string


def get_schema_file() -> Path | None:
    """Get the schema init.sql path, or None if not found."""
    path = get_init_sql_path()
    if path.exists():
        return path
    # Fallback to current directory
    cwd_path = Path.cwd() / "schema" / "init.sql"
    if cwd_path.exists():
        return cwd_path
    return None


def render_schema_sql(schema_name: str) -> str:
    """Render the schema SQL template with the given schema name."""
    schema_file = get_schema_file()
    if not schema_file:
        raise RuntimeError(
            "Schema file (schema/init.sql) not found. "
            "Make sure you're running from the project root."
        )

    template = Template(schema_file.read_text())
    return template.render(schema_name=schema_name)


def check_db_connection(settings: Settings | None = None) -> bool:
    """Check if PostgreSQL is reachable."""
    try:
        settings = settings or get_settings()
        conn = psycopg2.connect(add_connect_timeout(settings.postgres.connection_string))
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
        finally:
            conn.close()
        return True
    except Exception:
        return False


def check_schema_exists(settings: Settings | None = None) -> bool:
    """Check if the listener store schema (listeners table) exists."""
    try:
        settings = settings or get_settings()
        conn = psycopg2.connect(add_connect_timeout(settings.postgres.connection_string))
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT EXISTS (
                        SELECT FROM information_schema.tables
                        WHERE table_schema = %s
                        AND table_name = 'listeners'
                    )
                    """,
                    (settings.postgres.schema_name,),
                )
                result = cur.fetchone()
                return result[0] if result else False
        finally:
            conn.close()
    except Exception:
        return False


@retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
def ensure_schema(settings: Settings | None = None) -> bool:
    """
    Ensure the listener store schema exists, initializing it if needed.

    Idempotent. Retries on connection errors with exponential backoff
    (10 attempts, ~60 seconds).

    Returns:
        True if the schema was created, False if it already existed

    Raises:
        RuntimeError: If the schema file is missing or initialization fails
    """
    settings = settings or get_settings()
    schema_name = settings.postgres.schema_name

    if check_schema_exists(settings):
        return False

    logger.info("Initializing database schema '%s'...", schema_name)
    schema_sql = render_schema_sql(schema_name)

    conn = psycopg2.connect(add_connect_timeout(settings.postgres.connection_string))
    try:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()
    except POSTGRES_RETRY_EXCEPTIONS:
        raise
    except Exception as e:
        raise RuntimeError(f"Failed to initialize schema: {e}") from e
    finally:
        conn.close()

    logger.info("Database schema '%s' initialized.", schema_name)
    return True
