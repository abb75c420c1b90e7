# ==============================================================================
# Database Repository Adapters
# ==============================================================================
"""
Database adapters implementing the repository interfaces from base/repositories.py.

Currently supported:
- PostgreSQL (postgresql.py)
"""

from listenstats.infrastructure.repositories.postgresql import (
    PostgreSQLListenerRepository,
    row_to_event,
)

__all__ = [
    "PostgreSQLListenerRepository",
    "row_to_event",
]
