# ==============================================================================
# Utilities
# ==============================================================================
"""
Shared helpers: configuration, retry policies, paths and database setup.
"""

from listenstats.utils.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
