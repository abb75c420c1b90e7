# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes for the collaborators of the listener report.

The core consumes these interfaces only; infrastructure/ provides the
PostgreSQL, user agent and GeoIP implementations.
"""

from listenstats.base.enrichment import DeviceClassifier, GeoLocator
from listenstats.base.repositories import ListenerRepository, NameLookup

__all__ = [
    "DeviceClassifier",
    "GeoLocator",
    "ListenerRepository",
    "NameLookup",
]
