# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

This module contains concrete implementations of the base/ interfaces:
- repositories/ - Listener store adapters (PostgreSQL)
- devices.py - User agent classification (user-agents)
- geolocation.py - IP geolocation (MaxMind GeoIP2)
"""

from listenstats.infrastructure.devices import UserAgentClassifier
from listenstats.infrastructure.geolocation import GeoIP2Locator
from listenstats.infrastructure.repositories import PostgreSQLListenerRepository

__all__ = [
    "GeoIP2Locator",
    "PostgreSQLListenerRepository",
    "UserAgentClassifier",
]
