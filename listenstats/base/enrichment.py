# ==============================================================================
# Enrichment Service Abstract Base Classes
# ==============================================================================
"""
Interfaces for the lookups applied to each listener in the report.

Implementations: UserAgentClassifier, GeoIP2Locator (infrastructure/).
"""

from abc import ABC, abstractmethod

from listenstats.core.models import DeviceInfo, LocationInfo


class DeviceClassifier(ABC):
    """Classifies a user agent string into a client name and device type."""

    @abstractmethod
    def parse(self, user_agent: str) -> DeviceInfo:
        """
        Classify a user agent.

        Args:
            user_agent: Raw User-Agent header value

        Returns:
            DeviceInfo; client is None when the agent is not recognized
        """
        ...


class GeoLocator(ABC):
    """Resolves an IP address to a location."""

    @abstractmethod
    def lookup(self, ip: str, locale: str) -> LocationInfo:
        """
        Geolocate an IP address.

        Expected lookup failures (private address, unknown address, missing
        database) are returned as a LocationInfo with status "error". Only
        unexpected failures should raise.

        Args:
            ip: IPv4 or IPv6 address
            locale: Locale for place names (e.g., "en_US")

        Returns:
            LocationInfo
        """
        ...
