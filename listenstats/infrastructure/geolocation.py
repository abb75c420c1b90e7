# ==============================================================================
# IP Geolocation
# ==============================================================================
"""
GeoLocator backed by a MaxMind GeoIP2/GeoLite2 City database (``geoip2``).

Expected failures are reported as LocationInfo(status="error"):
- no database configured
- invalid, private or reserved addresses
- addresses missing from the database
"""

import ipaddress
import logging
from pathlib import Path

import geoip2.database
import geoip2.errors

from listenstats.base.enrichment import GeoLocator
from listenstats.core.models import LocationInfo

logger = logging.getLogger(__name__)

# Languages available in GeoLite2 databases
GEOIP_LANGUAGES = ("de", "en", "es", "fr", "ja", "pt-BR", "ru", "zh-CN")
FALLBACK_LANGUAGE = "en"


def locale_to_language(locale: str) -> str:
    """
    Map an application locale ("pt_BR", "en_US.UTF-8") to a GeoIP language.

    Returns the fallback language when the database has no names for it.
    """
    tag = locale.split(".", 1)[0].replace("_", "-")
    if tag in GEOIP_LANGUAGES:
        return tag
    base = tag.split("-", 1)[0].lower()
    if base in GEOIP_LANGUAGES:
        return base
    return FALLBACK_LANGUAGE


def _name(names: dict, language: str) -> str:
    return names.get(language) or names.get(FALLBACK_LANGUAGE) or ""


class GeoIP2Locator(GeoLocator):
    """
    Look up listener IPs in a local MaxMind City database.

    The database is opened lazily on first lookup and kept open until close().
    """

    def __init__(self, database_path: Path | None):
        self._database_path = database_path
        self._reader: geoip2.database.Reader | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self._database_path and self._database_path.is_file())

    def _get_reader(self) -> geoip2.database.Reader:
        if self._reader is None:
            self._reader = geoip2.database.Reader(str(self._database_path))
            logger.info("Opened GeoIP database %s", self._database_path)
        return self._reader

    def lookup(self, ip: str, locale: str) -> LocationInfo:
        if not self.is_configured:
            return LocationInfo.failure("GeoIP database not configured")

        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            return LocationInfo.failure("Invalid IP address")

        if address.is_private or address.is_reserved or address.is_loopback:
            return LocationInfo.failure("Internal/Reserved IP")

        try:
            record = self._get_reader().city(str(address))
        except geoip2.errors.AddressNotFoundError:
            return LocationInfo.failure("IP not found in GeoIP database")

        language = locale_to_language(locale)
        return LocationInfo(
            status="success",
            country=_name(record.country.names, language),
            region=_name(record.subdivisions.most_specific.names, language),
            city=_name(record.city.names, language),
            lat=record.location.latitude,
            lon=record.location.longitude,
        )

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
