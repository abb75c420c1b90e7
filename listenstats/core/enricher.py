# ==============================================================================
# Listener Enrichment
# ==============================================================================
"""
Attach display data to a listener: mount name, client/device, and location.

Each call to ``enrich()`` costs one device classification and one geolocation
lookup, so the aggregator calls it once per report row, never once per raw
connection.
"""

import logging
from typing import NamedTuple

from listenstats.base.enrichment import DeviceClassifier, GeoLocator
from listenstats.base.repositories import NameLookup
from listenstats.core.exceptions import (
    ConfigurationError,
    ListenerReportError,
    UpstreamUnavailable,
)
from listenstats.core.models import (
    ListenerEvent,
    LocalMount,
    LocationInfo,
    MountInfo,
    RemoteMount,
    Station,
)

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown"


class EnrichedListener(NamedTuple):
    """Enrichment result for one listener."""

    client: str
    is_mobile: bool
    mount: MountInfo | None
    location: LocationInfo


class ListenerEnricher:
    """
    Resolves mount names, device classification, and geolocation.

    Name tables are loaded once per report; the classifier and geolocator are
    called once per enriched listener.
    """

    def __init__(
        self,
        mount_names: dict[int, str],
        remote_names: dict[int, str],
        classifier: DeviceClassifier,
        geolocator: GeoLocator,
        locale: str,
    ):
        self._mount_names = mount_names
        self._remote_names = remote_names
        self._classifier = classifier
        self._geolocator = geolocator
        self._locale = locale

    @classmethod
    def for_station(
        cls,
        station: Station,
        names: NameLookup,
        classifier: DeviceClassifier,
        geolocator: GeoLocator,
        locale: str,
    ) -> "ListenerEnricher":
        """Load the station's mount and relay names and build an enricher."""
        try:
            mount_names = names.get_mount_names(station)
            remote_names = names.get_remote_names(station)
        except ListenerReportError:
            raise
        except Exception as e:
            raise UpstreamUnavailable(f"Failed to load mount names: {e}") from e

        logger.debug(
            "Loaded %d mount and %d remote names for station %s",
            len(mount_names),
            len(remote_names),
            station.short_name,
        )
        return cls(mount_names, remote_names, classifier, geolocator, locale)

    def resolve_mount(self, event: ListenerEvent) -> MountInfo | None:
        """
        Resolve the display name of the listener's mount or relay.

        Raises:
            ConfigurationError: If the id has no display name
        """
        mount = event.mount
        if isinstance(mount, LocalMount):
            try:
                return MountInfo(is_local=True, name=self._mount_names[mount.mount_id])
            except KeyError:
                raise ConfigurationError(
                    f"Listener {event.listener_hash} references unknown mount {mount.mount_id}"
                ) from None
        if isinstance(mount, RemoteMount):
            try:
                return MountInfo(is_local=False, name=self._remote_names[mount.remote_id])
            except KeyError:
                raise ConfigurationError(
                    f"Listener {event.listener_hash} references unknown remote {mount.remote_id}"
                ) from None
        return None

    def enrich(self, event: ListenerEvent) -> EnrichedListener:
        """Resolve every display field for one listener."""
        mount = self.resolve_mount(event)

        try:
            device = self._classifier.parse(event.user_agent)
        except ListenerReportError:
            raise
        except Exception as e:
            raise UpstreamUnavailable(f"Device classification failed: {e}") from e

        try:
            location = self._geolocator.lookup(event.ip, self._locale)
        except ListenerReportError:
            raise
        except Exception as e:
            raise UpstreamUnavailable(f"Geolocation failed for {event.ip}: {e}") from e

        return EnrichedListener(
            client=device.client or UNKNOWN_CLIENT,
            is_mobile=device.is_mobile,
            mount=mount,
            location=location,
        )
