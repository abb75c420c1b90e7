# ==============================================================================
# Repository Abstract Base Classes
# ==============================================================================
"""
Repository ABCs for reading listener data.

These define the "what" (read listeners, read display names) not the "how".
Concrete implementations in infrastructure/ handle the specifics.

Includes:
- ListenerRepository: Ordered, batched listener connections for a window
- NameLookup: Display names of a station's mounts and remote relays
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from listenstats.core.models import ListenerEvent, Station, Window


class ListenerRepository(ABC):
    """Repository for raw listener connections."""

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data store."""
        ...

    @abstractmethod
    def query_listeners(self, station: Station, window: Window) -> Iterator[ListenerEvent]:
        """
        Stream the listener connections relevant to a window.

        Implementations must:
        - order rows by timestamp_start ascending
        - for a live window, return only connections with timestamp_end = 0
        - for a historical window, return only connections overlapping it
        - page through results so memory does not grow with the row count

        Args:
            station: Station to report on
            window: Resolved report window

        Returns:
            Iterator of ListenerEvent
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...


class NameLookup(ABC):
    """Display names for a station's mount points and remote relays."""

    @abstractmethod
    def get_mount_names(self, station: Station) -> dict[int, str]:
        """
        Map every mount id of the station to its display name.

        Returns:
            Dict of mount_id -> display name
        """
        ...

    @abstractmethod
    def get_remote_names(self, station: Station) -> dict[int, str]:
        """
        Map every remote relay id of the station to its display name.

        Returns:
            Dict of remote_id -> display name
        """
        ...
