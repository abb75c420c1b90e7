# ==============================================================================
# Listener Domain Models
# ==============================================================================
"""
Pydantic models for raw listener connections and the listener report.

These models are used for:
- Validating rows read from the listeners table
- Describing the resolved report window
- Carrying enrichment results (mount, device, location)
- Serializing report rows for JSON consumers

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from listenstats.core.intervals import Interval


class LocalMount(BaseModel):
    """Listener connected to one of the station's own mount points."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    mount_id: int


class RemoteMount(BaseModel):
    """Listener counted on a remote relay."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    remote_id: int


MountRef = Annotated[LocalMount | RemoteMount, Field(discriminator="kind")]


def mount_ref_from_ids(
    mount_id: int | None, remote_id: int | None
) -> LocalMount | RemoteMount | None:
    """
    Build the mount reference from the two nullable listener columns.

    Raises:
        ValueError: If a row references both a mount and a remote relay
    """
    if mount_id and remote_id:
        raise ValueError(
            f"Listener references both mount {mount_id} and remote {remote_id}"
        )
    if mount_id:
        return LocalMount(mount_id=mount_id)
    if remote_id:
        return RemoteMount(remote_id=remote_id)
    return None


class ListenerEvent(BaseModel):
    """
    One persisted listener connection.

    Attributes:
        listener_hash: Stable fingerprint of the client identity
        ip: Client IP address
        user_agent: Client user agent string
        mount: Local mount, remote relay, or None
        timestamp_start: Connection start (epoch seconds)
        timestamp_end: Connection end (epoch seconds), 0 while still connected
    """

    model_config = ConfigDict(frozen=True)

    listener_hash: str = Field(..., description="Listener identity hash")
    ip: str = Field(..., description="Client IP address")
    user_agent: str = Field(default="", description="Client user agent")
    mount: MountRef | None = Field(default=None, description="Mount or remote relay")
    timestamp_start: int = Field(..., description="Connection start (epoch seconds)")
    timestamp_end: int = Field(default=0, description="Connection end, 0 if still open")

    @property
    def is_connected(self) -> bool:
        return self.timestamp_end == 0


class Station(BaseModel):
    """The subset of a station the listener report needs."""

    id: int
    short_name: str
    timezone: str = "UTC"


class WindowMode(str, Enum):
    """Report window types."""

    LIVE = "live"
    HISTORICAL = "historical"


class Window(BaseModel):
    """
    Resolved report window.

    Attributes:
        mode: Live snapshot or historical range
        start: First second of the window (epoch seconds)
        end: Last second of the window (epoch seconds)
        now: Instant the window was resolved (epoch seconds)
        label: "live" or "<start>_to_<end>", used in export filenames
        timezone: Station timezone name
    """

    model_config = ConfigDict(frozen=True)

    mode: WindowMode
    start: int
    end: int
    now: int
    label: str
    timezone: str = "UTC"

    @property
    def is_live(self) -> bool:
        return self.mode == WindowMode.LIVE


class MountInfo(BaseModel):
    """Resolved mount point or relay display name."""

    model_config = ConfigDict(frozen=True)

    is_local: bool
    name: str


class DeviceInfo(BaseModel):
    """Result of user agent classification."""

    model_config = ConfigDict(frozen=True)

    client: str | None = None
    is_mobile: bool = False


class LocationInfo(BaseModel):
    """
    Result of an IP geolocation lookup.

    ``status`` is "success" when the remaining fields are populated, otherwise
    "error" with an optional human-readable ``message``.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["success", "error"]
    message: str | None = None
    country: str | None = None
    region: str | None = None
    city: str | None = None
    lat: float | None = None
    lon: float | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @classmethod
    def failure(cls, message: str | None = None) -> "LocationInfo":
        return cls(status="error", message=message)


class ListenerRecord(BaseModel):
    """
    One row of the listener report.

    In raw mode there is one record per connection; in unique mode one record
    per listener hash, carrying every clamped interval of that listener.
    """

    model_config = ConfigDict(frozen=True)

    ip: str
    user_agent: str
    hash: str
    client: str = "Unknown"
    is_mobile: bool = False
    mount_is_local: bool = False
    mount_name: str = ""
    location: LocationInfo
    intervals: tuple[Interval, ...] = ()
    connected_on: int
    connected_until: int
    connected_time: int

    def to_api_dict(self) -> dict:
        """Serialize for JSON consumers."""
        return {
            "ip": self.ip,
            "user_agent": self.user_agent,
            "hash": self.hash,
            "client": self.client,
            "is_mobile": self.is_mobile,
            "mount_is_local": self.mount_is_local,
            "mount_name": self.mount_name,
            "location": self.location.model_dump(),
            "connected_on": self.connected_on,
            "connected_until": self.connected_until,
            "connected_time": self.connected_time,
            "intervals": [interval.to_dict() for interval in self.intervals],
        }
