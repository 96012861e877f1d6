"""Data models for the Wiser Heat integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .const import (
    BOOST_DEFAULT_DURATION,
    BOOST_DEFAULT_TEMP,
    DEFAULT_INTERVAL,
)

if TYPE_CHECKING:
    from collections.abc import Callable

# Entity type name -> entity records, as returned by the full domain dump
Snapshot = dict[str, Any]


@dataclass
class WiserSettings:
    """Runtime settings for one controller connection."""

    interval: int = DEFAULT_INTERVAL
    max_boost: float = BOOST_DEFAULT_TEMP
    boost_cancel_time: str | None = None
    folder: str = ""


@dataclass(frozen=True)
class RoomMapEntry:
    """Room that a device (SmartValve, RoomStat or SmartPlug) belongs to."""

    room_id: int
    room_name: str | None
    device_kind: str


@dataclass(slots=True)
class ChangeRecord:
    """One changed entity detected between two consecutive snapshots."""

    monitor_ref: str
    detected_at: datetime
    entity_type: str
    index: int
    id: int | None
    changed_fields: dict[str, Any]
    previous_fields: dict[str, Any]
    room_name: str | None = None

    def as_event_data(self) -> dict[str, Any]:
        """Return the payload fired on the event bus."""
        data: dict[str, Any] = {
            "monitor_ref": self.monitor_ref,
            "timestamp": self.detected_at.isoformat(),
            "entity_type": self.entity_type,
            "index": self.index,
            "id": self.id,
            "changed_fields": self.changed_fields,
            "previous_fields": self.previous_fields,
        }
        if self.room_name is not None:
            data["room_name"] = self.room_name
        return data


@dataclass
class MonitorHandle:
    """A registered polling loop.

    Attributes:
        ref: Caller supplied monitor reference.
        interval: Seconds between polls.
        cancel_token: Unsubscribe callable of the repeating timer.
        previous: Last accepted snapshot, volatile fields stripped.
        cancelled: Set once the handle has been removed or replaced.

    """

    ref: str
    interval: int
    cancel_token: Callable[[], None] | None = None
    previous: Snapshot | None = field(default=None, repr=False)
    cancelled: bool = False

    def cancel(self) -> None:
        """Stop future ticks of this monitor."""
        if self.cancel_token is not None:
            self.cancel_token()
            self.cancel_token = None
        self.cancelled = True


@dataclass(frozen=True)
class RoomModeSettings:
    """Room mode request as a single object."""

    room_id_or_name: int | str | None
    mode: str | None
    boost_temp: float = BOOST_DEFAULT_TEMP
    boost_duration: int = BOOST_DEFAULT_DURATION

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoomModeSettings:
        """Build settings from an event or service payload."""
        boost_temp = data.get("boost_temp")
        boost_duration = data.get("boost_duration")
        return cls(
            room_id_or_name=data.get("room_id_or_name"),
            mode=data.get("mode"),
            boost_temp=BOOST_DEFAULT_TEMP if boost_temp is None else boost_temp,
            boost_duration=(
                BOOST_DEFAULT_DURATION if boost_duration is None else boost_duration
            ),
        )


@dataclass(frozen=True)
class RoomModeResult:
    """Outcome of a room mode change; reflects the last write only."""

    room_id: int
    mode: str
    num_results: int
    last_result: Any
    last_payload: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        """Return the result as a service response."""
        return {
            "room_id": self.room_id,
            "mode": self.mode,
            "num_results": self.num_results,
            "last_result": self.last_result,
            "last_payload": self.last_payload,
        }
