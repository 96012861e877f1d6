"""In-memory room lookup rebuilt from each full snapshot."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .models import RoomMapEntry

if TYPE_CHECKING:
    from .models import Snapshot

_LOGGER = logging.getLogger(__name__)


class RoomIndex:
    """Rooms of the last accepted snapshot and the device to room map.

    Lookups are linear scans; a hub has tens of rooms at most. Lookups never
    raise: a miss returns None and logs a warning.
    """

    def __init__(self) -> None:
        """Initialize an empty index."""
        self._rooms: list[dict[str, Any]] = []
        self._device_map: dict[int, RoomMapEntry] = {}

    @property
    def rooms(self) -> list[dict[str, Any]]:
        """Return the rooms of the last rebuild."""
        return self._rooms

    @property
    def device_map(self) -> dict[int, RoomMapEntry]:
        """Return the device id to room map of the last rebuild."""
        return self._device_map

    def rebuild(self, snapshot: Snapshot) -> None:
        """Replace the index with the rooms of a new snapshot."""
        rooms = list(snapshot.get("Room") or [])
        device_map: dict[int, RoomMapEntry] = {}

        for room in rooms:
            room_id = room.get("id")
            room_name = room.get("Name")

            for valve_id in room.get("SmartValveIds") or []:
                device_map[valve_id] = RoomMapEntry(room_id, room_name, "SmartValve")

            roomstat_id = room.get("RoomStatId")
            if roomstat_id:
                device_map[roomstat_id] = RoomMapEntry(room_id, room_name, "RoomStat")

            for plug_id in room.get("SmartPlugIds") or []:
                device_map[plug_id] = RoomMapEntry(room_id, room_name, "SmartPlug")

        self._rooms = rooms
        self._device_map = device_map
        _LOGGER.debug(
            "Room index rebuilt: %d rooms, %d devices", len(rooms), len(device_map)
        )

    def find_room_by_id(self, room_id: float) -> dict[str, Any] | None:
        """Return the first room with the given id, or None."""
        return self._first_match("id", room_id)

    def find_room_by_name(self, name: str) -> dict[str, Any] | None:
        """Return the first room with the given name, or None."""
        return self._first_match("Name", name)

    def lookup_device(self, device_id: int | None) -> RoomMapEntry | None:
        """Return the room a device belongs to, or None."""
        if device_id is None:
            return None
        return self._device_map.get(device_id)

    def _first_match(self, key: str, value: Any) -> dict[str, Any] | None:
        matches = [room for room in self._rooms if room.get(key) == value]

        if not matches:
            _LOGGER.warning("Room %s %r not found", key, value)
            return None

        if len(matches) > 1:
            _LOGGER.warning(
                "Room %s %r is ambiguous, %d rooms match; using the first",
                key,
                value,
                len(matches),
            )

        return matches[0]
