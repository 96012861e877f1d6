"""Named polling loops that report controller changes on the event bus.

Each monitor polls the full snapshot every ``interval`` seconds, compares it
with the snapshot it accepted on its previous poll and fires one change event
per changed entity. Monitors are keyed by a caller supplied reference;
starting a monitor under an existing reference replaces it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_interval

from .api import WiserError
from .const import (
    DEFAULT_MONITOR_REF,
    EVENT_CHANGE,
    EVENT_ERROR,
    EVENT_MONITOR_REGISTERED,
    EVENT_MONITOR_REMOVED,
    EVENT_PING,
)
from .diff import compute_changes, strip_volatile_fields
from .models import MonitorHandle

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from homeassistant.core import HomeAssistant

    from .models import Snapshot
    from .room_index import RoomIndex

_LOGGER = logging.getLogger(__name__)


class WiserMonitorManager:
    """Registry of the monitors of one controller connection."""

    def __init__(
        self,
        hass: HomeAssistant,
        fetch_full: Callable[[], Awaitable[Snapshot]],
        room_index: RoomIndex,
        interval: int,
    ) -> None:
        """Initialize the manager.

        Args:
            hass: Home Assistant instance.
            fetch_full: Coroutine function returning a fresh full snapshot.
            room_index: Index rebuilt by fetch_full, used to name rooms.
            interval: Seconds between polls for every monitor.

        """
        self._hass = hass
        self._fetch_full = fetch_full
        self._room_index = room_index
        self._interval = interval
        self._handles: dict[str, MonitorHandle] = {}

    @property
    def interval(self) -> int:
        """Return the poll interval in seconds."""
        return self._interval

    @property
    def monitor_refs(self) -> list[str]:
        """Return the references of the running monitors."""
        return list(self._handles)

    def get_handle(self, ref: str) -> MonitorHandle | None:
        """Return the handle registered under ref, if any."""
        return self._handles.get(ref)

    def _fire(self, event_type: str, data: dict[str, Any]) -> None:
        self._hass.bus.async_fire(event_type, data)

    def _fire_error(self, ref: str, err: Exception) -> None:
        self._fire(
            EVENT_ERROR,
            {
                "monitor_ref": ref,
                "timestamp": datetime.now(UTC).isoformat(),
                "error": str(err),
            },
        )

    def _fire_ping(self, ref: str, *, initial_run: bool = False) -> None:
        data: dict[str, Any] = {
            "monitor_ref": ref,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if initial_run:
            data["initial_run"] = True
        self._fire(EVENT_PING, data)

    async def async_monitor(self, ref: str = DEFAULT_MONITOR_REF) -> MonitorHandle | None:
        """Start, or restart, the monitor registered under ref.

        Returns:
            The registered handle, or None if the initial fetch failed.

        """
        self.async_remove_monitor(ref)

        try:
            snapshot = await self._fetch_full()
        except WiserError as err:
            _LOGGER.error("Initial fetch for monitor %s failed: %s", ref, err)
            self._fire_error(ref, err)
            return None

        self._fire_ping(ref, initial_run=True)

        handle = MonitorHandle(
            ref=ref,
            interval=self._interval,
            previous=strip_volatile_fields(snapshot),
        )

        # Another start for the same ref may have finished while we waited
        self.async_remove_monitor(ref)

        async def _async_tick(now: datetime) -> None:
            await self._async_tick(handle)

        handle.cancel_token = async_track_time_interval(
            self._hass, _async_tick, timedelta(seconds=self._interval)
        )
        self._handles[ref] = handle

        _LOGGER.info("Monitor %s started, polling every %ss", ref, self._interval)
        self._fire(
            EVENT_MONITOR_REGISTERED,
            {"monitor_ref": ref, "interval": self._interval},
        )
        return handle

    async def _async_tick(self, handle: MonitorHandle) -> None:
        """Poll once for a running monitor and fire its events."""
        ref = handle.ref

        try:
            snapshot = await self._fetch_full()
        except WiserError as err:
            if handle.cancelled:
                return
            _LOGGER.warning("Poll for monitor %s failed: %s", ref, err)
            self._fire_error(ref, err)
            return

        # The monitor may have been removed while the fetch was in flight
        if handle.cancelled:
            _LOGGER.debug("Dropping poll result of removed monitor %s", ref)
            return

        self._fire_ping(ref)

        current = strip_volatile_fields(snapshot)
        if handle.previous is not None:
            changes = compute_changes(
                handle.previous,
                current,
                self._room_index,
                monitor_ref=ref,
            )
            for change in changes:
                self._fire(EVENT_CHANGE, change.as_event_data())

        handle.previous = current

    @callback
    def async_remove_monitor(self, ref: str) -> None:
        """Stop and unregister the monitor under ref; unknown refs are ignored."""
        handle = self._handles.pop(ref, None)
        if handle is None:
            return

        handle.cancel()
        _LOGGER.info("Monitor %s removed", ref)
        self._fire(EVENT_MONITOR_REMOVED, {"monitor_ref": ref})

    @callback
    def async_shutdown(self) -> None:
        """Stop every monitor."""
        for ref in list(self._handles):
            self.async_remove_monitor(ref)
