"""Connection to one Wiser hub.

The hub owns everything that belongs to a single controller connection: the
API client, the runtime settings, the room index rebuilt from the latest full
snapshot, the named monitors and the room mode controller.
"""

from __future__ import annotations

import logging
import os
import re
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_change

from .api import WiserError, WiserInvalidModeError, WiserWriteFailedError
from .const import SERVICE_PATHS, SYSTEM_OVERRIDE_TYPES, TEMP_MAXIMUM
from .models import WiserSettings
from .monitor import WiserMonitorManager
from .room_index import RoomIndex
from .room_mode import RoomModeController

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from .api import WiserApiClient
    from .models import Snapshot

_LOGGER = logging.getLogger(__name__)

BOOST_CANCEL_TIME_RE = re.compile(r"^\s*([01]?\d|2[0-3]):?([0-5]\d)\s*$")


def normalize_boost_cancel_time(value: str) -> str | None:
    """Return value as "HH:mm", or None if it is not a valid 24h time."""
    match = BOOST_CANCEL_TIME_RE.match(value)
    if match is None:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


class WiserHub:
    """A configured Wiser hub and its monitors."""

    def __init__(
        self,
        hass: HomeAssistant,
        client: WiserApiClient,
        settings: WiserSettings | None = None,
    ) -> None:
        """Initialize the hub."""
        self.hass = hass
        self.client = client
        self.settings = settings or WiserSettings()
        self.room_index = RoomIndex()
        self.data: Snapshot | None = None
        self.monitors = WiserMonitorManager(
            hass, self.async_get_full, self.room_index, self.settings.interval
        )
        self.room_mode = RoomModeController(
            client, self.async_get_full, self.room_index, self.settings
        )
        self._boost_cancel_unsub: Callable[[], None] | None = None

    async def async_get_full(self) -> Snapshot:
        """Fetch the full snapshot and rebuild the room index from it."""
        data = await self.client.async_get_full()
        self.data = data
        self.room_index.rebuild(data)
        return data

    async def async_get(self, service: str) -> dict[str, Any]:
        """Get the current controller data for a named service."""
        return await self.client.async_get_service(service)

    async def async_test_connection(self) -> bool:
        """Check that the hub answers as a Wiser controller."""
        return await self.client.async_test_connection()

    def get_room(self, room_id: int) -> dict[str, Any] | None:
        """Return a room of the latest snapshot by id."""
        return self.room_index.find_room_by_id(room_id)

    def get_room_by_name(self, name: str) -> dict[str, Any] | None:
        """Return a room of the latest snapshot by name."""
        return self.room_index.find_room_by_name(name)

    def set_max_boost(self, max_boost: Any = TEMP_MAXIMUM) -> float | None:
        """Set the highest temperature allowed for manual, set and boost.

        Returns:
            The stored value, or None if the value was ignored.

        """
        if isinstance(max_boost, bool) or not isinstance(max_boost, int | float):
            _LOGGER.warning("max_boost not a valid number, ignored: %r", max_boost)
            return None

        if max_boost > TEMP_MAXIMUM:
            _LOGGER.warning(
                "max_boost set too high (%s), changed to %s°C", max_boost, TEMP_MAXIMUM
            )
            max_boost = TEMP_MAXIMUM

        self.settings.max_boost = max_boost
        return max_boost

    def set_boost_cancel_time(self, boost_cancel_time: str | None = None) -> str | None:
        """Set the daily time at which all overrides are cancelled.

        Returns:
            The stored "HH:mm" value, or None if cleared or ignored.

        """
        if boost_cancel_time is None:
            self.settings.boost_cancel_time = None
            self._async_schedule_boost_cancel()
            return None

        normalized = normalize_boost_cancel_time(boost_cancel_time)
        if normalized is None:
            _LOGGER.warning(
                'boost_cancel_time not a valid time ("HH:mm"), ignored: %r',
                boost_cancel_time,
            )
            return None

        self.settings.boost_cancel_time = normalized
        self._async_schedule_boost_cancel()
        return normalized

    def set_folder(self, folder: str = "") -> str:
        """Set the folder used for schedule files (defaults to the cwd)."""
        if not folder:
            folder = os.getcwd()
        self.settings.folder = folder
        return folder

    async def async_set_system_mode(self, mode: str) -> Any:
        """Set the controller's overall operating mode.

        Raises:
            WiserInvalidModeError: If mode is not a known system mode.
            WiserWriteFailedError: If the controller rejects the write.

        """
        if mode not in SYSTEM_OVERRIDE_TYPES:
            error_msg = (
                f"Invalid system mode: {mode}, must be one of: "
                f"[{', '.join(SYSTEM_OVERRIDE_TYPES)}]"
            )
            raise WiserInvalidModeError(error_msg)

        payload = {"RequestOverride": {"Type": SYSTEM_OVERRIDE_TYPES[mode]}}
        try:
            result = await self.client.async_patch(SERVICE_PATHS["system"], payload)
        except WiserError as err:
            error_msg = f"Setting system mode {mode} failed: {err}"
            raise WiserWriteFailedError(error_msg) from err

        _LOGGER.info("System mode set to %s", mode)
        return result

    @callback
    def _async_schedule_boost_cancel(self) -> None:
        if self._boost_cancel_unsub is not None:
            self._boost_cancel_unsub()
            self._boost_cancel_unsub = None

        if self.settings.boost_cancel_time is None:
            return

        hour, minute = (int(part) for part in self.settings.boost_cancel_time.split(":"))
        self._boost_cancel_unsub = async_track_time_change(
            self.hass, self._async_cancel_overrides, hour=hour, minute=minute, second=0
        )
        _LOGGER.debug(
            "Overrides will be cancelled daily at %s", self.settings.boost_cancel_time
        )

    async def _async_cancel_overrides(self, now: datetime) -> None:
        try:
            await self.async_set_system_mode("cancelAllOverrides")
        except WiserError:
            _LOGGER.exception("Daily override cancellation failed")

    @callback
    def async_start(self) -> None:
        """Start the timers driven by the settings."""
        self._async_schedule_boost_cancel()

    @callback
    def async_shutdown(self) -> None:
        """Stop every monitor and timer of this hub."""
        self.monitors.async_shutdown()
        if self._boost_cancel_unsub is not None:
            self._boost_cancel_unsub()
            self._boost_cancel_unsub = None
