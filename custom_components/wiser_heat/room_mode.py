"""Room mode changes (manual, set, boost, off, auto).

A room mode change is translated into one to three PATCH writes against the
room, sent concurrently in a fixed submission order:

- manual: Mode=Manual, cancel override, Manual override at the higher of the
  requested temperature and the room's scheduled setpoint
- set:    cancel override, Manual override at the requested temperature
- boost:  timed Manual override at the requested temperature
- off:    Mode=Manual, cancel override, Manual override at the off setpoint
- auto:   cancel override, Mode=Auto
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import TYPE_CHECKING, Any

from .api import (
    WiserError,
    WiserFullFetchError,
    WiserInvalidModeError,
    WiserInvalidRoomError,
    WiserWriteFailedError,
    to_wiser_temp,
)
from .const import (
    BOOST_DEFAULT_DURATION,
    BOOST_DEFAULT_TEMP,
    ROOM_MODES,
    SERVICE_PATHS,
    TEMP_MINIMUM,
    TEMP_OFF,
)
from .models import RoomModeResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .api import WiserApiClient
    from .models import RoomModeSettings, Snapshot, WiserSettings
    from .room_index import RoomIndex

_LOGGER = logging.getLogger(__name__)

CANCEL_OVERRIDE_PAYLOAD = {
    "RequestOverride": {
        "Type": "None",
        "DurationMinutes": 0,
        "SetPoint": 0,
        "Originator": "App",
    }
}
MANUAL_MODE_PAYLOAD = {"Mode": "Manual"}


def clamp_temperature(temp: float, max_boost: float) -> float:
    """Limit a requested temperature to TEMP_MINIMUM..max_boost.

    The off setpoint is passed through unchanged.
    """
    if temp == TEMP_OFF:
        return temp
    if temp < TEMP_MINIMUM:
        _LOGGER.info(
            "Requested temperature too low (%s), using minimum (%s)",
            temp,
            TEMP_MINIMUM,
        )
        temp = TEMP_MINIMUM
    if temp > max_boost:
        _LOGGER.info(
            "Requested temperature too high (%s), using max. allowed (%s)",
            temp,
            max_boost,
        )
        return max_boost
    return temp


def _parse_room_id(room_id_or_name: int | float | str) -> float | None:
    """Return the numeric room id, or None if the value is a room name."""
    if isinstance(room_id_or_name, bool):
        return None
    if isinstance(room_id_or_name, int | float):
        return room_id_or_name
    try:
        room_id = float(room_id_or_name.strip())
    except ValueError:
        return None
    if math.isnan(room_id):
        return None
    return room_id


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_room_key(value: Any) -> bool:
    return isinstance(value, int | float | str) and not isinstance(value, bool)


class RoomModeController:
    """Translate room mode requests into controller writes."""

    def __init__(
        self,
        client: WiserApiClient,
        fetch_full: Callable[[], Awaitable[Snapshot]],
        room_index: RoomIndex,
        settings: WiserSettings,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Client used for the writes.
            fetch_full: Coroutine function returning a fresh full snapshot and
                rebuilding room_index.
            room_index: Index used to resolve rooms.
            settings: Connection settings, read for the boost ceiling.

        """
        self._client = client
        self._fetch_full = fetch_full
        self._room_index = room_index
        self._settings = settings

    def _resolve_room(self, room_id_or_name: int | float | str) -> dict[str, Any] | None:
        room_id = _parse_room_id(room_id_or_name)
        if room_id is None:
            return self._room_index.find_room_by_name(room_id_or_name)
        return self._room_index.find_room_by_id(room_id)

    def _build_payloads(
        self,
        mode: str,
        room: dict[str, Any],
        boost_temp: float,
        boost_duration: int,
    ) -> list[dict[str, Any]]:
        payloads: list[dict[str, Any]] = []
        set_point = to_wiser_temp(boost_temp)

        if mode == "manual":
            payloads.append(MANUAL_MODE_PAYLOAD)
            scheduled = room.get("ScheduledSetPoint")
            if scheduled is not None and scheduled > set_point:
                set_point = scheduled
            primary = {"RequestOverride": {"Type": "Manual", "SetPoint": set_point}}
        elif mode == "set":
            primary = {"RequestOverride": {"Type": "Manual", "SetPoint": set_point}}
        elif mode == "boost":
            primary = {
                "RequestOverride": {
                    "Type": "Manual",
                    "DurationMinutes": boost_duration,
                    "SetPoint": set_point,
                    "Originator": "App",
                }
            }
        elif mode == "off":
            payloads.append(MANUAL_MODE_PAYLOAD)
            primary = {
                "RequestOverride": {
                    "Type": "Manual",
                    "SetPoint": to_wiser_temp(TEMP_OFF),
                }
            }
        else:
            primary = {"Mode": "Auto"}

        # A lingering timed boost would otherwise survive the new mode
        if mode != "boost":
            payloads.append(CANCEL_OVERRIDE_PAYLOAD)

        payloads.append(primary)
        return payloads

    async def async_set_room_mode(
        self,
        room_id_or_name: int | float | str | None,
        mode: str | None,
        boost_temp: float = BOOST_DEFAULT_TEMP,
        boost_duration: int = BOOST_DEFAULT_DURATION,
    ) -> RoomModeResult:
        """Set the mode of a room.

        Args:
            room_id_or_name: Room id (number or numeric string) or room name.
            mode: One of manual, set, boost, off or auto (any case).
            boost_temp: Target temperature in °C for manual, set and boost.
            boost_duration: Boost duration in minutes.

        Returns:
            Result of the last write issued.

        Raises:
            WiserInvalidRoomError: If the room is empty or does not resolve.
            WiserInvalidModeError: If the mode is empty or unknown.
            WiserFullFetchError: If the snapshot needed to resolve the room fails.
            WiserWriteFailedError: If any write is rejected.

        """
        if _is_blank(room_id_or_name) or not _is_room_key(room_id_or_name):
            error_msg = f"Room ID or Name is invalid: --{room_id_or_name}--"
            raise WiserInvalidRoomError(error_msg)

        if _is_blank(mode):
            error_msg = f"Mode is not provided for room: {room_id_or_name}"
            raise WiserInvalidModeError(error_msg)

        if not isinstance(mode, str):
            error_msg = (
                f"Mode must be a string, got {mode!r} for room: {room_id_or_name}"
            )
            raise WiserInvalidModeError(error_msg)

        mode_key = mode.lower()
        if mode_key not in ROOM_MODES:
            error_msg = (
                f"Invalid mode provided ({mode}) for room: {room_id_or_name}. "
                f"Must be one of {list(ROOM_MODES)}"
            )
            raise WiserInvalidModeError(error_msg)

        try:
            await self._fetch_full()
        except WiserError as err:
            error_msg = f"Full fetch failed: {err}"
            raise WiserFullFetchError(error_msg) from err

        room = self._resolve_room(room_id_or_name)
        if room is None:
            error_msg = f"Invalid room id or name provided ({room_id_or_name})"
            raise WiserInvalidRoomError(error_msg)

        boost_temp = clamp_temperature(boost_temp, self._settings.max_boost)
        payloads = self._build_payloads(mode_key, room, boost_temp, boost_duration)
        room_path = f"{SERVICE_PATHS['rooms']}{room['id']}"

        _LOGGER.debug(
            "Setting room %s (%s) to %s with %d writes",
            room["id"],
            room.get("Name"),
            mode_key,
            len(payloads),
        )
        # gather starts the requests in list order, keeping Mode=Manual first
        results = await asyncio.gather(
            *(self._client.async_patch(room_path, payload) for payload in payloads),
            return_exceptions=True,
        )

        errors = [result for result in results if isinstance(result, Exception)]
        if errors:
            error_msg = (
                f"Send to controller failed for room {room['id']}: "
                f"{len(errors)} of {len(results)} writes rejected"
            )
            raise WiserWriteFailedError(error_msg) from errors[0]

        _LOGGER.info("Room %s set to %s", room.get("Name", room["id"]), mode_key)
        return RoomModeResult(
            room_id=room["id"],
            mode=mode_key,
            num_results=len(results),
            last_result=results[-1],
            last_payload=payloads[-1],
        )

    async def async_set_room_mode_from_settings(
        self, settings: RoomModeSettings
    ) -> RoomModeResult:
        """Set the mode of a room from a single settings object."""
        return await self.async_set_room_mode(
            settings.room_id_or_name,
            settings.mode,
            settings.boost_temp,
            settings.boost_duration,
        )
