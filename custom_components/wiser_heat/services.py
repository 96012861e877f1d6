"""Services and the room mode event adapter for the Wiser Heat integration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant.core import SupportsResponse
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from .api import WiserError
from .const import (
    ATTR_BOOST_DURATION,
    ATTR_BOOST_TEMP,
    ATTR_CONFIG_ENTRY_ID,
    ATTR_MODE,
    ATTR_MONITOR_REF,
    ATTR_ROOM_ID_OR_NAME,
    BOOST_DEFAULT_DURATION,
    BOOST_DEFAULT_TEMP,
    DEFAULT_MONITOR_REF,
    DOMAIN,
    EVENT_SET_ROOM_MODE,
    SERVICE_REMOVE_MONITOR,
    SERVICE_SET_ROOM_MODE,
    SERVICE_SET_SYSTEM_MODE,
    SERVICE_START_MONITOR,
)
from .models import RoomModeSettings

if TYPE_CHECKING:
    from homeassistant.core import Event, HomeAssistant, ServiceCall, ServiceResponse

    from .hub import WiserHub

_LOGGER = logging.getLogger(__name__)

DATA_EVENT_UNSUB = f"{DOMAIN}_event_unsub"

SET_ROOM_MODE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
        vol.Required(ATTR_ROOM_ID_OR_NAME): vol.Any(int, cv.string),
        vol.Required(ATTR_MODE): cv.string,
        vol.Optional(ATTR_BOOST_TEMP, default=BOOST_DEFAULT_TEMP): vol.Coerce(float),
        vol.Optional(
            ATTR_BOOST_DURATION, default=BOOST_DEFAULT_DURATION
        ): cv.positive_int,
    }
)
SET_SYSTEM_MODE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
        vol.Required(ATTR_MODE): cv.string,
    }
)
MONITOR_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
        vol.Optional(ATTR_MONITOR_REF, default=DEFAULT_MONITOR_REF): cv.string,
    }
)


def get_hub(hass: HomeAssistant, entry_id: str | None = None) -> WiserHub:
    """Return the hub of a config entry, or the first loaded hub.

    Raises:
        HomeAssistantError: If no matching hub is loaded.

    """
    hubs: dict[str, WiserHub] = hass.data.get(DOMAIN, {})

    if entry_id is not None:
        hub = hubs.get(entry_id)
    else:
        hub = next(iter(hubs.values()), None)

    if hub is None:
        error_msg = f"No Wiser hub loaded for config entry {entry_id}"
        raise HomeAssistantError(error_msg)
    return hub


def async_register_services(hass: HomeAssistant) -> None:
    """Register the integration services and the room mode event adapter."""
    if hass.services.has_service(DOMAIN, SERVICE_SET_ROOM_MODE):
        return

    async def async_set_room_mode(call: ServiceCall) -> ServiceResponse:
        hub = get_hub(hass, call.data.get(ATTR_CONFIG_ENTRY_ID))
        settings = RoomModeSettings.from_dict(dict(call.data))
        try:
            result = await hub.room_mode.async_set_room_mode_from_settings(settings)
        except WiserError as err:
            raise HomeAssistantError(str(err)) from err

        if call.return_response:
            return result.as_dict()
        return None

    async def async_set_system_mode(call: ServiceCall) -> None:
        hub = get_hub(hass, call.data.get(ATTR_CONFIG_ENTRY_ID))
        try:
            await hub.async_set_system_mode(call.data[ATTR_MODE])
        except WiserError as err:
            raise HomeAssistantError(str(err)) from err

    async def async_start_monitor(call: ServiceCall) -> None:
        hub = get_hub(hass, call.data.get(ATTR_CONFIG_ENTRY_ID))
        await hub.monitors.async_monitor(call.data[ATTR_MONITOR_REF])

    async def async_remove_monitor(call: ServiceCall) -> None:
        hub = get_hub(hass, call.data.get(ATTR_CONFIG_ENTRY_ID))
        hub.monitors.async_remove_monitor(call.data[ATTR_MONITOR_REF])

    async def async_handle_set_room_mode_event(event: Event) -> None:
        """Set a room mode from a bus event; failures are only logged."""
        try:
            data = SET_ROOM_MODE_SCHEMA(dict(event.data))
            hub = get_hub(hass, data.get(ATTR_CONFIG_ENTRY_ID))
            await hub.room_mode.async_set_room_mode_from_settings(
                RoomModeSettings.from_dict(data)
            )
        except (vol.Invalid, WiserError, HomeAssistantError) as err:
            _LOGGER.error("Room mode event %s failed: %s", dict(event.data), err)

    hass.services.async_register(
        DOMAIN,
        SERVICE_SET_ROOM_MODE,
        async_set_room_mode,
        schema=SET_ROOM_MODE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_SET_SYSTEM_MODE,
        async_set_system_mode,
        schema=SET_SYSTEM_MODE_SCHEMA,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_START_MONITOR,
        async_start_monitor,
        schema=MONITOR_SCHEMA,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_REMOVE_MONITOR,
        async_remove_monitor,
        schema=MONITOR_SCHEMA,
    )
    hass.data[DATA_EVENT_UNSUB] = hass.bus.async_listen(
        EVENT_SET_ROOM_MODE, async_handle_set_room_mode_event
    )
    _LOGGER.debug("Registered %s services", DOMAIN)


def async_unregister_services(hass: HomeAssistant) -> None:
    """Remove the integration services and the room mode event adapter."""
    for service in (
        SERVICE_SET_ROOM_MODE,
        SERVICE_SET_SYSTEM_MODE,
        SERVICE_START_MONITOR,
        SERVICE_REMOVE_MONITOR,
    ):
        hass.services.async_remove(DOMAIN, service)

    unsub = hass.data.pop(DATA_EVENT_UNSUB, None)
    if unsub is not None:
        unsub()
