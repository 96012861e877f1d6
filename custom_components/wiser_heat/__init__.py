from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import api
from .api import create_session_client
from .const import (
    CONF_BOOST_CANCEL_TIME,
    CONF_FOLDER,
    CONF_INTERVAL,
    CONF_IP,
    CONF_MAX_BOOST,
    CONF_SECRET,
    DEFAULT_INTERVAL,
    DEFAULT_MONITOR_REF,
    DOMAIN,
)
from .hub import WiserHub
from .models import WiserSettings
from .services import async_register_services, async_unregister_services

_LOGGER = logging.getLogger(__name__)


def _settings_interval(entry: ConfigEntry) -> int:
    interval = entry.data.get(CONF_INTERVAL, DEFAULT_INTERVAL)
    if isinstance(interval, bool) or not isinstance(interval, int | float):
        _LOGGER.warning("interval config ignored, it must be a number: %r", interval)
        return DEFAULT_INTERVAL
    return int(interval)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Wiser Heat integration for entry %s", entry.entry_id)

    session = create_session_client(hass)

    try:
        client = api.WiserApiClient(
            session, entry.data.get(CONF_IP), entry.data.get(CONF_SECRET)
        )
    except api.WiserConfigError as err:
        _LOGGER.error("Invalid configuration for entry %s: %s", entry.entry_id, err)
        return False

    hub = WiserHub(hass, client, WiserSettings(interval=_settings_interval(entry)))
    if CONF_MAX_BOOST in entry.data:
        hub.set_max_boost(entry.data[CONF_MAX_BOOST])
    if entry.data.get(CONF_BOOST_CANCEL_TIME):
        hub.set_boost_cancel_time(entry.data[CONF_BOOST_CANCEL_TIME])
    hub.set_folder(entry.data.get(CONF_FOLDER, ""))

    try:
        _LOGGER.debug("Probing Wiser hub at %s", client.base_url)
        if not await hub.async_test_connection():
            _LOGGER.error(
                "Device at %s is not a Wiser hub (entry %s)",
                client.base_url,
                entry.entry_id,
            )
            hub.async_shutdown()
            return False
    except api.WiserTransportError as err:
        _LOGGER.error("Connection error for entry %s: %s", entry.entry_id, err)
        hub.async_shutdown()
        return False

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = hub
    async_register_services(hass)

    hub.async_start()
    await hub.monitors.async_monitor(DEFAULT_MONITOR_REF)

    _LOGGER.info(
        "Successfully setup Wiser Heat integration for entry %s", entry.entry_id
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Wiser Heat integration for entry %s", entry.entry_id)

    hub: WiserHub | None = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if hub is not None:
        hub.async_shutdown()
        _LOGGER.debug("Stopped monitors for entry %s", entry.entry_id)

    if not hass.data.get(DOMAIN):
        hass.data.pop(DOMAIN, None)
        async_unregister_services(hass)

    return True
