"""
Configuration flow for Wiser Heat integration.

This module handles the setup of a Wiser hub connection through
Home Assistant's config flow system.
"""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    BOOST_DEFAULT_TEMP,
    CONF_BOOST_CANCEL_TIME,
    CONF_FOLDER,
    CONF_INTERVAL,
    CONF_IP,
    CONF_MAX_BOOST,
    CONF_SECRET,
    DEFAULT_INTERVAL,
    DOMAIN,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_CONFIG,
    ERROR_INVALID_HUB,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
    TEMP_MAXIMUM,
    TEMP_MINIMUM,
)

_LOGGER = logging.getLogger(__name__)


class WiserHeatConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Wiser Heat integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing the hub address and secret.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            ip = user_input[CONF_IP].strip()

            try:
                session = get_async_client(self.hass)
                client = api.WiserApiClient(session, ip, user_input[CONF_SECRET])
                connection_ok = await client.async_test_connection()

            except api.WiserConfigError:
                _LOGGER.warning("Configuration error (%s)", ERROR_INVALID_CONFIG)
                errors["base"] = ERROR_INVALID_CONFIG
            except api.WiserTransportError as err:
                if isinstance(err.__cause__, httpx.TimeoutException):
                    _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                    errors["base"] = ERROR_TIMEOUT
                else:
                    _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                    errors["base"] = ERROR_CANNOT_CONNECT
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during connection test (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                if not connection_ok:
                    _LOGGER.warning("Device at %s is not a Wiser hub", ip)
                    errors["base"] = ERROR_INVALID_HUB
                else:
                    await self.async_set_unique_id(ip)
                    self._abort_if_unique_id_configured()

                    return self.async_create_entry(
                        title=f"Wiser Heat ({ip})",
                        data={**user_input, CONF_IP: ip},
                    )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_IP): str,
                    vol.Required(CONF_SECRET): str,
                    vol.Optional(CONF_INTERVAL, default=DEFAULT_INTERVAL): vol.All(
                        vol.Coerce(int), vol.Range(min=5)
                    ),
                    vol.Optional(CONF_MAX_BOOST, default=BOOST_DEFAULT_TEMP): vol.All(
                        vol.Coerce(float), vol.Range(min=TEMP_MINIMUM, max=TEMP_MAXIMUM)
                    ),
                    vol.Optional(CONF_BOOST_CANCEL_TIME): str,
                    vol.Optional(CONF_FOLDER): str,
                }
            ),
            errors=errors,
        )
