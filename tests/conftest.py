"""Pytest configuration and fixtures for Wiser Heat tests."""

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.wiser_heat.models import WiserSettings
from custom_components.wiser_heat.room_index import RoomIndex

TEST_IP = "192.168.1.50"
TEST_SECRET = "test_secret"
TEST_BASE_URL = f"http://{TEST_IP}"


def build_snapshot() -> dict[str, Any]:
    """Build a full controller snapshot with two rooms and their devices.

    Returns:
        A new dictionary on every call, safe to modify.

    """
    return {
        "System": {
            "UnixTime": 1600000000,
            "LocalDateAndTime": {"Year": 2020, "Month": "September", "Time": 1230},
            "BrandName": "WiserHeat",
            "HeatingButtonOverrideState": "Off",
            "OverrideType": "None",
        },
        "Room": [
            {
                "id": 8,
                "Name": "Office",
                "Mode": "Auto",
                "ScheduledSetPoint": 190,
                "SmartValveIds": [20, 21],
                "RoomStatId": 30,
            },
            {
                "id": 11,
                "Name": "Lounge",
                "Mode": "Auto",
                "ScheduledSetPoint": 210,
                "SmartValveIds": [22],
                "SmartPlugIds": [40],
            },
        ],
        "Device": [
            {
                "id": 20,
                "ProductType": "iTRV",
                "ReceptionOfController": {"Rssi": -60, "Lqi": 120},
                "ReceptionOfDevice": {"Rssi": -58, "Lqi": 124},
                "PendingZigbeeMessageMask": 0,
                "BatteryVoltage": 30,
            },
            {
                "id": 99,
                "ProductType": "Controller",
                "ReceptionOfController": {"Rssi": -40, "Lqi": 200},
            },
        ],
        "SmartValve": [
            {"id": 20, "SetPoint": 190, "MeasuredTemperature": 201},
            {"id": 21, "SetPoint": 190, "MeasuredTemperature": 199},
        ],
    }


@pytest.fixture
def full_snapshot() -> dict[str, Any]:
    """Fixture providing a sample full controller snapshot."""
    return build_snapshot()


@pytest.fixture
def room_index(full_snapshot: dict[str, Any]) -> RoomIndex:
    """Fixture providing a room index built from the sample snapshot."""
    index = RoomIndex()
    index.rebuild(full_snapshot)
    return index


@pytest.fixture
def settings() -> WiserSettings:
    """Fixture providing default connection settings."""
    return WiserSettings()


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance with an event bus."""
    hass = Mock()
    hass.data = {}
    hass.bus = Mock()
    hass.bus.async_fire = Mock()
    return hass


@pytest.fixture
def mock_client() -> Mock:
    """Create a mock Wiser API client."""
    client = Mock()
    client.base_url = TEST_BASE_URL
    client.async_get = AsyncMock()
    client.async_patch = AsyncMock(return_value={"result": "ok"})
    client.async_get_full = AsyncMock(side_effect=lambda: build_snapshot())
    client.async_get_service = AsyncMock()
    client.async_test_connection = AsyncMock(return_value=True)
    return client
