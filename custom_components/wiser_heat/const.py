"""Constants for the Wiser Heat integration.

This module contains the constants used throughout the integration,
including controller service paths, temperature limits, configuration keys
and event names.
"""

DOMAIN = "wiser_heat"

BRAND_NAME = "WiserHeat"

SERVICE_PATHS = {
    "network": "/data/network/",
    "wifiRSSI": "/data/network/Station/RSSI/",
    "full": "/data/domain/",
    "brandName": "/data/domain/System/BrandName/",
    "devices": "/data/domain/Device/",
    "heating": "/data/domain/HeatingChannel/",
    "rooms": "/data/domain/Room/",
    "roomStats": "/data/domain/RoomStat/",
    "schedules": "/data/domain/Schedule",
    "system": "/data/domain/System/",
    "trvs": "/data/domain/SmartValve/",
}

SYSTEM_OVERRIDE_TYPES = {
    "normal": 0,
    "away": 2,
    "bootAllRooms": 4,
    "cancelAllOverrides": 5,
}

# Temperatures in °C
TEMP_MINIMUM = 5
TEMP_MAXIMUM = 30
TEMP_OFF = -20
BOOST_DEFAULT_TEMP = 20
BOOST_DEFAULT_DURATION = 30  # minutes

DEFAULT_INTERVAL = 60  # seconds
DEFAULT_MONITOR_REF = "wiser"

# Fields that change on every poll and carry no meaning
VOLATILE_SYSTEM_FIELDS = ("UnixTime", "LocalDateAndTime")
# Radio churn that is never reported as a change
NOISY_FIELDS = (
    "ReceptionOfController",
    "ReceptionOfDevice",
    "PendingZigbeeMessageMask",
)

ROOM_MODES = ("manual", "set", "boost", "off", "auto")

CONF_IP = "ip"
CONF_SECRET = "secret"
CONF_INTERVAL = "interval"
CONF_MAX_BOOST = "max_boost"
CONF_BOOST_CANCEL_TIME = "boost_cancel_time"
CONF_FOLDER = "folder"

ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_INVALID_CONFIG = "invalid_config"
ERROR_INVALID_HUB = "invalid_hub"
ERROR_UNKNOWN = "unknown_error"

EVENT_PING = f"{DOMAIN}_ping"
EVENT_CHANGE = f"{DOMAIN}_change"
EVENT_ERROR = f"{DOMAIN}_error"
EVENT_MONITOR_REGISTERED = f"{DOMAIN}_monitor_registered"
EVENT_MONITOR_REMOVED = f"{DOMAIN}_monitor_removed"
EVENT_SET_ROOM_MODE = f"{DOMAIN}_set_room_mode"

SERVICE_SET_ROOM_MODE = "set_room_mode"
SERVICE_SET_SYSTEM_MODE = "set_system_mode"
SERVICE_START_MONITOR = "start_monitor"
SERVICE_REMOVE_MONITOR = "remove_monitor"

ATTR_CONFIG_ENTRY_ID = "config_entry_id"
ATTR_ROOM_ID_OR_NAME = "room_id_or_name"
ATTR_MODE = "mode"
ATTR_BOOST_TEMP = "boost_temp"
ATTR_BOOST_DURATION = "boost_duration"
ATTR_MONITOR_REF = "monitor_ref"
