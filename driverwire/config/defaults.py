"""
Default configuration values for driverwire.

This module contains all default values used throughout the configuration system.
"""

# Driver service defaults
DEFAULT_SERVICE_HOST = "localhost"
DEFAULT_SERVICE_PORT = 0
DEFAULT_STARTUP_TIMEOUT = 20.0
DEFAULT_POLL_INTERVAL = 0.25
DEFAULT_CONNECT_ATTEMPT_TIMEOUT = 1.0
DEFAULT_STOP_TIMEOUT = 5.0

# Transport defaults
DEFAULT_REQUEST_TIMEOUT = 180.0
DEFAULT_CONNECT_TIMEOUT = 10.0

# Remote server defaults
DEFAULT_SUPPLIER = "remote"
DEFAULT_STATUS_TIMEOUT = 60.0
DEFAULT_NEW_SESSION_PATH = "/session"
DEFAULT_STATUS_PATH = "/status"

DEFAULT_USER_AGENT = "driverwire/0.1.0 (python)"

# Default HTTP headers for every wire request
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json, image/png",
    "Content-Type": "application/json; charset=utf-8",
    "Connection": "keep-alive",
    "User-Agent": DEFAULT_USER_AGENT,
}

# File config defaults
DEFAULT_CONFIG_FILENAME = "driverwire.config"
DEFAULT_CONFIG_EXTENSIONS = [".json", ".yaml", ".yml", ".toml"]
DEFAULT_CONFIG_SEARCH_PATHS = [
    ".",
    "~/.config/driverwire",
    "/etc/driverwire",
]

# Environment variable prefix
ENV_PREFIX = "DRIVERWIRE_"

