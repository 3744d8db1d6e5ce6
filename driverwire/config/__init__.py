"""
Configuration module for driverwire.

This module provides:
- Strongly-typed option classes (ServiceOptions, TransportOptions, RemoteOptions)
- Configuration file loading (JSON, YAML, TOML)
- Environment variable support
- Validation and type checking via Pydantic

Example usage:
    from driverwire.config import DriverwireConfig, ServiceOptions, load_config

    # Load from file with environment overrides
    config = load_config("driverwire.config.toml")

    # Create programmatically
    config = DriverwireConfig(
        service=ServiceOptions(executable_path="/usr/bin/safaridriver", port=4444),
    )

Environment variables:
    DRIVERWIRE_SERVICE_PORT=4444
    DRIVERWIRE_SERVICE_STARTUP_TIMEOUT=30
    DRIVERWIRE_REMOTE_SERVER_URL=http://grid:4444/wd/hub
"""

from .defaults import (
    DEFAULT_CONNECT_ATTEMPT_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEADERS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_STARTUP_TIMEOUT,
    DEFAULT_STATUS_TIMEOUT,
    DEFAULT_STOP_TIMEOUT,
    ENV_PREFIX,
)
from .env import (
    ENV_MAPPINGS,
    get_env,
    get_env_bool,
    get_env_float,
    get_env_int,
    get_env_key,
    load_env_config,
)
from .loader import (
    ConfigLoader,
    ConfigurationError,
    find_config_file,
    load_config,
    load_file,
    merge_configs,
)
from .options import (
    DriverwireConfig,
    RemoteOptions,
    ServiceOptions,
    SupplierKind,
    TransportOptions,
)

__all__ = [
    # Main configuration class
    "DriverwireConfig",
    # Option classes
    "ServiceOptions",
    "TransportOptions",
    "RemoteOptions",
    "SupplierKind",
    # Loader functions
    "load_config",
    "load_file",
    "find_config_file",
    "merge_configs",
    "ConfigLoader",
    "ConfigurationError",
    # Environment functions
    "get_env",
    "get_env_bool",
    "get_env_int",
    "get_env_float",
    "get_env_key",
    "load_env_config",
    "ENV_MAPPINGS",
    "ENV_PREFIX",
    # Default values
    "DEFAULT_STARTUP_TIMEOUT",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_CONNECT_ATTEMPT_TIMEOUT",
    "DEFAULT_STOP_TIMEOUT",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_STATUS_TIMEOUT",
    "DEFAULT_HEADERS",
]
