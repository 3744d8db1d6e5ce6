"""
Driver service supervision: spawn a driver executable and wait for it.
"""

from .net import PortProber, UrlChecker
from .safari import (
    SafariDriverService,
    SafariDriverServiceBuilder,
    create_default_service,
)
from .service import DriverService, DriverServiceBuilder, ServiceConfig, ServiceState

__all__ = [
    "DriverService",
    "DriverServiceBuilder",
    "PortProber",
    "SafariDriverService",
    "SafariDriverServiceBuilder",
    "ServiceConfig",
    "ServiceState",
    "UrlChecker",
    "create_default_service",
]
