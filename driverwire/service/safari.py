"""
safaridriver service.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from driverwire.config.options import ServiceOptions
from driverwire.service.service import DriverService, DriverServiceBuilder, ServiceConfig

logger = logging.getLogger(__name__)

SAFARI_DRIVER_EXECUTABLE = Path("/usr/bin/safaridriver")
TP_SAFARI_DRIVER_EXECUTABLE = Path(
    "/Applications/Safari Technology Preview.app/Contents/MacOS/safaridriver"
)


class SafariDriverService(DriverService):
    """Manages a safaridriver process."""


class SafariDriverServiceBuilder(DriverServiceBuilder):
    executable_name = "safaridriver"

    def using_technology_preview(self, enabled: bool = True) -> "SafariDriverServiceBuilder":
        """Select the Safari Technology Preview driver (or the stock one)."""
        self.using_driver_executable(
            TP_SAFARI_DRIVER_EXECUTABLE if enabled else SAFARI_DRIVER_EXECUTABLE
        )
        return self

    def default_executables(self) -> list[Path]:
        return [SAFARI_DRIVER_EXECUTABLE]

    def create_driver_service(self, config: ServiceConfig) -> SafariDriverService:
        return SafariDriverService(config)


def create_default_service(
    options: Optional[ServiceOptions] = None,
) -> Optional[SafariDriverService]:
    """Build a SafariDriverService if safaridriver is installed.

    Args:
        options: Service options. ``use_technology_preview`` selects the
            Technology Preview driver, ``executable_path`` overrides both.

    Returns:
        The configured service, or None when the executable does not exist.
    """
    options = options or ServiceOptions()
    if options.executable_path:
        executable = Path(options.executable_path)
    elif options.use_technology_preview:
        executable = TP_SAFARI_DRIVER_EXECUTABLE
    else:
        executable = SAFARI_DRIVER_EXECUTABLE

    if not executable.exists():
        logger.debug(f"No safaridriver at {executable}")
        return None

    builder = SafariDriverServiceBuilder().with_options(options)
    builder.using_driver_executable(executable)
    return builder.build()


__all__ = [
    "SAFARI_DRIVER_EXECUTABLE",
    "SafariDriverService",
    "SafariDriverServiceBuilder",
    "TP_SAFARI_DRIVER_EXECUTABLE",
    "create_default_service",
]
