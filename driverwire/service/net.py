"""
Network helpers for driver services: free-port discovery and readiness checks.
"""

from __future__ import annotations

import logging
import socket
import time
from typing import Callable, Optional

import httpx

from driverwire.config.defaults import (
    DEFAULT_CONNECT_ATTEMPT_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SERVICE_HOST,
)
from driverwire.errors import StartupTimeoutError, WebDriverTimeoutError

logger = logging.getLogger(__name__)


class PortProber:
    """Finds free ports and waits for ports to accept connections."""

    @staticmethod
    def find_free_port() -> int:
        """Ask the OS for a currently unused TCP port."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("", 0))
            s.listen(1)
            return s.getsockname()[1]

    @staticmethod
    def is_port_up(
        port: int,
        host: str = DEFAULT_SERVICE_HOST,
        timeout: float = DEFAULT_CONNECT_ATTEMPT_TIMEOUT,
    ) -> bool:
        """Attempt one bare TCP connection."""
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            return False

    @staticmethod
    def wait_for_port_up(
        port: int,
        timeout: float,
        *,
        host: str = DEFAULT_SERVICE_HOST,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        attempt_timeout: float = DEFAULT_CONNECT_ATTEMPT_TIMEOUT,
        should_abort: Optional[Callable[[], bool]] = None,
    ) -> None:
        """Poll ``host:port`` until it accepts a connection.

        Each attempt is bounded by ``attempt_timeout`` and never runs past the
        overall deadline.

        Args:
            port: Port to probe.
            timeout: Overall budget in seconds.
            host: Host to connect to.
            poll_interval: Sleep between attempts.
            attempt_timeout: Timeout of a single connection attempt.
            should_abort: Called between attempts; a truthy return value
                stops waiting immediately (the caller raises its own error).

        Raises:
            StartupTimeoutError: The port did not open within ``timeout``,
                wrapping the last connection error.
        """
        deadline = time.monotonic() + timeout
        last_error: Optional[OSError] = None

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                with socket.create_connection(
                    (host, port), timeout=min(attempt_timeout, remaining)
                ):
                    logger.debug(f"Port {port} on {host} is accepting connections")
                    return
            except OSError as e:
                last_error = e

            if should_abort is not None and should_abort():
                return

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(poll_interval, remaining))

        raise StartupTimeoutError(
            f"Timed out waiting for {host}:{port} to accept connections after {timeout}s",
            cause=last_error,
        )


class UrlChecker:
    """Polls an HTTP URL until it answers with 200."""

    def __init__(
        self,
        poll_interval: float = 0.5,
        request_timeout: float = DEFAULT_CONNECT_ATTEMPT_TIMEOUT * 2,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._poll_interval = poll_interval
        self._request_timeout = request_timeout
        self._client = client

    def wait_until_available(self, url: str, timeout: float) -> None:
        """Block until ``url`` returns HTTP 200.

        Raises:
            WebDriverTimeoutError: The URL never became available.
        """
        deadline = time.monotonic() + timeout
        client = self._client or httpx.Client()
        last_error: Optional[Exception] = None
        try:
            while time.monotonic() < deadline:
                try:
                    response = client.get(url, timeout=self._request_timeout)
                    if response.status_code == 200:
                        logger.debug(f"{url} is available")
                        return
                    logger.debug(f"{url} answered {response.status_code}")
                except httpx.HTTPError as e:
                    last_error = e
                time.sleep(min(self._poll_interval, max(deadline - time.monotonic(), 0)))
        finally:
            if self._client is None:
                client.close()

        raise WebDriverTimeoutError(
            f"Timed out waiting for {url} to be available after {timeout}s",
            cause=last_error,
        )


__all__ = ["PortProber", "UrlChecker"]
