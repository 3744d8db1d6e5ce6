"""
Driver service supervision.

A DriverService owns one driver executable (safaridriver, geckodriver, ...)
running as a child process and exposing the WebDriver HTTP endpoint on
``http://localhost:<port>``.

States: CONFIGURED -> STARTED -> READY -> STOPPED, with FAILED reachable while
waiting for the port to open.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import IO, Any, Callable, Mapping, Optional, Sequence

from driverwire.config.defaults import (
    DEFAULT_CONNECT_ATTEMPT_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SERVICE_HOST,
    DEFAULT_STARTUP_TIMEOUT,
    DEFAULT_STOP_TIMEOUT,
)
from driverwire.config.options import ServiceOptions
from driverwire.errors import DriverServiceError, ServiceStateError
from driverwire.service.net import PortProber

logger = logging.getLogger(__name__)


class ServiceState(str, Enum):
    CONFIGURED = "configured"
    STARTED = "started"
    READY = "ready"
    STOPPED = "stopped"
    FAILED = "failed"


#: Lines of driver stderr kept for error messages.
STDERR_TAIL_LINES = 100

#: Longest stderr line kept, in bytes.
STDERR_LINE_LIMIT = 4096


def _drain(stream: IO[bytes], tail: deque[bytes]) -> None:
    with stream:
        try:
            for line in iter(stream.readline, b""):
                tail.append(line[-STDERR_LINE_LIMIT:])
        except (OSError, ValueError):
            return


def port_flag_args(port: int) -> list[str]:
    """``--port <port>``, understood by safaridriver and geckodriver."""
    return ["--port", str(port)]


@dataclass(frozen=True)
class ServiceConfig:
    """Everything needed to spawn the driver. Immutable once built.

    The port arguments are produced from ``port`` on every access, so a
    configuration copied with a new port never points the driver elsewhere.
    """

    executable_path: str
    port: int
    extra_args: tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)
    startup_timeout: float = DEFAULT_STARTUP_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    connect_attempt_timeout: float = DEFAULT_CONNECT_ATTEMPT_TIMEOUT
    stop_timeout: float = DEFAULT_STOP_TIMEOUT
    port_args: Callable[[int], Sequence[str]] = field(
        default=port_flag_args, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra_args", tuple(self.extra_args))
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))

    @property
    def args(self) -> tuple[str, ...]:
        return (*self.port_args(self.port), *self.extra_args)

    @property
    def url(self) -> str:
        return f"http://{DEFAULT_SERVICE_HOST}:{self.port}"

    def command_line(self) -> list[str]:
        return [self.executable_path, *self.args]


class DriverService:
    """Manages a driver subprocess.

    Example:
        service = SafariDriverService.Builder().using_any_free_port().build()
        with service:
            print(service.url)
    """

    def __init__(self, config: ServiceConfig) -> None:
        self._config = config
        self._state = ServiceState.CONFIGURED
        self._process: Optional[subprocess.Popen[bytes]] = None
        self._lock = threading.Lock()
        self._stderr_tail: deque[bytes] = deque(maxlen=STDERR_TAIL_LINES)
        self._stderr_reader: Optional[threading.Thread] = None

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def process(self) -> Optional[subprocess.Popen[bytes]]:
        return self._process

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def reconfigure(self, **changes: Any) -> None:
        """Replace configuration fields before the service is started.

        Changing ``port`` also changes the port the driver is told to bind;
        ``port=0`` picks a free port.

        Raises:
            ServiceStateError: The service has already been started.
        """
        with self._lock:
            if self._state is not ServiceState.CONFIGURED:
                raise ServiceStateError(
                    f"Cannot change configuration of a service in state {self._state.value}"
                )
            if changes.get("port") == 0:
                changes["port"] = PortProber.find_free_port()
            self._config = replace(self._config, **changes)

    def start(self) -> None:
        """Spawn the driver and block until its port accepts connections.

        Raises:
            ServiceStateError: The service was already started.
            DriverServiceError: The process could not be spawned or exited
                before becoming ready.
            StartupTimeoutError: The port did not open within the startup
                timeout.
        """
        with self._lock:
            if self._state is not ServiceState.CONFIGURED:
                raise ServiceStateError(
                    f"Cannot start a service in state {self._state.value}"
                )
            self._spawn()
            self._state = ServiceState.STARTED

        try:
            self.wait_until_available()
        except BaseException:
            self._state = ServiceState.FAILED
            self._terminate()
            raise

        self._state = ServiceState.READY
        logger.info(f"Driver service ready at {self.url}")

    def _spawn(self) -> None:
        command = self._config.command_line()
        env = dict(self._config.environment)
        logger.debug(f"Starting driver service: {command}")

        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            self._state = ServiceState.FAILED
            raise DriverServiceError(
                f"Unable to start driver service {self._config.executable_path}", cause=e
            ) from e

        # The pipe is drained continuously so a chatty driver never blocks on it.
        self._stderr_tail.clear()
        self._stderr_reader = threading.Thread(
            target=_drain,
            args=(self._process.stderr, self._stderr_tail),
            daemon=True,
            name=f"driverwire-stderr-{self._config.port}",
        )
        self._stderr_reader.start()

    def _has_exited(self) -> bool:
        return self._process is None or self._process.poll() is not None

    def wait_until_available(self) -> None:
        """Poll the service port until it opens.

        Subclasses may override this to use a different readiness check.
        """
        config = self._config
        PortProber.wait_for_port_up(
            config.port,
            config.startup_timeout,
            poll_interval=config.poll_interval,
            attempt_timeout=config.connect_attempt_timeout,
            should_abort=self._has_exited,
        )
        if self._has_exited():
            raise DriverServiceError(
                f"Driver service exited with code {self._exit_code()} before becoming "
                f"available. stderr: {self._read_stderr()}"
            )

    def _exit_code(self) -> Optional[int]:
        return self._process.returncode if self._process is not None else None

    def _read_stderr(self) -> str:
        """Last lines the driver wrote to stderr."""
        if self._stderr_reader is not None:
            self._stderr_reader.join(timeout=self._config.stop_timeout)
        return b"".join(self._stderr_tail).decode(errors="replace").strip()

    def stop(self) -> None:
        """Terminate the driver process. Safe to call more than once."""
        with self._lock:
            if self._process is None:
                if self._state is not ServiceState.FAILED:
                    self._state = ServiceState.STOPPED
                return
            self._terminate()
            self._state = ServiceState.STOPPED
        logger.info(f"Driver service at {self.url} stopped")

    def _terminate(self) -> None:
        process = self._process
        if process is None:
            return
        try:
            if process.poll() is None:
                process.terminate()
                try:
                    process.wait(timeout=self._config.stop_timeout)
                except subprocess.TimeoutExpired:
                    logger.warning(
                        f"Driver service did not exit within {self._config.stop_timeout}s, killing it"
                    )
                    process.kill()
                    process.wait()
        except ProcessLookupError:
            pass
        finally:
            # The reader closes the pipe once the driver's end reaches EOF.
            if self._stderr_reader is not None:
                self._stderr_reader.join(timeout=self._config.stop_timeout)
            self._process = None

    def __enter__(self) -> "DriverService":
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} url={self.url!r} state={self._state.value}>"


class DriverServiceBuilder:
    """Collects service configuration and builds a DriverService.

    Subclasses provide ``executable_name``, ``default_executables()`` and
    ``create_args()``, and may override ``create_driver_service()``.
    """

    #: Name looked up on PATH when no explicit or default executable exists.
    executable_name: Optional[str] = None

    def __init__(self) -> None:
        self._executable: Optional[str] = None
        self._port: int = 0
        self._args: list[str] = []
        self._environment: dict[str, str] = {}
        self._startup_timeout = DEFAULT_STARTUP_TIMEOUT
        self._poll_interval = DEFAULT_POLL_INTERVAL
        self._connect_attempt_timeout = DEFAULT_CONNECT_ATTEMPT_TIMEOUT
        self._stop_timeout = DEFAULT_STOP_TIMEOUT
        self._built = False

    def _check_mutable(self) -> None:
        if self._built:
            raise ServiceStateError("Service configuration is frozen once built")

    @property
    def port(self) -> int:
        return self._port

    def using_driver_executable(self, path: str | os.PathLike[str]) -> "DriverServiceBuilder":
        self._check_mutable()
        self._executable = os.fspath(path)
        return self

    def using_port(self, port: int) -> "DriverServiceBuilder":
        self._check_mutable()
        if not 0 <= port <= 65535:
            raise ValueError(f"Invalid port: {port}")
        self._port = port
        return self

    def using_any_free_port(self) -> "DriverServiceBuilder":
        return self.using_port(0)

    def with_args(self, args: Sequence[str]) -> "DriverServiceBuilder":
        self._check_mutable()
        self._args = list(args)
        return self

    def with_environment(self, environment: Mapping[str, str]) -> "DriverServiceBuilder":
        self._check_mutable()
        self._environment = dict(environment)
        return self

    def with_startup_timeout(self, seconds: float) -> "DriverServiceBuilder":
        self._check_mutable()
        self._startup_timeout = seconds
        return self

    def with_poll_interval(self, seconds: float) -> "DriverServiceBuilder":
        self._check_mutable()
        self._poll_interval = seconds
        return self

    def with_options(self, options: ServiceOptions) -> "DriverServiceBuilder":
        """Apply a ServiceOptions block from configuration."""
        self._check_mutable()
        if options.executable_path:
            self._executable = options.executable_path
        self._port = options.port
        self._args = list(options.args)
        self._environment = dict(options.env)
        self._startup_timeout = options.startup_timeout
        self._poll_interval = options.poll_interval
        self._connect_attempt_timeout = options.connect_attempt_timeout
        self._stop_timeout = options.stop_timeout
        return self

    def default_executables(self) -> list[Path]:
        """Platform-specific install locations, most preferred first."""
        return []

    def find_default_executable(self) -> Optional[str]:
        """First existing default location, else a PATH lookup."""
        for candidate in self.default_executables():
            if candidate.is_file():
                return str(candidate)
        if self.executable_name:
            return shutil.which(self.executable_name)
        return None

    def create_args(self, port: int) -> list[str]:
        """Arguments telling the driver which port to bind."""
        return port_flag_args(port)

    def create_driver_service(self, config: ServiceConfig) -> DriverService:
        return DriverService(config)

    def build(self) -> DriverService:
        """Resolve executable, port, arguments and environment.

        Raises:
            DriverServiceError: No executable could be found.
            ServiceStateError: ``build`` was already called.
        """
        self._check_mutable()
        executable = self._executable or self.find_default_executable()
        if not executable:
            raise DriverServiceError(
                f"Unable to find a driver executable"
                f"{f' named {self.executable_name!r}' if self.executable_name else ''}. "
                f"Install it or set the executable path explicitly."
            )

        if self._port == 0:
            self._port = PortProber.find_free_port()

        environment = {**os.environ, **self._environment}

        config = ServiceConfig(
            executable_path=executable,
            port=self._port,
            extra_args=tuple(self._args),
            environment=environment,
            startup_timeout=self._startup_timeout,
            poll_interval=self._poll_interval,
            connect_attempt_timeout=self._connect_attempt_timeout,
            stop_timeout=self._stop_timeout,
            port_args=self.create_args,
        )
        self._built = True
        logger.debug(f"Built driver service configuration: {config.command_line()}")
        return self.create_driver_service(config)


__all__ = [
    "DriverService",
    "DriverServiceBuilder",
    "ServiceConfig",
    "ServiceState",
]
