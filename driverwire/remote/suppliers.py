"""
Session suppliers.

A supplier knows where a session comes from: a remote server URL, an external
server that has to become ready first, or a locally spawned driver service.
``create_supplier`` picks one from configuration via the ``SUPPLIERS`` registry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Optional

from driverwire.config.defaults import DEFAULT_STATUS_PATH, DEFAULT_STATUS_TIMEOUT
from driverwire.config.loader import ConfigurationError
from driverwire.config.options import DriverwireConfig, SupplierKind, TransportOptions
from driverwire.errors import DriverServiceError, WebDriverTimeoutError
from driverwire.remote.session import RemoteSession
from driverwire.remote.transport import HttpxTransport, Transport
from driverwire.service.net import UrlChecker
from driverwire.service.safari import create_default_service
from driverwire.service.service import DriverService

logger = logging.getLogger(__name__)

Caps = Optional[Mapping[str, Any]]
ServiceFactory = Callable[[], Optional[DriverService]]


def _create_transport(url: str, options: Optional[TransportOptions]) -> Transport:
    options = options or TransportOptions()
    return HttpxTransport(
        url,
        timeout=options.timeout,
        connect_timeout=options.connect_timeout,
        headers=options.headers,
    )


class SessionSupplier(ABC):
    """Produces new RemoteSession instances."""

    @abstractmethod
    def get(self) -> RemoteSession:
        """Create and return a new session."""

    def __call__(self) -> RemoteSession:
        return self.get()


class RemoteSessionSupplier(SessionSupplier):
    """Opens sessions on a server at a known URL."""

    def __init__(
        self,
        url: str,
        desired: Caps,
        required: Caps = None,
        transport_options: Optional[TransportOptions] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.desired = desired
        self.required = required
        self.transport_options = transport_options

    def get(self) -> RemoteSession:
        transport = _create_transport(self.url, self.transport_options)
        try:
            return RemoteSession.create(
                transport, self.desired, self.required, close_transport=True
            )
        except Exception:
            transport.close()
            raise

    def __repr__(self) -> str:
        return f"<RemoteSessionSupplier url={self.url!r}>"


class ExternalServerSupplier(SessionSupplier):
    """Waits for an external server's status endpoint, then delegates.

    Args:
        url: Base URL of the external server.
        delegate: Supplier used once the server answers.
        timeout: Seconds to wait for ``<url>/status``.
        url_checker: Checker used to poll the status URL.
    """

    def __init__(
        self,
        url: str,
        delegate: SessionSupplier,
        timeout: float = DEFAULT_STATUS_TIMEOUT,
        url_checker: Optional[UrlChecker] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.delegate = delegate
        self.timeout = timeout
        self._url_checker = url_checker or UrlChecker()

    def get(self) -> RemoteSession:
        status_url = f"{self.url}{DEFAULT_STATUS_PATH}"
        logger.info(f"Waiting for server to be ready at {self.url}")
        try:
            self._url_checker.wait_until_available(status_url, self.timeout)
        except WebDriverTimeoutError as e:
            raise DriverServiceError(
                "The external server is not accepting commands", cause=e
            ) from e
        logger.info("Server is ready")
        return self.delegate.get()

    def __repr__(self) -> str:
        return f"<ExternalServerSupplier url={self.url!r} delegate={self.delegate!r}>"


class LocalServiceSupplier(SessionSupplier):
    """Starts a local driver service and opens a session on it.

    The service is stopped when the session quits, or immediately if the
    session cannot be created.
    """

    def __init__(
        self,
        service_factory: ServiceFactory,
        desired: Caps,
        required: Caps = None,
        transport_options: Optional[TransportOptions] = None,
    ) -> None:
        self.service_factory = service_factory
        self.desired = desired
        self.required = required
        self.transport_options = transport_options

    def get(self) -> RemoteSession:
        service = self.service_factory()
        if service is None:
            raise DriverServiceError("No driver service is available on this machine")

        service.start()
        transport: Optional[Transport] = None
        try:
            transport = _create_transport(service.url, self.transport_options)
            return RemoteSession.create(
                transport,
                self.desired,
                self.required,
                close_transport=True,
                on_quit=service.stop,
            )
        except Exception:
            if transport is not None:
                transport.close()
            service.stop()
            raise


def _remote_supplier(
    config: DriverwireConfig,
    desired: Caps,
    required: Caps,
    service_factory: Optional[ServiceFactory],
) -> SessionSupplier:
    if not config.remote.server_url:
        raise ConfigurationError("remote.server_url is required for the remote supplier")
    return RemoteSessionSupplier(
        config.remote.server_url, desired, required, config.transport
    )


def _external_supplier(
    config: DriverwireConfig,
    desired: Caps,
    required: Caps,
    service_factory: Optional[ServiceFactory],
) -> SessionSupplier:
    delegate = _remote_supplier(config, desired, required, service_factory)
    return ExternalServerSupplier(
        config.remote.server_url, delegate, timeout=config.remote.status_timeout
    )


def _local_service_supplier(
    config: DriverwireConfig,
    desired: Caps,
    required: Caps,
    service_factory: Optional[ServiceFactory],
) -> SessionSupplier:
    if service_factory is None:
        def service_factory() -> Optional[DriverService]:
            return create_default_service(config.service)

    return LocalServiceSupplier(service_factory, desired, required, config.transport)


SUPPLIERS: dict[SupplierKind, Callable[..., SessionSupplier]] = {
    SupplierKind.REMOTE: _remote_supplier,
    SupplierKind.EXTERNAL: _external_supplier,
    SupplierKind.LOCAL_SERVICE: _local_service_supplier,
}


def create_supplier(
    config: DriverwireConfig,
    desired: Caps,
    required: Caps = None,
    service_factory: Optional[ServiceFactory] = None,
) -> SessionSupplier:
    """Build the supplier selected by ``config.remote.supplier``.

    Args:
        config: Loaded configuration.
        desired: Desired capabilities for new sessions.
        required: Required capabilities for new sessions.
        service_factory: Overrides the default local service factory.

    Raises:
        ConfigurationError: The selected supplier lacks required settings.
    """
    kind = SupplierKind(config.remote.supplier)
    logger.info(f"Using {kind.value} session supplier")
    return SUPPLIERS[kind](config, desired, required, service_factory)


__all__ = [
    "SUPPLIERS",
    "ExternalServerSupplier",
    "LocalServiceSupplier",
    "RemoteSessionSupplier",
    "SessionSupplier",
    "create_supplier",
]
