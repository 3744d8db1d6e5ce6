"""
driverwire: WebDriver wire-protocol client core.

Negotiates new sessions with remote ends that speak either the W3C WebDriver
protocol or the legacy JSON Wire Protocol, decodes W3C responses into a typed
error taxonomy, and supervises local driver processes.

Basic usage:
    from driverwire import Capabilities, HttpxTransport, RemoteSession

    transport = HttpxTransport("http://localhost:4444")
    with RemoteSession.create(transport, Capabilities.firefox(), close_transport=True) as session:
        print(session.dialect, session.session_id)
        session.execute("POST", "/session/:sessionId/url", {"url": "https://example.com"})

With a local safaridriver:
    from driverwire.service import create_default_service

    service = create_default_service()
    if service is not None:
        with service:
            transport = HttpxTransport(service.url)
            ...

From configuration:
    from driverwire import create_supplier, load_config

    supplier = create_supplier(load_config(), Capabilities.safari())
    session = supplier.get()
"""

__version__ = "0.1.0"

from driverwire.capabilities import (
    BrowserType,
    Capabilities,
    CapabilityType,
    Proxy,
    ProxyType,
    UnexpectedAlertBehaviour,
)

from driverwire.errors import (
    SUCCESS,
    DriverServiceError,
    ErrorCodes,
    ErrorKind,
    InvalidArgumentError,
    InvalidSessionIdError,
    NoSuchElementError,
    NoSuchWindowError,
    ProtocolError,
    ServiceStateError,
    SessionNotCreatedError,
    StaleElementReferenceError,
    StartupTimeoutError,
    UnhandledAlertError,
    UnknownError,
    WebDriverError,
    WebDriverTimeoutError,
)

from driverwire.models import (
    Dialect,
    HandshakeResult,
    HttpRequest,
    HttpResponse,
    WireResponse,
)

from driverwire.config import (
    ConfigurationError,
    DriverwireConfig,
    RemoteOptions,
    ServiceOptions,
    SupplierKind,
    TransportOptions,
    load_config,
)

from driverwire.remote import (
    ExternalServerSupplier,
    HttpxTransport,
    LocalServiceSupplier,
    ProtocolHandshake,
    RemoteSession,
    RemoteSessionSupplier,
    SessionSupplier,
    Transport,
    W3CHttpResponseCodec,
    create_supplier,
    encode_new_session,
)

from driverwire.service import (
    DriverService,
    DriverServiceBuilder,
    PortProber,
    SafariDriverService,
    SafariDriverServiceBuilder,
    ServiceState,
    UrlChecker,
    create_default_service,
)

__all__ = [
    "__version__",
    # Capabilities
    "BrowserType",
    "Capabilities",
    "CapabilityType",
    "Proxy",
    "ProxyType",
    "UnexpectedAlertBehaviour",
    # Errors
    "SUCCESS",
    "ErrorCodes",
    "ErrorKind",
    "WebDriverError",
    "ProtocolError",
    "UnknownError",
    "SessionNotCreatedError",
    "InvalidArgumentError",
    "InvalidSessionIdError",
    "NoSuchElementError",
    "NoSuchWindowError",
    "StaleElementReferenceError",
    "UnhandledAlertError",
    "WebDriverTimeoutError",
    "DriverServiceError",
    "StartupTimeoutError",
    "ServiceStateError",
    # Models
    "Dialect",
    "HandshakeResult",
    "HttpRequest",
    "HttpResponse",
    "WireResponse",
    # Config
    "ConfigurationError",
    "DriverwireConfig",
    "RemoteOptions",
    "ServiceOptions",
    "SupplierKind",
    "TransportOptions",
    "load_config",
    # Remote
    "encode_new_session",
    "ProtocolHandshake",
    "W3CHttpResponseCodec",
    "Transport",
    "HttpxTransport",
    "RemoteSession",
    "SessionSupplier",
    "RemoteSessionSupplier",
    "ExternalServerSupplier",
    "LocalServiceSupplier",
    "create_supplier",
    # Service
    "DriverService",
    "DriverServiceBuilder",
    "SafariDriverService",
    "SafariDriverServiceBuilder",
    "ServiceState",
    "PortProber",
    "UrlChecker",
    "create_default_service",
]
