"""
Error taxonomy for the WebDriver wire protocol.

Every failure reported by a remote end is classified as an ErrorKind. Each
kind knows its canonical W3C error string, the numeric status code used by
the legacy JSON Wire Protocol, and the HTTP status a W3C endpoint answers
with. The lookup tables are built once at import time and are read-only.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class WebDriverError(Exception):
    """Base class for every error raised by driverwire."""

    def __init__(
        self,
        message: Optional[str] = None,
        stacktrace: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.message = message or ""
        self.stacktrace = stacktrace
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        text = self.message
        if self.cause is not None:
            text = f"{text} (caused by {self.cause!r})" if text else repr(self.cause)
        return text


class ProtocolError(WebDriverError):
    """Response could not be understood (malformed JSON or unknown shape)."""


class UnknownError(WebDriverError):
    pass


class SessionNotCreatedError(WebDriverError):
    pass


class InvalidArgumentError(WebDriverError):
    pass


class InvalidSessionIdError(WebDriverError):
    pass


class NoSuchElementError(WebDriverError):
    pass


class NoSuchWindowError(WebDriverError):
    pass


class NoSuchFrameError(WebDriverError):
    pass


class NoSuchAlertError(WebDriverError):
    pass


class NoSuchCookieError(WebDriverError):
    pass


class StaleElementReferenceError(WebDriverError):
    pass


class ElementNotInteractableError(WebDriverError):
    pass


class ElementNotSelectableError(WebDriverError):
    pass


class ElementClickInterceptedError(WebDriverError):
    pass


class InvalidElementStateError(WebDriverError):
    pass


class InvalidCoordinatesError(WebDriverError):
    pass


class InvalidSelectorError(WebDriverError):
    pass


class InvalidCookieDomainError(WebDriverError):
    pass


class InsecureCertificateError(WebDriverError):
    pass


class UnableToSetCookieError(WebDriverError):
    pass


class UnableToCaptureScreenError(WebDriverError):
    pass


class JavascriptError(WebDriverError):
    pass


class MoveTargetOutOfBoundsError(WebDriverError):
    pass


class WebDriverTimeoutError(WebDriverError):
    pass


class ScriptTimeoutError(WebDriverTimeoutError):
    pass


class UnknownCommandError(WebDriverError):
    pass


class UnknownMethodError(WebDriverError):
    pass


class UnsupportedOperationError(WebDriverError):
    pass


class UnhandledAlertError(WebDriverError):
    """An alert was open when a command was issued.

    Carries the text of the offending alert when the remote end reports it.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        alert_text: Optional[str] = None,
        stacktrace: Optional[str] = None,
    ) -> None:
        super().__init__(message, stacktrace=stacktrace)
        self.alert_text = alert_text

    def __str__(self) -> str:
        base = super().__str__()
        if self.alert_text:
            return f"{base}: {self.alert_text}"
        return base


class DriverServiceError(WebDriverError):
    """The local driver process could not be started or managed."""


class StartupTimeoutError(DriverServiceError, WebDriverTimeoutError):
    """The driver process never started accepting connections."""


class ServiceStateError(DriverServiceError):
    """An operation is not allowed in the service's current state."""


class ErrorKind(Enum):
    """Canonical error classification: (wire string, legacy code, HTTP status)."""

    ELEMENT_CLICK_INTERCEPTED = ("element click intercepted", 64, 400)
    ELEMENT_NOT_SELECTABLE = ("element not selectable", 15, 400)
    ELEMENT_NOT_INTERACTABLE = ("element not interactable", 60, 400)
    INSECURE_CERTIFICATE = ("insecure certificate", 65, 400)
    INVALID_ARGUMENT = ("invalid argument", 61, 400)
    INVALID_COOKIE_DOMAIN = ("invalid cookie domain", 24, 400)
    INVALID_COORDINATES = ("invalid element coordinates", 29, 400)
    INVALID_ELEMENT_STATE = ("invalid element state", 12, 400)
    INVALID_SELECTOR = ("invalid selector", 32, 400)
    INVALID_SESSION_ID = ("invalid session id", 6, 404)
    JAVASCRIPT_ERROR = ("javascript error", 17, 500)
    MOVE_TARGET_OUT_OF_BOUNDS = ("move target out of bounds", 34, 500)
    NO_SUCH_ALERT = ("no such alert", 27, 404)
    NO_SUCH_COOKIE = ("no such cookie", 62, 404)
    NO_SUCH_ELEMENT = ("no such element", 7, 404)
    NO_SUCH_FRAME = ("no such frame", 8, 404)
    NO_SUCH_WINDOW = ("no such window", 23, 404)
    SCRIPT_TIMEOUT = ("script timeout", 28, 500)
    SESSION_NOT_CREATED = ("session not created", 33, 500)
    STALE_ELEMENT_REFERENCE = ("stale element reference", 10, 404)
    TIMEOUT = ("timeout", 21, 500)
    UNABLE_TO_SET_COOKIE = ("unable to set cookie", 25, 500)
    UNABLE_TO_CAPTURE_SCREEN = ("unable to capture screen", 63, 500)
    UNHANDLED_ALERT = ("unexpected alert open", 26, 500)
    UNKNOWN_COMMAND = ("unknown command", 9, 404)
    UNKNOWN_METHOD = ("unknown method", 405, 405)
    UNSUPPORTED_OPERATION = ("unsupported operation", 405, 500)
    UNKNOWN_ERROR = ("unknown error", 13, 500)

    def __init__(self, wire: str, legacy_code: int, http_status: int) -> None:
        self.wire = wire
        self.legacy_code = legacy_code
        self.http_status = http_status


SUCCESS = 0

_EXCEPTION_TYPES: Mapping[ErrorKind, type] = MappingProxyType({
    ErrorKind.ELEMENT_CLICK_INTERCEPTED: ElementClickInterceptedError,
    ErrorKind.ELEMENT_NOT_SELECTABLE: ElementNotSelectableError,
    ErrorKind.ELEMENT_NOT_INTERACTABLE: ElementNotInteractableError,
    ErrorKind.INSECURE_CERTIFICATE: InsecureCertificateError,
    ErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorKind.INVALID_COOKIE_DOMAIN: InvalidCookieDomainError,
    ErrorKind.INVALID_COORDINATES: InvalidCoordinatesError,
    ErrorKind.INVALID_ELEMENT_STATE: InvalidElementStateError,
    ErrorKind.INVALID_SELECTOR: InvalidSelectorError,
    ErrorKind.INVALID_SESSION_ID: InvalidSessionIdError,
    ErrorKind.JAVASCRIPT_ERROR: JavascriptError,
    ErrorKind.MOVE_TARGET_OUT_OF_BOUNDS: MoveTargetOutOfBoundsError,
    ErrorKind.NO_SUCH_ALERT: NoSuchAlertError,
    ErrorKind.NO_SUCH_COOKIE: NoSuchCookieError,
    ErrorKind.NO_SUCH_ELEMENT: NoSuchElementError,
    ErrorKind.NO_SUCH_FRAME: NoSuchFrameError,
    ErrorKind.NO_SUCH_WINDOW: NoSuchWindowError,
    ErrorKind.SCRIPT_TIMEOUT: ScriptTimeoutError,
    ErrorKind.SESSION_NOT_CREATED: SessionNotCreatedError,
    ErrorKind.STALE_ELEMENT_REFERENCE: StaleElementReferenceError,
    ErrorKind.TIMEOUT: WebDriverTimeoutError,
    ErrorKind.UNABLE_TO_SET_COOKIE: UnableToSetCookieError,
    ErrorKind.UNABLE_TO_CAPTURE_SCREEN: UnableToCaptureScreenError,
    ErrorKind.UNHANDLED_ALERT: UnhandledAlertError,
    ErrorKind.UNKNOWN_COMMAND: UnknownCommandError,
    ErrorKind.UNKNOWN_METHOD: UnknownMethodError,
    ErrorKind.UNSUPPORTED_OPERATION: UnsupportedOperationError,
    ErrorKind.UNKNOWN_ERROR: UnknownError,
})

# Older or driver-specific spellings of canonical wire strings.
_WIRE_ALIASES: Mapping[str, ErrorKind] = MappingProxyType({
    "element not visible": ErrorKind.ELEMENT_NOT_INTERACTABLE,
    "invalid coordinates": ErrorKind.INVALID_COORDINATES,
    "no such session": ErrorKind.INVALID_SESSION_ID,
    "unhandled alert": ErrorKind.UNHANDLED_ALERT,
})


class ErrorCodes:
    """Read-only lookups between wire strings, legacy codes and ErrorKinds.

    All lookups are total: anything unrecognized resolves to
    ``ErrorKind.UNKNOWN_ERROR``.
    """

    _by_wire_and_status: Mapping[tuple[str, int], ErrorKind] = MappingProxyType(
        {(kind.wire, kind.http_status): kind for kind in ErrorKind}
    )
    _by_wire: Mapping[str, ErrorKind] = MappingProxyType(
        {**{kind.wire: kind for kind in ErrorKind}, **_WIRE_ALIASES}
    )
    # First kind listed wins when several share a legacy code.
    _by_legacy_code: Mapping[int, ErrorKind] = MappingProxyType(
        {kind.legacy_code: kind for kind in reversed(list(ErrorKind))}
    )
    _by_exception_type: Mapping[type, ErrorKind] = MappingProxyType(
        {exc_type: kind for kind, exc_type in _EXCEPTION_TYPES.items()}
    )

    @classmethod
    def kind_for(cls, error: Optional[str], http_status: Optional[int] = None) -> ErrorKind:
        """Map a wire error string (and optional HTTP status) to an ErrorKind."""
        if not error:
            return ErrorKind.UNKNOWN_ERROR
        if http_status is not None:
            kind = cls._by_wire_and_status.get((error, http_status))
            if kind is not None:
                return kind
        return cls._by_wire.get(error, ErrorKind.UNKNOWN_ERROR)

    @classmethod
    def kind_for_status(cls, status: Optional[int]) -> ErrorKind:
        """Map a legacy numeric status code to an ErrorKind."""
        if status is None:
            return ErrorKind.UNKNOWN_ERROR
        return cls._by_legacy_code.get(status, ErrorKind.UNKNOWN_ERROR)

    @classmethod
    def to_status(cls, error: Optional[str], http_status: Optional[int] = None) -> int:
        """Legacy numeric status for a wire error string."""
        return cls.kind_for(error, http_status).legacy_code

    @classmethod
    def to_state(cls, status: Optional[int]) -> str:
        """Wire error string for a legacy numeric status."""
        if status == SUCCESS:
            return "success"
        return cls.kind_for_status(status).wire

    @classmethod
    def kind_of(cls, error: BaseException) -> ErrorKind:
        """Classify an exception instance, walking its MRO."""
        for klass in type(error).__mro__:
            kind = cls._by_exception_type.get(klass)
            if kind is not None:
                return kind
        return ErrorKind.UNKNOWN_ERROR

    @staticmethod
    def exception_type(kind: ErrorKind) -> type:
        return _EXCEPTION_TYPES.get(kind, UnknownError)

    @classmethod
    def create_exception(
        cls,
        kind: ErrorKind,
        message: str,
        stacktrace: Optional[str] = None,
        **extra: Any,
    ) -> WebDriverError:
        """Instantiate the exception class registered for ``kind``."""
        exc_type = cls.exception_type(kind)
        if exc_type is UnhandledAlertError:
            return UnhandledAlertError(
                message, alert_text=extra.get("alert_text"), stacktrace=stacktrace
            )
        return exc_type(message, stacktrace=stacktrace)


__all__ = [
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
    "NoSuchFrameError",
    "NoSuchAlertError",
    "NoSuchCookieError",
    "StaleElementReferenceError",
    "ElementNotInteractableError",
    "ElementNotSelectableError",
    "ElementClickInterceptedError",
    "InvalidElementStateError",
    "InvalidCoordinatesError",
    "InvalidSelectorError",
    "InvalidCookieDomainError",
    "InsecureCertificateError",
    "UnableToSetCookieError",
    "UnableToCaptureScreenError",
    "JavascriptError",
    "MoveTargetOutOfBoundsError",
    "WebDriverTimeoutError",
    "ScriptTimeoutError",
    "UnknownCommandError",
    "UnknownMethodError",
    "UnsupportedOperationError",
    "UnhandledAlertError",
    "DriverServiceError",
    "StartupTimeoutError",
    "ServiceStateError",
]
