"""
Core data models for driverwire.

This module defines the values exchanged between the handshake, the response
codec and the transport: dialects, raw HTTP messages, decoded wire responses
and the result of a session negotiation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from driverwire.errors import WebDriverError

if TYPE_CHECKING:
    from driverwire.capabilities import Capabilities


class Dialect(str, Enum):
    """WebDriver wire dialects a remote end may speak.

    - LEGACY: the original JSON Wire Protocol (numeric ``status`` codes)
    - W3C: the W3C WebDriver specification (string ``error`` codes)
    """

    LEGACY = "legacy"
    W3C = "w3c"


@dataclass
class HttpRequest:
    """A single outgoing HTTP request."""

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def json(cls, method: str, path: str, payload: Any) -> "HttpRequest":
        """Build a request whose body is ``payload`` serialized as UTF-8 JSON."""
        return cls(
            method=method,
            path=path,
            headers={"Content-Type": "application/json; charset=utf-8"},
            body=json.dumps(payload).encode("utf-8"),
        )

    @property
    def content_string(self) -> str:
        return self.body.decode("utf-8")


@dataclass
class HttpResponse:
    """A single HTTP response as handed back by a transport."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_string(self) -> str:
        return self.body.decode("utf-8")

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class WireResponse:
    """A decoded command response.

    ``value`` holds the result payload on success, or a ``WebDriverError``
    instance when the remote end reported a failure.
    """

    http_status: int
    state: str
    status: int
    value: Any = None
    session_id: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return isinstance(self.value, WebDriverError)

    def raise_for_error(self) -> None:
        """Raise the carried error, if any."""
        if self.is_error:
            raise self.value


@dataclass(frozen=True)
class HandshakeResult:
    """Outcome of a successful new-session negotiation."""

    dialect: Dialect
    session_id: str
    capabilities: "Capabilities"

    def __repr__(self) -> str:
        return (
            f"<HandshakeResult dialect={self.dialect.value} "
            f"session_id={self.session_id!r}>"
        )


__all__ = [
    "Dialect",
    "HandshakeResult",
    "HttpRequest",
    "HttpResponse",
    "WireResponse",
]
