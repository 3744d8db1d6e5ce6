"""
A negotiated remote session.

RemoteSession executes commands against a remote end after the handshake
has produced a session id and dialect.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from driverwire.capabilities import Capabilities
from driverwire.errors import InvalidSessionIdError
from driverwire.models import Dialect, HandshakeResult, HttpRequest
from driverwire.remote.codec import W3CHttpResponseCodec
from driverwire.remote.handshake import ProtocolHandshake
from driverwire.remote.transport import Transport

logger = logging.getLogger(__name__)

SESSION_ID_PLACEHOLDER = ":sessionId"

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class RemoteSession:
    """Executes commands within one session.

    Example:
        transport = HttpxTransport("http://localhost:4444")
        with RemoteSession.create(transport, Capabilities.firefox()) as session:
            session.execute("POST", "/session/:sessionId/url", {"url": "https://example.com"})
            title = session.execute("GET", "/session/:sessionId/title")
    """

    def __init__(
        self,
        transport: Transport,
        handshake: HandshakeResult,
        codec: Optional[W3CHttpResponseCodec] = None,
        *,
        close_transport: bool = False,
        on_quit: Optional[Callable[[], None]] = None,
    ) -> None:
        self._transport = transport
        self._handshake = handshake
        self._codec = codec or W3CHttpResponseCodec()
        self._close_transport = close_transport
        self._on_quit = on_quit
        self._closed = False

    @classmethod
    def create(
        cls,
        transport: Transport,
        desired: Optional[Mapping[str, Any]],
        required: Optional[Mapping[str, Any]] = None,
        *,
        codec: Optional[W3CHttpResponseCodec] = None,
        close_transport: bool = False,
        on_quit: Optional[Callable[[], None]] = None,
    ) -> "RemoteSession":
        """Negotiate a new session over ``transport`` and wrap it."""
        codec = codec or W3CHttpResponseCodec()
        result = ProtocolHandshake(codec).create_session(transport, desired, required)
        return cls(
            transport,
            result,
            codec,
            close_transport=close_transport,
            on_quit=on_quit,
        )

    @property
    def session_id(self) -> str:
        return self._handshake.session_id

    @property
    def dialect(self) -> Dialect:
        return self._handshake.dialect

    @property
    def capabilities(self) -> Capabilities:
        return self._handshake.capabilities

    @property
    def closed(self) -> bool:
        return self._closed

    def _resolve_path(self, path: str) -> str:
        return path.replace(SESSION_ID_PLACEHOLDER, self.session_id)

    def execute(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send one command and return its decoded value.

        Args:
            method: HTTP method.
            path: Command path; ``:sessionId`` is replaced with this session's id.
            params: JSON parameters. Sent as the body of POST/PUT/PATCH.

        Returns:
            The ``value`` of the response after element conversion.

        Raises:
            InvalidSessionIdError: The session has already been quit.
            WebDriverError: The remote end reported an error.
        """
        if self._closed:
            raise InvalidSessionIdError(f"Session {self.session_id} has been quit")

        method = method.upper()
        resolved = self._resolve_path(path)
        if method in _BODY_METHODS:
            request = HttpRequest.json(method, resolved, dict(params or {}))
        else:
            request = HttpRequest(method, resolved)

        response = self._codec.decode(self._transport.execute(request))
        response.raise_for_error()
        return self._codec.reconstruct_value(response).value

    def quit(self) -> None:
        """Delete the session on the remote end. Subsequent calls do nothing."""
        if self._closed:
            return
        self._closed = True
        try:
            logger.debug(f"Deleting session {self.session_id}")
            response = self._codec.decode(
                self._transport.execute(HttpRequest("DELETE", f"/session/{self.session_id}"))
            )
            response.raise_for_error()
        finally:
            try:
                if self._close_transport:
                    self._transport.close()
            finally:
                if self._on_quit is not None:
                    self._on_quit()
        logger.info(f"Session {self.session_id} quit")

    def __enter__(self) -> "RemoteSession":
        return self

    def __exit__(self, *args: Any) -> None:
        self.quit()

    def __repr__(self) -> str:
        return (
            f"<RemoteSession session_id={self.session_id!r} "
            f"dialect={self.dialect.value} closed={self._closed}>"
        )


__all__ = ["SESSION_ID_PLACEHOLDER", "RemoteSession"]
