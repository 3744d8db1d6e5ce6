"""
New-session handshake.

One POST carries every dialect's capability shape (see ``encoder``). The
remote end answers in its own dialect, which is recognized from the shape of
the response body. Shapes are tried in a fixed order and the first match wins:

1. ``{"sessionId": ..., "capabilities": {...}}``            W3C
2. ``{"value": {"sessionId": ..., "capabilities": {...}}}``  W3C
3. ``{"value": {"sessionId": ..., "value": {...}}}``         W3C (geckodriver 0.15)
4. ``{"sessionId": ..., "status": 0, "value": {...}}``       JSON Wire Protocol
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

from driverwire.capabilities import Capabilities
from driverwire.config.defaults import DEFAULT_NEW_SESSION_PATH
from driverwire.errors import SUCCESS, ErrorCodes, ProtocolError
from driverwire.models import Dialect, HandshakeResult, HttpRequest, HttpResponse
from driverwire.remote.codec import W3CHttpResponseCodec, parse_json
from driverwire.remote.encoder import encode_new_session
from driverwire.remote.transport import Transport

logger = logging.getLogger(__name__)

# (session id, capabilities) extracted from a matching body
Extracted = tuple[str, Mapping[str, Any]]


@dataclass(frozen=True)
class SessionShape:
    """One recognizable new-session response layout."""

    name: str
    dialect: Dialect
    extract: Callable[[dict[str, Any]], Optional[Extracted]]


def _is_session_id(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _caps_or_empty(value: Any) -> Optional[Mapping[str, Any]]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    return None


def _top_level_w3c(body: dict[str, Any]) -> Optional[Extracted]:
    session_id = body.get("sessionId")
    caps = body.get("capabilities")
    if _is_session_id(session_id) and isinstance(caps, Mapping):
        return session_id, caps
    return None


def _wrapped_w3c(body: dict[str, Any]) -> Optional[Extracted]:
    value = body.get("value")
    if not isinstance(value, Mapping):
        return None
    session_id = value.get("sessionId")
    caps = value.get("capabilities")
    if _is_session_id(session_id) and isinstance(caps, Mapping):
        return session_id, caps
    return None


def _wrapped_w3c_inner_value(body: dict[str, Any]) -> Optional[Extracted]:
    value = body.get("value")
    if not isinstance(value, Mapping):
        return None
    session_id = value.get("sessionId")
    caps = value.get("value")
    if _is_session_id(session_id) and isinstance(caps, Mapping):
        return session_id, caps
    return None


def _legacy(body: dict[str, Any]) -> Optional[Extracted]:
    session_id = body.get("sessionId")
    status = body.get("status")
    if not _is_session_id(session_id):
        return None
    if not isinstance(status, int) or isinstance(status, bool):
        return None
    caps = _caps_or_empty(body.get("value"))
    if caps is None:
        return None
    return session_id, caps


SESSION_SHAPES: tuple[SessionShape, ...] = (
    SessionShape("w3c", Dialect.W3C, _top_level_w3c),
    SessionShape("w3c-wrapped", Dialect.W3C, _wrapped_w3c),
    SessionShape("w3c-inner-value", Dialect.W3C, _wrapped_w3c_inner_value),
    SessionShape("legacy", Dialect.LEGACY, _legacy),
)


def match_session_shape(body: Any) -> Optional[tuple[SessionShape, Extracted]]:
    """Return the first shape matching ``body`` with what it extracted."""
    if not isinstance(body, dict):
        return None
    for shape in SESSION_SHAPES:
        extracted = shape.extract(body)
        if extracted is not None:
            return shape, extracted
    return None


class ProtocolHandshake:
    """Creates sessions and discovers the remote end's dialect.

    Example:
        with HttpxTransport("http://localhost:4444") as transport:
            result = ProtocolHandshake().create_session(
                transport, Capabilities.firefox()
            )
            print(result.dialect, result.session_id)
    """

    def __init__(
        self,
        codec: Optional[W3CHttpResponseCodec] = None,
        path: str = DEFAULT_NEW_SESSION_PATH,
    ) -> None:
        self._codec = codec or W3CHttpResponseCodec()
        self._path = path

    def create_session(
        self,
        transport: Transport,
        desired: Optional[Mapping[str, Any]],
        required: Optional[Mapping[str, Any]] = None,
    ) -> HandshakeResult:
        """Send one new-session request and interpret the reply.

        Raises:
            WebDriverError: The remote end reported an error (subclass
                according to the error kind).
            ProtocolError: The reply matched none of the known shapes.
        """
        payload = encode_new_session(desired, required)
        request = HttpRequest.json("POST", self._path, payload)
        logger.debug(f"New session request: {request.content_string}")

        response = transport.execute(request)
        result = self._interpret(response)
        logger.info(
            f"Negotiated {result.dialect.value} dialect for session {result.session_id}"
        )
        return result

    def _interpret(self, response: HttpResponse) -> HandshakeResult:
        if not response.ok:
            decoded = self._codec.decode(response)
            decoded.raise_for_error()
            raise ProtocolError(
                f"New session failed with HTTP {response.status} but no error was reported"
            )

        content = response.content_string.strip()
        if not content:
            raise ProtocolError("Empty response to new session request")
        body = parse_json(content)

        matched = match_session_shape(body)
        # A legacy status only means failure when the body is not a W3C session.
        if matched is None or matched[0].dialect is Dialect.LEGACY:
            self._raise_for_legacy_failure(body)
        if matched is None:
            raise ProtocolError(f"Unable to determine dialect from new session response: {content[:200]}")

        shape, (session_id, caps) = matched
        logger.debug(f"New session response matched the {shape.name!r} shape")
        return HandshakeResult(
            dialect=shape.dialect,
            session_id=session_id,
            capabilities=Capabilities(caps),
        )

    @staticmethod
    def _raise_for_legacy_failure(body: Any) -> None:
        # JSON Wire Protocol ends may report failures with HTTP 200.
        if not isinstance(body, dict):
            return
        status = body.get("status")
        if not isinstance(status, int) or isinstance(status, bool) or status == SUCCESS:
            return
        value = body.get("value")
        message = None
        if isinstance(value, Mapping):
            message = value.get("message")
        kind = ErrorCodes.kind_for_status(status)
        raise ErrorCodes.create_exception(kind, str(message) if message else kind.wire)


__all__ = [
    "SESSION_SHAPES",
    "ProtocolHandshake",
    "SessionShape",
    "match_session_shape",
]
