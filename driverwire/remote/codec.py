"""
W3C response codec.

Decodes HTTP responses from a remote end into WireResponse objects and encodes
WireResponse objects back into HTTP responses when acting as the server side.

Error body shapes understood by the decoder:

    {"value": {"error": "...", "message": "...", "data": {"text": "..."}}}
    {"error": "...", "message": "..."}
"""

from __future__ import annotations

import json
import logging
import traceback
from typing import Any, Callable, Optional

from driverwire.errors import (
    SUCCESS,
    ErrorCodes,
    ErrorKind,
    ProtocolError,
    UnhandledAlertError,
    WebDriverError,
)
from driverwire.models import HttpResponse, WireResponse

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An unknown error has occurred"
DEFAULT_ERROR = "unknown error"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"

ElementConverter = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


def parse_json(content: str) -> Any:
    """Parse JSON, reporting malformed input as a ProtocolError."""
    try:
        return json.loads(content)
    except ValueError as e:
        raise ProtocolError(f"Unable to parse response body as JSON: {content[:200]!r}", cause=e) from e


class W3CHttpResponseCodec:
    """Codec for responses that follow the W3C WebDriver specification.

    Args:
        element_converter: Optional transform applied by ``reconstruct_value``
            to turn element references in a decoded value into objects.
    """

    def __init__(self, element_converter: Optional[ElementConverter] = None) -> None:
        self._element_converter = element_converter or _identity

    def decode(self, encoded: HttpResponse) -> WireResponse:
        content = encoded.content_string.strip()
        logger.debug(
            f"Decoding response. Response code was: {encoded.status} and content: {content}"
        )
        content_type = encoded.header("Content-Type") or ""

        if encoded.status != 200:
            return self._decode_error(encoded.status, content)

        response = WireResponse(http_status=encoded.status, state="success", status=SUCCESS)
        if content:
            if not content_type or content_type.lower().startswith("application/json"):
                parsed = parse_json(content)
                if isinstance(parsed, dict) and "value" in parsed:
                    response.value = parsed["value"]
                    response.session_id = parsed.get("sessionId")
                else:
                    # Drivers that do not wrap their responses.
                    response.value = parsed
            else:
                response.value = content

        if isinstance(response.value, str):
            response.value = response.value.replace("\r\n", "\n")

        return response

    def _decode_error(self, http_status: int, content: str) -> WireResponse:
        logger.debug("Processing an error")
        obj = parse_json(content) if content else {}
        if not isinstance(obj, dict):
            raise ProtocolError(f"Error response is not a JSON object: {content[:200]!r}")

        wrapped = obj.get("value")
        if isinstance(wrapped, dict) and "error" in wrapped:
            obj = wrapped

        message = obj.get("message")
        message = DEFAULT_ERROR_MESSAGE if message is None else str(message)
        error = obj.get("error")
        error = DEFAULT_ERROR if error is None else str(error)
        stacktrace = obj.get("stacktrace")

        kind = ErrorCodes.kind_for(error, http_status)
        response = WireResponse(
            http_status=http_status,
            state=error,
            status=kind.legacy_code,
        )

        if error == ErrorKind.UNHANDLED_ALERT.wire and http_status == 500:
            text = ""
            data = obj.get("data")
            if isinstance(data, dict) and data.get("text") is not None:
                text = str(data["text"])
            response.value = UnhandledAlertError(message, alert_text=text, stacktrace=stacktrace)
        else:
            response.value = ErrorCodes.create_exception(kind, message, stacktrace=stacktrace)
        return response

    def value_to_encode(self, response: WireResponse) -> dict[str, Any]:
        """Build the JSON object sent to a client for ``response``."""
        value = response.value
        if isinstance(value, WebDriverError):
            error = response.state if response.state is not None else ErrorCodes.to_state(response.status)
            exception: dict[str, Any] = {
                "error": error,
                "message": value.message,
                "stacktrace": value.stacktrace or _format_stacktrace(value),
            }
            if isinstance(value, UnhandledAlertError):
                exception["data"] = {"text": value.alert_text}
            value = exception
        return {"value": value}

    def encode(self, response: WireResponse) -> HttpResponse:
        """Encode ``response`` as the HTTP response a W3C remote end sends."""
        if response.is_error:
            error = response.state if response.state is not None else ErrorCodes.to_state(response.status)
            status = ErrorCodes.kind_for(error).http_status
        else:
            status = 200
        body = json.dumps(self.value_to_encode(response), default=_json_default)
        return HttpResponse(
            status=status,
            headers={
                "Content-Type": JSON_CONTENT_TYPE,
                "Cache-Control": "no-cache",
            },
            body=body.encode("utf-8"),
        )

    def reconstruct_value(self, response: WireResponse) -> WireResponse:
        """Pass the decoded value through the element converter."""
        if not response.is_error:
            response.value = self._element_converter(response.value)
        return response


def _format_stacktrace(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _json_default(value: Any) -> Any:
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


__all__ = [
    "DEFAULT_ERROR",
    "DEFAULT_ERROR_MESSAGE",
    "W3CHttpResponseCodec",
    "parse_json",
]
