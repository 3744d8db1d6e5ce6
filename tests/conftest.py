"""
Shared fixtures for driverwire tests.
"""

import json
from typing import Any, Optional

import pytest

from driverwire.models import HttpRequest, HttpResponse
from driverwire.remote.transport import Transport


class RecordingTransport(Transport):
    """Transport that records requests and replays queued responses."""

    def __init__(self, *responses: HttpResponse) -> None:
        self.requests: list[HttpRequest] = []
        self.responses = list(responses)
        self.closed = False

    def queue(self, response: HttpResponse) -> None:
        self.responses.append(response)

    def execute(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.path}")
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True

    def payload(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content_string)


def json_response(
    body: Any,
    status: int = 200,
    content_type: Optional[str] = "application/json; charset=utf-8",
) -> HttpResponse:
    """Build an HttpResponse carrying ``body`` serialized as JSON."""
    headers = {"Content-Type": content_type} if content_type else {}
    return HttpResponse(status=status, headers=headers, body=json.dumps(body).encode("utf-8"))


@pytest.fixture
def transport() -> RecordingTransport:
    """Create an empty recording transport."""
    return RecordingTransport()
