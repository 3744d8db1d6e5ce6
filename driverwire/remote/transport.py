"""
HTTP transports for talking to a remote end.

The protocol core only needs something that sends one HttpRequest and returns
one HttpResponse. HttpxTransport is the default implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from driverwire.config.defaults import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEADERS,
    DEFAULT_REQUEST_TIMEOUT,
)
from driverwire.models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Sends a single request and returns the single response."""

    @abstractmethod
    def execute(self, request: HttpRequest) -> HttpResponse:
        """Send ``request`` and block until the response arrives."""

    def close(self) -> None:
        """Release any underlying resources."""

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class HttpxTransport(Transport):
    """Synchronous transport backed by ``httpx.Client``.

    Example:
        with HttpxTransport("http://localhost:4444") as transport:
            response = transport.execute(HttpRequest("GET", "/status"))
            print(response.status)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Address of the remote end, e.g. ``http://localhost:4444``.
            timeout: Overall timeout per request in seconds.
            connect_timeout: Timeout for establishing the connection.
            headers: Headers merged over the defaults for every request.
            client: Pre-built client to use instead of creating one.
        """
        self._base_url = base_url.rstrip("/")
        self._headers = DEFAULT_HEADERS.copy()
        if headers:
            self._headers.update(headers)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            follow_redirects=True,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _merge_headers(self, headers: Optional[dict[str, str]] = None) -> dict[str, str]:
        merged = self._headers.copy()
        if headers:
            merged.update(headers)
        return merged

    def execute(self, request: HttpRequest) -> HttpResponse:
        logger.debug(f"-> {request.method} {request.path} {request.body[:1024]!r}")
        raw = self._client.request(
            request.method,
            request.path,
            content=request.body or None,
            headers=self._merge_headers(request.headers),
        )
        response = HttpResponse(
            status=raw.status_code,
            headers=dict(raw.headers),
            body=raw.content,
        )
        logger.debug(f"<- {response.status} {response.body[:1024]!r}")
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __repr__(self) -> str:
        return f"<HttpxTransport base_url={self._base_url!r}>"


__all__ = ["HttpxTransport", "Transport"]
