"""Transport abstraction -- send one request, get back a raw status and body.

The transport is the only component that performs network I/O. It knows
nothing about authentication state, resource types, or status code
meaning: it moves a :class:`Request` to the server and hands back a
:class:`RawResponse`, or raises :class:`~hubuum_client.exceptions.TransportError`
if no response could be obtained.

Two interfaces exist side by side:

- :class:`Transport` -- blocking ``send``.
- :class:`AsyncTransport` -- ``send`` is a coroutine; the ``await`` on it
  is the one suspension point of every async client operation.

:class:`HttpxTransport` and :class:`AsyncHttpxTransport` are the default
implementations, backed by :class:`httpx.Client` and
:class:`httpx.AsyncClient`. Both accept an optional lower-level httpx
transport (for instance :class:`httpx.MockTransport` in tests).
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import httpx

from hubuum_client.exceptions import TransportError
from hubuum_client.types import BaseUrl

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Request:
    """A fully constructed request, independent of how it will be sent.

    Attributes:
        method: Upper-case HTTP method.
        path: Endpoint path relative to the base URL.
        params: Ordered query parameters.
        body: Encoded request body, if any.
        headers: Extra request headers (authentication, content type).
    """

    method: str
    path: str
    params: tuple[tuple[str, str], ...] = ()
    body: Optional[bytes] = None
    headers: tuple[tuple[str, str], ...] = ()

    def header(self, name: str) -> Optional[str]:
        """Return the value of header *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class RawResponse:
    """Status, body and headers of a response, uninterpreted."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(ABC):
    """Blocking transport interface."""

    @abstractmethod
    def send(self, request: Request) -> RawResponse:
        """Send *request* and return the raw response.

        Raises:
            TransportError: If no response could be obtained.
        """
        ...

    def close(self) -> None:
        """Release any pooled connections. The default does nothing."""


class AsyncTransport(ABC):
    """Suspension-based transport interface."""

    @abstractmethod
    async def send(self, request: Request) -> RawResponse:
        """Send *request* and return the raw response once it arrives.

        Raises:
            TransportError: If no response could be obtained.
        """
        ...

    async def aclose(self) -> None:
        """Release any pooled connections. The default does nothing."""


def _to_raw(response: httpx.Response) -> RawResponse:
    return RawResponse(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers),
    )


def _wrap_error(request: Request, exc: Exception) -> TransportError:
    return TransportError(f"{request.method} {request.path} failed: {exc}")


class HttpxTransport(Transport):
    """Blocking transport backed by a pooled :class:`httpx.Client`.

    The client is thread-safe, so one transport may be shared by every
    clone of a client and used from several threads at once.

    Args:
        base_url: Server base URL; request paths are joined onto it.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional lower-level httpx transport, e.g.
            :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        base_url: BaseUrl,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._client = httpx.Client(
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
            follow_redirects=True,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def send(self, request: Request) -> RawResponse:
        if self._client.is_closed:
            raise TransportError(f"{request.method} {request.path} failed: transport is closed")
        url = self._base_url.join(request.path)
        logger.debug("%s %s params=%s", request.method, url, list(request.params))
        started = time.monotonic()
        try:
            response = self._client.request(
                request.method,
                url,
                params=list(request.params),
                content=request.body,
                headers=list(request.headers),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise _wrap_error(request, exc) from exc
        logger.debug(
            "%s %s -> %d (%d bytes) in %.3fs",
            request.method,
            url,
            response.status_code,
            len(response.content),
            time.monotonic() - started,
        )
        return _to_raw(response)

    def close(self) -> None:
        self._client.close()


class AsyncHttpxTransport(AsyncTransport):
    """Async transport backed by a pooled :class:`httpx.AsyncClient`.

    Args:
        base_url: Server base URL; request paths are joined onto it.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional lower-level httpx transport, e.g.
            :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        base_url: BaseUrl,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
            follow_redirects=True,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def send(self, request: Request) -> RawResponse:
        if self._client.is_closed:
            raise TransportError(f"{request.method} {request.path} failed: transport is closed")
        url = self._base_url.join(request.path)
        logger.debug("%s %s params=%s", request.method, url, list(request.params))
        started = time.monotonic()
        try:
            response = await self._client.request(
                request.method,
                url,
                params=list(request.params),
                content=request.body,
                headers=list(request.headers),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise _wrap_error(request, exc) from exc
        logger.debug(
            "%s %s -> %d (%d bytes) in %.3fs",
            request.method,
            url,
            response.status_code,
            len(response.content),
            time.monotonic() - started,
        )
        return _to_raw(response)

    async def aclose(self) -> None:
        await self._client.aclose()
