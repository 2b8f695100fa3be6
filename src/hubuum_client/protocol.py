"""Request construction and response classification shared by both client flavors.

Every client operation is expressed as an :class:`Operation`: a fully
built :class:`~hubuum_client.transport.Request` plus a pure function that
classifies the :class:`~hubuum_client.transport.RawResponse` into a typed
result or a typed error. Nothing in this module performs I/O.

The blocking and async clients differ only in how they hand the request
to the transport::

    op = search_operation(session, path, clauses, Class)
    result = execute(session.transport, op)               # blocking
    result = await execute_async(session.transport, op)   # async

so both flavors send identical requests for identical builder state, and
classify identical responses into identical outcomes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, Sequence, TypeVar

from hubuum_client.codec import JsonCodec, Payload
from hubuum_client.endpoints import Endpoint
from hubuum_client.exceptions import (
    AmbiguousResultError,
    ApiError,
    AuthError,
    AuthNetworkError,
    CodecError,
    DecodeError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidUsageError,
    NetworkError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from hubuum_client.filters import FilterClause, to_query_params
from hubuum_client.session import Session
from hubuum_client.transport import AsyncTransport, RawResponse, Request, Transport
from hubuum_client.types import Credentials, Token

R = TypeVar("R")
M = TypeVar("M")

_MESSAGE_LIMIT = 200


@dataclass(frozen=True)
class Operation(Generic[R]):
    """A request paired with the rules for interpreting its response.

    Attributes:
        request: The request to send.
        interpret: Classifies the raw response; returns the result or raises.
        on_transport_error: Builds the error raised when the transport
            fails before any response arrives.
    """

    request: Request
    interpret: Callable[[RawResponse], R]
    on_transport_error: Callable[[TransportError], Exception]


def execute(transport: Transport, op: Operation[R]) -> R:
    """Run *op* on a blocking transport."""
    try:
        raw = transport.send(op.request)
    except TransportError as exc:
        raise op.on_transport_error(exc) from exc
    return op.interpret(raw)


async def execute_async(transport: AsyncTransport, op: Operation[R]) -> R:
    """Run *op* on an async transport, suspending while the request is in flight."""
    try:
        raw = await transport.send(op.request)
    except TransportError as exc:
        raise op.on_transport_error(exc) from exc
    return op.interpret(raw)


# ------------------------------------------------------------------ #
# Response helpers
# ------------------------------------------------------------------ #


def error_message(raw: RawResponse) -> str:
    """Extract the server's error message from a response body.

    Uses the ``message`` field of a JSON body when present, otherwise the
    (truncated) raw text.
    """
    text = raw.text
    try:
        body = json.loads(text)
    except ValueError:
        return text[:_MESSAGE_LIMIT] or f"HTTP {raw.status_code}"
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or body.get("detail")
        if message:
            return str(message)
    return text[:_MESSAGE_LIMIT] or f"HTTP {raw.status_code}"


def raise_for_status(raw: RawResponse) -> None:
    """Raise the :class:`ApiError` variant matching an error status code."""
    status = raw.status_code
    if raw.is_success:
        return
    message = error_message(raw)
    if status == 401:
        raise UnauthorizedError(message, status_code=status)
    if status == 403:
        raise ForbiddenError(message, status_code=status)
    if status == 404:
        raise NotFoundError(message, status_code=status)
    if 400 <= status < 500:
        raise ValidationError(message, status_code=status)
    if status >= 500:
        raise ServerError(message, status_code=status)
    raise ApiError(f"Unexpected response: {message}", status_code=status)


def _decode(raw: RawResponse, codec: JsonCodec, target: Any) -> Any:
    try:
        return codec.decode(raw.body, target)
    except CodecError as exc:
        raise DecodeError(str(exc), cause=exc, status_code=raw.status_code) from exc


def interpret_many(raw: RawResponse, codec: JsonCodec, model: type[M]) -> list[M]:
    """Classify a collection response. An empty list is a success."""
    raise_for_status(raw)
    return _decode(raw, codec, list[model])  # type: ignore[valid-type]


def interpret_one(raw: RawResponse, codec: JsonCodec, model: type[M]) -> M:
    """Classify a single-resource response (create, update)."""
    raise_for_status(raw)
    return _decode(raw, codec, model)


def interpret_delete(raw: RawResponse) -> None:
    """Classify a delete response; success carries no body."""
    raise_for_status(raw)
    if raw.body.strip():
        raise DecodeError(
            f"Expected empty response to DELETE, got: {raw.text[:_MESSAGE_LIMIT]}",
            status_code=raw.status_code,
        )


def one_or_err(items: Sequence[M], name: str) -> M:
    """Return the only element of *items*.

    Raises:
        NotFoundError: If *items* is empty.
        AmbiguousResultError: If *items* holds more than one element.
    """
    if len(items) == 1:
        return items[0]
    if not items:
        raise NotFoundError(f"{name} not found")
    raise AmbiguousResultError(
        f"Type: {name}, Count: {len(items)} (expected 1)", count=len(items)
    )


def _api_network_error(exc: TransportError) -> Exception:
    return NetworkError(str(exc), cause=exc)


def _auth_network_error(exc: TransportError) -> Exception:
    return AuthNetworkError(f"Login request failed: {exc}", cause=exc)


def _json_headers(codec: JsonCodec) -> tuple[tuple[str, str], ...]:
    return (("Content-Type", codec.content_type), ("Accept", codec.content_type))


# ------------------------------------------------------------------ #
# Authentication
# ------------------------------------------------------------------ #


def login_operation(session: Session, credentials: Credentials) -> Operation[Token]:
    """POST the credentials to the login endpoint and decode the token."""
    codec = session.codec

    def interpret(raw: RawResponse) -> Token:
        if raw.is_success:
            try:
                return codec.decode(raw.body, Token)
            except CodecError as exc:
                raise AuthError(f"Login response did not carry a token: {exc}") from exc
        if 400 <= raw.status_code < 500:
            raise InvalidCredentialsError(
                f"Invalid username or password: {error_message(raw)}"
            )
        raise AuthError(f"Login failed: HTTP {raw.status_code}: {error_message(raw)}")

    request = Request(
        method="POST",
        path=Endpoint.LOGIN.path,
        body=codec.encode(credentials),
        headers=_json_headers(codec),
    )
    return Operation(request, interpret, _auth_network_error)


def validate_token_operation(session: Session, token: Token) -> Operation[Token]:
    """GET the validate endpoint with *token*; success returns the token."""

    def interpret(raw: RawResponse) -> Token:
        if raw.is_success:
            return token
        raise InvalidTokenError(
            f"Token rejected by server: HTTP {raw.status_code}: {error_message(raw)}"
        )

    request = Request(
        method="GET",
        path=Endpoint.VALIDATE.path,
        headers=(("Accept", session.codec.content_type),)
        + tuple(token.bearer_header().items()),
    )
    return Operation(request, interpret, _auth_network_error)


# ------------------------------------------------------------------ #
# Resources
# ------------------------------------------------------------------ #


def _require_token(session: Session) -> tuple[tuple[str, str], ...]:
    if not session.is_authenticated:
        raise InvalidUsageError("Resource requests require an authenticated session")
    return session.auth_headers()


def search_operation(
    session: Session,
    path: str,
    clauses: Iterable[FilterClause],
    model: type[M],
) -> Operation[list[M]]:
    """GET *path* with the clauses as ordered query parameters."""
    codec = session.codec
    request = Request(
        method="GET",
        path=path,
        params=to_query_params(clauses),
        headers=(("Accept", codec.content_type),) + _require_token(session),
    )
    return Operation(
        request, lambda raw: interpret_many(raw, codec, model), _api_network_error
    )


def create_operation(
    session: Session, path: str, payload: Payload, model: type[M]
) -> Operation[M]:
    """POST *payload* to the collection *path*."""
    codec = session.codec
    request = Request(
        method="POST",
        path=path,
        body=_encode(codec, payload),
        headers=_json_headers(codec) + _require_token(session),
    )
    return Operation(
        request, lambda raw: interpret_one(raw, codec, model), _api_network_error
    )


def update_operation(
    session: Session, path: str, resource_id: int, payload: Payload, model: type[M]
) -> Operation[M]:
    """PATCH *payload* onto ``<path><resource_id>``."""
    codec = session.codec
    request = Request(
        method="PATCH",
        path=f"{path}{resource_id}",
        body=_encode(codec, payload),
        headers=_json_headers(codec) + _require_token(session),
    )
    return Operation(
        request, lambda raw: interpret_one(raw, codec, model), _api_network_error
    )


def delete_operation(session: Session, path: str, resource_id: int) -> Operation[None]:
    """DELETE ``<path><resource_id>``."""
    request = Request(
        method="DELETE",
        path=f"{path}{resource_id}",
        headers=_require_token(session),
    )
    return Operation(request, interpret_delete, _api_network_error)


def _encode(codec: JsonCodec, payload: Optional[Payload]) -> bytes:
    if payload is None:
        raise InvalidUsageError("A payload is required")
    try:
        return codec.encode(payload)
    except CodecError as exc:
        raise InvalidUsageError(str(exc)) from exc
