"""Exception hierarchy for hubuum-client.

All exceptions inherit from :class:`HubuumError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`hubuum_client.exit_codes`. Library callers catch the specific
subclass they care about; the command-line entry point in
:func:`hubuum_client.app.main` catches ``HubuumError`` and exits with the
matching code.

Subclass hierarchy::

    HubuumError (exit 1)
    +-- InvalidUsageError            (exit 2)
    |   +-- InvalidBaseUrlError
    |   +-- InvalidFilterError
    |   +-- ClientStateError
    +-- ConfigError                  (exit 1)
    +-- TransportError               (exit 6)
    +-- CodecError                   (exit 7)
    +-- AuthError                    (exit 3)
    |   +-- InvalidCredentialsError
    |   +-- InvalidTokenError
    |   +-- AuthNetworkError         (exit 6)
    +-- ApiError                     (exit 1)
        +-- UnauthorizedError        (exit 3)
        +-- ForbiddenError           (exit 3)
        +-- NotFoundError            (exit 4)
        +-- AmbiguousResultError     (exit 8)
        +-- ValidationError          (exit 7)
        +-- ServerError              (exit 5)
        +-- NetworkError             (exit 6)
        +-- DecodeError              (exit 7)

:class:`TransportError` and :class:`CodecError` are raised by the
collaborators in :mod:`hubuum_client.transport` and
:mod:`hubuum_client.codec`. The client never lets them escape on their
own: they are always re-raised wrapped in an :class:`AuthError` or
:class:`ApiError` variant, with the original chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Optional

from hubuum_client.exit_codes import (
    EXIT_AMBIGUOUS_RESULT,
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_VALIDATION_ERROR,
)


class HubuumError(Exception):
    """Base exception for all hubuum-client errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`hubuum_client.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


# --- Local caller errors ---


class InvalidUsageError(HubuumError):
    """Raised when the caller uses the client in a way it does not support."""

    exit_code = EXIT_INVALID_USAGE


class InvalidBaseUrlError(InvalidUsageError, ValueError):
    """Raised when a base URL is malformed, relative, or uses a non-HTTP scheme."""


class InvalidFilterError(InvalidUsageError, ValueError):
    """Raised when a filter value cannot be encoded as a query parameter."""


class ClientStateError(InvalidUsageError):
    """Raised when an unauthenticated client handle is used after a successful login."""


class ConfigError(HubuumError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Collaborator errors ---


class TransportError(HubuumError):
    """Raised by a transport when a request could not be completed.

    The transport never interprets HTTP status codes; this is strictly a
    connection / timeout / protocol failure.
    """

    exit_code = EXIT_CONNECTION_ERROR


class CodecError(HubuumError):
    """Raised by the codec when a body cannot be encoded or decoded."""

    exit_code = EXIT_VALIDATION_ERROR


# --- Authentication errors ---


class AuthError(HubuumError):
    """Raised when a login attempt fails.

    Login failures are terminal: the caller must retry the login
    explicitly, nothing is retried automatically.
    """

    exit_code = EXIT_AUTH_FAILURE


class InvalidCredentialsError(AuthError):
    """Raised when the login endpoint rejects the username/password pair."""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a supplied token is malformed or rejected by the validate endpoint."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class AuthNetworkError(AuthError):
    """Raised when the login request could not reach the server.

    Args:
        message: Human-readable error description.
        cause: The underlying :class:`TransportError`.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


# --- API errors ---


class ApiError(HubuumError):
    """Raised when an authenticated API call fails.

    Args:
        message: Human-readable error description, usually the ``message``
            field of the server's error body.
        status_code: The HTTP status code, when the failure came from a
            response rather than from the client itself.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class UnauthorizedError(ApiError):
    """Raised on HTTP 401. The caller must log in again; tokens are never refreshed."""

    exit_code = EXIT_AUTH_FAILURE


class ForbiddenError(ApiError):
    """Raised on HTTP 403 (the token is valid but lacks the permission)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ApiError):
    """Raised on HTTP 404, or when a single-result query matched nothing."""

    exit_code = EXIT_NOT_FOUND


class AmbiguousResultError(ApiError):
    """Raised when a single-result query matched more than one resource.

    Args:
        message: Human-readable error description.
        count: How many resources matched.
    """

    exit_code = EXIT_AMBIGUOUS_RESULT

    def __init__(self, message: str, count: int):
        super().__init__(message)
        self.count = count


class ValidationError(ApiError):
    """Raised when the server rejects a payload or filter (HTTP 4xx other than 401/403/404)."""

    exit_code = EXIT_VALIDATION_ERROR


class ServerError(ApiError):
    """Raised when the API returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class NetworkError(ApiError):
    """Raised when an API request could not reach the server.

    Args:
        message: Human-readable error description.
        cause: The underlying :class:`TransportError`.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class DecodeError(ApiError):
    """Raised when a successful response body cannot be decoded into the expected model.

    Args:
        message: Human-readable error description.
        cause: The underlying :class:`CodecError`, if any.
        status_code: Status of the response whose body failed to decode.
    """

    exit_code = EXIT_VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.cause = cause
