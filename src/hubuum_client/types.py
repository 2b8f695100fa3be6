"""Immutable value types validated at construction.

- :class:`BaseUrl` -- absolute ``http``/``https`` URL of the Hubuum server,
  normalised to end with exactly one ``/``.
- :class:`Credentials` -- username/password pair sent to the login
  endpoint. Consumed by login and never retained by a client.
- :class:`Token` -- opaque bearer token, in the wire shape of the login
  response (``{"token": "..."}``).

``Credentials`` and ``Token`` are Pydantic models so that they serialise
to and from the login wire format directly; invalid input raises
:class:`pydantic.ValidationError` (a :class:`ValueError`).
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hubuum_client.exceptions import InvalidBaseUrlError

_ALLOWED_SCHEMES = ("http", "https")


class BaseUrl:
    """A validated absolute base URL.

    Example::

        >>> str(BaseUrl("https://hubuum.example.com"))
        'https://hubuum.example.com/'
        >>> BaseUrl("https://hubuum.example.com/prefix").join("/api/v1/classes/")
        'https://hubuum.example.com/prefix/api/v1/classes/'

    Args:
        url: The URL string to validate.

    Raises:
        InvalidBaseUrlError: If *url* is not absolute, has no host, uses a
            scheme other than ``http``/``https``, or carries a query string
            or fragment.
    """

    __slots__ = ("_url",)

    def __init__(self, url: str) -> None:
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise InvalidBaseUrlError(f"Invalid URL: {url!r} ({exc})") from exc

        if parsed.scheme not in _ALLOWED_SCHEMES:
            raise InvalidBaseUrlError(f"Invalid URL scheme: {parsed.scheme or '<none>'}")
        if not parsed.host:
            raise InvalidBaseUrlError(f"URL has no host: {url!r}")
        if parsed.query or parsed.fragment:
            raise InvalidBaseUrlError(f"URL cannot be a base: {url!r}")

        path = parsed.path
        if not path.endswith("/"):
            path = f"{path}/"
        self._url = str(parsed.copy_with(path=path))

    def join(self, path: str) -> str:
        """Return the absolute URL for an endpoint *path* below this base."""
        return f"{self._url}{path.lstrip('/')}"

    @property
    def host(self) -> str:
        return httpx.URL(self._url).host

    def __str__(self) -> str:
        return self._url

    def __repr__(self) -> str:
        return f"BaseUrl({self._url!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BaseUrl):
            return self._url == other._url
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._url)

    def __setattr__(self, name: str, value: object) -> None:
        if hasattr(self, "_url"):
            raise AttributeError("BaseUrl is immutable")
        object.__setattr__(self, name, value)


class Credentials(BaseModel):
    """Username and password for the login endpoint.

    The password is excluded from ``repr()`` so credentials do not leak
    into tracebacks or debug logs.

    Example::

        Credentials(username="admin", password="secret")
    """

    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1)
    password: str = Field(min_length=1, repr=False)

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("username must not be blank")
        return value


class Token(BaseModel):
    """An opaque bearer token.

    Produced by a successful credential login, or supplied directly by the
    caller for :meth:`~hubuum_client.client.SyncClient.login_with_token`.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1, repr=False)

    @field_validator("token")
    @classmethod
    def _token_is_single_word(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError("token must not contain whitespace")
        return value

    def bearer_header(self) -> dict[str, str]:
        """Return the ``Authorization`` header carrying this token."""
        return {"Authorization": f"Bearer {self.token}"}
