"""Blocking Hubuum client.

This module provides the blocking half of the client:

- :class:`SyncClient` -- the unauthenticated client. Its only operations
  are :meth:`~SyncClient.login` and :meth:`~SyncClient.login_with_token`.
- :class:`AuthenticatedSyncClient` -- returned by a successful login;
  exposes the resource accessors (``classes()``, ``users()``, ...).
- :class:`Resource` -- CRUD operations on one collection.
- :class:`QueryBuilder` -- chainable filters with blocking terminal methods.

Because the two client states are distinct classes, calling a resource
accessor before logging in is an :class:`AttributeError` at runtime and a
type error for a static checker.

Each call occupies the calling thread until the transport returns. The
underlying :class:`httpx.Client` is thread-safe, so clones of an
authenticated client can be used from several threads at once.

See Also:
    :class:`~hubuum_client.client.async_client.AsyncClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

import httpx
from pydantic import BaseModel

from hubuum_client.auth import Authenticator
from hubuum_client.client.base import BaseQueryBuilder, BaseResource, ResourceAccessors
from hubuum_client.codec import Payload
from hubuum_client.exceptions import ClientStateError
from hubuum_client.protocol import execute
from hubuum_client.resources import ResourceType
from hubuum_client.session import Session
from hubuum_client.transport import DEFAULT_TIMEOUT, HttpxTransport, Transport
from hubuum_client.types import BaseUrl, Credentials, Token

if TYPE_CHECKING:
    from hubuum_client.models import Profile


class SyncClient:
    """Unauthenticated blocking client.

    Log in to obtain an :class:`AuthenticatedSyncClient`. A successful
    login consumes this handle: calling ``login*`` on it again raises
    :class:`~hubuum_client.exceptions.ClientStateError`. A failed login
    leaves it usable so the caller can try again.

    Args:
        base_url: Server URL, as a string or :class:`~hubuum_client.types.BaseUrl`.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional :class:`httpx.BaseTransport` to send requests
            through (e.g. :class:`httpx.MockTransport` in tests).

    Example::

        client = SyncClient("https://hubuum.example.com")
        with client.login(Credentials(username="admin", password="secret")) as hubuum:
            router = hubuum.classes().find().add_filter_name_exact("router") \\
                .execute_expecting_single_result()
    """

    def __init__(
        self,
        base_url: Union[str, BaseUrl],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        url = base_url if isinstance(base_url, BaseUrl) else BaseUrl(base_url)
        self._session: Session[Transport] = Session(
            base_url=url,
            transport=HttpxTransport(url, timeout=timeout, verify_ssl=verify_ssl, transport=transport),
        )
        self._consumed = False

    @classmethod
    def from_profile(
        cls, profile: Profile, transport: Optional[httpx.BaseTransport] = None
    ) -> SyncClient:
        """Build an unauthenticated client from a configuration profile."""
        return cls(
            profile.base_url,
            timeout=profile.request.timeout,
            verify_ssl=profile.request.verify_ssl,
            transport=transport,
        )

    @classmethod
    def _from_session(cls, session: Session[Transport]) -> SyncClient:
        client = cls.__new__(cls)
        client._session = session
        client._consumed = False
        return client

    @property
    def base_url(self) -> BaseUrl:
        return self._session.base_url

    def _ensure_usable(self) -> None:
        if self._consumed:
            raise ClientStateError(
                "This client has already logged in; use the authenticated client it returned"
            )

    def login(self, credentials: Credentials) -> AuthenticatedSyncClient:
        """Log in with username and password.

        Raises:
            ClientStateError: This handle was already consumed by a login.
            InvalidCredentialsError: The server rejected the credentials.
            AuthNetworkError: The server could not be reached.
        """
        self._ensure_usable()
        session = Authenticator(self._session).login(credentials)
        self._consumed = True
        return AuthenticatedSyncClient(session)

    def login_with_token(self, token: Union[Token, str]) -> AuthenticatedSyncClient:
        """Log in with an existing token, validating it against the server first.

        Raises:
            ClientStateError: This handle was already consumed by a login.
            InvalidTokenError: The server rejected the token.
            AuthNetworkError: The server could not be reached.
        """
        self._ensure_usable()
        if isinstance(token, str):
            token = Token(token=token)
        session = Authenticator(self._session).login_with_token(token)
        self._consumed = True
        return AuthenticatedSyncClient(session)

    def clone(self) -> SyncClient:
        """Return another handle sharing this client's session. No I/O."""
        self._ensure_usable()
        return self._from_session(self._session)

    __copy__ = clone

    def close(self) -> None:
        """Close the transport. Affects every handle sharing the session."""
        self._session.transport.close()

    def __enter__(self) -> SyncClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SyncClient({str(self.base_url)!r})"


class AuthenticatedSyncClient(ResourceAccessors["Resource"]):
    """Blocking client holding a validated token.

    Only obtainable from :meth:`SyncClient.login` or
    :meth:`SyncClient.login_with_token`. Accessor methods return a
    :class:`Resource` bound to one collection.

    Args:
        session: A session carrying a token.
    """

    def __init__(self, session: Session[Transport]) -> None:
        if not session.is_authenticated:
            raise ClientStateError("AuthenticatedSyncClient requires a session with a token")
        self._session = session

    @property
    def base_url(self) -> BaseUrl:
        return self._session.base_url

    @property
    def token(self) -> str:
        assert self._session.token is not None
        return self._session.token.token

    def _bind(self, resource_type: ResourceType, url_params: Mapping[str, Any]) -> Resource:
        return Resource(self._session, resource_type, url_params)

    def clone(self) -> AuthenticatedSyncClient:
        """Return another handle sharing this client's session and token. No I/O."""
        return AuthenticatedSyncClient(self._session)

    __copy__ = clone

    def close(self) -> None:
        """Close the transport. Affects every handle sharing the session."""
        self._session.transport.close()

    def __enter__(self) -> AuthenticatedSyncClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"AuthenticatedSyncClient({str(self.base_url)!r})"


class Resource(BaseResource):
    """Blocking CRUD and search operations on one collection."""

    def find(self) -> QueryBuilder:
        """Start a filtered search."""
        return QueryBuilder(self)

    def create(self, payload: Payload) -> Any:
        """Create a resource and return the server's representation of it.

        Args:
            payload: The resource type's post model, or a plain dict.

        Raises:
            ValidationError: The server rejected the payload.
            NetworkError: The server could not be reached.
        """
        return execute(self._session.transport, self._create_op(payload))

    def update(self, resource_id: int, payload: Payload) -> Any:
        """Apply *payload* to the resource with id *resource_id*."""
        return execute(self._session.transport, self._update_op(resource_id, payload))

    def delete(self, resource_id: int) -> None:
        execute(self._session.transport, self._delete_op(resource_id))

    def get(self, resource_id: int) -> Any:
        """Fetch the resource with id *resource_id*.

        Raises:
            NotFoundError: No such resource.
        """
        return self.find().add_filter_id(resource_id).execute_expecting_single_result()

    def select_by_name(self, name: str) -> Any:
        """Fetch the resource whose name field equals *name*."""
        return self.find().add_filter_name_exact(name).execute_expecting_single_result()

    def filter(self, params: Optional[BaseModel] = None, **fields: Any) -> list[Any]:
        """Search with equality filters taken from *params* and keyword arguments.

        Example::

            hubuum.classes().filter(ClassGet(namespace_id=3))
            hubuum.users().filter(username="admin")
        """
        return self.find().add_clauses(self._clauses_from(params, fields)).execute()

    def filter_expecting_single_result(
        self, params: Optional[BaseModel] = None, **fields: Any
    ) -> Any:
        return (
            self.find()
            .add_clauses(self._clauses_from(params, fields))
            .execute_expecting_single_result()
        )


class QueryBuilder(BaseQueryBuilder):
    """Chainable filters with blocking terminal methods.

    Example::

        classes = (
            hubuum.classes()
            .find()
            .add_filter_equals("namespace_id", 3)
            .add_filter_contains("name", "rout")
            .execute()
        )
    """

    def execute(self) -> list[Any]:
        """Run the search. No matches is an empty list, not an error."""
        return execute(self._resource._session.transport, self._search_op())

    def execute_expecting_single_result(self) -> Any:
        """Run the search and return its only match.

        Raises:
            NotFoundError: Nothing matched.
            AmbiguousResultError: More than one resource matched.
        """
        return self._single(self.execute())
