"""Async Hubuum client.

Mirror of :mod:`hubuum_client.client.sync_client` where every operation
that touches the network is a coroutine. Requests are built by the same
:mod:`hubuum_client.protocol` functions, so for identical inputs both
flavors send byte-identical requests and raise the same errors.

Accessors and ``add_filter*`` calls do no I/O and are plain methods::

    async with await AsyncClient(url).login(credentials) as hubuum:
        routers = await hubuum.classes().find().add_filter_contains("name", "rout").execute()

Uses :class:`httpx.AsyncClient` under the hood.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

import httpx
from pydantic import BaseModel

from hubuum_client.auth import AsyncAuthenticator
from hubuum_client.client.base import BaseQueryBuilder, BaseResource, ResourceAccessors
from hubuum_client.codec import Payload
from hubuum_client.exceptions import ClientStateError
from hubuum_client.protocol import execute_async
from hubuum_client.resources import ResourceType
from hubuum_client.session import Session
from hubuum_client.transport import DEFAULT_TIMEOUT, AsyncHttpxTransport, AsyncTransport
from hubuum_client.types import BaseUrl, Credentials, Token

if TYPE_CHECKING:
    from hubuum_client.models import Profile


class AsyncClient:
    """Unauthenticated async client.

    Same contract as :class:`~hubuum_client.client.sync_client.SyncClient`,
    with ``login`` and ``login_with_token`` as coroutines.

    Args:
        base_url: Server URL, as a string or :class:`~hubuum_client.types.BaseUrl`.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional :class:`httpx.AsyncBaseTransport`.
    """

    def __init__(
        self,
        base_url: Union[str, BaseUrl],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        url = base_url if isinstance(base_url, BaseUrl) else BaseUrl(base_url)
        self._session: Session[AsyncTransport] = Session(
            base_url=url,
            transport=AsyncHttpxTransport(
                url, timeout=timeout, verify_ssl=verify_ssl, transport=transport
            ),
        )
        self._consumed = False

    @classmethod
    def from_profile(
        cls, profile: Profile, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> AsyncClient:
        return cls(
            profile.base_url,
            timeout=profile.request.timeout,
            verify_ssl=profile.request.verify_ssl,
            transport=transport,
        )

    @classmethod
    def _from_session(cls, session: Session[AsyncTransport]) -> AsyncClient:
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

    async def login(self, credentials: Credentials) -> AuthenticatedAsyncClient:
        """Log in with username and password.

        Raises:
            ClientStateError: This handle was already consumed by a login.
            InvalidCredentialsError: The server rejected the credentials.
            AuthNetworkError: The server could not be reached.
        """
        self._ensure_usable()
        session = await AsyncAuthenticator(self._session).login(credentials)
        self._consumed = True
        return AuthenticatedAsyncClient(session)

    async def login_with_token(self, token: Union[Token, str]) -> AuthenticatedAsyncClient:
        """Log in with an existing token, validating it against the server first."""
        self._ensure_usable()
        if isinstance(token, str):
            token = Token(token=token)
        session = await AsyncAuthenticator(self._session).login_with_token(token)
        self._consumed = True
        return AuthenticatedAsyncClient(session)

    def clone(self) -> AsyncClient:
        self._ensure_usable()
        return self._from_session(self._session)

    __copy__ = clone

    async def aclose(self) -> None:
        await self._session.transport.aclose()

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"AsyncClient({str(self.base_url)!r})"


class AuthenticatedAsyncClient(ResourceAccessors["AsyncResource"]):
    """Async client holding a validated token.

    Clones share the session, so they may run requests concurrently as
    separate tasks on one event loop.
    """

    def __init__(self, session: Session[AsyncTransport]) -> None:
        if not session.is_authenticated:
            raise ClientStateError("AuthenticatedAsyncClient requires a session with a token")
        self._session = session

    @property
    def base_url(self) -> BaseUrl:
        return self._session.base_url

    @property
    def token(self) -> str:
        assert self._session.token is not None
        return self._session.token.token

    def _bind(self, resource_type: ResourceType, url_params: Mapping[str, Any]) -> AsyncResource:
        return AsyncResource(self._session, resource_type, url_params)

    def clone(self) -> AuthenticatedAsyncClient:
        return AuthenticatedAsyncClient(self._session)

    __copy__ = clone

    async def aclose(self) -> None:
        """Close the transport. Affects every handle sharing the session."""
        await self._session.transport.aclose()

    async def __aenter__(self) -> AuthenticatedAsyncClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"AuthenticatedAsyncClient({str(self.base_url)!r})"


class AsyncResource(BaseResource):
    """Async CRUD and search operations on one collection."""

    def find(self) -> AsyncQueryBuilder:
        return AsyncQueryBuilder(self)

    async def create(self, payload: Payload) -> Any:
        return await execute_async(self._session.transport, self._create_op(payload))

    async def update(self, resource_id: int, payload: Payload) -> Any:
        return await execute_async(
            self._session.transport, self._update_op(resource_id, payload)
        )

    async def delete(self, resource_id: int) -> None:
        await execute_async(self._session.transport, self._delete_op(resource_id))

    async def get(self, resource_id: int) -> Any:
        return await self.find().add_filter_id(resource_id).execute_expecting_single_result()

    async def select_by_name(self, name: str) -> Any:
        return await self.find().add_filter_name_exact(name).execute_expecting_single_result()

    async def filter(self, params: Optional[BaseModel] = None, **fields: Any) -> list[Any]:
        return await self.find().add_clauses(self._clauses_from(params, fields)).execute()

    async def filter_expecting_single_result(
        self, params: Optional[BaseModel] = None, **fields: Any
    ) -> Any:
        return await (
            self.find()
            .add_clauses(self._clauses_from(params, fields))
            .execute_expecting_single_result()
        )


class AsyncQueryBuilder(BaseQueryBuilder):
    """Chainable filters with awaitable terminal methods."""

    async def execute(self) -> list[Any]:
        return await execute_async(self._resource._session.transport, self._search_op())

    async def execute_expecting_single_result(self) -> Any:
        """Run the search and return its only match.

        Raises:
            NotFoundError: Nothing matched.
            AmbiguousResultError: More than one resource matched.
        """
        return self._single(await self.execute())
