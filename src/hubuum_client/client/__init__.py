"""Client state machine, resource accessors and query builders.

Two flavors share one request-construction layer
(:mod:`hubuum_client.protocol`):

Classes:
    :class:`SyncClient` -- unauthenticated, blocking; ``login`` returns an
        :class:`AuthenticatedSyncClient`.
    :class:`AsyncClient` -- unauthenticated, async; ``await login`` returns an
        :class:`AuthenticatedAsyncClient`.

Only the authenticated classes expose resource accessors, so querying
before logging in cannot be expressed.

Example::

    from hubuum_client.client import SyncClient

    with SyncClient(url).login(credentials) as hubuum:
        users = hubuum.users().find().add_filter_contains("username", "adm").execute()
"""

from hubuum_client.client.async_client import (
    AsyncClient,
    AsyncQueryBuilder,
    AsyncResource,
    AuthenticatedAsyncClient,
)
from hubuum_client.client.sync_client import (
    AuthenticatedSyncClient,
    QueryBuilder,
    Resource,
    SyncClient,
)

__all__ = [
    "SyncClient",
    "AuthenticatedSyncClient",
    "Resource",
    "QueryBuilder",
    "AsyncClient",
    "AuthenticatedAsyncClient",
    "AsyncResource",
    "AsyncQueryBuilder",
]
