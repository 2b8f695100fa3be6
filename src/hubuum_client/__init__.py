"""hubuum_client -- typed client for the Hubuum resource-management API.

Authenticate once, then run filterable CRUD operations against the
server's collections (classes, objects, relations, namespaces, users,
groups) without building URLs or query strings by hand. Every operation
is available in a blocking and an ``async`` flavor.

Typical use::

    from hubuum_client import Credentials, SyncClient

    client = SyncClient("https://hubuum.example.com")
    hubuum = client.login(Credentials(username="admin", password="secret"))
    router = hubuum.classes().select_by_name("router")

Modules:
    client: Client state machine, resource accessors, query builders.
    protocol: Request construction and response classification.
    filters: Filter operators and clauses.
    resources: Resource types and their pydantic models.
    exceptions: Exception hierarchy with exit-code mapping.
    config: XDG-aware configuration and profile management.
    app: Typer command-line front end.
"""

from hubuum_client.client import (
    AsyncClient,
    AuthenticatedAsyncClient,
    AuthenticatedSyncClient,
    SyncClient,
)
from hubuum_client.exceptions import ApiError, AuthError, HubuumError
from hubuum_client.filters import FilterOperator
from hubuum_client.types import BaseUrl, Credentials, Token

__version__ = "0.1.0"

__all__ = [
    "SyncClient",
    "AuthenticatedSyncClient",
    "AsyncClient",
    "AuthenticatedAsyncClient",
    "BaseUrl",
    "Credentials",
    "Token",
    "FilterOperator",
    "HubuumError",
    "AuthError",
    "ApiError",
]
