"""Resource commands -- log in, search, and delete against the active profile.

Provides the top-level ``login``, ``find``, ``delete`` and ``resources``
commands. Each command resolves the active profile through
:func:`~hubuum_client.config.resolve_config`, logs in with the profile's
credential sources, and runs one client operation.

Typical workflow::

    hubuum-client config add prod https://hubuum.example.com --username admin
    hubuum-client login
    hubuum-client find classes --filter name__icontains=rout
    hubuum-client find objects --class-id 3 --filter name=web01 --single
    hubuum-client delete namespaces 12
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import typer

from hubuum_client.commands import fail
from hubuum_client.exceptions import ConfigError, HubuumError
from hubuum_client.output import debug, print_resources, print_table, success

if TYPE_CHECKING:
    from hubuum_client.client import AuthenticatedSyncClient, Resource, SyncClient
    from hubuum_client.models import Profile
    from hubuum_client.resources import ResourceType


def _resolve_profile(ctx: typer.Context) -> Profile:
    from hubuum_client.config import resolve_config

    obj = ctx.obj or {}
    _, profile = resolve_config(
        cli_profile=obj.get("profile"), cli_base_url=obj.get("base_url")
    )
    if profile is None:
        raise ConfigError(
            "No profile selected. Use --profile, --base-url, or 'hubuum-client config add'."
        )
    return profile


def open_client(ctx: typer.Context) -> AuthenticatedSyncClient:
    """Log in with the active profile and return the authenticated client.

    A profile with ``token_source`` logs in with that token; otherwise the
    profile's ``username`` and ``password_source`` (default ``prompt``) are
    used.

    Raises:
        ConfigError: No profile is active, or it names no way to log in.
        AuthError: The server rejected the login.
    """
    from hubuum_client.client import SyncClient

    profile = _resolve_profile(ctx)
    transport = (ctx.obj or {}).get("transport")
    debug(f"Using profile '{profile.name}' at {profile.base_url}")
    client = SyncClient.from_profile(profile, transport=transport)
    try:
        return _login(client, profile)
    except HubuumError:
        client.close()
        raise


def _login(client: SyncClient, profile: Profile) -> AuthenticatedSyncClient:
    from hubuum_client.config import resolve_credential
    from hubuum_client.types import Credentials, Token

    if profile.token_source:
        secret = resolve_credential(profile.token_source, prompt="Token: ")
        try:
            token = Token(token=secret)
        except ValueError as exc:
            raise ConfigError(f"Invalid token for profile '{profile.name}': {exc}") from exc
        return client.login_with_token(token)

    if not profile.username:
        raise ConfigError(
            f"Profile '{profile.name}' has neither a username nor a token_source"
        )
    password = resolve_credential(profile.password_source or "prompt", prompt="Password: ")
    try:
        credentials = Credentials(username=profile.username, password=password)
    except ValueError as exc:
        raise ConfigError(f"Invalid credentials for profile '{profile.name}': {exc}") from exc
    return client.login(credentials)


def _lookup(resource_name: str) -> ResourceType:
    from hubuum_client.exceptions import InvalidUsageError
    from hubuum_client.resources import RESOURCE_TYPES

    try:
        return RESOURCE_TYPES[resource_name]
    except KeyError:
        known = ", ".join(RESOURCE_TYPES)
        raise InvalidUsageError(
            f"Unknown resource '{resource_name}'. Known resources: {known}"
        ) from None


def _bind(
    client: AuthenticatedSyncClient, resource_name: str, class_id: Optional[int]
) -> Resource:
    from hubuum_client.exceptions import InvalidUsageError

    resource_type = _lookup(resource_name)
    url_params: dict[str, Any] = {}
    if "class_id" in resource_type.url_params:
        if class_id is None:
            raise InvalidUsageError(f"'{resource_name}' requires --class-id")
        url_params["class_id"] = class_id
    return client.resource(resource_type, **url_params)


def login_command(ctx: typer.Context) -> None:
    """Log in with the active profile and report the result.

    Exits with code 3 if the server rejects the credentials or token.

    Example::

        hubuum-client --profile prod login
    """
    try:
        with open_client(ctx) as client:
            success(f"Logged in to {client.base_url}")
    except HubuumError as exc:
        raise fail(exc) from None


def find_command(
    ctx: typer.Context,
    resource: str = typer.Argument(help="Resource name, e.g. classes or users."),
    filters: Optional[list[str]] = typer.Option(
        None,
        "--filter",
        "-F",
        help="Filter as FIELD=VALUE or FIELD__OP=VALUE; repeatable.",
    ),
    single: bool = typer.Option(
        False, "--single", "-s", help="Require exactly one result."
    ),
    class_id: Optional[int] = typer.Option(
        None, "--class-id", help="Owning class id (objects only)."
    ),
) -> None:
    """Search a resource collection.

    Filters are combined with AND and sent in the order given. With
    ``--single`` the command fails with exit code 4 when nothing matches
    and 8 when more than one resource matches.

    Example::

        hubuum-client find classes --filter name__icontains=rout
        hubuum-client --json find users --filter username=admin --single
    """
    from hubuum_client.filters import parse_filter_expression

    try:
        clauses = tuple(parse_filter_expression(f) for f in filters or [])
        with open_client(ctx) as client:
            builder = _bind(client, resource, class_id).find().add_clauses(clauses)
            if single:
                items = [builder.execute_expecting_single_result()]
            else:
                items = builder.execute()
    except HubuumError as exc:
        raise fail(exc) from None
    print_resources(items, title=resource)


def delete_command(
    ctx: typer.Context,
    resource: str = typer.Argument(help="Resource name, e.g. classes or users."),
    resource_id: int = typer.Argument(help="Id of the resource to delete."),
    class_id: Optional[int] = typer.Option(
        None, "--class-id", help="Owning class id (objects only)."
    ),
) -> None:
    """Delete one resource by id.

    Example::

        hubuum-client delete namespaces 12
    """
    try:
        with open_client(ctx) as client:
            _bind(client, resource, class_id).delete(resource_id)
    except HubuumError as exc:
        raise fail(exc) from None
    success(f"Deleted {resource} {resource_id}")


def resources_command() -> None:
    """List the resource names accepted by ``find`` and ``delete``."""
    from hubuum_client.resources import RESOURCE_TYPES

    rows = [
        [rt.name, rt.path, rt.name_field, ", ".join(rt.url_params)]
        for rt in RESOURCE_TYPES.values()
    ]
    print_table(["resource", "path", "name field", "url params"], rows, title="Resources")
