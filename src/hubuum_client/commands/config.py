"""Config commands -- manage profiles and the global configuration.

Provides the ``hubuum-client config`` sub-command group. Profiles are
stored one JSON file per server in the config directory; the global
config records which profile is the default.
"""

from __future__ import annotations

from typing import Optional

import typer

from hubuum_client.commands import fail
from hubuum_client.exceptions import ConfigError, HubuumError
from hubuum_client.output import error, format_response, info, print_table, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the global configuration and the active profile.

    Example::

        hubuum-client config show
        hubuum-client --json config show
    """
    from hubuum_client.config import get_config_dir, list_profiles, resolve_config

    obj = ctx.obj or {}
    try:
        config, profile = resolve_config(
            cli_profile=obj.get("profile"), cli_base_url=obj.get("base_url")
        )
    except HubuumError as exc:
        raise fail(exc) from None

    info(f"Config directory: {get_config_dir()}")
    format_response(
        {
            "config": config.model_dump(mode="json"),
            "active_profile": profile.model_dump(mode="json") if profile else None,
            "profiles": list_profiles(),
        }
    )


@config_app.command("list")
def config_list() -> None:
    """List stored profiles."""
    from hubuum_client.config import list_profiles, load_global_config, load_profile

    default = load_global_config().default_profile
    rows = []
    for name in list_profiles():
        try:
            profile = load_profile(name)
        except ConfigError as exc:
            error(str(exc))
            continue
        rows.append([name, profile.base_url, profile.username or "", "*" if name == default else ""])
    print_table(["name", "base_url", "username", "default"], rows, title="Profiles")


@config_app.command("add")
def config_add(
    name: str = typer.Argument(help="Profile name."),
    base_url: str = typer.Argument(help="Server URL, e.g. https://hubuum.example.com"),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Login username."),
    password_source: Optional[str] = typer.Option(
        None, "--password-source", help="Password source: env:VAR, file:/path, prompt."
    ),
    token_source: Optional[str] = typer.Option(
        None, "--token-source", help="Token source: env:VAR, file:/path, prompt."
    ),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds."),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS verification."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create or replace a profile.

    Secrets are never written to the profile; only their source
    descriptors are.

    Example::

        hubuum-client config add prod https://hubuum.example.com \\
            --username admin --password-source env:HUBUUM_PASSWORD
    """
    from hubuum_client.config import profile_exists, save_profile
    from hubuum_client.models import Profile, RequestConfig

    try:
        if profile_exists(name) and not force:
            error(f"Profile '{name}' already exists. Use --force to replace it.")
            raise typer.Exit(code=2)
        profile = Profile(
            name=name,
            base_url=base_url,
            username=username,
            password_source=password_source,
            token_source=token_source,
            request=RequestConfig(timeout=timeout, verify_ssl=not insecure),
        )
        save_profile(profile)
    except ValueError as exc:
        error(f"Invalid profile: {exc}")
        raise typer.Exit(code=2) from None
    except HubuumError as exc:
        raise fail(exc) from None
    success(f"Saved profile '{name}' ({profile.base_url})")


@config_app.command("remove")
def config_remove(
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Delete a profile, clearing it as the default if it was one."""
    from hubuum_client.config import delete_profile, load_global_config, save_global_config

    try:
        delete_profile(name)
        config = load_global_config()
        if config.default_profile == name:
            config.default_profile = None
            save_global_config(config)
    except HubuumError as exc:
        raise fail(exc) from None
    success(f"Removed profile '{name}'")


@config_app.command("use")
def config_use(
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Make *name* the default profile."""
    from hubuum_client.config import load_global_config, profile_exists, save_global_config

    try:
        if not profile_exists(name):
            raise ConfigError(f"Profile '{name}' not found")
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)
    except HubuumError as exc:
        raise fail(exc) from None
    success(f"Default profile is now '{name}'")
