"""Typer application and CLI entry point for hubuum-client.

This module wires together the top-level Typer application and registers
the built-in commands (``login``, ``find``, ``delete``, ``resources`` and
the ``config`` group).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app;
a :class:`~hubuum_client.exceptions.HubuumError` that escapes a command is
reported on stderr and turned into the error's exit code.

See Also:
    :mod:`hubuum_client.config`: Profile and global configuration resolution.
    :mod:`hubuum_client.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from hubuum_client import __version__
from hubuum_client.commands.config import config_app
from hubuum_client.commands.resources import (
    delete_command,
    find_command,
    login_command,
    resources_command,
)
from hubuum_client.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="hubuum-client",
    help="Query and manage resources on a Hubuum server.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("login")(login_command)
app.command("find")(find_command)
app.command("delete")(delete_command)
app.command("resources")(resources_command)
app.add_typer(config_app, name="config", help="Profile and configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hubuum-client {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Server URL; overrides the profile's."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output, including HTTP requests."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~hubuum_client.output.OutputManager`,
    routes library logging to stderr, and stores the profile and base URL
    overrides in ``ctx.obj`` for the sub-commands. Entries already present
    in ``ctx.obj`` (such as a test transport) are kept.
    """
    from hubuum_client.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["base_url"] = base_url
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``hubuum-client`` console script.

    Unhandled :class:`~hubuum_client.exceptions.HubuumError` instances
    cause a clean exit with the error's ``exit_code``; anything else is
    reported and exits with a generic failure.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from hubuum_client.exceptions import HubuumError
        from hubuum_client.output import error

        if isinstance(exc, HubuumError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {type(exc).__name__}: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
