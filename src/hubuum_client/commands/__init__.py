"""Built-in CLI commands registered on the root app by :func:`hubuum_client.app.main`."""

from __future__ import annotations

import typer

from hubuum_client.exceptions import HubuumError
from hubuum_client.output import error


def fail(exc: HubuumError) -> typer.Exit:
    """Report *exc* on stderr and return the ``typer.Exit`` carrying its exit code."""
    error(str(exc))
    return typer.Exit(code=exc.exit_code)
