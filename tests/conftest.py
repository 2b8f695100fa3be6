"""Shared test fixtures for hubuum-client.

Provides a scriptable fake Hubuum server (served through
:class:`httpx.MockTransport`), resource JSON builders, isolated config
environments, and output-state management. These fixtures are
automatically discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union
from urllib.parse import parse_qsl

import httpx
import pytest

from hubuum_client.output import OutputFormat, OutputManager, reset_output, set_output

BASE_URL = "https://hubuum.example.com"
TOKEN = "tok-abc123"
TIMESTAMP = "2024-05-01T12:00:00"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the library logger after every test.

    Both cache references to sys.stdout/sys.stderr. When Typer's CliRunner
    redirects those streams and the test finishes, the cached references
    become stale, so they are dropped here.
    """
    yield
    reset_output()
    logger = logging.getLogger("hubuum_client")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Resource JSON builders
# ---------------------------------------------------------------------------


def class_json(id: int, name: str = "router", namespace_id: int = 1, **extra: Any) -> dict[str, Any]:
    data = {
        "id": id,
        "name": name,
        "description": f"{name} class",
        "namespace_id": namespace_id,
        "json_schema": None,
        "validate_schema": False,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }
    data.update(extra)
    return data


def user_json(id: int, username: str = "admin", **extra: Any) -> dict[str, Any]:
    data = {
        "id": id,
        "username": username,
        "email": f"{username}@example.com",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }
    data.update(extra)
    return data


def group_json(id: int, groupname: str = "admins") -> dict[str, Any]:
    return {
        "id": id,
        "groupname": groupname,
        "description": f"{groupname} group",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def namespace_json(id: int, name: str = "default") -> dict[str, Any]:
    return {
        "id": id,
        "name": name,
        "description": f"{name} namespace",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def object_json(id: int, class_id: int, name: str = "web01", data: Any = None) -> dict[str, Any]:
    return {
        "id": id,
        "name": name,
        "namespace_id": 1,
        "hubuum_class_id": class_id,
        "description": f"{name} object",
        "data": data,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


# ---------------------------------------------------------------------------
# Fake server
# ---------------------------------------------------------------------------

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response], Exception]


class FakeHubuum:
    """Routes requests by ``(METHOD, path)`` to scripted replies and records them.

    A route's reply may be an :class:`httpx.Response`, a callable taking
    the request, or an exception instance to raise (simulating a
    transport failure). Unrouted requests get a 404 with a JSON message.

    The login and validate endpoints are pre-routed to succeed with
    :data:`TOKEN`; tests override them with :meth:`route` as needed.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Reply] = {}
        self.requests: list[httpx.Request] = []
        self.route("POST", "/api/v0/auth/login", json_reply({"token": TOKEN}))
        self.route("GET", "/api/v0/auth/validate", self._validate)

    def route(self, method: str, path: str, reply: Reply) -> None:
        self.routes[(method.upper(), path)] = reply

    def _validate(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") == f"Bearer {TOKEN}":
            return httpx.Response(200)
        return json_reply({"message": "Invalid token"}, 401)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return json_reply({"message": f"No route for {request.url.path}"}, 404)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        # httpx binds a returned response to its request, so every call
        # gets a fresh copy of the scripted one.
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def resource_requests(self) -> list[httpx.Request]:
        """Recorded requests other than login and token validation."""
        return [r for r in self.requests if not r.url.path.startswith("/api/v0/auth/")]


def json_reply(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


def query_pairs(request: httpx.Request) -> list[tuple[str, str]]:
    """The request's query parameters, in order."""
    return parse_qsl(request.url.query.decode("ascii"), keep_blank_values=True)


def body_json(request: httpx.Request) -> Optional[Any]:
    content = request.read()
    return json.loads(content) if content else None


@pytest.fixture
def server() -> FakeHubuum:
    return FakeHubuum()


@pytest.fixture
def hubuum(server: FakeHubuum):
    """An authenticated blocking client talking to :func:`server`."""
    from hubuum_client import Credentials, SyncClient

    client = SyncClient(BASE_URL, transport=server.transport)
    authed = client.login(Credentials(username="admin", password="secret"))
    yield authed
    authed.close()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME to a subdirectory of tmp_path so that tests never
    touch real user config, clears the HUBUUM_* environment variables, and
    changes the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr("hubuum_client.config._is_xdg_platform", lambda: True)
    for var in ["HUBUUM_PROFILE", "HUBUUM_BASE_URL", "HUBUUM_PASSWORD", "HUBUUM_TOKEN"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
