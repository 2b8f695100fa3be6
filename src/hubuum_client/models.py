"""Configuration models shared by the config layer, the clients and the CLI.

These are serialised as JSON in the user's config directory:
:class:`RequestConfig`, :class:`OutputConfig`, :class:`GlobalConfig`, and
:class:`Profile`.

Resource payload models (``Class``, ``User``, ...) live in
:mod:`hubuum_client.resources` instead; they describe the server's data,
not the client's settings.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hubuum_client.types import BaseUrl


class RequestConfig(BaseModel):
    """HTTP settings applied to every request made with a profile."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/hubuum-client/config.json``.

    Fields here have the lowest precedence; see
    :func:`~hubuum_client.config.resolve_config` for the full chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """Connection settings for one Hubuum server.

    Secrets are never stored in a profile. ``password_source`` and
    ``token_source`` are source descriptors resolved at login time by
    :func:`~hubuum_client.config.resolve_credential`, e.g.
    ``"env:HUBUUM_PASSWORD"`` or ``"file:~/.hubuum-token"``.

    Example::

        Profile(
            name="prod",
            base_url="https://hubuum.example.com",
            username="admin",
            password_source="prompt",
        )
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    base_url: str = Field(description="Server URL (http or https)")
    username: Optional[str] = None
    password_source: Optional[str] = Field(
        default=None, description="Credential source: env:VAR, file:/path, prompt"
    )
    token_source: Optional[str] = Field(
        default=None, description="Token source: env:VAR, file:/path, prompt"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        # InvalidBaseUrlError is a ValueError, so pydantic reports it as a
        # validation error.
        return str(BaseUrl(value))
