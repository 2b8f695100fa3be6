"""Session -- the shared handle behind every client.

A :class:`Session` bundles the server's base URL, the transport, the codec
and (after login) the bearer token. It is immutable: logging in produces
a *new* session via :meth:`Session.with_token` that shares the same
transport object. Cloning a client copies the reference to its session,
so clones never open new connections and always see the same token.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Generic, Optional, TypeVar, Union

from hubuum_client.codec import JsonCodec
from hubuum_client.transport import AsyncTransport, Transport
from hubuum_client.types import BaseUrl, Token

TransportT = TypeVar("TransportT", bound=Union[Transport, AsyncTransport])


@dataclass(frozen=True)
class Session(Generic[TransportT]):
    """Base URL, transport, codec and optional token.

    Attributes:
        base_url: The validated server URL.
        transport: Blocking or async transport; shared by every clone.
        codec: Body codec.
        token: The bearer token, ``None`` until login succeeds.
    """

    base_url: BaseUrl
    transport: TransportT
    codec: JsonCodec = field(default_factory=JsonCodec)
    token: Optional[Token] = field(default=None, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def with_token(self, token: Token) -> Session[TransportT]:
        """Return a session carrying *token* and sharing this transport."""
        return replace(self, token=token)

    def auth_headers(self) -> tuple[tuple[str, str], ...]:
        if self.token is None:
            return ()
        return tuple(self.token.bearer_header().items())
