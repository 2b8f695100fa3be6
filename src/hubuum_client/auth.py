"""Login protocol -- turn credentials or a token into an authenticated session.

:class:`Authenticator` (blocking) and :class:`AsyncAuthenticator` run the
same two protocols from :mod:`hubuum_client.protocol`:

1. **Credential login** -- ``POST /api/v0/auth/login`` with username and
   password; the response carries the bearer token.
2. **Token login** -- the supplied token is validated eagerly with
   ``GET /api/v0/auth/validate`` before an authenticated session is
   produced, so a bad token fails here with
   :class:`~hubuum_client.exceptions.InvalidTokenError` rather than on the
   first resource call.

Both return a new :class:`~hubuum_client.session.Session` carrying the
token; the credentials are not stored anywhere.
"""

from __future__ import annotations

from hubuum_client.protocol import (
    execute,
    execute_async,
    login_operation,
    validate_token_operation,
)
from hubuum_client.session import Session
from hubuum_client.transport import AsyncTransport, Transport
from hubuum_client.types import Credentials, Token


class Authenticator:
    """Blocking login protocol runner.

    Args:
        session: An unauthenticated session whose transport will carry
            the login request.
    """

    def __init__(self, session: Session[Transport]) -> None:
        self._session = session

    def login(self, credentials: Credentials) -> Session[Transport]:
        """Exchange *credentials* for a token.

        Raises:
            InvalidCredentialsError: The server rejected the credentials.
            AuthNetworkError: The login request could not be sent.
            AuthError: Any other login failure.
        """
        token = execute(self._session.transport, login_operation(self._session, credentials))
        return self._session.with_token(token)

    def login_with_token(self, token: Token) -> Session[Transport]:
        """Validate *token* against the server and attach it to the session.

        Raises:
            InvalidTokenError: The server rejected the token.
            AuthNetworkError: The validation request could not be sent.
        """
        execute(self._session.transport, validate_token_operation(self._session, token))
        return self._session.with_token(token)


class AsyncAuthenticator:
    """Async login protocol runner; see :class:`Authenticator`."""

    def __init__(self, session: Session[AsyncTransport]) -> None:
        self._session = session

    async def login(self, credentials: Credentials) -> Session[AsyncTransport]:
        token = await execute_async(
            self._session.transport, login_operation(self._session, credentials)
        )
        return self._session.with_token(token)

    async def login_with_token(self, token: Token) -> Session[AsyncTransport]:
        await execute_async(
            self._session.transport, validate_token_operation(self._session, token)
        )
        return self._session.with_token(token)
