"""
Authentication methods for socks5auth.

Each authenticator owns the byte exchange for one SOCKS5 method code, starting
with the method-selection reply.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from .constants import SOCKS_VERSION, USER_AUTH_VERSION, AuthMethod, AuthStatus
from .context import AuthContext
from .credentials import CredentialStore, Identity
from .errors import AuthenticationFailedError, UnsupportedVersionError

logger = logging.getLogger(__name__)


class Authenticator(ABC):
    """Base class for authentication methods."""

    @abstractmethod
    async def negotiate(
        self,
        ctx: AuthContext,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> AuthContext:
        """Run the method's exchange with the client.

        The caller has already consumed the client's method proposal; this
        writes the selection reply and whatever sub-negotiation follows.

        Returns:
            The context, possibly enriched with what was learned about the
            client.

        Raises:
            Socks5Error: The client was rejected
            asyncio.IncompleteReadError: The stream ended early
        """
        pass

    @property
    @abstractmethod
    def code(self) -> int:
        """Return the SOCKS5 authentication method code."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code:#04x})"


class NoAuthAuthenticator(Authenticator):
    """No authentication required."""

    async def negotiate(
        self,
        ctx: AuthContext,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> AuthContext:
        writer.write(bytes([SOCKS_VERSION, self.code]))
        await writer.drain()
        return ctx

    @property
    def code(self) -> int:
        return AuthMethod.NO_AUTH


class UserPassAuthenticator(Authenticator):
    """Username/password authentication (RFC 1929)."""

    def __init__(self, credentials: CredentialStore):
        self.credentials = credentials

    async def negotiate(
        self,
        ctx: AuthContext,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> AuthContext:
        # Tell the client to use user/pass auth
        writer.write(bytes([SOCKS_VERSION, self.code]))
        await writer.drain()

        identity = await self._read_identity(ctx, reader)

        ctx, is_valid = await self.credentials.valid(
            ctx, identity.username, identity.password
        )
        status = AuthStatus.SUCCESS if is_valid else AuthStatus.FAILURE
        writer.write(bytes([USER_AUTH_VERSION, status]))
        await writer.drain()

        if not is_valid:
            logger.debug("Rejected credentials for user %r", identity.username)
            raise AuthenticationFailedError(identity.username, ctx)

        logger.debug("Accepted credentials for user %r", identity.username)
        return ctx.with_payload(username=identity.username)

    async def _read_identity(
        self, ctx: AuthContext, reader: asyncio.StreamReader
    ) -> Identity:
        """Read VER, ULEN, UNAME, PLEN, PASSWD from the client."""
        version, ulen = await reader.readexactly(2)
        if version != USER_AUTH_VERSION:
            raise UnsupportedVersionError(version, USER_AUTH_VERSION, ctx)

        username = await reader.readexactly(ulen)
        (plen,) = await reader.readexactly(1)
        password = await reader.readexactly(plen)

        return Identity(_decode(username), _decode(password))

    @property
    def code(self) -> int:
        return AuthMethod.USERNAME_PASSWORD


def _decode(field: bytes) -> str:
    # Arbitrary octets survive the round trip and compare byte-exactly
    return field.decode("utf-8", errors="surrogateescape")
