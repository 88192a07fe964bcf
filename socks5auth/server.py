"""
SOCKS5 server implementation for socks5auth.

Implements the RFC 1928 method-selection phase and hands authenticated
connections to a request handler supplied by the caller.
"""

import asyncio
import logging
from types import MappingProxyType
from typing import Awaitable, Callable, Iterable, List, Mapping, Optional, Tuple

from .auth import Authenticator, NoAuthAuthenticator, UserPassAuthenticator
from .constants import SOCKS_VERSION, AuthMethod
from .context import AuthContext
from .credentials import CredentialStore
from .errors import NoSupportedAuthError, Socks5Error, UnsupportedVersionError
from .events import EventEmitter

logger = logging.getLogger(__name__)

RequestHandler = Callable[
    [AuthContext, int, asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]
]


def build_registry(
    authenticators: Iterable[Authenticator],
) -> Mapping[int, Authenticator]:
    """Index authenticators by method code.

    Raises:
        ValueError: A code is 0xFF or appears twice
    """
    registry = {}
    for authenticator in authenticators:
        code = authenticator.code
        if code == AuthMethod.NO_ACCEPTABLE:
            raise ValueError(f"{authenticator!r} uses the reserved code 0xFF")
        if code in registry:
            raise ValueError(
                f"{authenticator!r} conflicts with {registry[code]!r} "
                f"for method {code:#04x}"
            )
        registry[code] = authenticator
    return MappingProxyType(registry)


async def read_methods(reader: asyncio.StreamReader) -> bytes:
    """Read NMETHODS and the method codes that follow."""
    (nmethods,) = await reader.readexactly(1)
    return await reader.readexactly(nmethods)


class Socks5Server:
    """SOCKS5 authentication front end."""

    def __init__(
        self,
        auth_methods: Optional[List[Authenticator]] = None,
        credentials: Optional[CredentialStore] = None,
        request_handler: Optional[RequestHandler] = None,
        idle_timeout: float = 300.0,
        bind_address: str = "0.0.0.0",
        bind_port: int = 1080,
    ):
        """Initialize the SOCKS5 server.

        Args:
            auth_methods: Authenticators to offer. When empty, username/password
                is used if credentials are given, otherwise no authentication.
            credentials: Credential store for the default username/password
                authenticator
            request_handler: Coroutine called with (context, method, reader,
                writer) once a client is authenticated
            idle_timeout: Seconds allowed for the whole negotiation
            bind_address: Address to bind the server to
            bind_port: Port to bind the server to (0 picks a free port)
        """
        if not auth_methods:
            if credentials is not None:
                auth_methods = [UserPassAuthenticator(credentials)]
            else:
                auth_methods = [NoAuthAuthenticator()]
        self.auth_methods = build_registry(auth_methods)
        self.request_handler = request_handler
        self.idle_timeout = idle_timeout
        self.bind_address = bind_address
        self.bind_port = bind_port
        self.events = EventEmitter()
        self._server = None
        self._running = False

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Return the (host, port) actually bound, or None when stopped."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[:2]

    async def start(self) -> None:
        """Start the SOCKS5 server."""
        if self._running:
            return

        self._server = await asyncio.start_server(
            self._handle_connection, self.bind_address, self.bind_port
        )
        self._running = True
        logger.info("SOCKS5 server listening on %s:%d", *self.address)

    async def stop(self) -> None:
        """Stop the SOCKS5 server."""
        if not self._running:
            return

        self._server.close()
        await self._server.wait_closed()
        await self.events.join()
        self._server = None
        self._running = False
        logger.info("SOCKS5 server stopped")

    async def authenticate(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        ctx: Optional[AuthContext] = None,
    ) -> Tuple[AuthContext, int]:
        """Negotiate an authentication method with a freshly connected client.

        The first method in the client's proposal that is registered wins.
        If that method's exchange fails, no other proposed method is tried.

        Returns:
            (context, method) where context.method == method

        Raises:
            UnsupportedVersionError: The client is not speaking SOCKS5
            NoSupportedAuthError: No proposed method is registered
            AuthenticationFailedError: Credentials were rejected
            asyncio.IncompleteReadError: The stream ended early
        """
        if ctx is None:
            ctx = AuthContext()

        (version,) = await reader.readexactly(1)
        if version != SOCKS_VERSION:
            raise UnsupportedVersionError(version, SOCKS_VERSION, ctx)

        methods = await read_methods(reader)

        for method in methods:
            authenticator = self.auth_methods.get(method)
            if authenticator is None:
                continue
            logger.debug("Selected method %#04x from %s", method, methods.hex())
            ctx = await authenticator.negotiate(ctx, reader, writer)
            return ctx.with_method(method), method

        logger.debug("No acceptable method in %s", methods.hex())
        raise await self._no_acceptable_auth(ctx, writer)

    async def _no_acceptable_auth(
        self, ctx: AuthContext, writer: asyncio.StreamWriter
    ) -> NoSupportedAuthError:
        """Send the 0xFF rejection and return the error to raise.

        A failed write is attached as the error's cause.
        """
        error = NoSupportedAuthError(ctx)
        try:
            writer.write(bytes([SOCKS_VERSION, AuthMethod.NO_ACCEPTABLE]))
            await writer.drain()
        except ConnectionError as e:
            error.__cause__ = e
        return error

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Handle a new client connection."""
        client_addr = writer.get_extra_info("peername")
        if client_addr:
            client_ip, client_port = client_addr[0], client_addr[1]
        else:
            client_ip, client_port = "unknown", 0

        self.events.emit("handshake", client_ip, client_port)

        try:
            try:
                ctx, method = await asyncio.wait_for(
                    self.authenticate(reader, writer), timeout=self.idle_timeout
                )
            except Socks5Error as e:
                logger.info(
                    "Authentication failed for %s:%d: %s", client_ip, client_port, e
                )
                self.events.emit("authenticate_error", e, client_ip, client_port)
                return

            self.events.emit("authenticate", client_ip, client_port, ctx)

            if self.request_handler is not None:
                await self.request_handler(ctx, method, reader, writer)

        except Exception as e:
            logger.debug(
                "Connection from %s:%d aborted", client_ip, client_port, exc_info=True
            )
            self.events.emit("error", e, client_ip, client_port)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass
            self.events.emit("disconnect", client_ip, client_port)
