"""
socks5auth - SOCKS5 authentication negotiation for asyncio servers.

Implements the method-selection handshake of RFC 1928 and the
username/password sub-negotiation of RFC 1929. Authentication methods are
pluggable authenticators registered by method code; username/password
checks are delegated to a swappable credential store.

A connected client is negotiated with ``Socks5Server.authenticate``; the
server can also listen on its own and pass authenticated connections to a
request handler.
"""

from .auth import Authenticator, NoAuthAuthenticator, UserPassAuthenticator
from .constants import SOCKS_VERSION, USER_AUTH_VERSION, AuthMethod, AuthStatus
from .context import AuthContext
from .credentials import CredentialStore, Identity, StaticCredentials
from .errors import (
    AuthenticationFailedError,
    NoSupportedAuthError,
    Socks5Error,
    UnsupportedVersionError,
)
from .events import EventEmitter
from .server import Socks5Server, build_registry, read_methods

__version__ = "0.1.0"
__all__ = [
    "Socks5Server",
    "build_registry",
    "read_methods",
    "Authenticator",
    "NoAuthAuthenticator",
    "UserPassAuthenticator",
    "CredentialStore",
    "StaticCredentials",
    "Identity",
    "AuthContext",
    "AuthMethod",
    "AuthStatus",
    "SOCKS_VERSION",
    "USER_AUTH_VERSION",
    "Socks5Error",
    "UnsupportedVersionError",
    "NoSupportedAuthError",
    "AuthenticationFailedError",
    "EventEmitter",
]
