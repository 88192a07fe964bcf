"""
Exceptions raised during SOCKS5 authentication negotiation.

Short reads and broken pipes are not wrapped: ``asyncio.IncompleteReadError``
and ``ConnectionError`` come straight from the stream.
"""

from typing import Optional

from .context import AuthContext


class Socks5Error(Exception):
    """Base class for negotiation failures."""

    def __init__(self, message: str, context: Optional[AuthContext] = None):
        super().__init__(message)
        self.context = context if context is not None else AuthContext()


class UnsupportedVersionError(Socks5Error):
    """The client sent a version byte we do not speak."""

    def __init__(
        self, version: int, expected: int, context: Optional[AuthContext] = None
    ):
        super().__init__(
            f"unsupported version: {version} (expected {expected})", context
        )
        self.version = version
        self.expected = expected


class NoSupportedAuthError(Socks5Error):
    """None of the proposed methods is registered; 0xFF was sent."""

    def __init__(self, context: Optional[AuthContext] = None):
        super().__init__("no supported authentication mechanism", context)


class AuthenticationFailedError(Socks5Error):
    """Credentials were rejected; the failure status was sent."""

    def __init__(self, username: str, context: Optional[AuthContext] = None):
        super().__init__("user authentication failed", context)
        self.username = username
