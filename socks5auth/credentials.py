"""
Credential stores for username/password authentication.

A store only answers whether a (username, password) pair is acceptable; it
knows nothing about the wire protocol.
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Iterator, Mapping, NamedTuple, Tuple

from .context import AuthContext


class Identity(NamedTuple):
    """Credentials submitted by a client."""

    username: str
    password: str


class CredentialStore(ABC):
    """Base class for credential stores."""

    @abstractmethod
    async def valid(
        self, ctx: AuthContext, username: str, password: str
    ) -> Tuple[AuthContext, bool]:
        """Check a username/password pair.

        Args:
            ctx: Current request-scoped context
            username: Username sent by the client
            password: Password sent by the client

        Returns:
            (context, accepted). The returned context may carry extra
            payload for the request layer. Unknown users are not an error,
            they simply yield False.
        """
        pass


class StaticCredentials(CredentialStore):
    """In-memory username -> password table."""

    def __init__(self, credentials: Mapping[str, str]):
        """Initialize with a mapping of username -> password.

        The mapping is copied; later changes to it are not seen.
        """
        self._credentials = MappingProxyType(dict(credentials))

    async def valid(
        self, ctx: AuthContext, username: str, password: str
    ) -> Tuple[AuthContext, bool]:
        if username not in self._credentials:
            return ctx, False
        return ctx, self._credentials[username] == password

    def __contains__(self, username: object) -> bool:
        return username in self._credentials

    def __iter__(self) -> Iterator[str]:
        return iter(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)

    def __repr__(self) -> str:
        return f"StaticCredentials(users={sorted(self._credentials)!r})"
