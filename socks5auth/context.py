"""Request-scoped state carried through one negotiation."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class AuthContext:
    """Immutable per-connection authentication state.

    ``method`` is only set once a method has been fully negotiated.
    ``payload`` holds whatever the authenticator or credential store learned
    about the client, e.g. ``{"username": "foo"}``.
    """

    method: Optional[int] = None
    payload: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def with_method(self, method: int) -> "AuthContext":
        return replace(self, method=method)

    def with_payload(self, **items: str) -> "AuthContext":
        merged = dict(self.payload)
        merged.update(items)
        return replace(self, payload=MappingProxyType(merged))
