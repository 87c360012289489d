"""Identity State — the cached signed-in profile and whether it can be trusted.

Invariants:
    - is_authenticated is True only when a profile is present AND initialized is True
    - A rehydrated profile is provisional (initialized=False) until revalidated
    - State objects are immutable; every change produces a new state

Design Decisions:
    - Frozen dataclass: a reader never observes a half-applied update
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class IdentityState:
    """Snapshot of the identity cache."""
    user: Any | None = None
    initialized: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.initialized and self.user is not None

    @property
    def role(self) -> str | None:
        if not self.is_authenticated:
            return None
        return getattr(self.user, "role", None)

    @classmethod
    def provisional(cls, user: Any | None) -> "IdentityState":
        """Rehydrated from local storage; not trusted until initialize()."""
        return cls(user=user, initialized=False)

    @classmethod
    def resolved(cls, user: Any | None) -> "IdentityState":
        """Confirmed against the remote store (or explicitly set by a caller)."""
        return cls(user=user, initialized=True)
