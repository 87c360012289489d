"""Auth Schemas — sessions and change notifications issued by the auth gateway.

Invariants:
    - AuthSession never carries the password or its hash
    - AuthEvent.session is None for SIGNED_OUT
"""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel

from farmlink.core.domain_types import AuthEventType


class AuthUser(BaseModel):
    """A registered account, not yet signed in."""
    id: UUID
    email: str


class AuthSession(BaseModel):
    """An authenticated account session."""
    account_id: UUID
    email: str
    access_token: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


class AuthEvent(BaseModel):
    """Sign-in/sign-out notification delivered to subscribers."""
    type: AuthEventType
    session: AuthSession | None = None
