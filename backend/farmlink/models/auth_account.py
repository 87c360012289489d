"""AuthAccount ORM — credentials for the auth gateway, separate from the public profile.

Invariants:
    - email is unique (case-folded before insert)
    - password_hash is a passlib hash string; plain passwords never stored
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from farmlink.db.base import Base


class AuthAccount(Base):
    """Sign-in identity: its id becomes the Profile id."""
    __tablename__ = "auth_accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
