"""Database Auth Gateway — sign-up, sign-in, sign-out and session change notifications.

Invariants:
    - Passwords stored only as passlib hashes; never logged, never returned
    - At most one current session per gateway (one signed-in identity per client)
    - get_session() returns None once the session expired or its account vanished
    - Sign-up creates the account only; it neither signs in nor emits
    - Every sign-in and every sign-out of a live session emits exactly one event
    - Listeners run as separate asyncio tasks; a failing listener never breaks the caller

Design Decisions:
    - pbkdf2_sha256 over bcrypt: pure passlib, no native backend to version-match
    - Notifications as tasks, not inline awaits: matches a remote auth subsystem whose
      events arrive asynchronously and may overlap; flush_notifications() drains them
"""

import asyncio
import logging
import secrets
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from sqlalchemy import select

from farmlink.core.domain_types import AuthEventType
from farmlink.core.errors import AuthenticationError, ValidationError
from farmlink.core.repository_protocols import AuthListener
from farmlink.infrastructure.database import DatabaseSessionManager
from farmlink.models.auth_account import AuthAccount
from farmlink.schemas.auth import AuthEvent, AuthSession, AuthUser

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class _Subscription:
    """Handle for one registered listener."""

    def __init__(self, listeners: list[AuthListener], listener: AuthListener):
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class DatabaseAuthGateway:
    """AuthGateway over the auth_accounts table."""

    def __init__(self, db: DatabaseSessionManager, session_ttl_minutes: int = 60 * 24 * 7):
        self.db = db
        self.session_ttl = timedelta(minutes=session_ttl_minutes)
        self._session: AuthSession | None = None
        self._listeners: list[AuthListener] = []
        self._pending: set[asyncio.Task] = set()

    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Create an account. The caller signs in once its profile exists."""
        email = _normalize_email(email)
        if not email:
            raise ValidationError("Email is required.", "email")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", "password",
            )

        async with self.db.session() as db:
            existing = await db.execute(
                select(AuthAccount).where(AuthAccount.email == email),
            )
            if existing.scalar_one_or_none() is not None:
                raise ValidationError("Email is already registered.", "email")

            account = AuthAccount(email=email, password_hash=pwd_context.hash(password))
            db.add(account)
            await db.commit()

        logger.info("Account created", extra={"profile_id": account.id})
        return AuthUser(id=account.id, email=account.email)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        email = _normalize_email(email)
        async with self.db.session() as db:
            result = await db.execute(
                select(AuthAccount).where(AuthAccount.email == email),
            )
            account = result.scalar_one_or_none()

        if account is None or not pwd_context.verify(password or "", account.password_hash):
            raise AuthenticationError("Invalid email or password")
        return self._start_session(account)

    async def sign_out(self) -> None:
        if self._session is None:
            return
        profile_id = self._session.account_id
        self._session = None
        logger.info("Signed out", extra={"profile_id": profile_id})
        self._emit(AuthEvent(type=AuthEventType.SIGNED_OUT))

    async def get_session(self) -> AuthSession | None:
        """Current session, or None if absent, expired, or its account is gone."""
        current = self._session
        if current is None:
            return None
        if current.is_expired():
            logger.info("Session expired", extra={"profile_id": current.account_id})
            await self.sign_out()
            return None

        async with self.db.session() as db:
            account = await db.get(AuthAccount, current.account_id)
        if account is None:
            logger.warning(
                "Session account no longer exists",
                extra={"profile_id": current.account_id},
            )
            await self.sign_out()
            return None
        return current

    def subscribe(self, listener: AuthListener) -> _Subscription:
        self._listeners.append(listener)
        return _Subscription(self._listeners, listener)

    async def flush_notifications(self) -> None:
        """Wait until every delivered notification (and any it triggers) has run."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # --- internals ------------------------------------------------------------

    def _start_session(self, account: AuthAccount) -> AuthSession:
        self._session = AuthSession(
            account_id=account.id,
            email=account.email,
            access_token=secrets.token_urlsafe(32),
            expires_at=datetime.now(timezone.utc) + self.session_ttl,
        )
        logger.info("Signed in", extra={"profile_id": account.id})
        self._emit(AuthEvent(type=AuthEventType.SIGNED_IN, session=self._session))
        return self._session

    def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            task = asyncio.create_task(self._deliver(listener, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(self, listener: AuthListener, event: AuthEvent) -> None:
        try:
            await listener(event)
        except Exception:
            logger.exception(
                "Auth listener failed", extra={"event": event.type.value},
            )
