"""Identity Cache — the signed-in profile, persisted locally and revalidated remotely.

Invariants:
    - At most one identity; is_authenticated only after initialize() or set_user()
    - A rehydrated identity is provisional until initialize() confirms it
    - A session without a profile is corrupt: force remote sign-out, end unauthenticated
    - Any failure in initialize() degrades to unauthenticated; it never raises
    - Latest call wins: an initialize() superseded by a later initialize() or
      set_user() discards its result
    - Every state change is persisted (profile only)

Design Decisions:
    - Generation counter over a lock: an auth notification arriving mid-initialize
      must not wait for a stale revalidation, it supersedes it
    - Injected collaborators (auth, store, storage): no module-level singleton
"""

import asyncio
import logging

from farmlink.core.domain_types import AuthEventType, UserRole
from farmlink.core.errors import AuthenticationError, PermissionDeniedError
from farmlink.core.identity_state import IdentityState
from farmlink.core.repository_protocols import (
    AuthGateway,
    AuthSubscription,
    IdentityStorage,
    MarketplaceStore,
)
from farmlink.schemas.auth import AuthEvent
from farmlink.schemas.marketplace import Profile

logger = logging.getLogger(__name__)


class IdentityCache:
    """Client-held copy of the signed-in user's profile."""

    def __init__(
        self,
        auth: AuthGateway,
        store: MarketplaceStore,
        storage: IdentityStorage,
        timeout_seconds: float = 30.0,
    ):
        self.auth = auth
        self.store = store
        self.storage = storage
        self.timeout_seconds = timeout_seconds
        self._state = IdentityState()
        self._generation = 0
        self._subscription: AuthSubscription | None = None

    # --- read side ------------------------------------------------------------

    @property
    def state(self) -> IdentityState:
        return self._state

    @property
    def user(self) -> Profile | None:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_initialized(self) -> bool:
        return self._state.initialized

    def require_user(self) -> Profile:
        if not self.is_authenticated:
            raise AuthenticationError("Sign in to continue.")
        return self._state.user

    def require_role(self, role: UserRole) -> Profile:
        """Advisory route guard: signed in, and with the given role."""
        user = self.require_user()
        if UserRole(user.role) != UserRole(role):
            raise PermissionDeniedError(f"This area is for {UserRole(role).value}s only.")
        return user

    # --- write side -----------------------------------------------------------

    def set_user(self, profile: Profile | None) -> None:
        """Synchronously replace the cached identity and persist it.

        Supersedes any initialize() still in flight.
        """
        self._generation += 1
        self._apply(profile)

    def clear(self) -> None:
        self.set_user(None)

    def rehydrate(self) -> IdentityState:
        """Load the persisted profile as provisional (not authenticated)."""
        self._state = IdentityState.provisional(self.storage.load())
        if self._state.user is not None:
            logger.info(
                "Rehydrated provisional identity",
                extra={"profile_id": self._state.user.id},
            )
        return self._state

    async def initialize(self) -> IdentityState:
        """Revalidate against the remote store. Never raises."""
        self._generation += 1
        generation = self._generation

        try:
            profile = await asyncio.wait_for(
                self._resolve_profile(), timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Identity initialization timed out - please check your network connection",
                extra={"generation": generation},
            )
            profile = None
        except Exception as e:
            logger.error(
                f"Error initializing identity: {e}",
                extra={"generation": generation, "error_code": getattr(e, "code", None)},
            )
            profile = None

        if generation != self._generation:
            logger.debug(
                "Discarding superseded identity result",
                extra={"generation": generation},
            )
            return self._state

        self._apply(profile)
        return self._state

    # --- auth notifications ---------------------------------------------------

    def attach(self) -> AuthSubscription:
        """Subscribe to auth change notifications (idempotent)."""
        if self._subscription is None:
            self._subscription = self.auth.subscribe(self.handle_auth_event)
        return self._subscription

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def handle_auth_event(self, event: AuthEvent) -> None:
        logger.info(
            "Auth state changed",
            extra={"event": AuthEventType(event.type).value},
        )
        await self.initialize()

    # --- internals ------------------------------------------------------------

    async def _resolve_profile(self) -> Profile | None:
        session = await self.auth.get_session()
        if session is None:
            return None

        async with self.store.transaction() as tx:
            profile = await tx.get_profile(session.account_id)

        if profile is None:
            logger.error(
                "Profile not found for authenticated user; signing out",
                extra={"profile_id": session.account_id},
            )
            await self.auth.sign_out()
            return None
        return profile

    def _apply(self, profile: Profile | None) -> None:
        self._state = IdentityState.resolved(profile)
        self._persist()

    def _persist(self) -> None:
        try:
            self.storage.save(self._state.user)
        except OSError as e:
            logger.warning(f"Could not persist identity: {e}")
