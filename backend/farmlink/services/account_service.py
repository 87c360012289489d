"""Account Service — registration, sign-in and sign-out on top of the auth gateway.

Invariants:
    - Registration creates the account, then the profile with the account's id,
      then signs in
    - Sign-in without a matching profile signs the session back out and fails
    - The identity cache is updated only with profiles read from (or written to) the store
"""

import logging

from farmlink.core.errors import ResourceNotFoundError
from farmlink.core.repository_protocols import AuthGateway, MarketplaceStore
from farmlink.schemas.marketplace import Profile, ProfileCreate
from farmlink.services.identity_cache import IdentityCache

logger = logging.getLogger(__name__)


class AccountService:
    """Sign-up / sign-in / sign-out flows."""

    def __init__(
        self, auth: AuthGateway, store: MarketplaceStore, identity: IdentityCache,
    ):
        self.auth = auth
        self.store = store
        self.identity = identity

    async def register(self, form: ProfileCreate, password: str) -> Profile:
        account = await self.auth.sign_up(form.email, password)
        async with self.store.transaction() as tx:
            profile = await tx.insert_profile({
                "id": account.id,
                "name": form.name,
                "email": account.email,
                "phone": form.phone,
                "role": form.role,
            })

        # signed in only now, so the SIGNED_IN revalidation finds the profile
        await self.auth.sign_in(form.email, password)
        self.identity.set_user(profile)
        logger.info("Registered", extra={"profile_id": profile.id})
        return profile

    async def sign_in(self, email: str, password: str) -> Profile:
        session = await self.auth.sign_in(email, password)
        async with self.store.transaction() as tx:
            profile = await tx.get_profile(session.account_id)

        if profile is None:
            await self.auth.sign_out()
            self.identity.clear()
            raise ResourceNotFoundError("Profile", str(session.account_id))

        self.identity.set_user(profile)
        return profile

    async def sign_out(self) -> None:
        await self.auth.sign_out()
        self.identity.clear()
