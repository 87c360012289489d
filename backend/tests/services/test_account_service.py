"""Account Service — registration and sign-in flows over the SQL store and auth gateway.

Invariants:
    - Registration leaves the new profile signed in and cached
    - SIGNED_IN revalidation after registration finds the profile (no forced sign-out)
    - Sign-in for an account without a profile fails and ends signed out
"""

import pytest

from farmlink.core.domain_types import UserRole
from farmlink.core.errors import AuthenticationError, ResourceNotFoundError, ValidationError
from farmlink.infrastructure.identity_storage import JsonFileIdentityStorage
from farmlink.infrastructure.sql_auth import DatabaseAuthGateway
from farmlink.schemas.marketplace import ProfileCreate
from farmlink.services.account_service import AccountService
from farmlink.services.identity_cache import IdentityCache


@pytest.fixture
def auth(db_manager):
    return DatabaseAuthGateway(db_manager)


@pytest.fixture
def identity(auth, sql_store, tmp_path):
    cache = IdentityCache(auth, sql_store, JsonFileIdentityStorage(tmp_path))
    cache.attach()
    yield cache
    cache.detach()


@pytest.fixture
def accounts(auth, sql_store, identity):
    return AccountService(auth, sql_store, identity)


def _form(role=UserRole.BUYER, email="bea@example.com"):
    return ProfileCreate(name="Bea", email=email, phone="555-0100", role=role)


async def test_register_signs_in_and_caches(accounts, auth, identity):
    profile = await accounts.register(_form(), "secret123")
    assert profile.role == UserRole.BUYER
    assert identity.is_authenticated
    assert identity.user.id == profile.id

    await auth.flush_notifications()
    assert identity.is_authenticated
    assert identity.user.id == profile.id
    session = await auth.get_session()
    assert session.account_id == profile.id


async def test_register_duplicate_email_rejected(accounts, auth):
    await accounts.register(_form(), "secret123")
    await auth.flush_notifications()
    with pytest.raises(ValidationError):
        await accounts.register(_form(role=UserRole.FARMER), "other-secret")


async def test_sign_out_then_sign_in(accounts, auth, identity):
    profile = await accounts.register(_form(), "secret123")
    await auth.flush_notifications()
    await accounts.sign_out()
    await auth.flush_notifications()
    assert not identity.is_authenticated

    again = await accounts.sign_in("BEA@example.com", "secret123")
    await auth.flush_notifications()
    assert again.id == profile.id
    assert identity.user.id == profile.id


async def test_wrong_password(accounts, identity, auth):
    await accounts.register(_form(), "secret123")
    await accounts.sign_out()
    await auth.flush_notifications()
    with pytest.raises(AuthenticationError):
        await accounts.sign_in("bea@example.com", "wrong-password")
    assert not identity.is_authenticated


async def test_sign_in_without_profile_signs_out(accounts, auth, identity):
    await auth.sign_up("ghost@example.com", "secret123")
    with pytest.raises(ResourceNotFoundError):
        await accounts.sign_in("ghost@example.com", "secret123")
    await auth.flush_notifications()
    assert await auth.get_session() is None
    assert not identity.is_authenticated
