"""Database Auth Gateway — verifies sign-up, sign-in, sessions and notifications.

Invariants:
    - Passwords stored hashed; wrong credentials give one generic error
    - Sign-up does not sign in
    - Every sign-in and every sign-out of a live session notifies subscribers once
    - A failing listener never breaks the caller
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from farmlink.core.domain_types import AuthEventType
from farmlink.core.errors import AuthenticationError, ValidationError
from farmlink.infrastructure.sql_auth import DatabaseAuthGateway
from farmlink.models.auth_account import AuthAccount


@pytest.fixture
def auth(db_manager):
    return DatabaseAuthGateway(db_manager, session_ttl_minutes=60)


@pytest.fixture
def events(auth):
    received = []

    async def listener(event):
        received.append(event.type)

    auth.subscribe(listener)
    return received


async def test_sign_up_stores_hash_and_does_not_sign_in(auth, db_manager, events):
    user = await auth.sign_up("  Fern@Example.com ", "secret123")
    assert user.email == "fern@example.com"
    assert await auth.get_session() is None
    await auth.flush_notifications()
    assert events == []

    async with db_manager.session() as db:
        account = (await db.execute(select(AuthAccount))).scalar_one()
    assert account.password_hash != "secret123"


@pytest.mark.parametrize("email,password,field", [
    ("", "secret123", "email"),
    ("a@example.com", "short", "password"),
])
async def test_sign_up_validation(auth, email, password, field):
    with pytest.raises(ValidationError) as exc:
        await auth.sign_up(email, password)
    assert exc.value.field == field


async def test_duplicate_email_rejected(auth):
    await auth.sign_up("fern@example.com", "secret123")
    with pytest.raises(ValidationError):
        await auth.sign_up("FERN@example.com", "another1")


async def test_sign_in_and_out_notify(auth, events):
    user = await auth.sign_up("fern@example.com", "secret123")
    session = await auth.sign_in("fern@example.com", "secret123")
    assert session.account_id == user.id
    assert (await auth.get_session()).access_token == session.access_token

    await auth.sign_out()
    await auth.sign_out()
    await auth.flush_notifications()
    assert events == [AuthEventType.SIGNED_IN, AuthEventType.SIGNED_OUT]
    assert await auth.get_session() is None


@pytest.mark.parametrize("email,password", [
    ("fern@example.com", "wrong-password"),
    ("nobody@example.com", "secret123"),
])
async def test_bad_credentials_generic_error(auth, email, password):
    await auth.sign_up("fern@example.com", "secret123")
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        await auth.sign_in(email, password)


async def test_expired_session_is_dropped(auth, events):
    await auth.sign_up("fern@example.com", "secret123")
    session = await auth.sign_in("fern@example.com", "secret123")
    auth._session = session.model_copy(
        update={"expires_at": datetime.now(timezone.utc) - timedelta(seconds=1)},
    )
    assert await auth.get_session() is None
    await auth.flush_notifications()
    assert events[-1] == AuthEventType.SIGNED_OUT


async def test_unsubscribe_stops_delivery(auth):
    received = []

    async def listener(event):
        received.append(event)

    subscription = auth.subscribe(listener)
    subscription.unsubscribe()
    subscription.unsubscribe()
    await auth.sign_up("fern@example.com", "secret123")
    await auth.sign_in("fern@example.com", "secret123")
    await auth.flush_notifications()
    assert received == []


async def test_failing_listener_is_isolated(auth, events):
    async def broken(event):
        raise RuntimeError("listener bug")

    auth.subscribe(broken)
    await auth.sign_up("fern@example.com", "secret123")
    await auth.sign_in("fern@example.com", "secret123")
    await auth.flush_notifications()
    assert events == [AuthEventType.SIGNED_IN]
