"""Identity State — provisional vs resolved identity snapshots."""

from types import SimpleNamespace

import pytest

from farmlink.core.identity_state import IdentityState


def test_default_state_is_unauthenticated():
    state = IdentityState()
    assert state.user is None
    assert not state.initialized
    assert not state.is_authenticated
    assert state.role is None


def test_provisional_user_is_not_authenticated():
    state = IdentityState.provisional(SimpleNamespace(role="buyer"))
    assert state.user is not None
    assert not state.is_authenticated
    assert state.role is None


def test_resolved_user_is_authenticated():
    state = IdentityState.resolved(SimpleNamespace(role="farmer"))
    assert state.is_authenticated
    assert state.role == "farmer"


def test_resolved_none_is_initialized_but_signed_out():
    state = IdentityState.resolved(None)
    assert state.initialized
    assert not state.is_authenticated


def test_state_is_frozen():
    state = IdentityState()
    with pytest.raises(AttributeError):
        state.initialized = True
