"""Identity Storage — verifies the persisted identity document."""

import json
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from farmlink.core.domain_types import UserRole
from farmlink.infrastructure.identity_storage import JsonFileIdentityStorage
from farmlink.schemas.marketplace import Profile


@pytest.fixture
def profile():
    return Profile(
        id=uuid4(),
        name="Bea",
        email="bea@example.com",
        role=UserRole.BUYER,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


def test_missing_file_loads_nothing(tmp_path):
    assert JsonFileIdentityStorage(tmp_path).load() is None


def test_save_and_load_profile(tmp_path, profile):
    storage = JsonFileIdentityStorage(tmp_path / "nested")
    storage.save(profile)
    assert storage.load() == profile

    document = json.loads((tmp_path / "nested" / "auth-storage.json").read_text())
    assert set(document) == {"user"}
    assert document["user"]["role"] == "buyer"


def test_save_none_clears(tmp_path, profile):
    storage = JsonFileIdentityStorage(tmp_path)
    storage.save(profile)
    storage.save(None)
    assert storage.load() is None


@pytest.mark.parametrize("content", [
    "{not json",
    "[]",
    '{"user": {"id": "nope"}}',
])
def test_malformed_file_loads_nothing(tmp_path, content):
    (tmp_path / "auth-storage.json").write_text(content)
    assert JsonFileIdentityStorage(tmp_path).load() is None
