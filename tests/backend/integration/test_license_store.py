"""
Integration tests for services.license_store against an in-memory database.
"""
import datetime as dt
import uuid

import pytest

from tankhah.core.security import hash_password
from tankhah.models.license import License
from tankhah.models.license_key import LicenseKey
from tankhah.models.user import User
from tankhah.services.license_store import (
    TortoiseLicenseKeyRegistry,
    TortoiseLicenseRecordStore,
    make_plain_key,
)


pytestmark = pytest.mark.asyncio

NOW = dt.datetime(2024, 3, 20, 12, 0, tzinfo=dt.timezone.utc)


async def _user() -> User:
    return await User.create(
        username=f"user_{uuid.uuid4().hex[:6]}",
        email=None,
        password_hash=hash_password("Pass!234"),
    )


async def test_get_returns_none_without_record(db):
    user = await _user()
    assert await TortoiseLicenseRecordStore().get(user.id) is None


async def test_upsert_keeps_one_record_per_user(db):
    store = TortoiseLicenseRecordStore()
    user = await _user()

    first = await store.upsert(user.id, license_type="trial", is_active=True, trial_end_date=NOW)
    second = await store.upsert(user.id, license_type="permanent", is_active=True, trial_end_date=None)

    assert first.id == second.id
    assert await License.filter(user_id=user.id).count() == 1
    stored = await store.get(user.id)
    assert stored.license_type == "permanent"
    assert stored.trial_end_date is None


async def test_claim_consumes_key_once(db):
    registry = TortoiseLicenseKeyRegistry()
    first_user, second_user = await _user(), await _user()
    await registry.insert("PERM-AAAA-BBBB-CCCC-DDDD")

    claimed = await registry.claim("PERM-AAAA-BBBB-CCCC-DDDD", first_user.id, NOW)
    assert claimed is not None
    assert claimed.is_used is True
    assert str(claimed.used_by_id) == str(first_user.id)

    assert await registry.claim("PERM-AAAA-BBBB-CCCC-DDDD", second_user.id, NOW) is None
    assert await registry.find_unconsumed("PERM-AAAA-BBBB-CCCC-DDDD") is None
    entry = await LicenseKey.get(key_hash=LicenseKey.sha256_hex("PERM-AAAA-BBBB-CCCC-DDDD"))
    assert str(entry.used_by_id) == str(first_user.id)


async def test_claim_unknown_key(db):
    user = await _user()
    assert await TortoiseLicenseKeyRegistry().claim("NOPE", user.id, NOW) is None


async def test_insert_stores_hash_and_display_parts(db):
    entry = await TortoiseLicenseKeyRegistry().insert("TRIAL-AB12-CD34-EF56-GH78", trial_days=7)
    assert entry.key_hash == LicenseKey.sha256_hex("TRIAL-AB12-CD34-EF56-GH78")
    assert entry.prefix == "TRIAL"
    assert entry.suffix_last4 == "GH78"
    assert entry.license_type == "trial"


async def test_mark_consumed(db):
    registry = TortoiseLicenseKeyRegistry()
    user = await _user()
    entry = await registry.insert("PERM-1111-2222-3333-4444")
    await registry.mark_consumed(entry.id, user.id, NOW)
    assert await registry.find_unconsumed("PERM-1111-2222-3333-4444") is None


async def test_generate_and_list(db):
    registry = TortoiseLicenseKeyRegistry()
    entry, plain = await registry.generate()
    assert plain.startswith("PERM-")
    assert entry.license_type == "permanent"
    trial_entry, trial_plain = await registry.generate(trial_days=10)
    assert trial_plain.startswith("TRIAL-")
    assert trial_entry.trial_days == 10

    total, rows = await registry.list_keys()
    assert total == 2
    assert {r.id for r in rows} == {entry.id, trial_entry.id}

    assert await registry.delete(entry.id) is True
    assert await registry.delete(entry.id) is False


def test_plain_key_format():
    key = make_plain_key("PERM")
    parts = key.split("-")
    assert parts[0] == "PERM"
    assert len(parts) == 5
    assert all(len(p) == 4 and p.isalnum() and p.upper() == p for p in parts[1:])
