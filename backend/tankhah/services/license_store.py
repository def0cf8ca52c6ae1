"""
License persistence collaborators.

Two stores back the license state machine:
- LicenseRecordStore: the per-user license record (get / upsert by user id)
- LicenseKeyRegistry: one-time redemption keys (lookup / atomic claim / insert)

The Tortoise implementations are the production ones; tests may substitute
in-memory versions of the abstract classes.
"""
from __future__ import annotations

import datetime as dt
import secrets
import string
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from tankhah.models.license import License
from tankhah.models.license_key import LicenseKey

KEY_ALPHABET = string.ascii_uppercase + string.digits


def make_plain_key(prefix: str) -> str:
    """
    Generate plaintext key in format like PERM-AB12-CD34-EF56-GH78.
    Only returned to the admin once; database only stores sha256(key).
    """
    parts = ["".join(secrets.choice(KEY_ALPHABET) for _ in range(4)) for __ in range(4)]
    return f"{prefix}-{parts[0]}-{parts[1]}-{parts[2]}-{parts[3]}"


class LicenseRecordStore(ABC):
    """Per-user license record store"""

    @abstractmethod
    async def get(self, user_id) -> Optional[License]:
        """Return the user's record, or None when the user has none yet."""

    @abstractmethod
    async def upsert(self, user_id, **values) -> License:
        """Create or replace the single record of ``user_id``."""


class LicenseKeyRegistry(ABC):
    """Registry of one-time license keys"""

    @abstractmethod
    async def find_unconsumed(self, key: str) -> Optional[LicenseKey]:
        pass

    @abstractmethod
    async def claim(self, key: str, user_id, at: dt.datetime) -> Optional[LicenseKey]:
        """
        Atomically mark an unconsumed key as consumed by ``user_id``.

        Returns the claimed entry, or None when the key does not exist or was
        already consumed (including by a concurrent claim).
        """

    @abstractmethod
    async def mark_consumed(self, entry_id, user_id, at: dt.datetime) -> None:
        pass

    @abstractmethod
    async def insert(self, key: str, trial_days: Optional[int] = None) -> LicenseKey:
        pass


class TortoiseLicenseRecordStore(LicenseRecordStore):

    async def get(self, user_id) -> Optional[License]:
        return await License.get_or_none(user_id=user_id)

    async def upsert(self, user_id, **values) -> License:
        record, _ = await License.update_or_create(defaults=values, user_id=user_id)
        return record


class TortoiseLicenseKeyRegistry(LicenseKeyRegistry):

    async def find_unconsumed(self, key: str) -> Optional[LicenseKey]:
        return await LicenseKey.get_or_none(key_hash=LicenseKey.sha256_hex(key), is_used=False)

    async def claim(self, key: str, user_id, at: dt.datetime) -> Optional[LicenseKey]:
        h = LicenseKey.sha256_hex(key)
        # Single conditional UPDATE: only one caller can flip is_used for a given key
        updated = await LicenseKey.filter(key_hash=h, is_used=False).update(
            is_used=True, used_by_id=user_id, used_at=at
        )
        if not updated:
            return None
        return await LicenseKey.get(key_hash=h)

    async def mark_consumed(self, entry_id, user_id, at: dt.datetime) -> None:
        await LicenseKey.filter(id=entry_id).update(is_used=True, used_by_id=user_id, used_at=at)

    async def insert(self, key: str, trial_days: Optional[int] = None) -> LicenseKey:
        parts = key.split("-")
        return await LicenseKey.create(
            key_hash=LicenseKey.sha256_hex(key),
            prefix=parts[0][:8],
            suffix_last4=parts[-1][-4:],
            trial_days=trial_days,
            is_used=False,
        )

    async def generate(self, trial_days: Optional[int] = None) -> Tuple[LicenseKey, str]:
        """
        Create a registry entry with a fresh random key.

        Returns the entry and the plaintext key (the only time it is available).
        Raises RuntimeError if no unused key could be drawn in 10 attempts.
        """
        prefix = "TRIAL" if trial_days else "PERM"
        for _ in range(10):
            plain = make_plain_key(prefix)
            if not await LicenseKey.filter(key_hash=LicenseKey.sha256_hex(plain)).exists():
                return await self.insert(plain, trial_days), plain
        raise RuntimeError("KEY_GENERATION_COLLISION")

    async def list_keys(
        self,
        is_used: Optional[bool] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[int, List[LicenseKey]]:
        qs = LicenseKey.all().order_by("-created_at")
        if is_used is not None:
            qs = qs.filter(is_used=is_used)
        total = await qs.count()
        rows = await qs.offset(offset).limit(limit)
        return total, rows

    async def get(self, entry_id) -> Optional[LicenseKey]:
        return await LicenseKey.get_or_none(id=entry_id)

    async def delete(self, entry_id) -> bool:
        deleted = await LicenseKey.filter(id=entry_id).delete()
        return bool(deleted)
