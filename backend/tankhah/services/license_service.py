"""
License lifecycle

Derives the user-facing license status from a stored license record and runs
the key redemption protocol. The service keeps no state between calls: every
check reads the record fresh and every activation is a single pass over the
stores.

States: none -> trial -> expired, permanent (optionally with expiry), inactive.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from tankhah.config import settings
from tankhah.core.db import is_backend_configured
from tankhah.services.license_store import (
    LicenseKeyRegistry,
    LicenseRecordStore,
    TortoiseLicenseKeyRegistry,
    TortoiseLicenseRecordStore,
)

logger = logging.getLogger("uvicorn.error")

SECONDS_PER_DAY = 24 * 60 * 60

# User-facing (Persian) messages, keyed by result code
MESSAGES = {
    "BACKEND_UNAVAILABLE": "اتصال به سرور برقرار نیست.",
    "KEY_REQUIRED": "لطفاً کد لایسنس را وارد کنید.",
    "ADMIN_KEY_FORBIDDEN": "این کد لایسنس مخصوص ادمین است.",
    "KEY_INVALID_OR_USED": "کد لایسنس نامعتبر است یا قبلاً استفاده شده است.",
    "ADMIN_ACTIVATION_FAILED": "خطا در فعال‌سازی لایسنس ادمین.",
    "KEY_CONSUME_FAILED": "خطا در مصرف کد لایسنس.",
    "LICENSE_UPDATE_FAILED": "خطا در به‌روزرسانی لایسنس کاربر.",
    "ADMIN_ACTIVATED": "لایسنس دائمی ادمین با موفقیت فعال شد!",
    "PERMANENT_ACTIVATED": "لایسنس دائمی با موفقیت فعال شد!",
    "TRIAL_ACTIVATED": "لایسنس آزمایشی {days} روزه با موفقیت فعال شد!",
}


@dataclass
class LicenseStatus:
    """
    Derived license status (never persisted).

    days_remaining is None for a license that never expires.
    """
    is_valid: bool
    license_type: str  # trial / permanent / expired / inactive / none / unknown
    days_remaining: Optional[int]
    trial_end_date: Optional[dt.datetime] = None
    expiry_date: Optional[dt.datetime] = None
    is_fallback: bool = False  # synthesized without a backend record

    @property
    def is_unlimited(self) -> bool:
        return self.is_valid and self.days_remaining is None

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "licenseType": self.license_type,
            "daysRemaining": self.days_remaining,
            "isUnlimited": self.is_unlimited,
            "trialEndDate": self.trial_end_date.isoformat() if self.trial_end_date else None,
            "expiryDate": self.expiry_date.isoformat() if self.expiry_date else None,
            "isFallback": self.is_fallback,
        }


@dataclass
class ActivationResult:
    """Outcome of a key activation, shown to the user as-is"""
    success: bool
    message: str
    code: Optional[str] = None

    @classmethod
    def failure(cls, code: str) -> "ActivationResult":
        return cls(success=False, message=MESSAGES[code], code=code)


@dataclass
class LicenseCheck:
    """Session-start result: the status, and whether the trial record was just created"""
    status: LicenseStatus
    created: bool = False


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_utc(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    # Naive timestamps coming back from the database are UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def days_until(end: dt.datetime, now: dt.datetime) -> int:
    """Whole days left until ``end``, rounding partial days up."""
    return math.ceil((end - now).total_seconds() / SECONDS_PER_DAY)


def fallback_status(trial_days: Optional[int] = None) -> LicenseStatus:
    """Synthetic trial used when no backend is reachable."""
    days = settings.trial_days if trial_days is None else trial_days
    return LicenseStatus(is_valid=True, license_type="trial", days_remaining=days, is_fallback=True)


def derive_status(record, now: Optional[dt.datetime] = None, *, offline_fallback: bool = False) -> LicenseStatus:
    """
    Compute the license status of ``record`` at ``now``.

    Args:
        record: License record (or any object with the same attributes), or None
        now: Reference instant; defaults to the current UTC time
        offline_fallback: When True a missing record yields the synthetic trial
            instead of the strict "none" status

    An expiry is only reached once ``now`` is strictly past the end instant.
    """
    if record is None:
        if offline_fallback:
            return fallback_status()
        return LicenseStatus(is_valid=False, license_type="none", days_remaining=0)

    if not record.is_active:
        return LicenseStatus(is_valid=False, license_type="inactive", days_remaining=0)

    now = _as_utc(now) or utc_now()

    if record.license_type == "permanent":
        expiry = _as_utc(record.expiry_date)
        if expiry is None:
            return LicenseStatus(is_valid=True, license_type="permanent", days_remaining=None)
        if now > expiry:
            return LicenseStatus(is_valid=False, license_type="expired", days_remaining=0, expiry_date=expiry)
        return LicenseStatus(
            is_valid=True,
            license_type="permanent",
            days_remaining=days_until(expiry, now),
            expiry_date=expiry,
        )

    trial_end = _as_utc(getattr(record, "trial_end_date", None))
    if record.license_type == "trial" and trial_end is not None:
        if now > trial_end:
            return LicenseStatus(is_valid=False, license_type="expired", days_remaining=0, trial_end_date=trial_end)
        return LicenseStatus(
            is_valid=True,
            license_type="trial",
            days_remaining=days_until(trial_end, now),
            trial_end_date=trial_end,
        )

    return LicenseStatus(is_valid=False, license_type="unknown", days_remaining=0)


class LicenseService:
    """
    License status checks and key activation over a record store and a key registry.

    Configuration (admin allow-list, master keys, trial length) is read from
    ``settings`` unless given explicitly.
    """

    def __init__(
        self,
        records: Optional[LicenseRecordStore] = None,
        keys: Optional[LicenseKeyRegistry] = None,
        *,
        backend_configured: Callable[[], bool] = is_backend_configured,
        admin_emails: Optional[Iterable[str]] = None,
        master_keys: Optional[Iterable[str]] = None,
        trial_days: Optional[int] = None,
        clock: Callable[[], dt.datetime] = utc_now,
    ):
        self.records = records or TortoiseLicenseRecordStore()
        self.keys = keys or TortoiseLicenseKeyRegistry()
        self._backend_configured = backend_configured
        self._admin_emails = None if admin_emails is None else {e.strip().lower() for e in admin_emails}
        self._master_keys = None if master_keys is None else {k.strip().upper() for k in master_keys}
        self._trial_days = trial_days
        self._clock = clock

    @property
    def admin_emails(self) -> set:
        return self._admin_emails if self._admin_emails is not None else set(settings.admin_emails)

    @property
    def master_keys(self) -> set:
        return self._master_keys if self._master_keys is not None else set(settings.master_admin_keys)

    @property
    def trial_days(self) -> int:
        return self._trial_days if self._trial_days is not None else settings.trial_days

    def is_admin_email(self, email: Optional[str]) -> bool:
        return (email or "").strip().lower() in self.admin_emails

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    async def create_trial(self, user_id):
        """Create (or replace) the user's record with a fresh trial window."""
        now = self._clock()
        return await self.records.upsert(
            user_id,
            license_key=None,
            license_type="trial",
            is_active=True,
            trial_start_date=now,
            trial_end_date=now + dt.timedelta(days=self.trial_days),
            expiry_date=None,
        )

    async def check(self, user_id) -> LicenseCheck:
        """
        Session-start license check.

        Without a backend, or when the record cannot be read or created, the
        user gets the synthetic trial; those failures are logged, not raised.
        A user without a record gets the implicit trial created here.
        """
        if not self._backend_configured():
            return LicenseCheck(fallback_status(self.trial_days))

        try:
            record = await self.records.get(user_id)
        except Exception:
            logger.exception("[license] fetch failed for user=%s -> using fallback trial", user_id)
            return LicenseCheck(fallback_status(self.trial_days))

        created = False
        if record is None:
            try:
                record = await self.create_trial(user_id)
            except Exception:
                logger.exception("[license] could not create trial for user=%s -> using fallback trial", user_id)
                return LicenseCheck(fallback_status(self.trial_days))
            created = True
            logger.info("[license] created %d-day trial for user=%s", self.trial_days, user_id)

        return LicenseCheck(derive_status(record, self._clock()), created=created)

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------
    async def activate(self, user_id, user_email: Optional[str], license_key: Optional[str]) -> ActivationResult:
        """
        Redeem ``license_key`` for the user.

        Master keys grant a permanent license to allow-listed admin emails only.
        Any other key must be an unconsumed registry key; it is claimed with a
        single conditional update and then written to the user's record. A
        failure after the claim leaves the key consumed without a grant.
        """
        if not self._backend_configured():
            return ActivationResult.failure("BACKEND_UNAVAILABLE")

        key = (license_key or "").strip().upper()
        email = (user_email or "").strip().lower()
        if not key:
            return ActivationResult.failure("KEY_REQUIRED")

        now = self._clock()

        if key in self.master_keys:
            if email not in self.admin_emails:
                logger.warning("[license] master key rejected for non-admin user=%s", user_id)
                return ActivationResult.failure("ADMIN_KEY_FORBIDDEN")
            try:
                await self.records.upsert(
                    user_id,
                    license_key=key,
                    license_type="permanent",
                    is_active=True,
                    activated_at=now,
                    expiry_date=None,
                    trial_end_date=None,
                )
            except Exception:
                logger.exception("[license] admin activation failed for user=%s", user_id)
                return ActivationResult.failure("ADMIN_ACTIVATION_FAILED")
            logger.info("[license] permanent admin license activated for user=%s", user_id)
            return ActivationResult(success=True, message=MESSAGES["ADMIN_ACTIVATED"], code="ADMIN_ACTIVATED")

        try:
            entry = await self.keys.claim(key, user_id, now)
        except Exception:
            logger.exception("[license] key claim failed for user=%s", user_id)
            return ActivationResult.failure("KEY_CONSUME_FAILED")
        if entry is None:
            return ActivationResult.failure("KEY_INVALID_OR_USED")

        trial_days = entry.trial_days
        if trial_days:
            values = dict(
                license_type="trial",
                trial_start_date=now,
                trial_end_date=now + dt.timedelta(days=trial_days),
                expiry_date=None,
            )
        else:
            values = dict(license_type="permanent", trial_end_date=None, expiry_date=None)

        try:
            await self.records.upsert(user_id, license_key=key, is_active=True, activated_at=now, **values)
        except Exception:
            logger.exception("[license] key consumed but license update failed for user=%s", user_id)
            return ActivationResult.failure("LICENSE_UPDATE_FAILED")

        if trial_days:
            logger.info("[license] %d-day trial activated for user=%s", trial_days, user_id)
            return ActivationResult(
                success=True,
                message=MESSAGES["TRIAL_ACTIVATED"].format(days=trial_days),
                code="TRIAL_ACTIVATED",
            )
        logger.info("[license] permanent license activated for user=%s", user_id)
        return ActivationResult(success=True, message=MESSAGES["PERMANENT_ACTIVATED"], code="PERMANENT_ACTIVATED")
