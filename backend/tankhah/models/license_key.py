# tankhah/models/license_key.py
import uuid
import hashlib
from typing import Optional
from tortoise import fields, models


class LicenseKey(models.Model):
    """
    One-time redemption key of the key registry.
    - key_hash: sha256(plain text key) 64-character hexadecimal string, unique (plain text not stored)
    - prefix: Plain text key prefix (PERM / TRIAL)
    - suffix_last4: Last 4 characters of plain text key (e.g., 3F9C)
    - trial_days: Length of the trial the key grants; null means a permanent grant
    - is_used: Whether already redeemed (flips to True exactly once)
    - used_by: Redeemer (User foreign key, can be null)
    - used_at: Redemption time
    - created_at: Creation time
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    key_hash = fields.CharField(max_length=64, unique=True, index=True)

    # Only for display, not the complete key
    prefix = fields.CharField(max_length=8, null=True)
    suffix_last4 = fields.CharField(max_length=4, null=True)

    trial_days = fields.IntField(null=True)
    is_used = fields.BooleanField(default=False)

    used_by: Optional[fields.ForeignKeyNullableRelation["User"]] = fields.ForeignKeyField(
        "models.User", related_name="license_keys", null=True, on_delete=fields.SET_NULL
    )
    used_at = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "license_keys"

    @property
    def license_type(self) -> str:
        return "trial" if self.trial_days else "permanent"

    @staticmethod
    def sha256_hex(raw: str) -> str:
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()
