# tankhah/models/license.py
import uuid
from tortoise import fields, models


class License(models.Model):
    """
    Access grant of a single user (one row per user, written with upsert semantics).
    - license_type: "trial" or "permanent"; permanent only means "not a trial"
    - is_active: False marks a record deactivated by an administrator
    - license_key: key that produced the grant (null for the implicit first-session trial)
    - trial_start_date / trial_end_date: trial window
    - expiry_date: optional end of a permanent grant (null = never expires)
    - activated_at: when a key was last redeemed for this user
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.OneToOneField(
        "models.User",
        related_name="license",
        on_delete=fields.CASCADE,
    )
    license_key = fields.CharField(max_length=64, null=True)
    license_type = fields.CharField(max_length=16, default="trial")
    is_active = fields.BooleanField(default=True)

    trial_start_date = fields.DatetimeField(null=True)
    trial_end_date = fields.DatetimeField(null=True)
    expiry_date = fields.DatetimeField(null=True)
    activated_at = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "licenses"
