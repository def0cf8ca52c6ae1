"""
Database model for users.
Represents an account of the household tracker, holding credentials and
the role used by the admin endpoints.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has at most one License (one-to-one, via related_name="license")
    - Has many consumed LicenseKeys (via used_by foreign key in LicenseKey model)

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email is stored lower-cased; it is matched against the admin allow-list
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=256, unique=True, index=True)
    email = fields.CharField(max_length=256, null=True)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16, default="user")  # "user" or "admin"
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
