"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: User account and authentication model
- License: Per-user license record (trial / permanent)
- LicenseKey: One-time key of the license key registry
"""
from .user import User
from .license import License
from .license_key import LicenseKey
