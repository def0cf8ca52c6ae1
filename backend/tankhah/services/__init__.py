"""
Services Module

- license_store: persistence collaborators (license records, key registry)
- license_service: license status derivation and key activation
"""
from .license_store import (
    LicenseRecordStore,
    LicenseKeyRegistry,
    TortoiseLicenseRecordStore,
    TortoiseLicenseKeyRegistry,
)
from .license_service import (
    ActivationResult,
    LicenseCheck,
    LicenseService,
    LicenseStatus,
    derive_status,
    fallback_status,
)

__all__ = [
    "LicenseRecordStore",
    "LicenseKeyRegistry",
    "TortoiseLicenseRecordStore",
    "TortoiseLicenseKeyRegistry",
    "ActivationResult",
    "LicenseCheck",
    "LicenseService",
    "LicenseStatus",
    "derive_status",
    "fallback_status",
]
