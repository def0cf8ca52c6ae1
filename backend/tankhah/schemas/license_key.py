"""
Pydantic schemas for license key management endpoints.
Defines request/response models for batch key generation and activation.
"""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class BatchGenerateIn(BaseModel):
    """
    Request model for batch license key generation.
    Used by admins to generate multiple registry keys at once.
    """
    count: int = Field(default=1, ge=1, le=200, description="Number of keys to generate, maximum 200")
    licenseType: Literal["trial", "permanent"] = "permanent"
    trialDays: Optional[int] = Field(default=None, ge=1, le=3650, description="Trial length; required for trial keys")


class GeneratedKeyItem(BaseModel):
    """
    Model for a single generated license key.
    Returned in batch generation response (only time plaintext key is exposed).
    """
    id: str
    key: str
    licenseType: str
    trialDays: Optional[int] = None


class BatchGenerateOut(BaseModel):
    keys: List[GeneratedKeyItem]


class LicenseKeyListOut(BaseModel):
    items: list[dict]
    offset: int
    limit: int
    total: int


class ActivateIn(BaseModel):
    """
    Request model for license activation.
    The key is normalized (trimmed, upper-cased) server-side.
    """
    key: str = ""
