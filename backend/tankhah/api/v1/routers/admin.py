from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tankhah.api.v1.deps import require_admin
from tankhah.models.license_key import LicenseKey
from tankhah.schemas.license_key import (
    BatchGenerateIn,
    BatchGenerateOut,
    GeneratedKeyItem,
    LicenseKeyListOut,
)
from tankhah.services.license_store import TortoiseLicenseKeyRegistry

router = APIRouter(prefix="/admin", tags=["admin"])


def get_key_registry() -> TortoiseLicenseKeyRegistry:
    return TortoiseLicenseKeyRegistry()


def _key_to_dict(r: LicenseKey) -> dict:
    """
    Convert a registry entry to its API representation.

    Keys are displayed masked as "PREFIX-****-****-LAST4"; the plaintext is
    never returned after generation.
    """
    if r.prefix and r.suffix_last4:
        key_preview = f"{r.prefix}-****-****-{r.suffix_last4}"
    else:
        key_preview = None
    return {
        "id": str(r.id),
        "licenseType": r.license_type,
        "trialDays": r.trial_days,
        "isUsed": r.is_used,
        "usedBy": str(r.used_by_id) if r.used_by_id else None,
        "usedAt": r.used_at.isoformat() if r.used_at else None,
        "createdAt": r.created_at.isoformat() if r.created_at else None,
        "keyPreview": key_preview,
    }


# ==============================================================================
# License key registry (batch generation, list, detail, delete)
#     Prefix: /api/v1/admin/license-keys/*
#     Note: plaintext keys are only returned once, by the generation endpoint
# ==============================================================================
@router.post(
    "/license-keys/batch",
    response_model=BatchGenerateOut,
    dependencies=[Depends(require_admin)],
)
async def batch_generate_keys(
    body: BatchGenerateIn,
    registry: TortoiseLicenseKeyRegistry = Depends(get_key_registry),
):
    """
    Batch generate license keys (admin only).

    Permanent keys look like PERM-XXXX-XXXX-XXXX-XXXX, trial keys like
    TRIAL-XXXX-XXXX-XXXX-XXXX and carry their trial length.

    Raises:
        HTTPException (400): If a trial key is requested without trialDays
        HTTPException (500): If key generation collision occurs (extremely rare)
        HTTPException (403): If user is not an admin
    """
    trial_days: Optional[int] = None
    if body.licenseType == "trial":
        if not body.trialDays:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "TRIAL_DAYS_REQUIRED", "message": "trialDays is required for trial keys"},
            )
        trial_days = body.trialDays

    items: List[GeneratedKeyItem] = []
    for _ in range(body.count):
        try:
            entry, plain = await registry.generate(trial_days)
        except RuntimeError:
            raise HTTPException(status_code=500, detail="KEY_GENERATION_COLLISION")
        items.append(
            GeneratedKeyItem(
                id=str(entry.id),
                key=plain,
                licenseType=entry.license_type,
                trialDays=entry.trial_days,
            )
        )

    return {"keys": items}


@router.get(
    "/license-keys",
    response_model=LicenseKeyListOut,
    dependencies=[Depends(require_admin)],
)
async def list_license_keys(
    is_used: Optional[bool] = Query(default=None),
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=200),
    registry: TortoiseLicenseKeyRegistry = Depends(get_key_registry),
):
    """
    Get paginated list of license keys (admin only), newest first.
    Optionally filtered by usage status.
    """
    total, rows = await registry.list_keys(is_used=is_used, offset=offset, limit=limit)
    items = [_key_to_dict(r) for r in rows]
    return {"items": items, "offset": offset, "limit": limit, "total": total}


@router.get(
    "/license-keys/{key_id}",
    dependencies=[Depends(require_admin)],
)
async def get_license_key_detail(
    key_id: str,
    registry: TortoiseLicenseKeyRegistry = Depends(get_key_registry),
):
    """
    Get detailed information about a specific license key (admin only).

    Raises:
        HTTPException (404): If key not found
    """
    r = await registry.get(key_id)
    if not r:
        raise HTTPException(status_code=404, detail="KEY_NOT_FOUND")
    return {"success": True, "data": _key_to_dict(r)}


@router.delete(
    "/license-keys/{key_id}",
    dependencies=[Depends(require_admin)],
)
async def delete_license_key(
    key_id: str,
    registry: TortoiseLicenseKeyRegistry = Depends(get_key_registry),
):
    """
    Delete a license key (admin only).

    Used keys can also be deleted; licenses already granted from them are kept.

    Raises:
        HTTPException (404): If key not found
    """
    if not await registry.delete(key_id):
        raise HTTPException(status_code=404, detail="KEY_NOT_FOUND")
    return {"success": True, "data": {"ok": True}}
