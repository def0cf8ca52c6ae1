from fastapi import APIRouter, Depends

from tankhah.api.v1.deps import get_license_service, get_license_user
from tankhah.models.user import User
from tankhah.schemas.license_key import ActivateIn
from tankhah.services.license_service import LicenseService

router = APIRouter(prefix="/license", tags=["license"])


@router.get("/status")
async def license_status(
    user: User = Depends(get_license_user),
    service: LicenseService = Depends(get_license_service),
):
    """
    Current license status of the logged-in user.

    Called on page load, after activation and on auth-state change. A user
    without a license record gets the implicit trial here; "created" tells the
    frontend to show its welcome dialog.

    Returns:
        dict: Response containing:
            - success: bool (always True)
            - data: dict with:
                - status: isValid, licenseType, daysRemaining (null = unlimited),
                  trialEndDate, expiryDate, isFallback
                - created: bool
    """
    check = await service.check(user.id)
    return {"success": True, "data": {"status": check.status.to_dict(), "created": check.created}}


@router.post("/activate")
async def activate_license(
    body: ActivateIn,
    user: User = Depends(get_license_user),
    service: LicenseService = Depends(get_license_service),
):
    """
    Redeem a license key for the logged-in user.

    Returns:
        dict: On success:
            - success: True
            - data: message, code and the refreshed status
        On failure:
            - success: False
            - error: code (KEY_REQUIRED, ADMIN_KEY_FORBIDDEN, KEY_INVALID_OR_USED, ...)
              and a localized message
    """
    result = await service.activate(user.id, user.email, body.key)
    if not result.success:
        return {"success": False, "error": {"code": result.code, "message": result.message}}

    check = await service.check(user.id)
    return {
        "success": True,
        "data": {"code": result.code, "message": result.message, "status": check.status.to_dict()},
    }
