from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from tankhah.core.db import is_backend_configured
from tankhah.core.security import decode_access_token
from tankhah.models.user import User
from tankhah.services.license_service import LicenseService


@dataclass
class TokenIdentity:
    """Caller identity taken from verified JWT claims, used when there is no user table to consult."""
    id: str
    role: str = "user"
    email: Optional[str] = None


def _token_claims(request: Request, authorization: str | None) -> dict:
    """
    Read and verify the JWT of the request.

    The JWT is read from:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        token = request.cookies.get("accessToken")

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")

    try:
        payload = decode_access_token(token)
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")
    if not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")
    return payload


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
):
    """
    FastAPI dependency to get the current authenticated user.

    Raises:
        HTTPException (401): If no token is provided (AUTH_REQUIRED)
        HTTPException (401): If token is invalid or expired (AUTH_INVALID_TOKEN)
        HTTPException (401): If user not found in database (AUTH_USER_NOT_FOUND)
    """
    payload = _token_claims(request, authorization)
    user = await User.get_or_none(id=payload["sub"])
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_USER_NOT_FOUND")
    return user


async def get_license_user(
    request: Request,
    authorization: str | None = Header(default=None),
):
    """
    Current user for the license routes.

    Without a configured backend the ORM is never initialised, so the caller
    is identified by the token claims alone; the license service answers with
    the offline trial in that case and never touches the user.
    """
    if is_backend_configured():
        return await get_current_user(request, authorization)
    payload = _token_claims(request, authorization)
    return TokenIdentity(id=payload["sub"], role=payload.get("role", "user"))


async def require_admin(current: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency to ensure the current user is an administrator (role "admin").

    Raises:
        HTTPException (403): If user is not an admin (FORBIDDEN_ADMIN_ONLY)
        HTTPException (401): If user is not authenticated (from get_current_user)
    """
    if getattr(current, "role", "user") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_ADMIN_ONLY")
    return current


def get_license_service() -> LicenseService:
    """Dependency returning the Tortoise-backed license service (overridable in tests)."""
    return LicenseService()
