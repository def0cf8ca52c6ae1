from fastapi import APIRouter, HTTPException, Response, status, Depends
from tankhah.config import settings
from tankhah.core.security import verify_password, create_access_token, hash_password
from tankhah.api.v1.deps import get_current_user
from tankhah.models.user import User
from tankhah.schemas.auth import LoginRequest, RegisterIn, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_out(user: User) -> dict:
    return UserOut(id=str(user.id), username=user.username, email=user.email, role=user.role).model_dump()


@router.post("/register")
async def register(body: RegisterIn):
    """
    Register a new user account.

    Username and email must be unique across all users. The email is stored
    lower-cased. Addresses on the admin allow-list cannot be self-registered.

    Returns:
        dict: Success response with user data, or error response:
            - success: bool
            - data: dict with user id, username, email (if success)
            - error: dict with error code and message (if failure)

    Error codes:
        - BAD_REQUEST: Missing username or password
        - USERNAME_EXISTS: Username already taken
        - EMAIL_EXISTS: Email already registered
        - EMAIL_RESERVED: Email is on the admin allow-list
    """
    if not body.username or not body.password:
        return {"success": False, "error": {"code": "BAD_REQUEST", "message": "username/password required"}}
    email = (body.email or "").strip().lower() or None
    if email and email in settings.admin_emails:
        return {"success": False, "error": {"code": "EMAIL_RESERVED", "message": "Email is reserved"}}
    if await User.get_or_none(username=body.username):
        return {"success": False, "error": {"code": "USERNAME_EXISTS", "message": "Username already exists"}}
    if email and await User.get_or_none(email=email):
        return {"success": False, "error": {"code": "EMAIL_EXISTS", "message": "Email already registered"}}
    u = await User.create(
        username=body.username,
        email=email,
        password_hash=hash_password(body.password),
        role="user",
    )
    return {"success": True, "data": {"id": str(u.id), "username": u.username, "email": u.email}}


@router.post("/login")
async def login(payload: LoginRequest, response: Response):
    """
    Authenticate user and create access token.

    The token is returned in the response body and also set as an HttpOnly
    cookie named "accessToken" for browser-based clients.

    Raises:
        HTTPException (401): If credentials are invalid
    """
    user = await User.get_or_none(username=payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Incorrect username or password"})
    token = create_access_token(str(user.id), user.role)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": {"user": _user_out(user), "accessToken": token}}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return {"success": True, "data": _user_out(user)}


@router.post("/logout")
async def logout(response: Response):
    """
    Log out the current user by clearing the access token cookie.
    The JWT itself remains valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True}
