"""
Pydantic schemas for authentication endpoints.
Defines request models for registration and login.
"""
from pydantic import BaseModel


class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    username: str
    password: str


class RegisterIn(BaseModel):
    """
    Request model for account registration.
    Emails on the admin allow-list are rejected.
    """
    username: str
    email: str | None = None
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    email: str | None = None
    role: str = "user"
