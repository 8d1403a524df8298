"""Pydantic schemas for account endpoints.

Request fields default to empty values so that missing input reaches the
account service and fails with its own messages.
"""

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: str = ""
    personal_email: str = ""
    uni_email: str = ""
    password: str = ""


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user_id: int
    verification_token: str
    uni_email: str


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    """Public profile; never includes the password hash."""

    user_id: int
    name: str
    email: str
    uni_email: str
    role_id: int
    avatar_color: str
    is_verified: bool


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserResponse


class VerifyRequest(BaseModel):
    token: str = ""


class ResendVerificationRequest(BaseModel):
    email: str = ""


class MessageResponse(BaseModel):
    message: str
