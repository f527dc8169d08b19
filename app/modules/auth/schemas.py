from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class PasswordResetRequest(BaseModel):
    email: EmailStr
    redirect_to: Optional[str] = None


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: str
    is_admin: bool
