from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from app.database.supabase_client import get_service_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    PasswordResetRequest, CurrentUserResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import (
    ADMIN_ROLE, security, get_auth_service, get_current_user_id, get_user_role, get_access_cache
)
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.post("/password-reset", status_code=202)
async def request_password_reset(
    reset_data: PasswordResetRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset email"""
    service.request_password_reset(reset_data)
    return {"message": "If the account exists, a reset link has been sent"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase),
    cache: Dict = Depends(get_access_cache),
):
    """Get current authenticated user and their role (for frontend UI)."""
    role = get_user_role(current_user["id"], supabase, cache)
    return CurrentUserResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        role=role,
        is_admin=role == ADMIN_ROLE,
    )
