import hashlib
import time
import logging
from supabase import Client
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, PasswordResetRequest
)
from app.config import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Token -> (user, expiry). Pages fire several API calls per load with the same token.
_TOKEN_CACHE: Dict[str, tuple] = {}
_TOKEN_CACHE_TTL_SEC = 60
_TOKEN_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _TOKEN_CACHE.clear()


def _token_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _cached_user(token: str) -> Optional[Dict[str, Any]]:
    entry = _TOKEN_CACHE.get(_token_key(token))
    if entry is None:
        return None
    user_data, expiry = entry
    if time.monotonic() >= expiry:
        _TOKEN_CACHE.pop(_token_key(token), None)
        return None
    return user_data


def _remember_user(token: str, user_data: Dict[str, Any]) -> None:
    if len(_TOKEN_CACHE) < _TOKEN_CACHE_MAX_SIZE:
        _TOKEN_CACHE[_token_key(token)] = (user_data, time.monotonic() + _TOKEN_CACHE_TTL_SEC)


def _user_to_dict(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "app_metadata": user.app_metadata or {},
        "created_at": user.created_at,
        "updated_at": user.updated_at
    }


class AuthService:
    """
    Thin wrapper over Supabase Auth. Profiles and the default 'user' role are
    created by the handle_new_user database trigger, not here.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up; the confirmation email links back to the site"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"email_redirect_to": f"{settings.site_url.rstrip('/')}/"}
            })
            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "already registered" in message or "already exists" in message:
                raise HTTPException(status_code=400, detail="This email is already registered")
            raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")

        logger.info(f"New account for {register_data.email}")
        return RegisterResponse(
            user_id=auth_response.user.id,
            email=auth_response.user.email or register_data.email,
            message="Account created. Check your email to confirm it."
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            message = str(e).lower()
            if "invalid" in message or "credentials" in message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def request_password_reset(self, reset_data: PasswordResetRequest) -> None:
        """Send a password reset link. Unknown emails are not revealed to the caller."""
        redirect_to = reset_data.redirect_to or f"{settings.site_url.rstrip('/')}/auth"
        try:
            self.supabase.auth.reset_password_for_email(reset_data.email, {"redirect_to": redirect_to})
        except Exception as e:
            logger.warning(f"Password reset request failed for {reset_data.email}: {e}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the user, cached for a short TTL"""
        user_data = _cached_user(token)
        if user_data is not None:
            return user_data
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.debug(f"Token rejected by Supabase Auth: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user_data = _user_to_dict(user_response.user)
        _remember_user(token, user_data)
        return user_data

    def logout(self, token: str) -> bool:
        # Tokens are stateless JWTs: forget the cached lookup and let the token expire
        _TOKEN_CACHE.pop(_token_key(token), None)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False
