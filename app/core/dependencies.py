"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (role)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_user_role(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> str:
    """Return the user's role from user_roles, 'user' when no row exists. Uses request-scoped cache when provided."""
    if cache is not None and "role" in cache:
        return cache["role"]
    try:
        result = supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        roles = [r["role"] for r in result.data] if result.data else []
        role = ADMIN_ROLE if ADMIN_ROLE in roles else (roles[0] if roles else DEFAULT_ROLE)
        if cache is not None:
            cache["role"] = role
        return role
    except Exception as e:
        logger.error(f"Error getting user role: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error verifying permissions"
        )


def is_admin(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    return get_user_role(user_data["id"], supabase, cache) == ADMIN_ROLE


def require_admin(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase)
) -> dict:
    """Dependency that lets only admins through"""
    cache = _get_request_cache(request)
    if not is_admin(user_data, supabase, cache):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user_data


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by require_admin when used)."""
    return _get_request_cache(request)
