from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.roles.schemas import (
    RoleChangeRequest, RoleTransitionRequest, UserRoleResponse,
    RoleChangeResponse, AuditLogResponse
)
from app.modules.roles.service import RoleService, AuditLogService
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_service_supabase)) -> RoleService:
    return RoleService(supabase)


def get_audit_log_service(supabase: Client = Depends(get_service_supabase)) -> AuditLogService:
    return AuditLogService(supabase)


@router.get("/users", response_model=List[UserRoleResponse])
async def list_users_with_roles(
    user_data: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    """List users with their role and email"""
    return service.list_users_with_roles()


@router.put("/users/{user_id}", response_model=RoleChangeResponse)
async def set_user_role(
    user_id: str,
    role_data: RoleChangeRequest,
    user_data: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    """Set a user's role and record the change in the audit log"""
    return service.set_role(user_data, user_id, role_data.role, role_data.current_role)


@router.post("/users/{user_id}/promote", response_model=RoleChangeResponse)
async def promote_to_admin(
    user_id: str,
    transition: Optional[RoleTransitionRequest] = None,
    user_data: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    """Promote a user to admin"""
    current_role = transition.current_role if transition else None
    return service.promote_to_admin(user_data, user_id, current_role)


@router.post("/users/{user_id}/demote", response_model=RoleChangeResponse)
async def demote_to_user(
    user_id: str,
    transition: Optional[RoleTransitionRequest] = None,
    user_data: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    """Demote an admin to regular user"""
    current_role = transition.current_role if transition else None
    return service.demote_to_user(user_data, user_id, current_role)


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def list_audit_logs(
    search: Optional[str] = None,
    limit: int = 100,
    user_data: Dict = Depends(require_admin),
    service: AuditLogService = Depends(get_audit_log_service)
):
    """Role change history, newest first"""
    return service.list_audit_logs(search=search, limit=limit)
