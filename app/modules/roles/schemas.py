from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

AppRole = Literal["admin", "user"]


class RoleChangeRequest(BaseModel):
    role: AppRole
    current_role: Optional[AppRole] = None  # caller's view of the current role, recorded as old_role


class RoleTransitionRequest(BaseModel):
    current_role: Optional[AppRole] = None


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    role: AppRole
    email: str = "N/A"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleChangeResponse(BaseModel):
    user_id: str
    action: str
    old_role: Optional[AppRole] = None
    new_role: AppRole
    audit_logged: bool
    message: str


class AuditLogResponse(BaseModel):
    id: str
    admin_user_id: Optional[str] = None
    admin_email: Optional[str] = None
    target_user_id: str
    target_email: Optional[str] = None
    action: str
    old_role: Optional[AppRole] = None
    new_role: Optional[AppRole] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
