from supabase import Client
from app.modules.roles.schemas import UserRoleResponse, RoleChangeResponse, AuditLogResponse
from app.core.dependencies import ADMIN_ROLE, DEFAULT_ROLE
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

ACTION_PROMOTE = "promote_to_admin"
ACTION_DEMOTE = "demote_to_user"
ACTION_SET_ROLE = "set_role"


class AuditLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_audit_log(
        self,
        actor: Dict[str, Any],
        target_user_id: str,
        action: str,
        old_role: Optional[str],
        new_role: str,
        target_email: Optional[str] = None
    ) -> bool:
        """Append an audit row. Best-effort: failures are logged and reported as False."""
        try:
            result = self.supabase.table("audit_logs").insert({
                "admin_user_id": actor.get("id"),
                "admin_email": actor.get("email"),
                "target_user_id": target_user_id,
                "target_email": target_email,
                "action": action,
                "old_role": old_role,
                "new_role": new_role
            }).execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error creating audit log for {target_user_id}: {e}")
            return False

    def list_audit_logs(self, search: Optional[str] = None, limit: int = 100) -> List[AuditLogResponse]:
        """Newest audit rows first, optionally filtered by admin email, target email or action"""
        try:
            result = self.supabase.table("audit_logs")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            logs = [AuditLogResponse(**row) for row in result.data or []]
            if search:
                needle = search.lower()
                logs = [
                    log for log in logs
                    if needle in (log.admin_email or "").lower()
                    or needle in (log.target_email or "").lower()
                    or needle in log.action.lower()
                ]
            return logs
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.audit = AuditLogService(supabase)

    def get_user_role(self, user_id: str) -> str:
        """Current role of a user; 'user' when no row exists"""
        try:
            result = self.supabase.table("user_roles")\
                .select("role")\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                return DEFAULT_ROLE
            return result.data[0]["role"]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_email(self, user_id: str) -> str:
        try:
            result = self.supabase.table("profiles")\
                .select("email")\
                .eq("id", user_id)\
                .execute()
            if result.data:
                return result.data[0].get("email") or "N/A"
        except Exception as e:
            logger.warning(f"Could not load email for {user_id}: {e}")
        return "N/A"

    def list_users_with_roles(self) -> List[UserRoleResponse]:
        """Role rows joined with profile emails"""
        try:
            roles_result = self.supabase.table("user_roles")\
                .select("id, user_id, role, created_at")\
                .execute()
            profiles_result = self.supabase.table("profiles")\
                .select("id, email")\
                .execute()
            emails = {p["id"]: p.get("email") for p in profiles_result.data or []}
            return [
                UserRoleResponse(**row, email=emails.get(row["user_id"]) or "N/A")
                for row in roles_result.data or []
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_role(
        self,
        actor: Dict[str, Any],
        target_user_id: str,
        new_role: str,
        old_role: Optional[str] = None,
        action: str = ACTION_SET_ROLE
    ) -> RoleChangeResponse:
        """
        Replace the user's role with a single upsert keyed by user_id, then append an audit row.

        old_role is recorded as passed by the caller. An audit failure does not undo the role change;
        it is reported through audit_logged.
        """
        try:
            result = self.supabase.table("user_roles")\
                .upsert({"user_id": target_user_id, "role": new_role}, on_conflict="user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update role")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update role: {str(e)}")

        logger.info(f"User {target_user_id} role set to {new_role} by {actor.get('id')}")
        audit_logged = self.audit.create_audit_log(
            actor,
            target_user_id,
            action,
            old_role,
            new_role,
            target_email=self._get_email(target_user_id)
        )
        return RoleChangeResponse(
            user_id=target_user_id,
            action=action,
            old_role=old_role,
            new_role=new_role,
            audit_logged=audit_logged,
            message=f"Role updated to {new_role}"
        )

    def promote_to_admin(self, actor: Dict[str, Any], user_id: str, current_role: Optional[str]) -> RoleChangeResponse:
        """Grant admin; rejected when the caller already sees the user as admin"""
        current_role = current_role or self.get_user_role(user_id)
        if current_role == ADMIN_ROLE:
            raise HTTPException(status_code=400, detail="User is already an admin")
        return self.set_role(actor, user_id, ADMIN_ROLE, current_role, action=ACTION_PROMOTE)

    def demote_to_user(self, actor: Dict[str, Any], user_id: str, current_role: Optional[str]) -> RoleChangeResponse:
        """Revoke admin; rejected when the caller already sees the user as a regular user"""
        current_role = current_role or self.get_user_role(user_id)
        if current_role == DEFAULT_ROLE:
            raise HTTPException(status_code=400, detail="User is already a regular user")
        return self.set_role(actor, user_id, DEFAULT_ROLE, current_role, action=ACTION_DEMOTE)
