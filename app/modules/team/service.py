from supabase import Client
from app.modules.team.schemas import TeamMemberCreate, TeamMemberUpdate, TeamMemberResponse
from typing import List
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_members(self) -> List[TeamMemberResponse]:
        try:
            result = self.supabase.table("team_members")\
                .select("*")\
                .order("display_order")\
                .execute()
            return [TeamMemberResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_member(self, member_data: TeamMemberCreate) -> TeamMemberResponse:
        try:
            result = self.supabase.table("team_members")\
                .insert(member_data.model_dump())\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team member")
            return TeamMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_member(self, member_id: str, member_data: TeamMemberUpdate) -> TeamMemberResponse:
        try:
            update_data = member_data.model_dump(exclude_unset=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("team_members")\
                .update(update_data)\
                .eq("id", member_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Team member not found")
            return TeamMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_member(self, member_id: str) -> bool:
        try:
            result = self.supabase.table("team_members")\
                .delete()\
                .eq("id", member_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Team member not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
