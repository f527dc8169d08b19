from fastapi import APIRouter, Depends, UploadFile, File
from app.database.supabase_client import get_service_supabase
from app.modules.team.schemas import TeamMemberCreate, TeamMemberUpdate, TeamMemberResponse
from app.modules.team.service import TeamService
from app.core.dependencies import require_admin
from app.storage import upload_image
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/team", tags=["team"])


def get_team_service(supabase: Client = Depends(get_service_supabase)) -> TeamService:
    return TeamService(supabase)


@router.get("", response_model=List[TeamMemberResponse])
async def list_team_members(service: TeamService = Depends(get_team_service)):
    return service.list_members()


@router.post("", response_model=TeamMemberResponse, status_code=201)
async def create_team_member(
    member_data: TeamMemberCreate,
    user_data: Dict = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    return service.create_member(member_data)


@router.put("/{member_id}", response_model=TeamMemberResponse)
async def update_team_member(
    member_id: str,
    member_data: TeamMemberUpdate,
    user_data: Dict = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    return service.update_member(member_id, member_data)


@router.post("/{member_id}/avatar", response_model=TeamMemberResponse)
async def upload_team_avatar(
    member_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: TeamService = Depends(get_team_service),
    supabase: Client = Depends(get_service_supabase)
):
    content = await file.read()
    url = upload_image(
        supabase, content, file.filename, "team",
        content_type=file.content_type or "application/octet-stream"
    )
    return service.update_member(member_id, TeamMemberUpdate(avatar_url=url))


@router.delete("/{member_id}", status_code=204)
async def delete_team_member(
    member_id: str,
    user_data: Dict = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    service.delete_member(member_id)
    return None
