from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.notifications.schemas import NotificationResponse, UnreadCountResponse
from app.modules.notifications.service import NotificationService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_service_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=List[NotificationResponse])
async def list_my_notifications(
    unread_only: bool = False,
    limit: int = 50,
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Notifications for the current user, newest first"""
    return service.list_notifications(current_user["id"], unread_only=unread_only, limit=limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return UnreadCountResponse(unread=service.get_unread_count(current_user["id"]))


@router.post("/read-all")
async def mark_all_read(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    updated = service.mark_all_read(current_user["id"])
    return {"message": "All notifications marked as read", "updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_read(notification_id, current_user["id"])
