from fastapi import APIRouter, Depends, UploadFile, File
from app.database.supabase_client import get_service_supabase
from app.modules.events.schemas import (
    EventCreate, EventUpdate, EventResponse, RegistrationStatusUpdate, DashboardStats
)
from app.modules.events.service import EventService
from app.modules.notifications.service import NotificationService
from app.core.dependencies import require_admin
from app.storage import upload_image
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(supabase: Client = Depends(get_service_supabase)) -> EventService:
    return EventService(supabase, notifier=NotificationService(supabase))


@router.get("", response_model=List[EventResponse])
async def list_events(
    status: Optional[str] = None,
    featured: Optional[bool] = None,
    limit: int = 50,
    offset: int = 0,
    service: EventService = Depends(get_event_service)
):
    """Public event list, latest event date first"""
    return service.list_events(status=status, featured=featured, limit=limit, offset=offset)


@router.get("/stats/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    user_data: Dict = Depends(require_admin),
    service: EventService = Depends(get_event_service)
):
    return service.get_dashboard_stats()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    service: EventService = Depends(get_event_service)
):
    return service.get_event_by_id(event_id)


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    event_data: EventCreate,
    user_data: Dict = Depends(require_admin),
    service: EventService = Depends(get_event_service)
):
    return service.create_event(event_data)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    user_data: Dict = Depends(require_admin),
    service: EventService = Depends(get_event_service)
):
    return service.update_event(event_id, event_data)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    user_data: Dict = Depends(require_admin),
    service: EventService = Depends(get_event_service)
):
    service.delete_event(event_id)
    return None


@router.post("/{event_id}/image", response_model=EventResponse)
async def upload_event_image(
    event_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: EventService = Depends(get_event_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Upload the event cover image and store its public URL on the event"""
    service.get_event_by_id(event_id)
    content = await file.read()
    url = upload_image(
        supabase, content, file.filename, "events",
        content_type=file.content_type or "application/octet-stream"
    )
    return service.set_event_image(event_id, url)


@router.put("/{event_id}/registration-status", response_model=EventResponse)
async def update_registration_status(
    event_id: str,
    status_data: RegistrationStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: EventService = Depends(get_event_service)
):
    """Open, pause or close registrations; opening notifies all users"""
    return service.update_registration_status(event_id, status_data.registration_status)
