from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import Response
from app.database.supabase_client import get_service_supabase, get_async_supabase
from app.modules.registrations.schemas import (
    RegistrationCreate, RegistrationResponse, RegistrationWithEventResponse, AttendanceUpdate
)
from app.modules.registrations.capacity import CapacitySnapshot, RegistrationCounter
from app.modules.registrations.service import RegistrationService
from app.modules.notifications.service import NotificationService
from app.core.dependencies import get_current_user_id, require_admin
from supabase import AsyncClient, Client
from typing import List, Optional, Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registrations", tags=["registrations"])
event_router = APIRouter(prefix="/events", tags=["registrations"])


def get_registration_service(supabase: Client = Depends(get_service_supabase)) -> RegistrationService:
    return RegistrationService(supabase, notifier=NotificationService(supabase))


@event_router.post("/{event_id}/registrations", response_model=RegistrationResponse, status_code=201)
async def register_for_event(
    event_id: str,
    registration_data: RegistrationCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: RegistrationService = Depends(get_registration_service)
):
    """Register the current user; 409 when already registered or the event is full"""
    return service.register(current_user["id"], event_id, registration_data)


@event_router.get("/{event_id}/capacity", response_model=CapacitySnapshot)
async def get_event_capacity(
    event_id: str,
    service: RegistrationService = Depends(get_registration_service)
):
    return service.get_capacity(event_id)


@event_router.websocket("/{event_id}/capacity/ws")
async def stream_event_capacity(
    websocket: WebSocket,
    event_id: str,
    supabase: Client = Depends(get_service_supabase),
    async_supabase: AsyncClient = Depends(get_async_supabase)
):
    """Push a capacity snapshot on connect and after every registration change"""
    try:
        initial = RegistrationService(supabase).get_capacity(event_id)
    except HTTPException as e:
        await websocket.close(code=4404 if e.status_code == 404 else 1011)
        return

    await websocket.accept()

    async def push(snapshot: CapacitySnapshot):
        await websocket.send_json(snapshot.model_dump(mode="json"))

    counter = RegistrationCounter(async_supabase, event_id, initial.max_participants, on_change=push)
    try:
        await counter.start()
    except Exception as e:
        logger.error(f"Could not start capacity stream for event {event_id}: {e}")
        await counter.stop()
        await websocket.close(code=1011)
        return

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(f"Capacity stream for event {event_id} closed")
    finally:
        await counter.stop()


@router.get("", response_model=List[RegistrationWithEventResponse])
async def list_registrations(
    event_id: Optional[str] = None,
    search: Optional[str] = None,
    user_data: Dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
):
    """All registrations with their event title, optionally filtered by event and search text"""
    return service.list_registrations(event_id=event_id, search=search)


@router.get("/export")
async def export_registrations(
    event_id: Optional[str] = None,
    user_data: Dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
):
    content = service.export_registrations_csv(event_id=event_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="registrations.csv"'}
    )


@router.get("/me", response_model=List[RegistrationWithEventResponse])
async def list_my_registrations(
    current_user: Dict = Depends(get_current_user_id),
    service: RegistrationService = Depends(get_registration_service)
):
    return service.list_user_registrations(current_user["id"])


@router.delete("/me/{registration_id}", status_code=204)
async def cancel_my_registration(
    registration_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RegistrationService = Depends(get_registration_service)
):
    service.cancel_registration(registration_id, current_user["id"])
    return None


@router.delete("/{registration_id}", status_code=204)
async def delete_registration(
    registration_id: str,
    user_data: Dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
):
    service.delete_registration(registration_id)
    return None


@router.patch("/{registration_id}/attendance", response_model=RegistrationResponse)
async def set_attendance(
    registration_id: str,
    attendance: AttendanceUpdate,
    user_data: Dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
):
    """Mark a registration as attended; attendance unlocks reviews"""
    return service.set_attendance(registration_id, attendance.attended)
