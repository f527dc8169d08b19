from supabase import Client
from app.modules.registrations.schemas import (
    RegistrationCreate, RegistrationResponse, RegistrationWithEventResponse
)
from app.modules.registrations.capacity import CapacitySnapshot, count_registrations
from app.modules.notifications.service import NotificationService
from app.core.email import send_registration_confirmation
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import csv
import io
import logging

logger = logging.getLogger(__name__)

REGISTRATION_RESULT_ERRORS = {
    "duplicate": (409, "You are already registered for this event"),
    "full": (409, "This event is full"),
    "closed": (400, "Registrations are not open for this event"),
    "not_found": (404, "Event not found"),
}

CSV_COLUMNS = [
    "event_title", "player_name", "player_email", "minecraft_username",
    "additional_info", "attended", "status", "created_at"
]


def _raise_for_result(status: str):
    if status in REGISTRATION_RESULT_ERRORS:
        code, detail = REGISTRATION_RESULT_ERRORS[status]
        raise HTTPException(status_code=code, detail=detail)


class RegistrationService:
    def __init__(self, supabase: Client, notifier: Optional[NotificationService] = None):
        self.supabase = supabase
        self.notifier = notifier or NotificationService(supabase)

    def _get_event(self, event_id: str) -> Dict[str, Any]:
        result = self.supabase.table("events")\
            .select("*")\
            .eq("id", event_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Event not found")
        return result.data

    def get_capacity(self, event_id: str) -> CapacitySnapshot:
        """Current count and capacity state of an event"""
        try:
            event = self._get_event(event_id)
            count = count_registrations(self.supabase, event_id)
            return CapacitySnapshot.build(event_id, count, event.get("max_participants"))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def check_gate(self, event: Dict[str, Any], user_id: str) -> None:
        """
        Read-only pre-checks that give a precise error before any write.
        The authoritative check is repeated by register_for_event under a row lock.
        """
        if event.get("status") != "upcoming" or event.get("registration_status") in ("closed", "paused"):
            _raise_for_result("closed")

        existing = self.supabase.table("event_registrations")\
            .select("id")\
            .eq("event_id", event["id"])\
            .eq("user_id", user_id)\
            .execute()
        if existing.data:
            _raise_for_result("duplicate")

        max_participants = event.get("max_participants")
        if max_participants is not None and count_registrations(self.supabase, event["id"]) >= max_participants:
            _raise_for_result("full")

    def register(self, user_id: str, event_id: str, data: RegistrationCreate) -> RegistrationResponse:
        """
        Register the user for an event.

        The insert runs inside the register_for_event database function, which locks the
        event row, so of two concurrent requests for the last spot only the first succeeds.
        """
        try:
            event = self._get_event(event_id)
            self.check_gate(event, user_id)

            result = self.supabase.rpc("register_for_event", {
                "p_event_id": event_id,
                "p_user_id": user_id,
                "p_player_name": data.player_name,
                "p_player_email": data.player_email,
                "p_minecraft_username": data.minecraft_username,
                "p_additional_info": data.additional_info
            }).execute()

            outcome = result.data or {}
            _raise_for_result(outcome.get("status"))
            if outcome.get("status") != "registered" or not outcome.get("registration"):
                raise HTTPException(status_code=500, detail="Failed to register for event")
            registration = RegistrationResponse(**outcome["registration"])
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "23505" in error_msg or "duplicate" in error_msg.lower():
                _raise_for_result("duplicate")
            raise HTTPException(status_code=500, detail=error_msg)

        logger.info(f"User {user_id} registered for event {event_id}")
        self._after_registration(event, registration)
        return registration

    def _after_registration(self, event: Dict[str, Any], registration: RegistrationResponse):
        """Confirmation email and low-capacity warning; neither can fail the registration"""
        try:
            send_registration_confirmation(
                to_email=registration.player_email,
                player_name=registration.player_name,
                minecraft_username=registration.minecraft_username,
                event_title=event.get("title", ""),
                event_date=event.get("event_date"),
                additional_info=registration.additional_info,
            )
        except Exception as e:
            logger.error(f"Failed to send confirmation email to {registration.player_email}: {e}")

        try:
            self.notifier.check_low_capacity(registration.event_id, registration.user_id)
        except Exception as e:
            logger.error(f"Low capacity check failed for event {registration.event_id}: {e}")

    def _with_events(self, rows: List[Dict[str, Any]]) -> List[RegistrationWithEventResponse]:
        event_ids = list({row["event_id"] for row in rows if row.get("event_id")})
        events = {}
        if event_ids:
            events_result = self.supabase.table("events")\
                .select("id, title, event_date, image_url")\
                .in_("id", event_ids)\
                .execute()
            events = {e["id"]: e for e in events_result.data or []}

        registrations = []
        for row in rows:
            event = events.get(row.get("event_id"), {})
            registrations.append(RegistrationWithEventResponse(
                **row,
                event_title=event.get("title"),
                event_date=event.get("event_date"),
                event_image_url=event.get("image_url")
            ))
        return registrations

    def list_registrations(
        self,
        event_id: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[RegistrationWithEventResponse]:
        """Admin listing, newest first, with a search over name, email and minecraft username"""
        try:
            query = self.supabase.table("event_registrations").select("*")
            if event_id:
                query = query.eq("event_id", event_id)
            result = query.order("created_at", desc=True).execute()
            rows = result.data or []
            if search:
                needle = search.lower()
                rows = [
                    row for row in rows
                    if needle in (row.get("player_name") or "").lower()
                    or needle in (row.get("player_email") or "").lower()
                    or needle in (row.get("minecraft_username") or "").lower()
                ]
            return self._with_events(rows)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_registrations(self, user_id: str) -> List[RegistrationWithEventResponse]:
        try:
            result = self.supabase.table("event_registrations")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return self._with_events(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def cancel_registration(self, registration_id: str, user_id: str) -> bool:
        """Users can only cancel their own registrations"""
        try:
            result = self.supabase.table("event_registrations")\
                .delete()\
                .eq("id", registration_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Registration not found")
            logger.info(f"User {user_id} cancelled registration {registration_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_registration(self, registration_id: str) -> bool:
        try:
            result = self.supabase.table("event_registrations")\
                .delete()\
                .eq("id", registration_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Registration not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_attendance(self, registration_id: str, attended: bool) -> RegistrationResponse:
        try:
            result = self.supabase.table("event_registrations")\
                .update({"attended": attended})\
                .eq("id", registration_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Registration not found")
            return RegistrationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def export_registrations_csv(self, event_id: Optional[str] = None) -> str:
        registrations = self.list_registrations(event_id=event_id)
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for registration in registrations:
            row = registration.model_dump(mode="json")
            row["event_title"] = row.get("event_title") or ""
            writer.writerow(row)
        return output.getvalue()
