from supabase import Client
from app.modules.events.schemas import (
    EventCreate, EventUpdate, EventResponse, DashboardStats,
    StatusCount, EventRegistrationCount
)
from app.modules.notifications.service import NotificationService
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

REGISTRATIONS_OPENED_TITLE = "Registrations are open!"


class EventService:
    def __init__(self, supabase: Client, notifier: Optional[NotificationService] = None):
        self.supabase = supabase
        self.notifier = notifier or NotificationService(supabase)

    def create_event(self, event_data: EventCreate) -> EventResponse:
        """Create a new event"""
        try:
            result = self.supabase.table("events")\
                .insert(event_data.model_dump(mode="json"))\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create event")

            logger.info(f"Created event {result.data[0]['id']}")
            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_event_by_id(self, event_id: str) -> EventResponse:
        """Get event by ID"""
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("id", event_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Event not found")

            return EventResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_events(
        self,
        status: Optional[str] = None,
        featured: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[EventResponse]:
        """List events, most recent event date first"""
        try:
            query = self.supabase.table("events").select("*")
            if status:
                query = query.eq("status", status)
            if featured is not None:
                query = query.eq("featured", featured)
            result = query.order("event_date", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [EventResponse(**event) for event in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_event(self, event_id: str, event_data: EventUpdate) -> EventResponse:
        """Update event fields that were sent"""
        try:
            update_data = event_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("events")\
                .update(update_data)\
                .eq("id", event_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Event not found")

            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_event_image(self, event_id: str, image_url: str) -> EventResponse:
        return self.update_event(event_id, EventUpdate(image_url=image_url))

    def delete_event(self, event_id: str) -> bool:
        """Delete event (registrations, gallery and reviews cascade)"""
        try:
            result = self.supabase.table("events")\
                .delete()\
                .eq("id", event_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Event not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_registration_status(self, event_id: str, registration_status: str) -> EventResponse:
        """
        Open, pause or close registrations.

        Opening registrations notifies every user; a failed broadcast is logged and does not
        undo the status change.
        """
        try:
            result = self.supabase.table("events")\
                .update({"registration_status": registration_status})\
                .eq("id", event_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Event not found")
            event = EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if registration_status == "open":
            try:
                self.notifier.send_event_notification(
                    event.id,
                    REGISTRATIONS_OPENED_TITLE,
                    f"Registrations for {event.title} are now open."
                )
            except Exception as e:
                logger.error(f"Failed to notify users about opened registrations for {event.id}: {e}")
        return event

    def _count(self, table: str, **filters) -> int:
        query = self.supabase.table(table).select("*", count="exact", head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    def get_dashboard_stats(self, recent_events: int = 5) -> DashboardStats:
        """Totals plus per-status and per-event breakdowns for the admin dashboard"""
        try:
            status_result = self.supabase.table("events").select("status").execute()
            status_counts = {}
            for row in status_result.data or []:
                status_counts[row["status"]] = status_counts.get(row["status"], 0) + 1

            recent_result = self.supabase.table("events")\
                .select("id, title")\
                .order("created_at", desc=True)\
                .limit(recent_events)\
                .execute()
            registrations_by_event = [
                EventRegistrationCount(
                    event_id=event["id"],
                    name=event["title"][:20],
                    registrations=self._count("event_registrations", event_id=event["id"])
                )
                for event in recent_result.data or []
            ]

            return DashboardStats(
                total_events=self._count("events"),
                total_registrations=self._count("event_registrations"),
                total_users=self._count("profiles"),
                events_by_status=[StatusCount(name=k, value=v) for k, v in status_counts.items()],
                registrations_by_event=registrations_by_event
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
