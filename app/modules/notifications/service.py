from supabase import Client
from app.modules.notifications.schemas import NotificationResponse, LowCapacityResult, FanOutResult
from app.config import settings
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

LOW_CAPACITY_TITLE = "Last spots available"


def low_capacity_message(event_title: str, remaining_spots: int) -> str:
    if remaining_spots <= 0:
        return f'The event "{event_title}" is full!'
    if remaining_spots == 1:
        return f'Last spot available for "{event_title}"!'
    return f'Only {remaining_spots} spots left for "{event_title}"!'


def is_low_capacity(remaining_spots: int, max_participants: int) -> bool:
    """Low when few spots remain in absolute terms or as a share of capacity"""
    percentage_remaining = (remaining_spots / max_participants) * 100
    return (
        remaining_spots <= settings.low_capacity_spots
        or percentage_remaining <= settings.low_capacity_ratio * 100
    )


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def fan_out(
        self,
        event_id: Optional[str],
        title: str,
        message: str,
        notification_type: str = "info",
        exclude_user_id: Optional[str] = None
    ) -> int:
        """Insert one notification per user (minus the excluded one) in a single batch. Returns rows written."""
        try:
            query = self.supabase.table("profiles").select("id")
            if exclude_user_id:
                query = query.neq("id", exclude_user_id)
            users_result = query.execute()
            users = users_result.data or []
            if not users:
                logger.info("No users to notify")
                return 0

            notifications = [
                {
                    "user_id": user["id"],
                    "title": title,
                    "message": message,
                    "type": notification_type,
                    "event_id": event_id,
                    "read": False
                }
                for user in users
            ]
            self.supabase.table("notifications").insert(notifications).execute()
            logger.info(f"Created {len(notifications)} notifications for event {event_id}")
            return len(notifications)
        except Exception as e:
            logger.error(f"Error creating notifications for event {event_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def check_low_capacity(self, event_id: str, new_registration_user_id: Optional[str] = None) -> LowCapacityResult:
        """Warn everyone but the new registrant when an event is close to full"""
        try:
            event_result = self.supabase.table("events")\
                .select("title, max_participants")\
                .eq("id", event_id)\
                .maybe_single()\
                .execute()
            if not event_result or not event_result.data:
                raise HTTPException(status_code=404, detail="Event not found")
            event = event_result.data

            if event.get("max_participants") is None:
                logger.info(f"Event {event_id} has no max_participants limit, skipping notification")
                return LowCapacityResult(message="No capacity limit set")

            count_result = self.supabase.table("event_registrations")\
                .select("*", count="exact", head=True)\
                .eq("event_id", event_id)\
                .execute()
            current_count = count_result.count or 0
            max_participants = event["max_participants"]
            remaining_spots = max_participants - current_count

            logger.info(
                f"Event: {event['title']}, Current: {current_count}, "
                f"Max: {max_participants}, Remaining: {remaining_spots}"
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not is_low_capacity(remaining_spots, max_participants):
            return LowCapacityResult(message="Capacity OK", remaining_spots=remaining_spots)

        count = self.fan_out(
            event_id,
            LOW_CAPACITY_TITLE,
            low_capacity_message(event["title"], remaining_spots),
            notification_type="warning",
            exclude_user_id=new_registration_user_id
        )
        if count == 0:
            return LowCapacityResult(message="No users to notify", count=0, remaining_spots=remaining_spots)
        return LowCapacityResult(message="Notifications sent", count=count, remaining_spots=remaining_spots)

    def send_event_notification(self, event_id: str, title: str, message: str) -> FanOutResult:
        """Admin broadcast about an event to every user"""
        count = self.fan_out(event_id, title, message, notification_type="event")
        if count == 0:
            return FanOutResult(count=0, message="No users to notify")
        return FanOutResult(count=count)

    def list_notifications(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[NotificationResponse]:
        try:
            query = self.supabase.table("notifications").select("*").eq("user_id", user_id)
            if unread_only:
                query = query.eq("read", False)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [NotificationResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_unread_count(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .select("*", count="exact", head=True)\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()
            return result.count or 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_read(self, notification_id: str, user_id: str) -> NotificationResponse:
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("id", notification_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Notification not found")
            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_all_read(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
