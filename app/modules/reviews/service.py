from supabase import Client
from app.modules.reviews.schemas import (
    ReviewUpsert, ReviewResponse, EventReviewsResponse, ReviewEligibility
)
from typing import Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

UNKNOWN_REVIEWER = "Unknown user"


class ReviewService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_reviews(self, event_id: str) -> EventReviewsResponse:
        """Reviews of an event, newest first, with reviewer email and average rating"""
        try:
            result = self.supabase.table("event_reviews")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []

            emails = {}
            user_ids = list({row["user_id"] for row in rows})
            if user_ids:
                profiles_result = self.supabase.table("profiles")\
                    .select("id, email")\
                    .in_("id", user_ids)\
                    .execute()
                emails = {p["id"]: p.get("email") for p in profiles_result.data or []}

            reviews = [
                ReviewResponse(**row, reviewer_email=emails.get(row["user_id"]) or UNKNOWN_REVIEWER)
                for row in rows
            ]
            average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else None
            return EventReviewsResponse(
                event_id=event_id,
                average_rating=average,
                total=len(reviews),
                reviews=reviews
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def has_attended(self, event_id: str, user_id: str) -> bool:
        result = self.supabase.table("event_registrations")\
            .select("attended")\
            .eq("event_id", event_id)\
            .eq("user_id", user_id)\
            .execute()
        return any(row.get("attended") for row in result.data or [])

    def _get_own_review(self, event_id: str, user_id: str) -> Optional[ReviewResponse]:
        result = self.supabase.table("event_reviews")\
            .select("*")\
            .eq("event_id", event_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            return None
        return ReviewResponse(**result.data[0])

    def get_eligibility(self, event_id: str, user_id: str) -> ReviewEligibility:
        try:
            if not self.has_attended(event_id, user_id):
                return ReviewEligibility(can_review=False)
            return ReviewEligibility(can_review=True, review=self._get_own_review(event_id, user_id))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upsert_review(self, event_id: str, user_id: str, review_data: ReviewUpsert) -> ReviewResponse:
        """Create or replace the caller's review; only attendees may review"""
        try:
            if not self.has_attended(event_id, user_id):
                raise HTTPException(status_code=403, detail="Only attendees can review this event")

            result = self.supabase.table("event_reviews")\
                .upsert({
                    "event_id": event_id,
                    "user_id": user_id,
                    "rating": review_data.rating,
                    "comment": review_data.comment
                }, on_conflict="event_id,user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save review")
            logger.info(f"User {user_id} reviewed event {event_id}")
            return ReviewResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
