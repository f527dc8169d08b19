from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.reviews.schemas import (
    ReviewUpsert, ReviewResponse, EventReviewsResponse, ReviewEligibility
)
from app.modules.reviews.service import ReviewService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/events", tags=["reviews"])


def get_review_service(supabase: Client = Depends(get_service_supabase)) -> ReviewService:
    return ReviewService(supabase)


@router.get("/{event_id}/reviews", response_model=EventReviewsResponse)
async def list_event_reviews(
    event_id: str,
    service: ReviewService = Depends(get_review_service)
):
    return service.list_reviews(event_id)


@router.get("/{event_id}/reviews/me", response_model=ReviewEligibility)
async def get_my_review(
    event_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ReviewService = Depends(get_review_service)
):
    """Whether the current user may review the event, and their existing review"""
    return service.get_eligibility(event_id, current_user["id"])


@router.put("/{event_id}/reviews", response_model=ReviewResponse)
async def upsert_my_review(
    event_id: str,
    review_data: ReviewUpsert,
    current_user: Dict = Depends(get_current_user_id),
    service: ReviewService = Depends(get_review_service)
):
    return service.upsert_review(event_id, current_user["id"], review_data)
