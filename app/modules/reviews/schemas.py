from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ReviewUpsert(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: str
    event_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    reviewer_email: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventReviewsResponse(BaseModel):
    event_id: str
    average_rating: Optional[float] = None
    total: int
    reviews: List[ReviewResponse]


class ReviewEligibility(BaseModel):
    can_review: bool
    review: Optional[ReviewResponse] = None
