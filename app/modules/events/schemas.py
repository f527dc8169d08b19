from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

EventStatus = Literal["upcoming", "ongoing", "completed"]
RegistrationStatus = Literal["open", "paused", "closed"]


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    event_date: Optional[datetime] = None
    status: EventStatus = "upcoming"
    registration_status: RegistrationStatus = "open"
    max_participants: Optional[int] = Field(None, gt=0)
    organizer: Optional[str] = None
    players_count: Optional[str] = None
    featured: bool = False
    image_url: Optional[str] = None


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    event_date: Optional[datetime] = None
    status: Optional[EventStatus] = None
    max_participants: Optional[int] = Field(None, gt=0)
    organizer: Optional[str] = None
    players_count: Optional[str] = None
    featured: Optional[bool] = None
    image_url: Optional[str] = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    event_date: Optional[datetime] = None
    status: str
    registration_status: Optional[str] = "open"
    max_participants: Optional[int] = None
    organizer: Optional[str] = None
    players_count: Optional[str] = None
    featured: Optional[bool] = False
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RegistrationStatusUpdate(BaseModel):
    registration_status: RegistrationStatus


class StatusCount(BaseModel):
    name: str
    value: int


class EventRegistrationCount(BaseModel):
    event_id: str
    name: str
    registrations: int


class DashboardStats(BaseModel):
    total_events: int
    total_registrations: int
    total_users: int
    events_by_status: List[StatusCount]
    registrations_by_event: List[EventRegistrationCount]
