from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class RegistrationCreate(BaseModel):
    player_name: str = Field(..., min_length=2, max_length=100)
    player_email: EmailStr
    minecraft_username: str = Field(..., min_length=3, max_length=50)
    additional_info: Optional[str] = Field(None, max_length=1000)


class RegistrationResponse(BaseModel):
    id: str
    event_id: str
    user_id: Optional[str] = None
    player_name: str
    player_email: str
    minecraft_username: str
    additional_info: Optional[str] = None
    attended: Optional[bool] = False
    status: Optional[str] = "confirmed"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RegistrationWithEventResponse(RegistrationResponse):
    event_title: Optional[str] = None
    event_date: Optional[datetime] = None
    event_image_url: Optional[str] = None


class AttendanceUpdate(BaseModel):
    attended: bool
