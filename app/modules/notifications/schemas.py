from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    read: Optional[bool] = False
    event_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread: int


class FunctionModel(BaseModel):
    """camelCase on the wire, matching what the site's frontend sends to backend functions"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckLowCapacityRequest(FunctionModel):
    event_id: str
    new_registration_user_id: Optional[str] = None


class LowCapacityResult(FunctionModel):
    message: str
    count: Optional[int] = None
    remaining_spots: Optional[int] = None


class SendEventNotificationRequest(FunctionModel):
    event_id: str
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)


class FanOutResult(FunctionModel):
    success: bool = True
    count: int
    message: Optional[str] = None
