from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: str = Field(..., min_length=1, max_length=100)
    role_color: Optional[str] = None
    specialty: Optional[str] = None
    avatar_url: Optional[str] = None
    display_order: int = 0


class TeamMemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, min_length=1, max_length=100)
    role_color: Optional[str] = None
    specialty: Optional[str] = None
    avatar_url: Optional[str] = None
    display_order: Optional[int] = None


class TeamMemberResponse(BaseModel):
    id: str
    name: str
    role: str
    role_color: Optional[str] = None
    specialty: Optional[str] = None
    avatar_url: Optional[str] = None
    display_order: Optional[int] = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
