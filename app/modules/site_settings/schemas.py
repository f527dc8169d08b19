from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

SettingType = Literal["text", "color", "image", "video"]


class SiteSettingUpdate(BaseModel):
    setting_value: str = Field(..., max_length=2000)
    setting_type: SettingType = "text"


class SiteSettingResponse(BaseModel):
    id: Optional[str] = None
    setting_key: str
    setting_value: str
    setting_type: str = "text"
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MetaTags(BaseModel):
    title: str
    description: str
    og_title: str
    og_description: str
    og_image: str
    twitter_title: str
    twitter_description: str
    twitter_image: str
