from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class GalleryImageResponse(BaseModel):
    id: str
    event_id: Optional[str] = None
    image_url: str
    caption: Optional[str] = None
    display_order: Optional[int] = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
