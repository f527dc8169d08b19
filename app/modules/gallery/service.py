from supabase import Client
from app.modules.gallery.schemas import GalleryImageResponse
from app.storage import upload_image
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class GalleryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_images(self, event_id: str) -> List[GalleryImageResponse]:
        try:
            result = self.supabase.table("event_gallery")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("display_order")\
                .execute()
            return [GalleryImageResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_image(
        self,
        event_id: str,
        content: bytes,
        filename: str,
        content_type: str,
        caption: Optional[str] = None,
        display_order: int = 0
    ) -> GalleryImageResponse:
        """Upload the file, then record it in the event gallery"""
        image_url = upload_image(self.supabase, content, filename, "gallery", content_type=content_type)
        try:
            result = self.supabase.table("event_gallery").insert({
                "event_id": event_id,
                "image_url": image_url,
                "caption": caption,
                "display_order": display_order
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save gallery image")
            logger.info(f"Added gallery image to event {event_id}")
            return GalleryImageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_image(self, image_id: str) -> bool:
        try:
            result = self.supabase.table("event_gallery")\
                .delete()\
                .eq("id", image_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Image not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
