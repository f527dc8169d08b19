from fastapi import APIRouter, Depends, UploadFile, File, Form
from app.database.supabase_client import get_service_supabase
from app.modules.gallery.schemas import GalleryImageResponse
from app.modules.gallery.service import GalleryService
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/gallery", tags=["gallery"])


def get_gallery_service(supabase: Client = Depends(get_service_supabase)) -> GalleryService:
    return GalleryService(supabase)


@router.get("", response_model=List[GalleryImageResponse])
async def list_gallery_images(
    event_id: str,
    service: GalleryService = Depends(get_gallery_service)
):
    """Gallery of one event in display order"""
    return service.list_images(event_id)


@router.post("", response_model=GalleryImageResponse, status_code=201)
async def upload_gallery_image(
    event_id: str = Form(...),
    caption: Optional[str] = Form(None),
    display_order: int = Form(0),
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: GalleryService = Depends(get_gallery_service)
):
    content = await file.read()
    return service.add_image(
        event_id, content, file.filename,
        file.content_type or "application/octet-stream",
        caption=caption,
        display_order=display_order
    )


@router.delete("/{image_id}", status_code=204)
async def delete_gallery_image(
    image_id: str,
    user_data: Dict = Depends(require_admin),
    service: GalleryService = Depends(get_gallery_service)
):
    service.delete_image(image_id)
    return None
