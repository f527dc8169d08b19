"""Blob storage for uploaded images (events, team avatars, gallery, site assets)."""
import logging
import os
import uuid

from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.storage.s3_storage import S3Storage
from app.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


def get_storage(supabase: Client):
    """S3 when AWS settings are complete, Supabase Storage otherwise."""
    if settings.s3_configured:
        try:
            return S3Storage()
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
    return SupabaseStorage(supabase)


def build_object_key(folder: str, filename: str) -> str:
    """Random-suffixed key under a logical folder, keeping the original extension."""
    if folder not in settings.get_upload_folders():
        raise HTTPException(status_code=400, detail=f"Unknown upload folder: {folder}")
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    name = uuid.uuid4().hex
    return f"{folder}/{name}.{ext}" if ext else f"{folder}/{name}"


def upload_image(
    supabase: Client,
    file_content: bytes,
    filename: str,
    folder: str,
    content_type: str = "application/octet-stream",
) -> str:
    """Store an uploaded file and return the public URL to save on the row."""
    key = build_object_key(folder, filename)
    try:
        url = get_storage(supabase).upload_file(file_content, key, content_type=content_type)
    except Exception as e:
        logger.error(f"Upload to {key} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")
    logger.info(f"Uploaded {key}")
    return url
