"""Supabase Storage bucket for public site images."""
import logging

from supabase import Client

from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseStorage:
    def __init__(self, supabase: Client, bucket_name: str = None):
        self.supabase = supabase
        self.bucket_name = bucket_name or settings.storage_bucket

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to the bucket and return its public URL."""
        bucket = self.supabase.storage.from_(self.bucket_name)
        bucket.upload(path=key, file=file_content, file_options={"content-type": content_type})
        logger.debug(f"Stored {key} in bucket {self.bucket_name}")
        return bucket.get_public_url(key)
