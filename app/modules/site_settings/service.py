from supabase import Client
from app.modules.site_settings.schemas import SiteSettingResponse
from app.modules.site_settings.store import settings_map, KNOWN_SETTINGS
from app.storage import upload_image
from typing import Dict, List
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class SiteSettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_settings(self) -> List[SiteSettingResponse]:
        try:
            result = self.supabase.table("site_settings").select("*").execute()
            return [SiteSettingResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_settings_map(self) -> Dict[str, str]:
        try:
            result = self.supabase.table("site_settings").select("*").execute()
            return settings_map(result.data)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_setting(self, key: str, value: str, setting_type: str = "text") -> SiteSettingResponse:
        """Create or replace a setting; subscribed stores reload on the resulting change event"""
        try:
            result = self.supabase.table("site_settings")\
                .upsert({
                    "setting_key": key,
                    "setting_value": value,
                    "setting_type": setting_type,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                }, on_conflict="setting_key")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update setting")
            logger.info(f"Site setting {key} updated")
            return SiteSettingResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upload_setting_file(self, key: str, content: bytes, filename: str, content_type: str) -> SiteSettingResponse:
        """Store an image or video for a setting and save its public URL as the value"""
        url = upload_image(self.supabase, content, filename, "site", content_type=content_type)
        return self.update_setting(key, url, KNOWN_SETTINGS.get(key, "image"))
