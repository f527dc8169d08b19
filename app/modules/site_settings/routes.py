from fastapi import APIRouter, Depends, Request, UploadFile, File
from app.database.supabase_client import get_service_supabase
from app.modules.site_settings.schemas import SiteSettingUpdate, SiteSettingResponse, MetaTags
from app.modules.site_settings.service import SiteSettingsService
from app.modules.site_settings.store import render_theme, render_meta_tags
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/site-settings", tags=["site-settings"])


def get_site_settings_service(supabase: Client = Depends(get_service_supabase)) -> SiteSettingsService:
    return SiteSettingsService(supabase)


def get_current_settings(
    request: Request,
    service: SiteSettingsService = Depends(get_site_settings_service)
) -> Dict[str, str]:
    """Live store when the app subscribed one at startup, a fresh query otherwise"""
    store = getattr(request.app.state, "site_settings_store", None)
    if store is not None and store.loaded:
        return store.snapshot()
    return service.get_settings_map()


@router.get("", response_model=Dict[str, str])
async def get_site_settings(current: Dict[str, str] = Depends(get_current_settings)):
    return current


@router.get("/theme", response_model=Dict[str, str])
async def get_theme(current: Dict[str, str] = Depends(get_current_settings)):
    """CSS variables derived from the configured colors"""
    return render_theme(current)


@router.get("/meta", response_model=MetaTags)
async def get_meta_tags(current: Dict[str, str] = Depends(get_current_settings)):
    return render_meta_tags(current)


@router.get("/rows", response_model=List[SiteSettingResponse])
async def list_setting_rows(
    user_data: Dict = Depends(require_admin),
    service: SiteSettingsService = Depends(get_site_settings_service)
):
    return service.list_settings()


@router.put("/{setting_key}", response_model=SiteSettingResponse)
async def update_setting(
    setting_key: str,
    setting_data: SiteSettingUpdate,
    user_data: Dict = Depends(require_admin),
    service: SiteSettingsService = Depends(get_site_settings_service)
):
    return service.update_setting(setting_key, setting_data.setting_value, setting_data.setting_type)


@router.post("/{setting_key}/upload", response_model=SiteSettingResponse)
async def upload_setting_file(
    setting_key: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: SiteSettingsService = Depends(get_site_settings_service)
):
    """Upload a logo, hero video or social image and point the setting at it"""
    content = await file.read()
    return service.upload_setting_file(
        setting_key, content, file.filename,
        file.content_type or "application/octet-stream"
    )
