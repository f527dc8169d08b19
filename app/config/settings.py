from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Table access from the API; the anon key only serves Supabase Auth

    # Storage
    storage_bucket: str = "images"
    upload_folders: str = "events,team,gallery,site"

    # AWS S3 (optional; replaces Supabase Storage when fully configured)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None
    s3_public_base_url: Optional[str] = None

    # Email (Resend)
    resend_api_key: Optional[str] = None
    email_from: str = "Infinity Team <onboarding@resend.dev>"
    site_name: str = "Infinity Team"
    site_url: str = "http://localhost:5173"  # Used in auth email redirects

    # Capacity thresholds
    almost_full_ratio: float = 0.8
    low_capacity_spots: int = 5
    low_capacity_ratio: float = 0.2
    auto_close_when_full: bool = True

    # Realtime
    realtime_enabled: bool = True

    # App
    app_name: str = "community-events-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def s3_configured(self) -> bool:
        return all([self.aws_access_key_id, self.aws_secret_access_key, self.s3_bucket_name])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_upload_folders(self) -> List[str]:
        return [f.strip() for f in self.upload_folders.split(",") if f.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
