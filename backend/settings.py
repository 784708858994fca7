import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    port: int
    frontend_url: str
    app_env: str
    log_level: str
    database_url: str
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    cloudinary_upload_preset: str
    upload_folder: str
    campaign_webhook_url: str
    campaign_webhook_timeout_seconds: int
    rate_limit_max_requests: int
    rate_limit_window_seconds: int

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def object_store_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)


def load_settings() -> Settings:
    return Settings(
        port=int(os.getenv("PORT", "5000")),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
        app_env=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        database_url=os.getenv("DATABASE_URL", ""),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME", ""),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY", ""),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET", ""),
        cloudinary_upload_preset=os.getenv("CLOUDINARY_UPLOAD_PRESET", ""),
        upload_folder=os.getenv("UPLOAD_FOLDER", "pdf-uploads"),
        campaign_webhook_url=os.getenv("CAMPAIGN_WEBHOOK_URL", ""),
        campaign_webhook_timeout_seconds=int(os.getenv("CAMPAIGN_WEBHOOK_TIMEOUT_SECONDS", "15")),
        rate_limit_max_requests=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100")),
        rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
