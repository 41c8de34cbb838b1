"""Application configuration loaded from environment variables."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the EHS audit register service."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "EHS Photo Audit Assistant"
    APP_VERSION: str = "0.1.0"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "*"

    # Register storage. The register lives for the hosting session only.
    REGISTER_DATABASE_URL: str = "sqlite://"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    # Reports
    REPORT_TITLE: str = "EHS Photo Audit Report / Báo cáo kiểm tra EHS từ ảnh"
    REPORT_FOOTER: str = "Generated by EHS Photo Audit Assistant"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]


settings = Settings()
