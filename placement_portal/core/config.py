"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "placement_user"
    postgres_password: str = "password"
    postgres_db: str = "placement_portal"

    # Full URL wins over the postgres_* parts (used for sqlite in tests)
    database_url: Optional[str] = None

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 7 * 24 * 60
    invitation_expire_hours: int = 24

    # SMTP
    mail_enabled: bool = False
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = "placements@example.edu"

    # Links in invitation emails point here
    frontend_url: str = "http://localhost:8080"

    # Job documents
    upload_dir: str = "uploads"
    max_upload_mb: int = 50

    # App
    cors_origins: List[str] = ["http://localhost:8080"]
    log_level: str = "INFO"
    debug: bool = False

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
