"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Career Guidance Platform"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origin: str = "http://localhost:3000"

    # MongoDB (empty URI -> in-memory store)
    mongodb_uri: str = ""
    mongodb_db: str = "careerguide"
    seed_sample_data: bool = True

    # JWT Auth
    jwt_secret_key: str = "careerguide-secret-key-2024"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7

    # One-time tokens
    verification_token_hours: int = 24
    reset_token_hours: int = 1

    # SMTP relay
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from: str = "CareerGuide LS <no-reply@careerguide.ls>"
    frontend_url: str = "http://localhost:3000"

    @property
    def use_memory_store(self) -> bool:
        """True when no database credentials are configured."""
        return not self.mongodb_uri.strip()

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """Dependency - the settings the running app was created with."""
    return request.app.state.settings
