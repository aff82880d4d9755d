"""Application configuration."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Twilio
    twilio_account_sid: str
    twilio_auth_token: str
    twilio_phone_number: str
    twilio_api_base_url: str = "https://api.twilio.com"

    # Public base URL Twilio uses to reach our webhooks
    webhook_base_url: str = "http://localhost:8000"

    # Call record storage
    call_store_backend: Literal["sql", "memory"] = "sql"
    database_url: str = "sqlite+aiosqlite:///./medication_reminder.db"

    # Call flow
    max_retries: int = 2
    min_call_duration_seconds: int = 5
    record_calls: bool = True
    machine_detection: bool = True
    http_timeout_seconds: float = 10.0
    messages_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
