from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    DATABASE_URL: str
    # Document store namespace
    APP_ID: str = "default-8d-app"
    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"
    SSE_KEEPALIVE_SECONDS: float = 15.0
    # Sessions untouched for longer are closed
    SESSION_IDLE_SECONDS: float = 1800.0

settings = Settings()
