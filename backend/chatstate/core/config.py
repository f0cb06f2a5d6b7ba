from typing import List
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Live conversation views kept in memory; the oldest is dropped beyond this.
    MAX_SESSIONS: int = Field(default=1000, ge=1)

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173"]


settings = Settings()
