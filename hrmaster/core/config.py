from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "HR Master"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "hrmaster"
    SECRET_KEY: str = "change-me"

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60
    COOKIE_SECURE: bool = False

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]
    # organization timezone used for "today", lateness and day boundaries
    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    # when set, /cron endpoints accept "Authorization: Bearer <CRON_SECRET>"
    CRON_SECRET: Optional[str] = None

    # loads the .env file from the project root
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
