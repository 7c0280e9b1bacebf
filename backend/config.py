import os
from typing import List


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings:
    # Application Configuration
    APP_TITLE: str = os.getenv("APP_TITLE", "Menu Tree API")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "True").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: list = _split_origins(
        os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    )

    # Menu store
    SEED_SAMPLE_DATA: bool = os.getenv("SEED_SAMPLE_DATA", "True").lower() == "true"

    # Health check
    PING_MESSAGE: str = os.getenv("PING_MESSAGE", "ping")


settings = Settings()
