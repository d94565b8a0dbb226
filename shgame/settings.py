# shgame/settings.py
from __future__ import annotations

from pydantic import BaseModel
import os


class Settings(BaseModel):
    APP_NAME: str = "secret-hitler-server"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    ENTITY_TTL_SEC: int = 60 * 60 * 24
    LOCK_TIMEOUT_SEC: float = 10.0
    LOCK_WAIT_SEC: float = 5.0

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" | "console"

    # WebSocket origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173,null"
    # Dev helper: allow any private LAN IP on port 5173
    WS_ALLOW_LAN_ORIGINS: bool = True


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "secret-hitler-server"),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        ENTITY_TTL_SEC=int(os.getenv("ENTITY_TTL_SEC", str(60 * 60 * 24))),
        LOCK_TIMEOUT_SEC=float(os.getenv("LOCK_TIMEOUT_SEC", "10")),
        LOCK_WAIT_SEC=float(os.getenv("LOCK_WAIT_SEC", "5")),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        LOG_FORMAT=os.getenv("LOG_FORMAT", "json"),

        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,null",
        ),
        WS_ALLOW_LAN_ORIGINS=os.getenv("WS_ALLOW_LAN_ORIGINS", "true").lower()
        in ("1", "true", "yes", "y", "on"),
    )
