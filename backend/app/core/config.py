import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    app_env: str = "development"
    log_level: str = "info"
    cors_origins: List[str] = []
    host: str = "0.0.0.0"
    port: int = 4000
    outbox_max_size: int = Field(default=256, ge=1)
    private_room_prefix: str = "user_"
    # Off by default: peers only see a stop when the client sends one
    typing_stop_on_disconnect: bool = False
    emit_errors: bool = False


@lru_cache
def get_settings() -> Settings:
    # Load .env if present (noop if already loaded)
    load_dotenv()
    origins = os.getenv("CORS_ORIGINS", "")
    origins_list = [o.strip() for o in origins.split(",") if o.strip()]
    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "info"),
        cors_origins=origins_list,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "4000")),
        outbox_max_size=int(os.getenv("OUTBOX_MAX_SIZE", "256")),
        private_room_prefix=os.getenv("PRIVATE_ROOM_PREFIX", "user_"),
        typing_stop_on_disconnect=_env_flag("TYPING_STOP_ON_DISCONNECT"),
        emit_errors=_env_flag("EMIT_ERRORS"),
    )
