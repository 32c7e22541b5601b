# server/core/config.py

import os
import logging
import secrets
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv


load_dotenv()

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration. Built once at startup and read-only afterwards.
    """
    jwt_secret: str
    database_url: str = "sqlite:///./data/app.db"
    deepseek_api_key: Optional[str] = None
    moderation_base_url: str = "https://api.deepseek.com/v1"
    moderation_model: str = "deepseek-chat"
    moderation_timeout: float = 30.0
    cookie_secure: bool = True
    cors_origins: tuple = field(default=("http://localhost:3000",))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            logger.warning("JWT_SECRET is not set; using a random secret, sessions will not survive a restart")
            jwt_secret = secrets.token_urlsafe(32)

        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

        return cls(
            jwt_secret=jwt_secret,
            database_url=os.getenv("DATABASE_URL", "sqlite:///./data/app.db"),
            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY") or None,
            moderation_base_url=os.getenv("MODERATION_BASE_URL", "https://api.deepseek.com/v1"),
            moderation_model=os.getenv("MODERATION_MODEL", "deepseek-chat"),
            moderation_timeout=float(os.getenv("MODERATION_TIMEOUT", "30")),
            cookie_secure=_env_flag("COOKIE_SECURE", True),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
