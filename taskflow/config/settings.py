# taskflow/config/settings.py
# Application configuration, built once from the environment

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEV_SECRET_KEY = "taskflow-dev-secret-change-me"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable application settings"""

    database_url: str = "sqlite:///./taskflow.db"
    db_sslmode: Optional[str] = None

    # Token signing
    secret_key: str = DEV_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False
    cors_origins: Tuple[str, ...] = ("http://localhost:3000",)

    # File storage
    upload_dir: str = "uploads"
    max_file_size: int = 10 * 1024 * 1024  # 10MB

    # Orphaned upload sweep (0 disables)
    orphan_sweep_minutes: int = 60
    orphan_min_age_seconds: int = 3600

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret_key = os.getenv("SECRET_KEY")
        if not secret_key:
            logger.warning("SECRET_KEY is not set, using the development signing key")
            secret_key = DEV_SECRET_KEY

        return cls(
            database_url=os.getenv("DATABASE_URL") or cls.database_url,
            db_sslmode=os.getenv("DB_SSLMODE") or None,
            secret_key=secret_key,
            algorithm=os.getenv("ALGORITHM") or cls.algorithm,
            access_token_expire_days=_env_int("ACCESS_TOKEN_EXPIRE_DAYS", cls.access_token_expire_days),
            host=os.getenv("HOST") or cls.host,
            port=_env_int("PORT", cls.port),
            reload=_env_bool("RELOAD", cls.reload),
            cors_origins=_env_list("ALLOWED_ORIGINS", cls.cors_origins),
            upload_dir=os.getenv("UPLOAD_DIR") or cls.upload_dir,
            max_file_size=_env_int("MAX_FILE_SIZE", cls.max_file_size),
            orphan_sweep_minutes=_env_int("ORPHAN_SWEEP_MINUTES", cls.orphan_sweep_minutes),
            orphan_min_age_seconds=_env_int("ORPHAN_MIN_AGE_SECONDS", cls.orphan_min_age_seconds),
            log_level=(os.getenv("LOG_LEVEL") or cls.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process"""
    load_dotenv()
    return Settings.from_env()
