from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

STORE_BACKENDS = {"memory", "sqlite", "supabase"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - STORE_BACKEND: 'memory' (default), 'sqlite' or 'supabase'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/portfolio.db'
    - SUPABASE_URL: project URL (required when STORE_BACKEND=supabase)
    - SUPABASE_SERVICE_ROLE_KEY: service key (required when STORE_BACKEND=supabase)
    - ADMIN_PASSWORD: shared secret for write routes; unset rejects every write
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - STORE_TIMEOUT_SECONDS: network/busy timeout for store calls (default 15)
    - LOG_LEVEL: level for the 'portfolio_api' logger (default INFO)
    """

    store_backend: str = "memory"
    sqlite_db_path: str = "./data/portfolio.db"
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    admin_password: Optional[str] = None
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    store_timeout_seconds: float = 15.0
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric value %r, using %s", value, default)
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("STORE_BACKEND", "memory").strip().lower()
    if backend not in STORE_BACKENDS:
        logger.warning("Unsupported STORE_BACKEND %r, falling back to memory", backend)
        backend = "memory"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"

    return Settings(
        store_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/portfolio.db").strip(),
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_service_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        store_timeout_seconds=_parse_float(_get_env("STORE_TIMEOUT_SECONDS", "15"), 15.0),
        log_level=log_level,
    )
