from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

BACKENDS = {"memory", "sqlite", "json"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default), 'sqlite' or 'json'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - JSON_STORE_PATH: path to the local JSON key-value file. Default './data/tasks.json'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to identify users with HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERNAME: username for basic auth (required when ENABLE_BASIC_AUTH=true)
    - BASIC_AUTH_PASSWORD: password for basic auth (required when ENABLE_BASIC_AUTH=true)
    - DEFAULT_USER_ID: acting user when auth is disabled and no X-User-Id header is sent
    - SEED_WELCOME_TASKS: 'true' to seed two welcome tasks into an empty list (default: false)
    - LOG_LEVEL: root log level name. Default 'INFO'
    - LOG_FILE: optional path of a log file; console only when unset
    """

    persistence_backend: str
    sqlite_db_path: str
    json_store_path: str
    cors_allow_origins: List[str]
    enable_basic_auth: bool
    basic_auth_username: Optional[str]
    basic_auth_password: Optional[str]
    default_user_id: str
    seed_welcome_tasks: bool
    log_level: str
    log_file: Optional[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


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
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in BACKENDS:
        backend = "memory"

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)
    basic_user = os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None
    basic_pass = os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None

    log_file = os.getenv("LOG_FILE") or None

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        json_store_path=_get_env("JSON_STORE_PATH", "./data/tasks.json").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=basic_user,
        basic_auth_password=basic_pass,
        default_user_id=_get_env("DEFAULT_USER_ID", "dev-user").strip(),
        seed_welcome_tasks=_parse_bool(_get_env("SEED_WELCOME_TASKS", "false"), False),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_file=log_file,
    )
