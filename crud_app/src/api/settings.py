from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from sqlalchemy.engine import URL


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sql'
    - DATABASE_URL: full SQLAlchemy URL (sqlite or mysql/mariadb only); overrides the DB_* variables when set
    - DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_NAME: MySQL connection parts
    - DB_POOL_SIZE: connection pool capacity (default 10)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; 'http://localhost:4200' by default
    - HOST / PORT: listen address of the server (default 127.0.0.1:8080)
    - LOG_LEVEL: root log level (default INFO)
    - SEED_DEMO_USERS: 'true' (default) to seed the in-memory users store
    """

    persistence_backend: str
    database_url_override: Optional[str]
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    db_pool_size: int
    cors_allow_origins: List[str]
    host: str
    port: int
    log_level: str
    seed_demo_users: bool

    def database_url(self) -> str:
        """Return the SQLAlchemy URL for the SQL backend."""
        if self.database_url_override:
            return self.database_url_override
        url = URL.create(
            "mysql+pymysql",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


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


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
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
    """Return application settings loaded from the environment (and a local .env file)."""
    load_dotenv(find_dotenv(usecwd=True))

    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sql"}:
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        database_url_override=os.getenv("DATABASE_URL") or None,
        db_host=_get_env("DB_HOST", "localhost").strip(),
        db_port=_parse_int(_get_env("DB_PORT", "3306"), 3306),
        db_user=_get_env("DB_USER", "root").strip(),
        db_password=os.getenv("DB_PASSWORD", ""),
        db_name=_get_env("DB_NAME", "todo_db").strip(),
        db_pool_size=_parse_int(_get_env("DB_POOL_SIZE", "10"), 10),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "http://localhost:4200")),
        host=_get_env("HOST", "127.0.0.1").strip(),
        port=_parse_int(_get_env("PORT", "8080"), 8080),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        seed_demo_users=_parse_bool(_get_env("SEED_DEMO_USERS", "true"), True),
    )
