from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env if present
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    session_name: str = os.getenv("SESSION_NAME", "SEGSESSID")
    session_backend: str = os.getenv("SESSION_BACKEND", "sqlite")
    session_db_path: str = os.getenv("SESSION_DB_PATH", ".sessions.sqlite")
    cookie_lifetime: int = int(os.getenv("SESSION_COOKIE_LIFETIME", "0"))
    cookie_path: str = os.getenv("SESSION_COOKIE_PATH", "/")
    cookie_domain: str = os.getenv("SESSION_COOKIE_DOMAIN", "")
    cookie_secure: bool = _flag("SESSION_COOKIE_SECURE", "false")
    cookie_httponly: bool = _flag("SESSION_COOKIE_HTTPONLY", "true")
    token_bytes: int = int(os.getenv("TOKEN_BYTES", "32"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
