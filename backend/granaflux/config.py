# backend/granaflux/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # development | production | testing
    ENV = os.environ.get("GRANAFLUX_ENV", "development")

    # SQLite DB stored next to the instance by default
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///granaflux.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
    SESSION_HOURS = int(os.environ.get("SESSION_HOURS", "24"))

    # Fallback rate when a seller has no persisted commission rate
    DEFAULT_COMMISSION_PERCENTAGE = float(os.environ.get("DEFAULT_COMMISSION_PERCENTAGE", "5.0"))

    # When true, task status changes must follow TASK_TRANSITIONS
    TASK_STRICT_TRANSITIONS = _env_bool("TASK_STRICT_TRANSITIONS", False)

    APP_VERSION = "1.0.0"
