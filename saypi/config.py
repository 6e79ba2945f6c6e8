"""
Shared configuration for SayAPI.
"""

from __future__ import annotations

import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("saypi")


def _get_bool(env_name: str, default: bool) -> bool:
    value = os.environ.get(env_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(env_name: str, default: int) -> int:
    value = os.environ.get(env_name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Database settings
DB_BACKEND = os.environ.get("DB_BACKEND", "postgres").strip().lower()
SQLITE_PATH = os.environ.get("SQLITE_PATH", "/data/saypi.db")
DATABASE_URL = os.environ.get("DATABASE_URL")
DB_POOL_SIZE = _get_int("DB_POOL_SIZE", 5)
DB_MAX_OVERFLOW = _get_int("DB_MAX_OVERFLOW", 10)

# Database initialization controls
AUTO_MIGRATE_ON_STARTUP = _get_bool("AUTO_MIGRATE_ON_STARTUP", True)

# User token signing
USER_SECRET_HEX = os.environ.get("SAYPI_USER_SECRET", "")
ALLOW_INSECURE_SECRET = _get_bool("SAYPI_ALLOW_INSECURE_SECRET", False)
INSECURE_DEV_SECRET = b"shhh"
USER_SECRET = b""

# Request/input limits
DEFAULT_LIST_LIMIT = _get_int("SAYPI_DEFAULT_LIST_LIMIT", 10)
MAX_LIST_LIMIT = _get_int("SAYPI_MAX_LIST_LIMIT", 100)
MAX_HEADING_LENGTH = _get_int("SAYPI_MAX_HEADING_LENGTH", 60)
MAX_TEXT_LENGTH = _get_int("SAYPI_MAX_TEXT_LENGTH", 1024)

# Identifier generation
PUBLIC_ID_MAX_ATTEMPTS = _get_int("SAYPI_PUBLIC_ID_MAX_ATTEMPTS", 16)

# Rendering
BALLOON_WIDTH = _get_int("SAYPI_BALLOON_WIDTH", 40)

# HTTP server
HTTP_HOST = os.environ.get("HTTP_HOST", "0.0.0.0")
HTTP_PORT = _get_int("HTTP_PORT", 8080)


def validate_and_prepare_config() -> None:
    """Validate configuration and apply derived settings at startup."""
    global DATABASE_URL, USER_SECRET

    errors = []
    if DB_BACKEND not in {"postgres", "sqlite"}:
        errors.append("DB_BACKEND must be 'postgres' or 'sqlite'")

    if not DATABASE_URL:
        if DB_BACKEND == "sqlite":
            if not SQLITE_PATH:
                errors.append("SQLITE_PATH environment variable is required for sqlite")
            else:
                DATABASE_URL = f"sqlite:///{SQLITE_PATH}"
        else:
            errors.append("DATABASE_URL environment variable is required")
    else:
        url_lower = DATABASE_URL.lower()
        is_sqlite_url = url_lower.startswith("sqlite")
        if DB_BACKEND == "sqlite" and not is_sqlite_url:
            errors.append("DATABASE_URL must be a sqlite URL when DB_BACKEND=sqlite")
        if DB_BACKEND == "postgres" and is_sqlite_url:
            errors.append("DATABASE_URL must be a postgres URL when DB_BACKEND=postgres")

    if USER_SECRET_HEX:
        try:
            USER_SECRET = bytes.fromhex(USER_SECRET_HEX)
        except ValueError:
            errors.append("SAYPI_USER_SECRET must be hex encoded")
    elif ALLOW_INSECURE_SECRET:
        logger.warning("SAYPI_USER_SECRET is not set; using the insecure development secret.")
        USER_SECRET = INSECURE_DEV_SECRET
    else:
        errors.append("SAYPI_USER_SECRET environment variable is required")

    if DEFAULT_LIST_LIMIT < 0 or DEFAULT_LIST_LIMIT > MAX_LIST_LIMIT:
        errors.append("SAYPI_DEFAULT_LIST_LIMIT must be between 0 and SAYPI_MAX_LIST_LIMIT")

    if PUBLIC_ID_MAX_ATTEMPTS < 1:
        errors.append("SAYPI_PUBLIC_ID_MAX_ATTEMPTS must be at least 1")

    if errors:
        raise RuntimeError("Configuration invalid: " + "; ".join(errors))
