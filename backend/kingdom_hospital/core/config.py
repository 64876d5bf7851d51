"""
Centralized configuration module for application-wide settings.

Every setting is read from the environment so the same code runs locally
(SQLite file), in tests (in-memory SQLite) and in production.
"""

import logging
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")

# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Returns:
        ZoneInfo: Application timezone (defaults to UTC if not configured)

    Environment Variables:
        TZ: Timezone identifier (e.g., 'Europe/Brussels', 'UTC')
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


APP_TZ = get_app_timezone()


def today() -> date:
    """Current calendar date in the application timezone."""
    return datetime.now(APP_TZ).date()


# ===========================
# Database / Runtime Settings
# ===========================


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower().strip() in _TRUTHY


def get_database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./kingdom_hospital.db")


def is_testing() -> bool:
    return _env_flag("TESTING", "false")


def get_log_settings() -> dict:
    """Logging flags consumed by setup_logging()."""
    return {
        "log_level": os.getenv("LOG_LEVEL", "DEBUG" if is_testing() else "INFO"),
        "use_json_format": _env_flag("LOG_JSON", "false"),
        "log_to_file": _env_flag("LOG_TO_FILE", "false" if is_testing() else "true"),
        "enable_sql_echo": _env_flag("SQL_ECHO", "false"),
    }


def rate_limit_enabled() -> bool:
    return _env_flag("RATE_LIMIT_ENABLED", "1")


def seed_on_startup() -> bool:
    return _env_flag("SEED_ON_STARTUP", "true")


def log_runtime_config() -> None:
    """
    Log the active configuration.

    Should be called during application startup to provide visibility
    into the environment the API is running with.
    """
    logger.info(
        "Runtime configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "testing": is_testing(),
                "rate_limit_enabled": rate_limit_enabled(),
                "seed_on_startup": seed_on_startup(),
            }
        },
    )
