"""Configuration management"""
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dotenv import load_dotenv

from extflex.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("EXTFLEX_LOG_LEVEL", "INFO")

# Storage
# - 'memory' (default): in-process store, nothing survives a restart
# - 'json': single JSON document at DATA_PATH/store.json
STORE_BACKEND: str = os.getenv("EXTFLEX_STORE_BACKEND", "memory")
DATA_PATH: Path = Path(os.getenv("EXTFLEX_DATA_PATH", "./data"))

# Calendar
# IANA timezone used for day keys. Empty means the system local timezone.
TIMEZONE: str = os.getenv("EXTFLEX_TIMEZONE", "")

# Streaks
FREEZES_PER_WEEK: int = int(os.getenv("EXTFLEX_FREEZES_PER_WEEK", "2"))

# Achievements
# Upper bound on unlock/achievement re-scans per logged exercise
ACHIEVEMENT_CASCADE_LIMIT: int = int(os.getenv("EXTFLEX_ACHIEVEMENT_CASCADE_LIMIT", "10"))

SUPPORTED_BACKENDS = ("memory", "json")


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if STORE_BACKEND not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"Unsupported store backend '{STORE_BACKEND}'",
            config_key="EXTFLEX_STORE_BACKEND",
        )
    if TIMEZONE:
        try:
            ZoneInfo(TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown timezone '{TIMEZONE}'",
                config_key="EXTFLEX_TIMEZONE",
                cause=e,
            )
    if FREEZES_PER_WEEK < 0:
        raise ConfigurationError(
            "EXTFLEX_FREEZES_PER_WEEK must not be negative",
            config_key="EXTFLEX_FREEZES_PER_WEEK",
        )
    if ACHIEVEMENT_CASCADE_LIMIT < 1:
        raise ConfigurationError(
            "EXTFLEX_ACHIEVEMENT_CASCADE_LIMIT must be at least 1",
            config_key="EXTFLEX_ACHIEVEMENT_CASCADE_LIMIT",
        )
