"""Fixed patterns and runtime settings for daykit."""

import os
from dataclasses import dataclass
from typing import Optional

import dotenv

# ============================================================================
# CONFIGURATION
# ============================================================================

# Date patterns (SimpleDateFormat letters, see daykit.patterns)
MILLISECOND_PATTERN = "yyyy-MM-dd HH:mm:ss.SSS"
SECOND_PATTERN = "yyyy-MM-dd HH:mm:ss"
FILE_SAFE_PATTERN = "yyyy-MM-dd_HH:mm:ss"
# Windows refuses ':' in filenames
FILE_SAFE_PATTERN_WINDOWS = "yyyy-MM-dd_HH-mm-ss"
DAY_PATTERN = "yyyyMMdd"
DEFAULT_DATE_PATTERN = "dd.MM.yyyy"

# String file format limits
MAX_ENCODED_STRING_LENGTH = 0xFFFF

LOG_LEVEL_ENV = "DAYKIT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL


def file_safe_pattern() -> str:
    """Return the timestamp pattern usable inside filenames on this platform."""
    if os.name == "nt":
        return FILE_SAFE_PATTERN_WINDOWS
    return FILE_SAFE_PATTERN


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings from the environment, reading a .env file first

    Args:
        env_file: Optional explicit path to a .env file

    Returns:
        Settings with values from DAYKIT_* variables or defaults
    """
    dotenv.load_dotenv(env_file)
    log_level = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
    return Settings(log_level=log_level or DEFAULT_LOG_LEVEL)
