"""
Utility functions for the trade journal.

Provides common utilities including:
- Logging setup
- Configuration loading
- Timestamp helpers
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

import yaml


def setup_logging(
    level: str = "INFO",
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Custom log format string

    Returns:
        Configured application logger
    """
    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    log_level = os.getenv("LOG_LEVEL", level)
    logging.basicConfig(level=log_level, format=log_format)
    return logging.getLogger("trade-journal")


def load_yaml_config(filepath: Optional[str]) -> dict:
    """
    Load a YAML configuration file.

    Args:
        filepath: Path to the YAML file. None or a missing file yields {}.

    Returns:
        Parsed configuration dict
    """
    if not filepath or not os.path.exists(filepath):
        return {}
    with open(filepath, "r") as f:
        return yaml.safe_load(f) or {}


def utc_now() -> datetime:
    """Get current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp. A trailing "Z" is read as UTC.

    Raises:
        ValueError: If the string is not a valid timestamp
        TypeError: If value is not a string
    """
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert to UTC for comparison and storage. Naive values are read as local time."""
    return dt.astimezone(timezone.utc)
