"""
hello-bigtable Configuration Settings

This module contains all configuration constants for the hello-bigtable program.
Values that differ between environments can be overridden with environment
variables or on the command line.
"""

import os
from dataclasses import dataclass
from typing import Tuple


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class Settings:
    """Program configuration settings."""

    # Bigtable location
    PROJECT_ID: str = os.environ.get("BIGTABLE_PROJECT", "xxx")
    INSTANCE_ID: str = os.environ.get("BIGTABLE_INSTANCE", "yyy")

    # Schema
    TABLE_NAME: str = os.environ.get("BIGTABLE_TABLE", "Hello-Bigtable")
    COLUMN_FAMILY: str = "cf1"
    COLUMN_NAME: str = "greeting"
    ROW_KEY_PREFIX: str = "greeting"
    GREETINGS: Tuple[str, ...] = ("Hello!", "Hello Cloud Bigtable!", "Hello HBase!")

    # Write loop
    ROWS: int = int(os.environ.get("BIGTABLE_ROWS", "1000000"))
    PACING_MS: int = int(os.environ.get("BIGTABLE_PACING_MS", "100"))
    PACING_STEPS: int = 15  # sleep is PACING_MS * randrange(PACING_STEPS)

    # Table lifecycle
    CREATE_TABLE: bool = _env_bool("BIGTABLE_CREATE_TABLE", "true")
    DELETE_TABLE: bool = _env_bool("BIGTABLE_DELETE_TABLE", "true")

    # Metrics settings
    REPORTER_INTERVAL: int = 10  # Seconds between console reports
    CLOUD_EXPORT: bool = _env_bool("BIGTABLE_CLOUD_EXPORT", "true")
    EXIT_DELAY: float = float(os.environ.get("BIGTABLE_EXIT_DELAY", "30"))

    # Logging settings
    DEBUG: bool = _env_bool("BIGTABLE_DEBUG", "false")
    LOG_LEVEL: str = os.environ.get("BIGTABLE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
