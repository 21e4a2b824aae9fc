"""
Configuration for the HDFS Resource MCP server.

Loads and validates environment variables (site config file, application type,
name-fragment character class, log level).
load_dotenv() is a no-op if vars are already set.
"""

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_APP_TYPE = "HdfsAuditLogApplication"
DEFAULT_NAME_FRAGMENT_CHARS = r"\w\s"


def check_name_fragment_chars(chars: str) -> None:
    """Raise ValueError unless chars is usable as the body of a regex character class."""
    escaped = False
    for ch in chars:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "]":
            raise ValueError("unescaped ']' would close the character class")
    if escaped:
        raise ValueError("trailing backslash")
    try:
        re.compile(f"[{chars}]+")
    except re.error as e:
        raise ValueError(str(e)) from e


@dataclass(frozen=True)
class Settings:
    """Validated process configuration from environment (or .env)."""

    site_config_file: Path
    app_type: str
    name_fragment_chars: str
    log_level: str


def get_settings() -> Settings:
    """Load and validate settings; exit with error if a value is unusable."""
    site_config_file = Path(os.getenv("SITE_CONFIG_FILE", "sites.json"))
    app_type = os.getenv("HDFS_APP_TYPE") or DEFAULT_APP_TYPE
    name_fragment_chars = os.getenv("NAME_FRAGMENT_CHARS") or DEFAULT_NAME_FRAGMENT_CHARS
    log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()

    try:
        check_name_fragment_chars(name_fragment_chars)
    except ValueError as e:
        print(
            f"ERROR: NAME_FRAGMENT_CHARS is not a valid character class: {e}",
            file=sys.stderr,
        )
        sys.exit(1)
    if not isinstance(logging.getLevelName(log_level), int):
        print(f"ERROR: Unknown LOG_LEVEL: {log_level}", file=sys.stderr)
        sys.exit(1)
    return Settings(
        site_config_file=site_config_file,
        app_type=app_type,
        name_fragment_chars=name_fragment_chars,
        log_level=log_level,
    )


# Singleton used by other modules
settings = get_settings()
