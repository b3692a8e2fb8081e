"""Configuration management for gracecal."""

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

GRACECAL_HOME = Path(os.environ.get("GRACECAL_HOME", Path.home() / "gracecal"))
CONFIG_FILE = GRACECAL_HOME / "config" / "gracecal.conf"
DATA_DIR = GRACECAL_HOME / "data"


@dataclass
class Config:
    """gracecal configuration."""

    church_name: str = "Grace Church"
    calendar_name: str = ""
    timezone: str = "America/Chicago"
    data_backend: str = "json"
    data_dir: str = ""
    # Hosted database (PostgREST / Supabase)
    supabase_url: str = ""
    supabase_key: str = ""
    church_id: str = ""
    upcoming_days: int = 30
    day_cell_limit: int = 3

    @property
    def tzinfo(self) -> tzinfo | None:
        """Configured zone, or None (system local) if it doesn't exist."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{self.timezone}', using system local time")
            return None

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value.startswith(('"', "'")):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, keeping {default}")
        return default


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from gracecal.conf (KEY=value lines)."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "church_name":
                config.church_name = value
            case "calendar_name":
                config.calendar_name = value
            case "timezone":
                config.timezone = value
            case "data_backend":
                config.data_backend = value.lower()
            case "data_dir":
                config.data_dir = value
            case "supabase_url":
                config.supabase_url = value.rstrip("/")
            case "supabase_key":
                config.supabase_key = value
            case "church_id":
                config.church_id = value
            case "upcoming_days":
                config.upcoming_days = _parse_int(key, value, config.upcoming_days)
            case "day_cell_limit":
                config.day_cell_limit = _parse_int(key, value, config.day_cell_limit)

    return config
