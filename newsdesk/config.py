"""Application configuration and logging setup."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config/settings.yaml")

# Environment variable -> config field
ENV_OVERRIDES = {
    "RSS2JSON_API_KEY": "api_key",
    "NEWSDESK_API_BASE_URL": "api_base_url",
    "NEWSDESK_BACKEND": "backend",
    "NEWSDESK_FETCH_TIMEOUT": "fetch_timeout",
    "NEWSDESK_CACHE_TTL": "cache_ttl",
    "NEWSDESK_DATA_DIR": "data_dir",
}

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


class AppConfig(BaseModel):
    """Process-wide settings (not user preferences, see models.Settings)."""

    api_base_url: str = Field(
        default="https://api.rss2json.com/v1/api.json",
        description="Feed-normalization backend endpoint",
    )
    api_key: str = Field(default="", description="Backend access credential")
    backend: Literal["rss2json", "direct"] = Field(
        default="rss2json",
        description="'rss2json' uses the backend, 'direct' fetches and parses feeds locally",
    )
    fetch_timeout: float = Field(default=15.0, gt=0, description="Per-feed timeout in seconds")
    cache_ttl: float = Field(default=300.0, gt=0, description="Article cache lifetime in seconds")
    catalog_path: Optional[Path] = None
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")
    user_agent: str = "NewsDesk/0.3 (+https://github.com/newsdesk)"

    @property
    def preferences_file(self) -> Path:
        return self.data_dir / "preferences.json"


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load configuration from YAML, then apply environment overrides.

    Args:
        path: Config file; defaults to config/settings.yaml (optional file)

    Returns:
        AppConfig

    Raises:
        ConfigError: unreadable file or invalid values
    """
    load_dotenv()

    config_path = Path(path) if path else CONFIG_FILE
    values: dict = {}

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must be a mapping")
        values.update(data.get("newsdesk", {}) or {})
    elif path:
        raise ConfigError(f"Config file not found: {config_path}")

    for env_name, field_name in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[field_name] = env_value

    try:
        config = AppConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    if not config.api_key and config.backend == "rss2json":
        logger.warning("RSS2JSON_API_KEY is not set; backend requests may be rate limited")
    return config


def setup_logging(log_dir: Union[str, Path] = "logs", name: Optional[str] = None) -> Path:
    """Configure file logging for a process. Returns the log file path."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_name = name or datetime.now().strftime("%Y-%m-%d")
    log_file = log_dir / f"{log_name}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(file_handler)

    return log_file
