"""recordfs configuration."""

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from recordfs.common.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_ENCODING,
    DEFAULT_LOG_LEVEL,
    DEFAULT_RECORD_FORMAT,
    DEFAULT_SEARCH_PATTERN,
    ENV_PREFIX,
)

logger = logging.getLogger("recordfs.config")


class RecordFSSettings(BaseSettings):
    """Settings loaded from environment or config file."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    # Console
    debug: bool = Field(False, description="Print console.debug() output. Env: RECORDFS_DEBUG")

    # Logging
    log_level: str = Field(DEFAULT_LOG_LEVEL, description="Level for the 'recordfs' logger")

    # Files
    encoding: str = Field(DEFAULT_ENCODING, description="Text encoding used by read_all_chars")
    default_search_pattern: str = Field(DEFAULT_SEARCH_PATTERN, description="Pattern used by clean when none is given")

    # Records
    default_format: str = Field(
        DEFAULT_RECORD_FORMAT,
        description="Record layout used by the CLI: a stock name (int64, float64, ...) or a struct format",
    )


def parse_size(value: str) -> int:
    """Parse human-readable size string to bytes.

    Examples: '100MB', '1GB', '500kb', '1073741824'
    """
    value = value.strip().upper()
    multipliers = {
        "B": 1,
        "KB": 1024,
        "MB": 1024**2,
        "GB": 1024**3,
        "TB": 1024**4,
        "K": 1024,
        "M": 1024**2,
        "G": 1024**3,
        "T": 1024**4,
    }
    for suffix, mult in sorted(multipliers.items(), key=lambda x: -len(x[0])):
        if value.endswith(suffix):
            num = value[: -len(suffix)].strip()
            return int(float(num) * mult)
    return int(value)


def _parse_yaml_to_settings_dict(config: dict) -> dict:
    """Convert a parsed YAML config dict into a flat settings dict."""
    d: dict = {}

    console = config.get("console") or {}
    if "debug" in console:
        d["debug"] = console["debug"]
    log_cfg = config.get("logging") or {}
    if "level" in log_cfg:
        d["log_level"] = log_cfg["level"]
    files = config.get("files") or {}
    if "encoding" in files:
        d["encoding"] = files["encoding"]
    if "search_pattern" in files:
        d["default_search_pattern"] = files["search_pattern"]
    records = config.get("records") or {}
    if "format" in records:
        d["default_format"] = records["format"]

    return d


def _apply_env_overrides(settings_dict: dict) -> None:
    """Drop file values that an environment variable overrides (in-place).

    Init kwargs outrank the environment in pydantic-settings, so fields set
    through ``RECORDFS_*`` are removed and left to the settings loader.
    """
    for field in list(settings_dict):
        if os.environ.get(f"{ENV_PREFIX}{field.upper()}"):
            del settings_dict[field]


# ── Config file auto-discovery ────────────────────────────────

# Paths searched in order when no explicit config is given.
_CONFIG_SEARCH_PATHS = [
    Path("./recordfs.yaml"),
    Path.home() / CONFIG_DIR_NAME / "config.yaml",
]


def discover_config_path() -> Optional[Path]:
    """Find a config file using auto-discovery.

    Search order:
      1. ``$RECORDFS_CONFIG`` environment variable
      2. ``./recordfs.yaml``
      3. ``~/.recordfs/config.yaml``

    Returns:
        Path to the discovered config file, or None.
    """
    env_path = os.environ.get(f"{ENV_PREFIX}CONFIG", "")
    if env_path:
        p = Path(env_path)
        if p.exists():
            return p
        logger.warning("$RECORDFS_CONFIG=%s does not exist", env_path)

    for candidate in _CONFIG_SEARCH_PATHS:
        if candidate.exists():
            return candidate
    return None


def load_settings(config_path: Optional[Path] = None) -> RecordFSSettings:
    """Load settings from config file + environment variables.

    Args:
        config_path: Explicit path to config file.  When ``None``,
            auto-discovery is used (see :func:`discover_config_path`).
    """
    import yaml

    resolved_path = config_path
    if resolved_path is None:
        resolved_path = discover_config_path()

    settings_dict: dict = {}

    if resolved_path and resolved_path.exists():
        with open(resolved_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        settings_dict = _parse_yaml_to_settings_dict(config)
        logger.info("Loaded config from %s", resolved_path.resolve())
    else:
        logger.debug("No config file found, using defaults + environment variables")

    _apply_env_overrides(settings_dict)
    return RecordFSSettings(**settings_dict)


def configure_logging(level: str) -> None:
    """Set the level of the ``recordfs`` logger hierarchy."""
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.getLogger("recordfs").setLevel(numeric_level)
    # Also set root handler if none configured
    if not logging.getLogger().handlers:
        logging.basicConfig(level=numeric_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
