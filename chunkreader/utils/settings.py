"""
Settings loader for ChunkReader.

Loads reader settings from a YAML file in config/, then applies
CHUNKREADER_* environment overrides (a project .env is read first).
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator


logger = logging.getLogger(__name__)

# Project root (relative to this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "reader.yaml"
DEFAULT_PASSAGES_DIR = PROJECT_ROOT / "data" / "passages"

THEME_KEYS = ("white", "black", "pink", "sky", "green")

ENV_OVERRIDES = {
    "CHUNKREADER_PASSAGES_DIR": "passages_dir",
    "CHUNKREADER_SOURCE_FORMAT": "source_format",
    "CHUNKREADER_THEME": "theme",
    "CHUNKREADER_REQUIRE_SELECTION": "require_selection_for_chunk_mode",
    "CHUNKREADER_LOG_LEVEL": "log_level",
}


class ReaderSettings(BaseModel):
    """Runtime settings for the reader app."""
    passages_dir: Path = DEFAULT_PASSAGES_DIR
    source_format: Literal["json", "csv"] = "json"
    theme: str = "white"
    require_selection_for_chunk_mode: bool = True  # chunk mode needs tagged sentences
    log_level: str = "INFO"

    @field_validator("theme")
    @classmethod
    def theme_known(cls, v):
        if v not in THEME_KEYS:
            raise ValueError(f"Unknown theme '{v}', expected one of {', '.join(THEME_KEYS)}")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v):
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return level


def load_settings(
    config_path: Path | None = None,
    env: dict[str, str] | None = None,
) -> ReaderSettings:
    """
    Load settings from YAML with environment overrides.

    Args:
        config_path: YAML file (default: config/reader.yaml). A missing file
            means defaults.
        env: Environment mapping to read overrides from (default: os.environ,
            after loading the project .env)

    Returns:
        Validated ReaderSettings

    Raises:
        ValueError: If the YAML is malformed or a value fails validation
    """
    path = config_path or DEFAULT_CONFIG_PATH
    values: dict[str, Any] = {}

    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            try:
                values = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid settings file {path}: {e}") from e
        if not isinstance(values, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
    else:
        logger.debug(f"No settings file at {path}, using defaults")

    if env is None:
        load_dotenv(PROJECT_ROOT / ".env")
        env = dict(os.environ)

    for env_key, field in ENV_OVERRIDES.items():
        if env.get(env_key):
            values[field] = env[env_key]

    # Relative passage dirs are resolved against the project root
    if "passages_dir" in values:
        passages_dir = Path(values["passages_dir"])
        if not passages_dir.is_absolute():
            passages_dir = PROJECT_ROOT / passages_dir
        values["passages_dir"] = passages_dir

    try:
        return ReaderSettings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
