"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from diskcached.core.config.models import DiskCacheConfig

logger = logging.getLogger(__name__)

# Default config path (can be overridden with DISKCACHED_CONFIG)
_DEFAULT_APP_CONFIG_PATH = Path("diskcached.yaml")

ENV_CONFIG = "DISKCACHED_CONFIG"
ENV_ROOT = "DISKCACHED_ROOT"
ENV_LOG_LEVEL = "DISKCACHED_LOG_LEVEL"


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("diskcached.json")
        'json'
        >>> detect_format("diskcached.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return the raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary (empty for an empty YAML file)

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)
    text = path.read_text(encoding="utf-8")

    if fmt == "json":
        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            content = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        # safe_load returns None for empty files
        if content is None:
            content = {}

    if not isinstance(content, dict):
        raise ValueError(f"Config in {path} must be a mapping, got {type(content).__name__}")
    return content


def load_app_config(path: str | Path | None = None) -> DiskCacheConfig:
    """Load and validate application configuration.

    Path resolution: explicit `path`, then $DISKCACHED_CONFIG, then
    ./diskcached.yaml. A missing default file yields all defaults; a missing
    explicit file is an error. Environment overrides are applied last.

    Returns:
        Validated DiskCacheConfig

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
        ValidationError: If config is invalid
    """
    explicit = path is not None or os.getenv(ENV_CONFIG) is not None
    config_path = Path(path or os.getenv(ENV_CONFIG) or _DEFAULT_APP_CONFIG_PATH)

    if config_path.exists() or explicit:
        config = DiskCacheConfig.model_validate(load_config(config_path))
        logger.debug(f"Loaded config from {config_path}")
    else:
        config = DiskCacheConfig()

    return _apply_env_overrides(config)


def _apply_env_overrides(config: DiskCacheConfig) -> DiskCacheConfig:
    """Return a copy of config with environment overrides applied."""
    updates: dict[str, Any] = {}

    root = os.getenv(ENV_ROOT)
    if root:
        logger.debug(f"Using {ENV_ROOT} from environment")
        updates["root"] = Path(root)

    level = os.getenv(ENV_LOG_LEVEL)
    if level:
        updates["logging"] = {**config.logging.model_dump(), "level": level.upper()}

    if not updates:
        return config
    # Re-validate so bad environment values fail like bad file values
    return DiskCacheConfig.model_validate({**config.model_dump(), **updates})
