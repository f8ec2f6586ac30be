"""
Configuration and cache location for capsync.

    ~/.capsync/config.yaml      optional settings
    ~/.capsync/capabilities/    the capability cache
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger("capsync.config")

CONFIG_FILENAME = "config.yaml"
CAPABILITY_DIRNAME = "capabilities"


class CapsyncConfig(BaseModel):
    """Settings read from ``<home>/config.yaml``."""

    source_dir: Optional[Path] = None
    cache_dir: Optional[Path] = None
    strict: bool = False


def load_config(home: Path) -> CapsyncConfig:
    """Load the config file, falling back to defaults when it is unusable.

    Args:
        home: capsync home directory.

    Returns:
        The parsed configuration.
    """
    config_file = Path(home).expanduser() / CONFIG_FILENAME
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            return CapsyncConfig(**data)
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as exc:
            logger.warning("Failed to load config %s: %s", config_file, exc)
    return CapsyncConfig()


def resolve_capability_dir(home: Path, config: Optional[CapsyncConfig] = None) -> Path:
    """Return the capability cache directory without creating it.

    Args:
        home: capsync home directory.
        config: Loaded configuration; ``cache_dir`` overrides the default.
    """
    if config is not None and config.cache_dir is not None:
        return config.cache_dir.expanduser()
    return Path(home).expanduser() / CAPABILITY_DIRNAME


def get_capability_dir(home: Path, config: Optional[CapsyncConfig] = None) -> Path:
    """Resolve and create the capability cache directory.

    Args:
        home: capsync home directory.
        config: Loaded configuration; ``cache_dir`` overrides the default.

    Returns:
        Path to the cache directory.
    """
    cache_dir = resolve_capability_dir(home, config)
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
