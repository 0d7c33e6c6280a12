#!/usr/bin/env python3
"""
config.py - Import settings

Settings are read from a YAML file. Checks (in order):
1. Explicit path passed to load_settings()
2. CANVASIMSCP_CONFIG environment variable
3. canvasimscp.yaml in the current directory
4. Built-in defaults

Example canvasimscp.yaml:

    temp_base: /var/tmp
    max_total_size: 209715200
    verbose: false
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from canvasimscp.errors import ConfigurationError


CONFIG_ENV_VAR = "CANVASIMSCP_CONFIG"
DEFAULT_CONFIG_NAME = "canvasimscp.yaml"

# Resource type Canvas uses for QTI 1.2 question files
QTI_RESOURCE_TYPE = "imsqti_xmlv1p2"


@dataclass(frozen=True)
class Settings:
    """Values that control one import run."""

    temp_base: str = tempfile.gettempdir()
    manifest_name: str = "imsmanifest.xml"
    archive_name: str = "content.zip"
    qti_resource_type: str = QTI_RESOURCE_TYPE

    # SECURITY: Size limits to prevent zip bombs and DoS
    max_total_size: int = 500 * 1024 * 1024  # 500 MB total
    max_file_size: int = 50 * 1024 * 1024    # 50 MB per file
    max_files: int = 10000
    max_compression_ratio: int = 100

    verbose: bool = True


def _find_config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path:
        return Path(path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    local = Path.cwd() / DEFAULT_CONFIG_NAME
    if local.is_file():
        return local

    return None


def _coerce(data: Dict[str, Any], source: Path) -> Dict[str, Any]:
    """Check keys and value types against the Settings fields."""
    known = {f.name: f for f in fields(Settings)}
    defaults = Settings()
    values: Dict[str, Any] = {}

    for key, value in data.items():
        if key not in known:
            raise ConfigurationError(
                f"Unknown setting '{key}' in {source}",
                suggestion=f"Valid settings: {', '.join(sorted(known))}",
            )
        expected = type(getattr(defaults, key))
        # bool is an int subclass; don't let `verbose: 1` or `max_files: true` slip through
        if isinstance(value, bool) != (expected is bool) or not isinstance(value, expected):
            raise ConfigurationError(
                f"Setting '{key}' in {source} must be {expected.__name__}, got {type(value).__name__}",
            )
        values[key] = value

    return values


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from YAML.

    Raises:
        ConfigurationError: If the file is missing (when given explicitly),
            unreadable, not valid YAML, or has unknown/mistyped keys
    """
    config_file = _find_config_file(path)
    if config_file is None:
        return Settings()

    if not config_file.is_file():
        raise ConfigurationError(
            f"Config file not found: {config_file}",
            suggestion=f"Create the file or unset {CONFIG_ENV_VAR}",
        )

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not read config file {config_file}", cause=e)

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a mapping")

    return replace(Settings(), **_coerce(data, config_file))
