"""Configuration file loader for Cornerstone.

A single YAML file (cornerstone_config.yaml) holds the scheduler options and
the timeline view options.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .scheduler import SchedulingConfig

CONFIG_FILENAME = "cornerstone_config.yaml"


class TimelineConfig(BaseModel):
    """Options for the timeline view."""

    # Show undated work items in text output (they never affect the date range)
    include_undated: bool = False


class UnifiedConfig(BaseModel):
    """Top-level configuration."""

    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)
    timeline: TimelineConfig = Field(default_factory=TimelineConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load configuration from a YAML file.

    Missing sections fall back to their defaults; an empty file yields the
    default configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ParseError: If the file is not valid YAML or not a mapping
        ValidationError: If a section fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config {config_path}: {e}") from e

    if data is None:
        return UnifiedConfig()
    if not isinstance(data, dict):
        raise ParseError(f"Config {config_path} must contain a mapping at the root level")

    try:
        return UnifiedConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid config {config_path}: {e}") from e
