"""
AlertMap Configuration

Settings for the grouped alerts view:
- Environment-based configuration (ALERTMAP_ prefix)
- Type-safe settings with Pydantic
- JSON file loading and saving
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from alertmap.exceptions import ConfigError


class LogLevel(str, Enum):
    """Logging levels for AlertMap."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GroupingConfig(BaseModel):
    """Configuration for the Grouping Engine."""
    default_dimensions: List[str] = Field(default_factory=lambda: ["type"])
    unknown_label: str = "Unknown"
    tag_key_prefix: str = "tagKey:"

    @field_validator("default_dimensions")
    @classmethod
    def non_empty_dimensions(cls, v: List[str]) -> List[str]:
        """At least one default dimension is required."""
        dims = [d for d in v if d]
        if not dims:
            raise ValueError("default_dimensions must name at least one dimension")
        return dims


class LayoutConfig(BaseModel):
    """Configuration for the treemap layout."""
    min_weight: int = 1  # Zero-count nodes still get area
    gutter: float = 1.0  # Inset applied by the renderer, in pixels
    overflow_enabled: bool = False  # Collapse excess leaves into "+N more"

    @field_validator("min_weight")
    @classmethod
    def positive_weight(cls, v: int) -> int:
        if v < 1:
            raise ValueError("min_weight must be >= 1")
        return v

    @field_validator("gutter")
    @classmethod
    def non_negative_gutter(cls, v: float) -> float:
        if v < 0:
            raise ValueError("gutter must be >= 0")
        return v


class AlertMapConfig(BaseSettings):
    """
    Main AlertMap Configuration

    Loads configuration from environment variables and/or config files.
    Environment variables are prefixed with ALERTMAP_
    (e.g., ALERTMAP_LOG_LEVEL=DEBUG, ALERTMAP_LAYOUT__GUTTER=2).
    """

    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False

    grouping: GroupingConfig = Field(default_factory=GroupingConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    model_config = {
        "env_prefix": "ALERTMAP_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    @classmethod
    def from_file(cls, config_path: Path) -> "AlertMapConfig":
        """Load configuration from a JSON file."""
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path) as f:
                config_data = json.load(f)
            return cls(**config_data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    def to_file(self, config_path: Path) -> None:
        """Save configuration to a JSON file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)


# Global configuration instance (lazy loaded)
_config: Optional[AlertMapConfig] = None


def get_config() -> AlertMapConfig:
    """Get the global AlertMap configuration instance."""
    global _config
    if _config is None:
        _config = AlertMapConfig()
    return _config


def set_config(config: AlertMapConfig) -> None:
    """Set the global AlertMap configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration to default."""
    global _config
    _config = None
