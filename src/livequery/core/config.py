"""
Configuration loading and validation for live query stores.

Example livequery.yaml:

    live_query:
      id_field_name: id
      include_identifier_extension: true
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

CONFIG_SECTION = "live_query"


class LiveQueryStoreConfig(BaseModel):
    """Settings for InMemoryLiveQueryStore."""

    id_field_name: str = Field(default="id", min_length=1)
    include_identifier_extension: bool = False
    identifier_extension_key: str = Field(default="liveResourceIdentifier", min_length=1)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LiveQueryStoreConfig":
        """Create config from dictionary, accepting a nested live_query section."""
        if CONFIG_SECTION in data:
            data = data[CONFIG_SECTION] or {}
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid live query configuration: {e}") from e


def load_config(path: Path | str = "livequery.yaml") -> LiveQueryStoreConfig:
    """
    Load configuration from YAML file.

    A missing file yields the default configuration.
    """
    path = Path(path)
    if not path.exists():
        return LiveQueryStoreConfig()

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e

    if data is None:
        return LiveQueryStoreConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")

    return LiveQueryStoreConfig.from_dict(data)
