"""Site configuration (stemcell.json / stemcell.toml).

The configuration file is a single table with three optional sections:

    {
      "defaults": {"instance_type": "m1.small", ...},
      "availability_zones": {"us-east-1": ["us-east-1a", "us-east-1b"]},
      "backing_store": {
        "ebs": {"image_id": "ami-..."},
        "instance_store": {"image_id": "ami-..."}
      }
    }

Unknown top-level keys are ignored so the same file can carry settings for
other tools.
"""

import copy
import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigError, MissingConfigurationError

logger = logging.getLogger(__name__)


class StemcellConfig(BaseModel):
    """Validated contents of the site configuration file."""

    defaults: Dict[str, Any] = Field(default_factory=dict, description="Site-wide default options")
    availability_zones: Dict[str, List[str]] = Field(
        default_factory=dict, description="Region -> ordered availability zones"
    )
    backing_store: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Backing store name -> option bundle"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("defaults", "availability_zones", "backing_store", mode="before")
    @classmethod
    def null_section_is_empty(cls, v):
        # `"defaults": null` in JSON means the section is not set
        return {} if v is None else v


class Configuration:
    """File-backed configuration, loaded once at construction."""

    def __init__(self, config_path: Path | str) -> None:
        self._config_path = Path(config_path)
        self._config = self._read_configuration(self._config_path)

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def config(self) -> StemcellConfig:
        return self._config

    def default_options(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config.defaults)

    def availability_zones(self) -> Dict[str, List[str]]:
        return {region: list(zones) for region, zones in self._config.availability_zones.items()}

    def options_for_backing_store(self, backing_store: str) -> Dict[str, Any]:
        options = self._config.backing_store.get(backing_store)
        if options is None:
            logger.debug(f"No options configured for backing store {backing_store!r}")
            return {}
        return copy.deepcopy(options)

    @staticmethod
    def _read_raw(path: Path) -> Any:
        if not path.exists():
            raise MissingConfigurationError(path)
        try:
            if path.suffix.lower() == ".toml":
                with open(path, "rb") as f:
                    return tomllib.load(f)
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration from {path}: {e}") from e

    @classmethod
    def _read_configuration(cls, path: Path) -> StemcellConfig:
        data = cls._read_raw(path)
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be an object: {path}")
        try:
            config = StemcellConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration structure in {path}: {e}") from e
        logger.debug(
            f"Loaded configuration from {path}: "
            f"{len(config.defaults)} defaults, "
            f"{len(config.availability_zones)} regions, "
            f"{len(config.backing_store)} backing stores"
        )
        return config
