"""Instance metadata expansion.

Layer order (later wins, per key):
1) Built-in defaults (DEFAULT_OPTIONS)
2) Site configuration `defaults`
3) Site configuration `backing_store.<resolved backing store>`
4) Role metadata from the chef repository
5) Caller overrides (usually the command line)

After the merge, `chef_role` and `chef_environment` are set from the call
arguments, and a missing `availability_zone` is filled from the first zone
configured for `region`.

The backing store is resolved before layer 3 is fetched, from the first
non-null of: overrides, role metadata, site defaults, built-in default.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import EmptyRoleError, InvalidArgumentError
from .base import ConfigurationReader, RoleRepositoryReader
from .chef_repository import ChefRepository
from .configuration import Configuration

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS_VERSION = 1

# Floor for every expansion. Bump DEFAULT_OPTIONS_VERSION when this changes.
DEFAULT_OPTIONS: Mapping[str, Any] = {
    "git_branch": "production",
    "backing_store": "instance_store",
    "chef_environment": "production",
    "tags": {},
    "count": 1,
}


class ExpandOptions(BaseModel):
    """Flags controlling a single expansion."""

    allow_empty_roles: bool = Field(
        default=False,
        description="Expand with defaults only when the role declares no metadata",
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def coerce(cls, value: Union["ExpandOptions", Mapping[str, Any], None]) -> "ExpandOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        flags = {str(k): v for k, v in value.items()}
        unknown = sorted(set(flags) - set(cls.model_fields))
        if unknown:
            logger.debug(f"Ignoring unknown expand options: {unknown}")
        try:
            return cls(**flags)
        except ValidationError as e:
            raise InvalidArgumentError(f"invalid expand options: {e}") from e


def merge_layers(layers: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Fold mappings left to right; a later layer's keys replace earlier ones."""
    result: Dict[str, Any] = {}
    for layer in layers:
        result.update(layer)
    return result


def resolve_backing_store(*sources: Mapping[str, Any]) -> str:
    """First non-null `backing_store` among sources, else the built-in default."""
    for source in sources:
        value = source.get("backing_store")
        if value is not None:
            return value
    return DEFAULT_OPTIONS["backing_store"]


def substitute_availability_zone(
    metadata: Dict[str, Any], availability_zones: Mapping[str, list]
) -> Dict[str, Any]:
    region = metadata.get("region")
    if region is None or metadata.get("availability_zone") is not None:
        return metadata
    if not isinstance(region, str):
        logger.debug(f"Region {region!r} is not a name; leaving availability_zone unset")
        return metadata
    zones = availability_zones.get(region)
    if zones:
        metadata["availability_zone"] = zones[0]
    else:
        logger.debug(f"No availability zones configured for region {region!r}")
    return metadata


def _require(name: str, value: Any) -> None:
    if value is None:
        raise InvalidArgumentError(f"{name} is required")
    if isinstance(value, str) and not value.strip():
        raise InvalidArgumentError(f"{name} is required")
    # Path("") collapses to "."
    if isinstance(value, Path) and not value.parts:
        raise InvalidArgumentError(f"{name} is required")


class MetadataSource:
    """Expand roles into instance metadata for one chef repository."""

    def __init__(
        self,
        chef_root: Union[str, Path],
        config_filename: str,
        *,
        config: Optional[ConfigurationReader] = None,
        chef_repo: Optional[RoleRepositoryReader] = None,
    ) -> None:
        _require("chef_root", chef_root)
        _require("config_filename", config_filename)
        self._chef_root = chef_root
        self._config_filename = config_filename
        if config is None:
            config = Configuration(Path(chef_root) / config_filename)
        if chef_repo is None:
            chef_repo = ChefRepository(chef_root)
        self._config = config
        self._chef_repo = chef_repo

    @property
    def chef_root(self) -> Union[str, Path]:
        return self._chef_root

    @property
    def config_filename(self) -> str:
        return self._config_filename

    @property
    def config(self) -> ConfigurationReader:
        return self._config

    @property
    def chef_repo(self) -> RoleRepositoryReader:
        return self._chef_repo

    def expand_role(
        self,
        role: str,
        environment: str,
        override_options: Optional[Mapping[str, Any]] = None,
        expand_options: Union[ExpandOptions, Mapping[str, Any], None] = None,
    ) -> Dict[str, Any]:
        """Return the fully resolved metadata for `role` in `environment`.

        Raises:
            InvalidArgumentError: role or environment is None.
            EmptyRoleError: the role declares no metadata and empty roles
                were not allowed.
        """
        if role is None:
            raise InvalidArgumentError("role is required")
        if environment is None:
            raise InvalidArgumentError("environment is required")
        options = ExpandOptions.coerce(expand_options)
        override_options = dict(override_options or {})

        role_metadata = self._chef_repo.metadata_for_role(role, environment)
        if role_metadata is None:
            if not options.allow_empty_roles:
                raise EmptyRoleError(role, environment)
            logger.info(f"Role {role!r} has no metadata in {environment!r}; using defaults only")
            role_metadata = {}

        default_options = self._config.default_options()
        backing_store = resolve_backing_store(override_options, role_metadata, default_options)
        backing_store_options = self._config.options_for_backing_store(backing_store)

        metadata = merge_layers(
            [
                copy.deepcopy(DEFAULT_OPTIONS),
                default_options,
                {"backing_store": backing_store},
                backing_store_options,
                role_metadata,
                override_options,
                {"chef_role": role, "chef_environment": environment},
            ]
        )
        metadata = substitute_availability_zone(metadata, self._config.availability_zones())

        logger.debug(
            f"Expanded role {role!r} in {environment!r} "
            f"(backing_store={metadata.get('backing_store')!r}, {len(metadata)} keys)"
        )
        return metadata
