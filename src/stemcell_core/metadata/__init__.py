"""Instance metadata expansion from layered configuration sources."""

from .base import ConfigurationReader, RoleRepositoryReader
from .chef_repository import ChefRepository, Role
from .configuration import Configuration, StemcellConfig
from .source import (
    DEFAULT_OPTIONS,
    DEFAULT_OPTIONS_VERSION,
    ExpandOptions,
    MetadataSource,
    merge_layers,
    resolve_backing_store,
    substitute_availability_zone,
)

__all__ = [
    "ConfigurationReader",
    "RoleRepositoryReader",
    "ChefRepository",
    "Role",
    "Configuration",
    "StemcellConfig",
    "DEFAULT_OPTIONS",
    "DEFAULT_OPTIONS_VERSION",
    "ExpandOptions",
    "MetadataSource",
    "merge_layers",
    "resolve_backing_store",
    "substitute_availability_zone",
]
