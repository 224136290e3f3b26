"""Stemcell Core - instance metadata resolution library."""

from .__version__ import __version__, __version_info__

from .metadata import (
    DEFAULT_OPTIONS,
    ChefRepository,
    Configuration,
    ConfigurationReader,
    ExpandOptions,
    MetadataSource,
    RoleRepositoryReader,
)
from .errors import (
    ConfigError,
    EmptyRoleError,
    InvalidArgumentError,
    MissingConfigurationError,
    RoleNotFoundError,
    StemcellError,
)

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Metadata
    "DEFAULT_OPTIONS",
    "ChefRepository",
    "Configuration",
    "ConfigurationReader",
    "ExpandOptions",
    "MetadataSource",
    "RoleRepositoryReader",
    # Errors
    "ConfigError",
    "EmptyRoleError",
    "InvalidArgumentError",
    "MissingConfigurationError",
    "RoleNotFoundError",
    "StemcellError",
]
