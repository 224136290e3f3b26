"""Exception taxonomy for stemcell-core."""

from pathlib import Path


class StemcellError(Exception):
    """Base exception for all stemcell errors."""

    pass


class InvalidArgumentError(StemcellError, ValueError):
    """A required argument was missing or malformed."""

    pass


# Config errors


class ConfigError(StemcellError):
    """Failed to load or validate a configuration or role file."""

    pass


class MissingConfigurationError(ConfigError):
    """Configuration file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Configuration file not found: {path}")


# Role metadata errors


class RoleNotFoundError(StemcellError):
    """A role referenced from a run list has no role file."""

    def __init__(self, role: str, included_by: str) -> None:
        self.role = role
        self.included_by = included_by
        super().__init__(f"Role not found: {role} (included by {included_by})")


class EmptyRoleError(StemcellError):
    """Role declares no instance metadata for the environment."""

    def __init__(self, role: str, environment: str) -> None:
        self.role = role
        self.environment = environment
        super().__init__(
            f"Role '{role}' has no instance metadata in environment '{environment}'"
        )
