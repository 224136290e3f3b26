"""Metadata source capability types."""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol


class ConfigurationReader(Protocol):
    """Read-only view over a loaded site configuration."""

    @property
    def config_path(self) -> Path:
        """Location the configuration was loaded from."""
        ...

    def default_options(self) -> Dict[str, Any]:
        """Site-wide default options."""
        ...

    def availability_zones(self) -> Dict[str, List[str]]:
        """Region name -> ordered availability zone names."""
        ...

    def options_for_backing_store(self, backing_store: str) -> Dict[str, Any]:
        """Options specific to a backing store; empty for unknown names."""
        ...


class RoleRepositoryReader(Protocol):
    """Read-only view over a role metadata repository."""

    @property
    def chef_root(self) -> Path:
        """Repository root."""
        ...

    def metadata_for_role(self, role: str, environment: str) -> Optional[Dict[str, Any]]:
        """Declared metadata, or None when the role declares none."""
        ...
