"""Role metadata from a Chef repository.

Instance metadata lives in role attributes under `instance_metadata`:

    roles/web.json
    {
      "name": "web",
      "default_attributes": {"instance_metadata": {"instance_type": "c1.xlarge"}},
      "override_attributes": {},
      "run_list": ["role[base]", "recipe[nginx]"],
      "env_run_lists": {"staging": ["role[base_staging]"]}
    }

A role is expanded the way chef-client does for a node: the environment's run
list replaces the default one, included roles are applied before the role that
includes them (so the including role wins), and a role already seen is skipped.
"""

from __future__ import annotations

import copy
import json
import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import ConfigError, InvalidArgumentError, RoleNotFoundError

logger = logging.getLogger(__name__)

METADATA_ATTRIBUTE = "instance_metadata"

_RUN_LIST_ITEM = re.compile(r"^(role|recipe)\[([^\]]+)\]$")


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass
class Role:
    """Parsed role document (only the parts used for metadata)."""

    name: str
    default_attributes: Dict[str, Any] = field(default_factory=dict)
    override_attributes: Dict[str, Any] = field(default_factory=dict)
    run_list: List[str] = field(default_factory=list)
    env_run_lists: Dict[str, List[str]] = field(default_factory=dict)

    def run_list_for(self, environment: str) -> List[str]:
        if environment in self.env_run_lists:
            return self.env_run_lists[environment]
        return self.run_list


class ChefRepository:
    """Read role metadata from `<chef_root>/roles`."""

    def __init__(self, chef_root: Path | str) -> None:
        self._chef_root = Path(chef_root)

    @property
    def chef_root(self) -> Path:
        return self._chef_root

    @property
    def roles_dir(self) -> Path:
        return self._chef_root / "roles"

    def metadata_for_role(self, role: str, environment: str) -> Optional[Dict[str, Any]]:
        """Return the merged `instance_metadata` for a role in an environment.

        Returns None when the role file does not exist or none of the expanded
        roles declares `instance_metadata`. An explicitly empty table is
        returned as `{}`.
        """
        _validate_role_name(role)
        top = self._load_role(role)
        if top is None:
            logger.debug(f"No role file for {role!r} under {self.roles_dir}")
            return None

        applied = self._expand(top, environment)
        logger.debug(f"Expanded role {role!r} in {environment!r}: {[r.name for r in applied]}")

        declared = False
        default_attrs: dict[str, Any] = {}
        override_attrs: dict[str, Any] = {}
        for r in applied:
            declared = declared or METADATA_ATTRIBUTE in r.default_attributes
            declared = declared or METADATA_ATTRIBUTE in r.override_attributes
            default_attrs = deep_merge(default_attrs, r.default_attributes)
            override_attrs = deep_merge(override_attrs, r.override_attributes)

        if not declared:
            return None
        merged = deep_merge(default_attrs, override_attrs)
        metadata = merged.get(METADATA_ATTRIBUTE)
        if metadata is None:
            return {}
        if not isinstance(metadata, dict):
            raise ConfigError(
                f"'{METADATA_ATTRIBUTE}' for role {role!r} must be an object, "
                f"got {type(metadata).__name__}"
            )
        return copy.deepcopy(metadata)

    def _expand(self, top: Role, environment: str) -> List[Role]:
        applied: List[Role] = []
        seen: set[str] = set()

        def visit(role: Role) -> None:
            seen.add(role.name)
            for item in role.run_list_for(environment):
                kind, name = _parse_run_list_item(item, role.name)
                if kind != "role" or name in seen:
                    continue
                included = self._load_role(name)
                if included is None:
                    raise RoleNotFoundError(name, role.name)
                visit(included)
            # a role is applied after everything its run list pulls in
            applied.append(role)

        visit(top)
        return applied

    def _role_path(self, name: str) -> Optional[Path]:
        for suffix in (".json", ".toml"):
            path = self.roles_dir / f"{name}{suffix}"
            if path.exists():
                return path
        return None

    def _load_role(self, name: str) -> Optional[Role]:
        _validate_role_name(name)
        path = self._role_path(name)
        if path is None:
            return None
        try:
            if path.suffix == ".toml":
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            else:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Invalid role file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read role file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Role file must be an object: {path}")
        return _role_from_dict(name, data, path)


def _role_from_dict(name: str, data: dict[str, Any], path: Path) -> Role:
    def table(key: str) -> dict[str, Any]:
        value = data.get(key) or {}
        if not isinstance(value, dict):
            raise ConfigError(f"'{key}' must be an object in {path}")
        return value

    def run_list(value: Any, key: str) -> List[str]:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' must be a list of strings in {path}")
        return value

    env_run_lists = {
        env: run_list(items, f"env_run_lists.{env}")
        for env, items in table("env_run_lists").items()
    }
    return Role(
        name=name,
        default_attributes=table("default_attributes"),
        override_attributes=table("override_attributes"),
        run_list=run_list(data.get("run_list") or [], "run_list"),
        env_run_lists=env_run_lists,
    )


def _parse_run_list_item(item: str, included_by: str) -> tuple[str, str]:
    match = _RUN_LIST_ITEM.match(item.strip())
    if match:
        return match.group(1), match.group(2)
    # A bare name is a recipe in chef run lists
    if item.strip() and "[" not in item:
        return "recipe", item.strip()
    raise ConfigError(f"Invalid run list item {item!r} in role {included_by!r}")


def _validate_role_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidArgumentError("role name must be non-empty")
    if "/" in name or "\\" in name or name.startswith("."):
        raise InvalidArgumentError(f"invalid role name: {name!r}")
