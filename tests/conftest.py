import json

from pathlib import Path
from typing import Any, Dict, List, Optional

from hypothesis import settings

# No local example database (e.g. `.hypothesis/`) and no per-example deadline during tests.
settings.register_profile("stemcell-tests", database=None, deadline=None)
settings.load_profile("stemcell-tests")


def write_stemcell_config(
    chef_root: Path,
    *,
    defaults: Optional[Dict[str, Any]] = None,
    availability_zones: Optional[Dict[str, List[str]]] = None,
    backing_store: Optional[Dict[str, Dict[str, Any]]] = None,
    filename: str = "stemcell.json",
) -> Path:
    """Write a stemcell.json site config under chef_root for tests.

    Args:
        chef_root: Temporary chef repository root (tmp_path).
        defaults: Site-wide default options.
        availability_zones: Region -> zones mapping.
        backing_store: Backing store name -> options.

    Returns:
        Path to the written config file.
    """
    if availability_zones is None:
        availability_zones = {"us-east-1": ["us-east-1a", "us-east-1c"]}
    if backing_store is None:
        backing_store = {
            "ebs": {"image_id": "ami-ebs"},
            "instance_store": {"image_id": "ami-instance"},
        }

    chef_root.mkdir(parents=True, exist_ok=True)
    path = chef_root / filename
    payload = {
        "defaults": defaults or {},
        "availability_zones": availability_zones,
        "backing_store": backing_store,
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def write_role(
    chef_root: Path,
    name: str,
    *,
    metadata: Optional[Dict[str, Any]] = None,
    override_metadata: Optional[Dict[str, Any]] = None,
    run_list: Optional[List[str]] = None,
    env_run_lists: Optional[Dict[str, List[str]]] = None,
) -> Path:
    """Write a chef JSON role file under chef_root/roles.

    `metadata` goes to default_attributes.instance_metadata and
    `override_metadata` to override_attributes.instance_metadata; either is
    left out of the role entirely when None.
    """
    roles_dir = chef_root / "roles"
    roles_dir.mkdir(parents=True, exist_ok=True)

    role: Dict[str, Any] = {
        "name": name,
        "json_class": "Chef::Role",
        "default_attributes": {},
        "override_attributes": {},
        "run_list": run_list or [],
    }
    if metadata is not None:
        role["default_attributes"]["instance_metadata"] = metadata
    if override_metadata is not None:
        role["override_attributes"]["instance_metadata"] = override_metadata
    if env_run_lists is not None:
        role["env_run_lists"] = env_run_lists

    path = roles_dir / f"{name}.json"
    path.write_text(json.dumps(role, indent=2), encoding="utf-8")
    return path
