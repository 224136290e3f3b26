"""
expand.py - Print the resolved instance metadata for a role.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

import tomli_w
import typer

from stemcell_core.errors import StemcellError
from stemcell_core.metadata import ExpandOptions, MetadataSource

from ..util import parse_overrides, strip_nulls

DEFAULT_CONFIG_FILENAME = "stemcell.json"


def expand(
    role: str = typer.Argument(..., help="Role to expand"),
    environment: str = typer.Option("production", "--environment", "-e", help="Chef environment"),
    chef_root: Path = typer.Option(
        Path("."),
        "--chef-root",
        envvar="STEMCELL_CHEF_ROOT",
        help="Chef repository root (holds roles/ and the config file)",
    ),
    config_filename: str = typer.Option(
        DEFAULT_CONFIG_FILENAME,
        "--config-filename",
        envvar="STEMCELL_CONFIG_FILENAME",
        help="Config file name, relative to the chef root",
    ),
    option: List[str] = typer.Option(
        [],
        "--option",
        "-o",
        help="Override option as KEY=VALUE (VALUE parsed as JSON when possible); repeatable",
    ),
    allow_empty_roles: bool = typer.Option(
        False, "--allow-empty-roles", help="Expand with defaults when the role has no metadata"
    ),
    format: str = typer.Option("json", "--format", case_sensitive=False, help="Output format: json|toml"),
):
    """Print the metadata a role would launch with."""
    fmt = format.lower()
    if fmt not in {"json", "toml"}:
        typer.echo("format must be json or toml", err=True)
        raise typer.Exit(1)

    overrides = parse_overrides(option or [])

    try:
        source = MetadataSource(chef_root, config_filename)
        metadata = source.expand_role(
            role,
            environment,
            overrides,
            ExpandOptions(allow_empty_roles=allow_empty_roles),
        )
    except StemcellError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if fmt == "json":
        typer.echo(json.dumps(metadata, indent=2, sort_keys=True, default=str))
    else:
        # TOML has no null
        typer.echo(tomli_w.dumps(strip_nulls(metadata)))
