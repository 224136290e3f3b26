from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stemcell_core.errors import ConfigError
from stemcell_core.metadata import Configuration

from .expand import DEFAULT_CONFIG_FILENAME

app = typer.Typer(help="Site configuration inspection")
console = Console()


def _load(chef_root: Path, config_filename: str) -> Configuration:
    try:
        return Configuration(chef_root / config_filename)
    except ConfigError as e:
        typer.echo(f"ConfigError: {e}", err=True)
        raise typer.Exit(1)


@app.command("show")
def config_show(
    chef_root: Path = typer.Option(Path("."), "--chef-root", envvar="STEMCELL_CHEF_ROOT", help="Chef repository root"),
    config_filename: str = typer.Option(
        DEFAULT_CONFIG_FILENAME, "--config-filename", envvar="STEMCELL_CONFIG_FILENAME", help="Config file name"
    ),
):
    """Print the loaded site configuration as JSON."""
    config = _load(chef_root, config_filename)
    typer.echo(
        json.dumps(
            {
                "config_path": str(config.config_path),
                "config": config.config.model_dump(),
            },
            indent=2,
            default=str,
        )
    )


@app.command("zones")
def config_zones(
    chef_root: Path = typer.Option(Path("."), "--chef-root", envvar="STEMCELL_CHEF_ROOT", help="Chef repository root"),
    config_filename: str = typer.Option(
        DEFAULT_CONFIG_FILENAME, "--config-filename", envvar="STEMCELL_CONFIG_FILENAME", help="Config file name"
    ),
):
    """List configured regions and their availability zones."""
    config = _load(chef_root, config_filename)
    zones = config.availability_zones()
    if not zones:
        console.print("[yellow]No availability zones configured[/yellow]")
        return

    table = Table(title=f"Availability zones ({config.config_path})")
    table.add_column("Region", style="cyan")
    table.add_column("Default zone", style="green")
    table.add_column("All zones")
    for region in sorted(zones):
        region_zones = zones[region]
        table.add_row(region, region_zones[0] if region_zones else "-", ", ".join(region_zones))
    console.print(table)
