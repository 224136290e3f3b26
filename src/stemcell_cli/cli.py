from __future__ import annotations

import typer

from .util import configure_logging, configure_stdio

app = typer.Typer(help="stemcell: Resolve instance launch metadata for chef roles")


@app.callback()
def _init(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level for diagnostics on stderr (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    configure_stdio()
    configure_logging(log_level)


from .commands import config_cmd as config_cmd  # noqa: E402
from .commands.expand import expand as expand_fn  # noqa: E402

app.add_typer(config_cmd.app, name="config", help="Site configuration inspection")
app.command(name="expand")(expand_fn)


def main():
    app()
