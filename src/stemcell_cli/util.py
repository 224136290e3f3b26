from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List

import typer


def configure_stdio() -> None:
    """Make CLI output robust across Windows console encodings."""

    if os.name != "nt":
        return

    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="replace")


def configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"unknown log level: {level}", param_hint="--log-level")
    logging.basicConfig(
        level=numeric,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def parse_option_value(raw: str) -> Any:
    """Parse VALUE as JSON when it parses (numbers, null, lists), else keep the string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_overrides(options: List[str]) -> Dict[str, Any]:
    """Turn repeated KEY=VALUE flags into an override mapping (last one wins)."""
    overrides: Dict[str, Any] = {}
    for option in options:
        key, sep, value = option.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {option!r}", param_hint="--option")
        overrides[key] = parse_option_value(value)
    return overrides


def strip_nulls(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_nulls(v) for v in value if v is not None]
    return value
