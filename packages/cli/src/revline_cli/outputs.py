"""CI step outputs."""

from __future__ import annotations

import os

import click


def set_outputs(**outputs) -> None:
    """Write name=value pairs to $GITHUB_OUTPUT, or echo them when run outside Actions."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        for name, value in outputs.items():
            click.echo(f"{name}={value}")
        return
    with open(output_path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")
