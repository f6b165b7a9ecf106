"""init command — write .revline.yml and a GitHub Actions workflow."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from revline_core.config import DEFAULT_CONFIG
from revline_core.models import REVIEW_DEPTHS, SEVERITIES

console = Console()

_WORKFLOW_PATH = Path(".github/workflows/revline.yml")

_WORKFLOW_TEMPLATE = """\
name: Revline Review

on:
  pull_request:
    types: [opened, synchronize, reopened]

concurrency:
  group: revline-${{{{ github.event.pull_request.number }}}}
  cancel-in-progress: true

jobs:
  review:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install revline
        run: pip install "revline=={version}"

      - name: Run review
        id: revline
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
          REVLINE_API_KEY: ${{{{ secrets.REVLINE_API_KEY }}}}
          ANTHROPIC_API_KEY: ${{{{ secrets.ANTHROPIC_API_KEY }}}}
        run: revline review
"""


def _get_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("revline")
    except PackageNotFoundError:
        return "0.1.0"


def _write_config(config: dict, path: Path = Path(".revline.yml")) -> None:
    """Write or update the config file, preserving keys the wizard does not ask about."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _write_workflow() -> None:
    _WORKFLOW_PATH.parent.mkdir(parents=True, exist_ok=True)
    _WORKFLOW_PATH.write_text(_WORKFLOW_TEMPLATE.format(version=_get_version()))


@click.command("init")
def init_cmd():
    """Set up revline for this repository."""
    console.print("\n[bold cyan]revline init[/bold cyan]\n")

    config = {
        "review_depth": click.prompt(
            "Review depth", type=click.Choice(REVIEW_DEPTHS), default=DEFAULT_CONFIG["review_depth"]
        ),
        "severity_threshold": click.prompt(
            "Minimum severity to post",
            type=click.Choice(SEVERITIES),
            default=DEFAULT_CONFIG["severity_threshold"],
        ),
        "max_files": click.prompt(
            "Maximum files per review", type=click.IntRange(min=1), default=DEFAULT_CONFIG["max_files"]
        ),
    }
    _write_config(config)
    console.print("[green]Wrote .revline.yml[/green]")

    if click.confirm(f"\nGenerate {_WORKFLOW_PATH} for GitHub Actions?", default=True):
        _write_workflow()
        console.print(f"[green]Created {_WORKFLOW_PATH}[/green]")
        console.print(
            "\n[yellow]Add [bold]REVLINE_API_KEY[/bold] and [bold]ANTHROPIC_API_KEY[/bold] to your "
            "repository secrets (Settings → Secrets → Actions).[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")
