"""CLI entry point for revline.

Commands:
  review   — review a pull request and post the results (run this in CI)
  cost     — show the cumulative review cost recorded on a pull request
  init     — write .revline.yml and a GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from revline_cli.commands.cost import cost_cmd
from revline_cli.commands.init import init_cmd
from revline_cli.commands.review import review_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("revline"),
    prog_name="revline",
)
@click.option(
    "--config",
    "config_path",
    default=".revline.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVLINE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Post AI code review results onto GitHub pull requests."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(cost_cmd)
main.add_command(init_cmd)
