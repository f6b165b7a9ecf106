"""review command — the CI run: review a pull request and post the results."""

from __future__ import annotations

import json
import os

import click
from github import GithubException
from rich.console import Console

from revline_cli.auth import resolve_github_token
from revline_cli.outputs import set_outputs
from revline_core.api import ReviewAPIError
from revline_core.config import ConfigError, load_config, validate_config
from revline_core.models import REVIEW_DEPTHS, SEVERITIES
from revline_core.reviewer import run_review

console = Console()

# Failures whose message is meaningful to the user as-is.
_KNOWN_ERRORS = (ConfigError, ReviewAPIError, GithubException, ValueError, OSError)


def _pr_number_from_event() -> int | None:
    """Read the pull request number from the Actions event payload, if any."""
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path or not os.path.exists(event_path):
        return None
    with open(event_path, encoding="utf-8") as f:
        try:
            event = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Could not parse event payload {event_path}: {e}")
    if not isinstance(event, dict):
        raise ValueError(f"Event payload {event_path} is not a JSON object.")
    pr = event.get("pull_request") or {}
    return pr.get("number")


def _describe_failure(error: Exception) -> str:
    if isinstance(error, _KNOWN_ERRORS):
        return str(error)
    return f"An unexpected error occurred ({type(error).__name__}): {error}"


@click.command("review")
@click.option("--repo", envvar="GITHUB_REPOSITORY", default=None, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the pull_request event that triggered the workflow.",
)
@click.option("--depth", type=click.Choice(REVIEW_DEPTHS), default=None, help="Review depth. Overrides config.")
@click.option(
    "--threshold",
    type=click.Choice(SEVERITIES),
    default=None,
    help="Minimum severity to post. Overrides config.",
)
@click.option("--max-files", type=int, default=None, help="Maximum number of files to send. Overrides config.")
@click.option("--dry-run", is_flag=True, help="Print findings instead of posting them to GitHub.")
@click.pass_context
def review_cmd(
    ctx,
    repo: str | None,
    pr_number: int | None,
    depth: str | None,
    threshold: str | None,
    max_files: int | None,
    dry_run: bool,
):
    """Review a pull request and post inline and summary comments.

    Previous revline comments on the pull request are replaced, and the
    cumulative review cost is carried over into the new summary.

    \b
    Required environment variables (or action inputs):
      REVLINE_API_KEY      Review service API key (input: api_key)
      ANTHROPIC_API_KEY    Model provider key forwarded to the service
      GITHUB_TOKEN         GitHub token (or use gh CLI)

    \b
    Outputs: findings_count, high_severity_count
    """
    config_path = ctx.obj.get("config_path", ".revline.yml") if ctx.obj else ".revline.yml"

    try:
        config = validate_config(
            load_config(
                config_path,
                cli_overrides={"review_depth": depth, "severity_threshold": threshold, "max_files": max_files},
            )
        )
    except Exception as e:
        raise click.ClickException(_describe_failure(e))

    if not config.get("github_token"):
        config["github_token"] = resolve_github_token()
    if not config.get("github_token"):
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
    if not repo:
        raise click.UsageError("No repository given. Pass --repo or set GITHUB_REPOSITORY.")
    if pr_number is None:
        try:
            pr_number = _pr_number_from_event()
        except Exception as e:
            raise click.ClickException(_describe_failure(e))
    if pr_number is None:
        raise click.UsageError("No pull request number. Pass --pr or run on a pull_request event.")

    console.print(f"[bold]revline[/bold] reviewing {repo}#{pr_number}")
    try:
        outcome = run_review(repo=repo, pr_number=pr_number, config=config, dry_run=dry_run)
    except Exception as e:
        raise click.ClickException(_describe_failure(e))

    set_outputs(findings_count=outcome.findings_count, high_severity_count=outcome.high_severity_count)
    if not outcome.skipped:
        console.print(
            f"[green]Done: {outcome.findings_count} finding(s), "
            f"{outcome.high_severity_count} high severity.[/green]"
        )
