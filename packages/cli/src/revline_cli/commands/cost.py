"""cost command — show the cumulative review cost recorded on a pull request."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from revline_cli.auth import resolve_github_token
from revline_core.gh.pull_request import find_summary_comment, get_pull, get_repo
from revline_core.ledger import parse_ledger

console = Console()


@click.command("cost")
@click.option("--repo", envvar="GITHUB_REPOSITORY", required=True, help="GitHub repository (owner/name).")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
def cost_cmd(repo: str, pr_number: int):
    """Show every review run recorded in the pull request's summary comment.

    The ledger lives only in the hidden marker of the latest revline
    summary, so this reads it straight from GitHub.
    """
    token = resolve_github_token()
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    pr = get_pull(get_repo(repo, token=token), pr_number)
    comment = find_summary_comment(pr)
    if comment is None:
        console.print(f"[yellow]No revline summary found on {repo}#{pr_number}.[/yellow]")
        return

    ledger = parse_ledger(comment.body or "")
    if ledger is None or not ledger.reviews:
        console.print("[yellow]The summary comment has no readable cost ledger.[/yellow]")
        return

    table = Table(title=f"Review Cost — {repo}#{pr_number}", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=4)
    table.add_column("Review ID")
    table.add_column("Reviewed At", width=20)
    table.add_column("Cost", justify="right")

    for i, entry in enumerate(ledger.reviews, 1):
        table.add_row(str(i), entry.id, entry.timestamp[:19].replace("T", " "), f"${entry.cost:.4f}")

    console.print(table)
    console.print(f"[bold]Total:[/bold] ${ledger.total_cost:.4f} across {len(ledger.reviews)} review(s)")
