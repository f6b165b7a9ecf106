"""Review run orchestration and comment reconciliation.

Each run replaces everything the previous run posted: old summary comments
are deleted (their cost ledger is carried forward), old inline reviews are
dismissed, and exactly one new summary comment is posted. Ownership of
comments is recognised solely by BOT_SIGNATURE in the comment body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from github import GithubException
from rich.console import Console

from revline_core.api import call_review_api
from revline_core.comments import (
    BOT_SIGNATURE,
    format_deferred_section,
    format_finding,
    format_summary,
    insert_before_signature,
)
from revline_core.diff import build_position_map
from revline_core.gh.pull_request import (
    get_changed_files,
    get_file_patches,
    get_pr_metadata,
    get_pull,
    get_repo,
    populate_file_contents,
)
from revline_core.ledger import build_updated_ledger, parse_ledger
from revline_core.models import CostLedger, FileInfo, Finding, ReviewOptions, ReviewRequest, ReviewResponse
from revline_core.utils.retry import with_retry

console = Console()
logger = logging.getLogger(__name__)

_SEVERITY_RANK = {"high": 3, "medium": 2, "low": 1}

DISMISS_MESSAGE = "Replaced by a new Revline review."


@dataclass
class PostResult:
    """What post_review published for one run."""

    inline_count: int
    deferred: list[Finding]
    replaced_previous: bool
    ledger: CostLedger


@dataclass
class ReviewOutcome:
    """Result returned by run_review. Feeds the CI step outputs."""

    findings_count: int = 0
    high_severity_count: int = 0
    skipped: bool = False
    review_id: str | None = None
    findings: list[Finding] = field(default_factory=list)
    post_result: PostResult | None = None


def filter_by_severity(findings: list[Finding], threshold: str) -> list[Finding]:
    """Keep findings at or above threshold, preserving order."""
    min_rank = _SEVERITY_RANK[threshold]
    return [f for f in findings if _SEVERITY_RANK.get(f.severity, 0) >= min_rank]


def delete_existing_summaries(pr) -> tuple[bool, CostLedger | None]:
    """Delete every previous summary comment and return the last ledger found in them."""
    had_previous = False
    previous_ledger: CostLedger | None = None

    # Materialise all pages first: deleting while paging would shift later pages.
    comments = list(pr.get_issue_comments())

    for comment in comments:
        body = comment.body or ""
        if BOT_SIGNATURE not in body:
            continue
        ledger = parse_ledger(body)
        if ledger is not None:
            previous_ledger = ledger
            logger.debug(
                "Extracted cost ledger: %d previous review(s), $%.4f total",
                len(ledger.reviews),
                ledger.total_cost,
            )
        with_retry(comment.delete, "delete comment")
        had_previous = True
        logger.debug("Deleted previous summary comment #%s", comment.id)

    return had_previous, previous_ledger


def dismiss_existing_reviews(pr) -> int:
    """Dismiss previous inline reviews. Failures are logged, never raised."""
    dismissed = 0
    for review in pr.get_reviews():
        if BOT_SIGNATURE not in (review.body or "") or review.state == "DISMISSED":
            continue
        try:
            review.dismiss(DISMISS_MESSAGE)
            dismissed += 1
            logger.debug("Dismissed previous review #%s", review.id)
        except Exception as e:
            # COMMENT reviews cannot be dismissed; GitHub answers 422.
            logger.debug("Could not dismiss review #%s: %s", review.id, e)
    return dismissed


def partition_findings(
    findings: list[Finding], position_maps: dict[str, dict[int, int]]
) -> tuple[list[tuple[Finding, int]], list[Finding]]:
    """Split findings into (finding, diff position) pairs and findings outside the diff."""
    inline: list[tuple[Finding, int]] = []
    deferred: list[Finding] = []
    for finding in findings:
        position = position_maps.get(finding.file, {}).get(finding.line)
        if position:
            inline.append((finding, position))
        else:
            logger.debug("Issue at %s:%d not in diff — will include in summary instead.", finding.file, finding.line)
            deferred.append(finding)
    return inline, deferred


def post_review(pr, config: dict, response: ReviewResponse) -> PostResult:
    """Replace the previous review comments on pr with the results in response.

    Only the final summary post can fail the run. Inline comments that cannot
    be posted fall back to a list in the summary, so no finding is lost.
    """
    had_previous, previous_ledger = delete_existing_summaries(pr)
    dismiss_existing_reviews(pr)
    if had_previous:
        console.print("Replaced previous Revline review (re-run detected).")

    metrics = response.metrics
    ledger = build_updated_ledger(previous_ledger, response.review_id, metrics.estimated_cost_usd)
    cost_msg = f"Cost: ${metrics.estimated_cost_usd:.4f} this review"
    if len(ledger.reviews) > 1:
        cost_msg += f" · ${ledger.total_cost:.4f} total ({len(ledger.reviews)} reviews)"
    console.print(cost_msg)

    threshold = config["severity_threshold"]
    filtered = filter_by_severity(response.issues, threshold)
    console.print(f"Posting {len(filtered)}/{len(response.issues)} issue(s) (threshold: {threshold})")

    # Fresh fetch: positions must be computed against the PR's current patches.
    try:
        patches = with_retry(lambda: get_file_patches(pr), "list PR files")
    except Exception as e:
        logger.warning("Failed to list PR files: %s. Posting every issue in the summary.", e)
        patches = {}
    position_maps = {name: build_position_map(patch) for name, patch in patches.items()}
    inline, deferred = partition_findings(filtered, position_maps)

    inline_count = 0
    if inline:
        api_comments = [{"path": f.file, "position": pos, "body": format_finding(f)} for f, pos in inline]
        try:
            with_retry(
                lambda: pr.create_review(body=BOT_SIGNATURE, event="COMMENT", comments=api_comments),
                "create review",
            )
            inline_count = len(api_comments)
            console.print(f"Posted {inline_count} inline review comment(s).")
        except Exception as e:
            logger.warning("Failed to post inline comments: %s. Falling back to summary only.", e)
            console.print("[yellow]Inline comments could not be posted; listing them in the summary.[/yellow]")
            deferred = list(filtered)

    body = format_summary(metrics, response.summary, len(filtered), metrics.issues_found, ledger)
    if deferred:
        body = insert_before_signature(body, format_deferred_section(deferred))

    with_retry(lambda: pr.create_issue_comment(body), "create summary comment")
    console.print("[green]Posted review summary comment.[/green]")

    return PostResult(inline_count=inline_count, deferred=deferred, replaced_previous=had_previous, ledger=ledger)


def print_dry_run(findings: list[Finding], files: list[FileInfo]) -> None:
    """Print findings to the terminal, marking where each would be posted."""
    _severity_color = {"high": "red", "medium": "yellow", "low": "blue"}
    if not findings:
        console.print("[yellow]Dry run: no findings at or above the severity threshold.[/yellow]")
        return

    position_maps = {f.filename: build_position_map(f.patch) for f in files}
    console.print(f"\n[bold]Dry run — {len(findings)} finding(s) (not posted)[/bold]\n")
    for finding in findings:
        color = _severity_color.get(finding.severity, "white")
        position = position_maps.get(finding.file, {}).get(finding.line)
        where = f"inline @ position {position}" if position else "summary only"
        console.print(
            f"[bold cyan]{finding.file}[/bold cyan]  line [bold]{finding.line}[/bold]  "
            f"[{color}]{finding.severity.upper()}[/{color}]  {finding.category}  [dim]({where})[/dim]"
        )
        console.print(f"  {finding.message}")
        if finding.suggestion:
            console.print(f"  [dim]{finding.suggestion}[/dim]")
        console.print()


def run_review(
    repo: str,
    pr_number: int,
    config: dict,
    repo_obj=None,
    dry_run: bool = False,
) -> ReviewOutcome:
    """Run the full pipeline: collect files, call the review API, reconcile comments.

    config must already have passed validate_config.
    """
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    metadata = get_pr_metadata(this_pr, repo)
    files = get_changed_files(this_pr, config["max_files"])
    if not files:
        console.print("[yellow]No reviewable files changed. Nothing to do.[/yellow]")
        return ReviewOutcome(skipped=True)

    console.print(f"Reviewing {len(files)} file(s) in {repo}#{pr_number}")
    populate_file_contents(this_repo, files, this_pr.head.sha)

    request = ReviewRequest(
        pr=metadata,
        files=files,
        options=ReviewOptions(
            review_depth=config["review_depth"],
            severity_threshold=config["severity_threshold"],
            custom_instructions=config["custom_instructions"],
            max_files=config["max_files"],
        ),
        anthropic_api_key=config["anthropic_api_key"],
    )
    response = call_review_api(request, config)

    outcome = ReviewOutcome(
        findings_count=response.metrics.issues_found,
        high_severity_count=response.metrics.high_severity_count,
        review_id=response.review_id,
        findings=response.issues,
    )

    if dry_run:
        print_dry_run(filter_by_severity(response.issues, config["severity_threshold"]), files)
        return outcome

    outcome.post_result = post_review(this_pr, config, response)
    return outcome
