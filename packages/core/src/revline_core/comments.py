"""Markdown rendering for inline and summary comments.

Every summary ends with BOT_SIGNATURE so later runs can find it with a plain
substring search, and so extra sections can be spliced in just before it.
"""

from __future__ import annotations

from revline_core.ledger import serialize_ledger
from revline_core.models import CostLedger, Finding, ReviewMetrics

BOT_SIGNATURE = "<!-- revline-review -->"

SEVERITY_EMOJI = {"high": "\U0001f534", "medium": "\U0001f7e1", "low": "\U0001f535"}


def format_finding(finding: Finding) -> str:
    """Build the body of one inline review comment."""
    emoji = SEVERITY_EMOJI.get(finding.severity, "")
    body = f"{emoji} **{finding.severity.upper()}** — {finding.category}\n\n{finding.message}"

    if finding.suggestion:
        body += f"\n\n**Suggestion:**\n```\n{finding.suggestion}\n```"

    body += f"\n\n<sub>Found by {finding.model} ({finding.pass_name} pass)</sub>"
    return body


def _cost_line(metrics: ReviewMetrics, ledger: CostLedger) -> str:
    this_run = f"${metrics.estimated_cost_usd:.4f}"
    if len(ledger.reviews) > 1:
        return (
            f"| Estimated cost | {this_run} (this review) · "
            f"${ledger.total_cost:.4f} total across {len(ledger.reviews)} reviews |"
        )
    return f"| Estimated cost | {this_run} |"


def format_summary(
    metrics: ReviewMetrics,
    summary: str,
    filtered_count: int,
    total_findings: int,
    ledger: CostLedger,
) -> str:
    """Build the summary comment: title, summary, metrics table, ledger, signature."""
    lines = [
        "## \U0001f50d Revline Code Review",
        "",
        summary,
        "",
        "### Metrics",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Files reviewed | {metrics.files_reviewed} |",
        f"| Files skipped | {metrics.files_skipped} |",
        f"| Issues found | {total_findings} |",
        f"| High severity | {metrics.high_severity_count} |",
        f"| Medium severity | {metrics.medium_severity_count} |",
        f"| Low severity | {metrics.low_severity_count} |",
        f"| Passes run | {', '.join(metrics.passes_run)} |",
        f"| Models used | {', '.join(metrics.models_used)} |",
        _cost_line(metrics, ledger),
    ]

    if filtered_count < total_findings:
        lines.extend(
            [
                "",
                f"> **Note:** {total_findings - filtered_count} issue(s) below the severity threshold "
                "were omitted from inline comments.",
            ]
        )

    lines.extend(["", serialize_ledger(ledger), BOT_SIGNATURE])
    return "\n".join(lines)


def format_deferred_section(findings: list[Finding]) -> str:
    """List findings that could not be anchored to a diff line."""
    lines = ["### Issues not in diff (posted here instead)", ""]
    for f in findings:
        lines.append(f"- {SEVERITY_EMOJI.get(f.severity, '')} **{f.file}:{f.line}** — {f.message}")
    return "\n".join(lines)


def insert_before_signature(body: str, section: str) -> str:
    """Splice a section into a summary body just ahead of the signature marker."""
    head, sep, tail = body.rpartition(BOT_SIGNATURE)
    if not sep:
        return f"{body}\n\n{section}"
    return f"{head}\n{section}\n\n{BOT_SIGNATURE}{tail}"
