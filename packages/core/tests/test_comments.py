"""Tests for inline and summary comment formatting."""

from revline_core.comments import (
    BOT_SIGNATURE,
    format_deferred_section,
    format_finding,
    format_summary,
    insert_before_signature,
)
from revline_core.ledger import parse_ledger
from revline_core.models import CostLedger, CostLedgerEntry

T1 = "2026-01-05T10:00:00+00:00"


def _single_ledger(cost=0.065):
    return CostLedger(reviews=[CostLedgerEntry("rev_abc", cost, T1)], total_cost=cost)


class TestFormatFinding:
    def test_header_message_and_attribution(self, sample_findings):
        body = format_finding(sample_findings[1])
        assert body.startswith("\U0001f7e1 **MEDIUM** — error-handling")
        assert "Token verification has no error handling." in body
        assert body.endswith("<sub>Found by haiku-4.5 (diff pass)</sub>")

    def test_suggestion_block_included(self, sample_findings):
        body = format_finding(sample_findings[0])
        assert "**Suggestion:**\n```\n" in body
        assert 'secret = os.environ["JWT_SECRET"]' in body

    def test_no_suggestion_block_when_absent(self, sample_findings):
        assert "Suggestion" not in format_finding(sample_findings[2])
        assert "(context pass)" in format_finding(sample_findings[2])


class TestFormatSummary:
    def test_sections_in_order_with_signature_last(self, sample_metrics):
        body = format_summary(sample_metrics, "Looks mostly fine.", 5, 5, _single_ledger())
        title = body.index("Revline Code Review")
        summary = body.index("Looks mostly fine.")
        table = body.index("| Files reviewed | 3 |")
        ledger = body.index("<!-- revline-meta:")
        assert title < summary < table < ledger
        assert body.endswith(BOT_SIGNATURE)

    def test_metrics_table_rows(self, sample_metrics):
        body = format_summary(sample_metrics, "", 5, 5, _single_ledger())
        assert "| Files skipped | 1 |" in body
        assert "| Issues found | 5 |" in body
        assert "| High severity | 2 |" in body
        assert "| Passes run | diff, context |" in body
        assert "| Models used | haiku-4.5, sonnet-4.5 |" in body

    def test_single_review_cost_line(self, sample_metrics):
        body = format_summary(sample_metrics, "", 5, 5, _single_ledger())
        assert "| Estimated cost | $0.0650 |" in body
        assert "total across" not in body

    def test_cumulative_cost_line(self, sample_metrics):
        sample_metrics.estimated_cost_usd = 0.042
        ledger = CostLedger(
            reviews=[CostLedgerEntry("rev_abc", 0.065, T1), CostLedgerEntry("rev_def", 0.042, T1)],
            total_cost=0.107,
        )
        body = format_summary(sample_metrics, "", 5, 5, ledger)
        assert "$0.0420 (this review) · $0.1070 total across 2 reviews" in body

    def test_threshold_note_when_findings_omitted(self, sample_metrics):
        body = format_summary(sample_metrics, "", 3, 5, _single_ledger())
        assert "2 issue(s) below the severity threshold" in body

    def test_no_threshold_note_when_nothing_omitted(self, sample_metrics):
        body = format_summary(sample_metrics, "", 5, 5, _single_ledger())
        assert "below the severity threshold" not in body

    def test_embedded_ledger_is_parseable(self, sample_metrics):
        ledger = _single_ledger()
        body = format_summary(sample_metrics, "", 5, 5, ledger)
        assert parse_ledger(body) == ledger


class TestDeferredSection:
    def test_lists_each_finding(self, sample_findings):
        section = format_deferred_section(sample_findings[:2])
        assert section.startswith("### Issues not in diff")
        assert "**src/auth.py:23**" in section
        assert "**src/auth.py:38**" in section

    def test_inserted_before_signature(self, sample_metrics, sample_findings):
        body = format_summary(sample_metrics, "", 5, 5, _single_ledger())
        spliced = insert_before_signature(body, format_deferred_section(sample_findings[:1]))
        assert spliced.endswith(BOT_SIGNATURE)
        assert spliced.index("### Issues not in diff") < spliced.index(BOT_SIGNATURE)
        assert spliced.count(BOT_SIGNATURE) == 1

    def test_appended_when_signature_missing(self):
        assert insert_before_signature("body", "section") == "body\n\nsection"
