"""Shared review-service fixtures."""

import pytest

from revline_core.models import Finding, ReviewMetrics, ReviewResponse


@pytest.fixture
def sample_findings():
    return [
        Finding(
            file="src/auth.py",
            line=23,
            severity="high",
            category="security",
            message="JWT secret is hardcoded. Move it to an environment variable.",
            suggestion='secret = os.environ["JWT_SECRET"]',
            pass_name="diff",
            model="haiku-4.5",
        ),
        Finding(
            file="src/auth.py",
            line=38,
            severity="medium",
            category="error-handling",
            message="Token verification has no error handling.",
            model="haiku-4.5",
        ),
        Finding(
            file="src/auth.py",
            line=1,
            severity="low",
            category="best-practice",
            message="Consider a middleware for consistency.",
            pass_name="context",
            model="sonnet-4.5",
        ),
        Finding(
            file="src/db.py",
            line=15,
            severity="high",
            category="bug",
            message="SQL injection via string concatenation.",
            suggestion="Use parameterized queries instead.",
            model="haiku-4.5",
        ),
        Finding(
            file="src/utils.py",
            line=5,
            severity="low",
            category="maintainability",
            message="Consider extracting this into a helper function.",
            model="haiku-4.5",
        ),
    ]


@pytest.fixture
def sample_metrics():
    return ReviewMetrics(
        files_reviewed=3,
        files_skipped=1,
        issues_found=5,
        high_severity_count=2,
        medium_severity_count=1,
        low_severity_count=2,
        passes_run=["diff", "context"],
        models_used=["haiku-4.5", "sonnet-4.5"],
        estimated_cost_usd=0.065,
        total_input_tokens=12400,
        total_output_tokens=3200,
    )


@pytest.fixture
def sample_response(sample_findings, sample_metrics):
    return ReviewResponse(
        review_id="rev_test123",
        summary="Found 5 issues across 2 passes.",
        issues=sample_findings,
        metrics=sample_metrics,
    )
