"""Review data models.

Wire shapes exchanged with the remote review service, plus the cost ledger
that is carried from run to run inside the summary comment.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

SEVERITIES = ("high", "medium", "low")
REVIEW_DEPTHS = ("quick", "auto", "thorough")
CATEGORIES = (
    "security",
    "bug",
    "error-handling",
    "performance",
    "maintainability",
    "best-practice",
    "architecture",
)


@dataclass(frozen=True)
class Finding:
    """A single issue reported by the review service."""

    file: str
    line: int
    severity: str  # "high" | "medium" | "low"
    category: str
    message: str
    suggestion: str | None = None
    pass_name: str = "diff"  # "diff" | "context"
    model: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Finding:
        return cls(
            file=d.get("file", ""),
            line=int(d.get("line", 0)),
            severity=d.get("severity", "low"),
            category=d.get("category", ""),
            message=d.get("message", ""),
            suggestion=d.get("suggestion"),
            pass_name=d.get("pass", "diff"),
            model=d.get("model", ""),
        )


@dataclass
class ReviewMetrics:
    files_reviewed: int = 0
    files_skipped: int = 0
    issues_found: int = 0
    high_severity_count: int = 0
    medium_severity_count: int = 0
    low_severity_count: int = 0
    passes_run: list[str] = field(default_factory=list)
    models_used: list[str] = field(default_factory=list)
    estimated_cost_usd: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> ReviewMetrics:
        return cls(
            files_reviewed=d.get("files_reviewed", 0),
            files_skipped=d.get("files_skipped", 0),
            issues_found=d.get("issues_found", 0),
            high_severity_count=d.get("high_severity_count", 0),
            medium_severity_count=d.get("medium_severity_count", 0),
            low_severity_count=d.get("low_severity_count", 0),
            passes_run=list(d.get("passes_run", [])),
            models_used=list(d.get("models_used", [])),
            estimated_cost_usd=float(d.get("estimated_cost_usd", 0.0)),
            total_input_tokens=d.get("total_input_tokens", 0),
            total_output_tokens=d.get("total_output_tokens", 0),
        )


@dataclass
class ReviewResponse:
    review_id: str
    summary: str
    issues: list[Finding] = field(default_factory=list)
    metrics: ReviewMetrics = field(default_factory=ReviewMetrics)

    @classmethod
    def from_dict(cls, d: dict) -> ReviewResponse:
        return cls(
            review_id=d.get("review_id", ""),
            summary=d.get("summary", ""),
            issues=[Finding.from_dict(i) for i in d.get("issues", [])],
            metrics=ReviewMetrics.from_dict(d.get("metrics", {})),
        )


@dataclass
class PrMetadata:
    number: int
    title: str
    description: str
    author: str
    base_ref: str
    head_ref: str
    repo: str


@dataclass
class FileInfo:
    filename: str
    status: str  # "added" | "modified" | "removed" | "renamed"
    patch: str
    additions: int = 0
    deletions: int = 0
    contents: str | None = None  # filled in by populate_file_contents


@dataclass
class ReviewOptions:
    review_depth: str
    severity_threshold: str
    custom_instructions: str
    max_files: int


@dataclass
class ReviewRequest:
    pr: PrMetadata
    files: list[FileInfo]
    options: ReviewOptions
    anthropic_api_key: str

    def to_dict(self) -> dict:
        return {
            "pr": asdict(self.pr),
            "files": [asdict(f) for f in self.files],
            "options": asdict(self.options),
            "credentials": {"anthropic_api_key": self.anthropic_api_key},
        }


@dataclass(frozen=True)
class CostLedgerEntry:
    id: str
    cost: float
    timestamp: str  # ISO-8601 UTC


@dataclass
class CostLedger:
    """Cumulative cost of every review run on one pull request, oldest first.

    total_cost always equals the sum of the entry costs; build new ledgers
    with ledger.build_updated_ledger rather than appending in place.
    """

    reviews: list[CostLedgerEntry] = field(default_factory=list)
    total_cost: float = 0.0

    def to_dict(self) -> dict:
        return {
            "reviews": [asdict(e) for e in self.reviews],
            "total_cost": self.total_cost,
        }
