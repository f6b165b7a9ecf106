"""Cumulative cost ledger carried inside the summary comment.

The ledger is stored as a hidden HTML comment so it survives between runs
without any storage beyond the pull request itself:

    <!-- revline-meta:{"reviews": [...], "total_cost": 0.107} -->

Parsing never raises. A missing marker is the normal first-run case; a marker
that has been edited or truncated is treated exactly like a missing one, so
the cumulative total resets instead of failing the run.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from revline_core.models import CostLedger, CostLedgerEntry

logger = logging.getLogger(__name__)

META_PREFIX = "<!-- revline-meta:"
META_SUFFIX = " -->"
_META_RE = re.compile(r"<!-- revline-meta:(.*?) -->", re.DOTALL)


def serialize_ledger(ledger: CostLedger) -> str:
    """Render the ledger as a single-line hidden marker.

    ">" is written as a JSON escape so no value can close the HTML comment early.
    """
    payload = json.dumps(ledger.to_dict(), separators=(",", ":")).replace(">", "\\u003e")
    return f"{META_PREFIX}{payload}{META_SUFFIX}"


def parse_ledger(text: str) -> CostLedger | None:
    """Return the ledger embedded in text, or None if absent or malformed."""
    match = _META_RE.search(text or "")
    if not match or not match.group(1):
        return None

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.debug("Ignoring cost ledger with unparseable payload")
        return None

    if not isinstance(data, dict):
        return None
    reviews = data.get("reviews")
    total = data.get("total_cost")
    if not isinstance(reviews, list):
        return None
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return None

    try:
        entries = [
            CostLedgerEntry(id=str(r["id"]), cost=float(r["cost"]), timestamp=str(r["timestamp"])) for r in reviews
        ]
    except (KeyError, TypeError, ValueError):
        logger.debug("Ignoring cost ledger with malformed entries")
        return None

    return CostLedger(reviews=entries, total_cost=float(total))


def build_updated_ledger(previous: CostLedger | None, review_id: str, cost: float) -> CostLedger:
    """Append this run's entry to the previous ledger and recompute the total."""
    entries = list(previous.reviews) if previous else []
    entries.append(
        CostLedgerEntry(
            id=review_id,
            cost=cost,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
    )
    return CostLedger(reviews=entries, total_cost=sum(e.cost for e in entries))
