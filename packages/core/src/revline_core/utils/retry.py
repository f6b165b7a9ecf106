"""Retry with exponential backoff for GitHub API calls that hit rate limits.

Only rate-limit responses are retried. Everything else is raised on the
first failure so real errors (404, 422, auth) surface immediately.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY = 1.0  # seconds
RATE_LIMIT_STATUSES = frozenset({403, 429})


def is_rate_limited(error: BaseException) -> bool:
    """True when the error carries a 403/429 status (PyGithub sets .status)."""
    return getattr(error, "status", None) in RATE_LIMIT_STATUSES


def with_retry(fn: Callable[[], T], label: str, max_retries: int = MAX_RETRIES, base_delay: float = BASE_DELAY) -> T:
    """Call fn, retrying rate-limited failures up to max_retries attempts in total."""
    for attempt in range(max_retries):
        try:
            return fn()
        except Exception as e:
            if not is_rate_limited(e) or attempt == max_retries - 1:
                raise
            delay = base_delay * 2**attempt
            logger.warning(
                "Rate limited on %s, retrying in %.1fs (attempt %d/%d)...",
                label,
                delay,
                attempt + 1,
                max_retries,
            )
            time.sleep(delay)
    raise RuntimeError(f"{label}: retry loop exited without a result")

