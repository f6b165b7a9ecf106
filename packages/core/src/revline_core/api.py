"""Client for the remote review service.

One POST per run. The call is never retried: a review can take minutes and
costs money, so a failure is reported and the CI run fails instead.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import requests
from rich.console import Console

from revline_core.models import ReviewRequest, ReviewResponse

console = Console()
logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 120  # seconds, for the whole call; reviews of large PRs take a while


class ReviewAPIError(RuntimeError):
    """The review service rejected the request or could not be reached."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ReviewTimeoutError(ReviewAPIError):
    """The review service did not answer within the client-side timeout."""


def _error_message(response: requests.Response) -> str:
    body = response.text
    try:
        data = response.json()
    except ValueError:
        return body
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or body
    return body


def call_review_api(request: ReviewRequest, config: dict, timeout: float = REQUEST_TIMEOUT) -> ReviewResponse:
    """Send the review request and return the parsed response.

    Raises ReviewAPIError for any non-2xx status and ReviewTimeoutError when
    the service does not respond in time.
    """
    url = f"{config['api_url']}/v1/review"
    console.print(f"Calling review API at {config['api_url']}...")
    console.print(f"Sending {len(request.files)} file(s) for review (depth: {request.options.review_depth})")

    # requests' timeout bounds each socket wait; the pool bounds the whole call.
    pool = ThreadPoolExecutor(max_workers=1)
    future = pool.submit(
        requests.post,
        url,
        json=request.to_dict(),
        headers={"Authorization": f"Bearer {config['api_key']}"},
        timeout=timeout,
    )
    try:
        response = future.result(timeout=timeout)
    except (requests.Timeout, FutureTimeoutError):
        future.cancel()
        raise ReviewTimeoutError(
            f"Review API request timed out after {timeout:g}s. "
            "The PR may be too large, or the API may be experiencing issues."
        )
    finally:
        pool.shutdown(wait=False)

    if not response.ok:
        status = response.status_code
        message = _error_message(response)
        logger.debug("Review API error %d: %s", status, message)
        if status == 401:
            raise ReviewAPIError(f"Authentication failed: {message}. Check your api_key.", status)
        if status == 400:
            raise ReviewAPIError(f"Bad request: {message}. Check your action inputs.", status)
        if status == 429:
            raise ReviewAPIError("Rate limited by the review API. Please try again later.", status)
        raise ReviewAPIError(f"Review API returned {status}: {message}", status)

    result = ReviewResponse.from_dict(response.json())
    console.print(f"Review complete: {result.metrics.issues_found} issue(s) found")
    console.print(
        f"Passes run: {', '.join(result.metrics.passes_run)} | "
        f"Estimated cost: ${result.metrics.estimated_cost_usd:.4f}"
    )
    return result
