"""Tests for the remote review service client."""

import threading
from unittest.mock import MagicMock

import pytest
import requests

from revline_core.api import ReviewAPIError, ReviewTimeoutError, call_review_api
from revline_core.models import FileInfo, PrMetadata, ReviewOptions, ReviewRequest

CONFIG = {"api_url": "https://api.example.com", "api_key": "rl-key"}

RESPONSE_JSON = {
    "review_id": "rev_1",
    "summary": "All good.",
    "issues": [
        {
            "file": "a.py",
            "line": 3,
            "severity": "high",
            "category": "bug",
            "message": "Off by one.",
            "suggestion": None,
            "pass": "context",
            "model": "sonnet-4.5",
        }
    ],
    "metrics": {"issues_found": 1, "high_severity_count": 1, "passes_run": ["diff"], "estimated_cost_usd": 0.01},
}


def _request():
    return ReviewRequest(
        pr=PrMetadata(1, "Title", "Body", "octocat", "main", "feature", "owner/repo"),
        files=[FileInfo(filename="a.py", status="modified", patch="@@ -1 +1 @@\n+x", additions=1)],
        options=ReviewOptions("auto", "low", "", 20),
        anthropic_api_key="ant-key",
    )


def _response(status=200, json_body=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if json_body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def post(mocker):
    return mocker.patch("revline_core.api.requests.post")


def test_successful_call_parses_response(post):
    post.return_value = _response(json_body=RESPONSE_JSON)

    result = call_review_api(_request(), CONFIG)

    assert result.review_id == "rev_1"
    assert result.issues[0].pass_name == "context"
    assert result.issues[0].line == 3
    assert result.metrics.high_severity_count == 1


def test_request_shape_and_auth(post):
    post.return_value = _response(json_body=RESPONSE_JSON)

    call_review_api(_request(), CONFIG, timeout=30)

    args, kwargs = post.call_args
    assert args[0] == "https://api.example.com/v1/review"
    assert kwargs["headers"]["Authorization"] == "Bearer rl-key"
    assert kwargs["timeout"] == 30
    body = kwargs["json"]
    assert body["pr"]["author"] == "octocat"
    assert body["files"][0]["contents"] is None
    assert body["options"]["review_depth"] == "auto"
    assert body["credentials"] == {"anthropic_api_key": "ant-key"}


@pytest.mark.parametrize(
    "status,expected",
    [
        (401, "Authentication failed: bad key"),
        (400, "Bad request: bad key"),
        (429, "Rate limited"),
        (500, "Review API returned 500: bad key"),
    ],
)
def test_error_statuses_map_to_messages(post, status, expected):
    post.return_value = _response(status=status, json_body={"message": "bad key"}, text='{"message": "bad key"}')

    with pytest.raises(ReviewAPIError, match=expected) as exc_info:
        call_review_api(_request(), CONFIG)
    assert exc_info.value.status == status


def test_error_falls_back_to_error_field(post):
    post.return_value = _response(status=503, json_body={"error": "maintenance"}, text="{}")
    with pytest.raises(ReviewAPIError, match="503: maintenance"):
        call_review_api(_request(), CONFIG)


def test_error_with_plain_text_body(post):
    post.return_value = _response(status=502, text="Bad Gateway")
    with pytest.raises(ReviewAPIError, match="502: Bad Gateway"):
        call_review_api(_request(), CONFIG)


def test_timeout_raises_timeout_error(post):
    post.side_effect = requests.Timeout("read timed out")

    with pytest.raises(ReviewTimeoutError, match="timed out after 120s"):
        call_review_api(_request(), CONFIG)


def test_call_is_not_retried(post):
    post.return_value = _response(status=429, json_body={})
    with pytest.raises(ReviewAPIError):
        call_review_api(_request(), CONFIG)
    assert post.call_count == 1


def test_slow_response_hits_overall_deadline(post):
    release = threading.Event()

    def trickle(*args, **kwargs):
        # Each socket read stays under the timeout, but the body never finishes in time.
        release.wait(5)
        return _response(json_body=RESPONSE_JSON)

    post.side_effect = trickle
    try:
        with pytest.raises(ReviewTimeoutError, match="timed out after 0.05s"):
            call_review_api(_request(), CONFIG, timeout=0.05)
    finally:
        release.set()
