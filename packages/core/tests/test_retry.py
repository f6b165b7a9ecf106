"""Tests for rate-limit retry with backoff."""

from unittest.mock import MagicMock

import pytest
from github import GithubException

from revline_core.utils.retry import is_rate_limited, with_retry


@pytest.fixture
def sleep(mocker):
    return mocker.patch("revline_core.utils.retry.time.sleep")


def test_returns_result_on_first_success(sleep):
    assert with_retry(lambda: 42, "op") == 42
    sleep.assert_not_called()


@pytest.mark.parametrize("status", [403, 429])
def test_retries_rate_limit_then_succeeds(sleep, status):
    fn = MagicMock(side_effect=[GithubException(status, "slow down"), "ok"])
    assert with_retry(fn, "op") == "ok"
    assert fn.call_count == 2
    sleep.assert_called_once_with(1.0)


def test_backoff_doubles_each_attempt(sleep):
    fn = MagicMock(side_effect=[GithubException(429, "a"), GithubException(429, "b"), "ok"])
    assert with_retry(fn, "op") == "ok"
    assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]


def test_exhausted_retries_raise_last_error(sleep):
    last = GithubException(429, "third")
    fn = MagicMock(side_effect=[GithubException(429, "first"), GithubException(429, "second"), last])
    with pytest.raises(GithubException) as exc_info:
        with_retry(fn, "op")
    assert exc_info.value is last
    assert fn.call_count == 3
    assert sleep.call_count == 2


def test_non_rate_limit_error_is_not_retried(sleep):
    fn = MagicMock(side_effect=GithubException(422, "Unprocessable"))
    with pytest.raises(GithubException):
        with_retry(fn, "op")
    assert fn.call_count == 1
    sleep.assert_not_called()


def test_error_without_status_is_not_retried(sleep):
    fn = MagicMock(side_effect=ConnectionError("boom"))
    with pytest.raises(ConnectionError):
        with_retry(fn, "op")
    assert fn.call_count == 1


def test_is_rate_limited():
    assert is_rate_limited(GithubException(403, "forbidden"))
    assert is_rate_limited(GithubException(429, "too many"))
    assert not is_rate_limited(GithubException(500, "oops"))
    assert not is_rate_limited(ValueError("no status"))
