"""GitHub token resolution.

In CI the token arrives as the github_token action input or GITHUB_TOKEN.
Local runs fall back to the GitHub CLI session, so `revline cost` and
`revline review --dry-run` work after `gh auth login` with no extra setup.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS = ("INPUT_GITHUB_TOKEN", "GITHUB_TOKEN")


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    token = result.stdout.strip() if result.returncode == 0 else ""
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None if no source has one. Never raises."""
    for name in _TOKEN_ENV_VARS:
        token = os.environ.get(name, "").strip()
        if token:
            return token
    return _gh_cli_token()
