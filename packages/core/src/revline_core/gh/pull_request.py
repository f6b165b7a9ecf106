from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from github import Auth, Github

from revline_core.comments import BOT_SIGNATURE
from revline_core.models import FileInfo, PrMetadata
from revline_core.utils.code import is_binary_file

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
_CONTENT_WORKERS = 8


def get_repo(repo_name: str, token: str):
    # PaginatedList fetches PAGE_SIZE items per request and follows the Link: next header.
    return Github(auth=Auth.Token(token), per_page=PAGE_SIZE).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pr_metadata(pr, repo_name: str) -> PrMetadata:
    return PrMetadata(
        number=pr.number,
        title=pr.title or "",
        description=pr.body or "",
        author=pr.user.login if pr.user else "",
        base_ref=pr.base.ref,
        head_ref=pr.head.ref,
        repo=repo_name,
    )


def get_changed_files(pr, max_files: int) -> list[FileInfo]:
    """Return reviewable files, keeping the max_files with the most changed lines."""
    files: list[FileInfo] = []
    for f in pr.get_files():
        if is_binary_file(f.filename):
            logger.debug("Skipping binary file: %s", f.filename)
            continue
        if not f.patch:
            logger.debug("Skipping file with no patch: %s", f.filename)
            continue
        files.append(
            FileInfo(
                filename=f.filename,
                status=f.status or "modified",
                patch=f.patch,
                additions=f.additions,
                deletions=f.deletions,
            )
        )

    files.sort(key=lambda f: f.additions + f.deletions, reverse=True)
    if len(files) > max_files:
        logger.warning(
            "PR has %d changed files, limiting to %d. Skipping %d file(s) with fewer changes.",
            len(files),
            max_files,
            len(files) - max_files,
        )
        return files[:max_files]
    return files


def _fetch_contents(repo, file: FileInfo, ref: str) -> None:
    try:
        content = repo.get_contents(file.filename, ref=ref)
    except Exception as e:
        # Non-fatal: the context pass just works with less information for this file.
        logger.debug("Could not fetch contents for %s: %s", file.filename, e)
        return
    if isinstance(content, list):  # a directory, not a file
        return
    file.contents = content.decoded_content.decode("utf-8", errors="replace")


def populate_file_contents(repo, files: list[FileInfo], ref: str, max_workers: int = _CONTENT_WORKERS) -> None:
    """Fill in FileInfo.contents at ref, fetching files concurrently.

    Each fetch writes only to its own FileInfo, and a failure for one file
    leaves its contents as None without affecting the others.
    """
    targets = [f for f in files if f.status != "removed"]
    if not targets:
        return
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        list(pool.map(lambda f: _fetch_contents(repo, f, ref), targets))


def get_file_patches(pr) -> dict[str, str]:
    """Return {filename: patch} for every file in the PR that GitHub could diff."""
    return {f.filename: f.patch for f in pr.get_files() if f.patch}


def find_summary_comment(pr):
    """Return the most recent issue comment carrying the revline signature, or None."""
    found = None
    for comment in pr.get_issue_comments():
        if BOT_SIGNATURE in (comment.body or ""):
            found = comment
    return found
