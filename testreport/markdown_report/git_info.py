"""Collect repository provenance for the report header."""

import logging
import subprocess
from collections.abc import Mapping
from pathlib import Path

from testreport.markdown_report.models.report_config import CommitInfo, GitInfo

logger = logging.getLogger(__name__)

# hash, author, date, then the raw message body
_COMMIT_FORMAT = "%H%n%an <%ae>%n%aD%n%B"


def get_git_info(repo_path: Path) -> GitInfo | None:
    """Get repository name, branch, and HEAD commit for a working tree.

    Every field is best-effort: a missing remote, a detached HEAD, or an
    empty repository leaves the corresponding field unset.

    Args:
        repo_path: Path inside the git working tree

    Returns:
        Collected information, or None if the path is not a git repository
        or git is not available

    """
    try:
        toplevel = _run_git(repo_path, "rev-parse", "--show-toplevel")
    except (OSError, subprocess.CalledProcessError) as e:
        logger.info(f"No git repository at {repo_path}: {_describe_error(e)}")
        return None

    url = _try_git(repo_path, "config", "--get", "remote.origin.url")
    branch = _try_git(repo_path, "rev-parse", "--abbrev-ref", "HEAD")
    if branch == "HEAD":
        # detached
        branch = None

    name = parse_repository_name(url) if url else None
    if name is None:
        name = Path(toplevel).name or None

    info = GitInfo(
        repository_name=name,
        repository_url=url,
        branch=branch,
        commit=_get_commit(repo_path),
    )
    logger.debug(f"Git info: {info}")
    return info


def parse_repository_name(url: str) -> str | None:
    """Extract an ``org/repo`` identifier from a remote URL.

    Supports https://host/org/repo(.git), ssh://git@host/org/repo(.git)
    and git@host:org/repo(.git). Local path remotes yield the last path
    component.

    Returns:
        The identifier, or None if the URL cannot be interpreted

    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]
    if not url:
        return None

    if "://" in url:
        parts = url.split("://", 1)[1].split("/")
        # host, org, repo
        if len(parts) >= 3 and parts[-2] and parts[-1]:
            return f"{parts[-2]}/{parts[-1]}"
        return None

    if "@" in url and ":" in url:
        repo_part = url.split(":")[-1].strip("/")
        return repo_part or None

    return Path(url).name or None


def get_job_url(environ: Mapping[str, str]) -> str | None:
    """Build the GitHub Actions run URL from the CI environment.

    Returns:
        The run URL, or None outside of GitHub Actions

    """
    repo = environ.get("GITHUB_REPOSITORY")
    run_id = environ.get("GITHUB_RUN_ID")
    if not repo or not run_id:
        return None

    server = environ.get("GITHUB_SERVER_URL") or "https://github.com"
    return f"{server.rstrip('/')}/{repo}/actions/runs/{run_id}"


def _run_git(repo_path: Path, *args: str) -> str:
    """Run a git command in repo_path and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],  # noqa: S607
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _try_git(repo_path: Path, *args: str) -> str | None:
    """Like _run_git, but returns None on failure or empty output."""
    try:
        output = _run_git(repo_path, *args)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug(f"git {' '.join(args)} failed: {_describe_error(e)}")
        return None
    return output or None


def _get_commit(repo_path: Path) -> CommitInfo | None:
    output = _try_git(repo_path, "log", "-1", f"--format={_COMMIT_FORMAT}")
    if output is None:
        return None

    commit_id, author, date, *message = output.split("\n") + ["", "", ""]
    body = "\n".join(message).strip()
    return CommitInfo(
        id=commit_id,
        author=author or None,
        date=date or None,
        message=body or None,
    )


def _describe_error(error: Exception) -> str:
    if isinstance(error, subprocess.CalledProcessError) and error.stderr:
        return str(error.stderr).strip()
    return str(error)
