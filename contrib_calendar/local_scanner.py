"""
Scanner for commits in local git repositories.

Local repositories that aren't on GitHub still represent work. Their commit
times are merged into the calendar under ``local:<name>`` repositories.
"""

import logging
import subprocess
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

GITHUB_REMOTE_PREFIXES = ("git@github.com:", "https://github.com/")


class LocalScanError(Exception):
    """Raised when a local repository can't be read."""

    pass


def _git(path: Path, *args: str, check: bool = True) -> str | None:
    """
    Run a git command in ``path`` and return its stripped output.

    Returns None when ``check`` is False and the command fails.
    """
    try:
        result = subprocess.run(
            ["git", "-C", str(path), *args],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise LocalScanError(f"Could not run git: {e}") from e

    if result.returncode != 0:
        if check:
            raise LocalScanError(
                f"git {' '.join(args)} failed in {path}: {result.stderr.strip()}"
            )
        return None
    return result.stdout.strip()


def is_git_repository(path: Path) -> bool:
    """Check if ``path`` is a working directory, .git directory or bare repo."""
    return _git(path, "rev-parse", "--git-dir", check=False) is not None


def has_github_remote(path: Path) -> bool:
    """Check if any remote of the repository points at GitHub."""
    remotes = _git(path, "remote", "-v", check=False) or ""
    for line in remotes.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[1].startswith(GITHUB_REMOTE_PREFIXES):
            return True
    return False


def _ref_exists(path: Path, ref: str) -> bool:
    return _git(path, "rev-parse", "--verify", "--quiet", ref, check=False) is not None


def get_default_branch(path: Path) -> str:
    """
    Guess the default branch of a repository.

    git has no real notion of a default branch, so this checks, in order:

      1. refs/remotes/origin/HEAD
      2. refs/remotes/upstream/HEAD
      3. The init.defaultBranch setting
      4. main
      5. master

    and falls back to HEAD.
    """
    for remote in ("origin", "upstream"):
        target = _git(
            path, "symbolic-ref", "--quiet", f"refs/remotes/{remote}/HEAD", check=False
        )
        if target:
            branch = target.rsplit("/", 1)[-1]
            if _ref_exists(path, f"refs/heads/{branch}"):
                return branch

    configured = _git(path, "config", "init.defaultBranch", check=False)
    candidates = [configured] if configured else []
    candidates.extend(["main", "master"])
    for branch in candidates:
        if _ref_exists(path, f"refs/heads/{branch}"):
            return branch

    return "HEAD"


def scan_repository(path: str | Path) -> list[datetime]:
    """
    Get the author times of commits on the default branch.

    Args:
        path: Repository working directory, .git directory or bare repository

    Returns:
        Commit times as aware UTC datetimes, newest first. Empty for
        repositories with a GitHub remote, since their commits are already
        in the API data.

    Raises:
        LocalScanError: If ``path`` isn't a readable git repository
    """
    path = Path(path)
    if not is_git_repository(path):
        raise LocalScanError(f"Not a git repository: {path}")

    if has_github_remote(path):
        logger.info("Skipping %s: it has a GitHub remote", path)
        return []

    branch = get_default_branch(path)
    output = _git(path, "log", "--format=%at", branch)
    return [
        datetime.fromtimestamp(int(line), tz=timezone.utc)
        for line in output.splitlines()
        if line.strip()
    ]


def scan_directory(root: str | Path) -> dict[str, list[datetime]]:
    """
    Scan every git repository directly inside ``root``.

    Returns:
        Mapping of directory name to commit times, for
        Calendar.update_from_local()
    """
    root = Path(root)
    contributions = {}

    for child in sorted(root.iterdir()):
        if not child.is_dir() or child.name.startswith("."):
            continue
        if not is_git_repository(child):
            logger.info("Skipping %s: not a git repository", child)
            continue
        contributions[child.name] = scan_repository(child)

    return contributions
