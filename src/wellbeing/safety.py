from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger("wellbeing.safety")


class UnsafeDataPath(Exception):
    """Raised when the mood data file would live inside a git work tree."""

    def __init__(self, data_path: Path, repo_root: Path):
        self.data_path = data_path
        self.repo_root = repo_root
        super().__init__(
            f"Refusing to use a data file inside a git repo.\n"
            f"   data_path: {data_path}\n"
            f"   repo_root: {repo_root}\n"
            f"   Fix: use ~/.config/wellbeing/*.json or pass --allow-repo-data-path"
        )


def find_git_root(start: Path) -> Path | None:
    cur = start
    for _ in range(200):
        if (cur / ".git").exists():
            return cur
        if cur.parent == cur:
            return None
        cur = cur.parent
    return None


def assert_safe_data_path(data_path: Path, allow_repo_data_path: bool) -> None:
    # refuse if data lives inside any git repo (unless overridden)
    git_root = find_git_root(data_path.parent)
    if git_root is None:
        return
    if allow_repo_data_path:
        logger.warning("Data file %s is inside git repo %s (override in effect)", data_path, git_root)
        return
    raise UnsafeDataPath(data_path, git_root)
