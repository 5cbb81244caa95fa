"""Git queries used by the guard and the stop hook."""

from pathlib import Path

from featureflow.git.runner import run_git


def get_current_branch(worktree: Path) -> str | None:
    """Get the current branch name, or None if detached HEAD or not a repo."""
    result = run_git(["rev-parse", "--abbrev-ref", "HEAD"], worktree)
    if not result.success:
        return None
    branch = result.stdout.strip()
    if not branch or branch == "HEAD":
        return None
    return branch


def has_tracked_changes(worktree: Path) -> bool:
    """True if tracked files differ from HEAD.

    `git diff --quiet` exits 1 on changes. Any other failure (no repo, no
    commits yet) is treated as changed so verification is not skipped.
    """
    result = run_git(["diff", "--quiet", "HEAD", "--", "."], worktree)
    return result.returncode != 0


def get_untracked_files(worktree: Path) -> list[str]:
    """Untracked files that are not ignored."""
    result = run_git(["ls-files", "--others", "--exclude-standard"], worktree)
    if not result.success:
        return []
    return result.lines()


def has_uncommitted_work(worktree: Path) -> bool:
    """Tracked modifications or new untracked files."""
    return has_tracked_changes(worktree) or bool(get_untracked_files(worktree))
