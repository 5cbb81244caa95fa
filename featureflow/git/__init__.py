"""Git helpers for featureflow.

Return type conventions:
- Functions returning GitResult: caller must check .success before using output.
- Functions returning bool or parsed values never raise on git failure.
"""

from featureflow.git.runner import GitResult, run_git
from featureflow.git.repo import (
    get_current_branch,
    get_untracked_files,
    has_tracked_changes,
    has_uncommitted_work,
)

__all__ = [
    "GitResult",
    "run_git",
    "get_current_branch",
    "get_untracked_files",
    "has_tracked_changes",
    "has_uncommitted_work",
]
