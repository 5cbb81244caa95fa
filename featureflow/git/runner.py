"""Run read-only git queries for hooks.

Hooks fire on every tool call, so queries get a short timeout and never
raise: a repository that cannot be queried just yields a failed result.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_TIMEOUT = 10

# Conventional "command not found" status
GIT_MISSING = 127


@dataclass
class GitResult:
    """Outcome of one git invocation."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False
    args: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def lines(self) -> list[str]:
        """Non-blank stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]


def run_git(args: list[str], cwd: Path, timeout: int = DEFAULT_TIMEOUT) -> GitResult:
    """Run `git -C cwd <args>` and capture its output."""
    cmd = ["git", "-C", str(cwd)] + args
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return GitResult(-1, "", f"git {' '.join(args)} timed out after {timeout}s", timed_out=True, args=args)
    except FileNotFoundError:
        return GitResult(GIT_MISSING, "", "git executable not found", args=args)
    return GitResult(proc.returncode, proc.stdout, proc.stderr, args=args)
