"""
Command guard: classify a shell command before an agent runs it.

Rules are checked in order and the first match wins. The classifier is
pure; anything it needs to know about the repository comes in through
GuardContext, which guard_context_for() builds from git and the store.
"""

import logging
import re
import shlex
from dataclasses import dataclass
from pathlib import Path

from featureflow.git import get_current_branch
from featureflow.lib.config import ProjectConfig
from featureflow.store.records import store_exists

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_BRANCHES = ("main", "master")

RM_ROOT_TARGETS = frozenset({"/", "~", "~/", "$HOME", "$HOME/", "${HOME}", "${HOME}/"})
COMMAND_SEPARATORS = frozenset({";", "&", "&&", "|", "||", "(", ")"})
PUSH_FORCE_RE = re.compile(r"\bgit\s+push\s+.*--force(\s|$)")
PUSH_F_RE = re.compile(r"\bgit\s+push\s+(.*\s)?-f(\s|$)")
DROP_RE = re.compile(r"\bDROP\s+(DATABASE|TABLE)\b", re.IGNORECASE)
COMMIT_RE = re.compile(r"\bgit\s+commit\b")


@dataclass(frozen=True)
class GuardContext:
    branch: str | None = None
    store_present: bool = False
    protected_branches: tuple[str, ...] = DEFAULT_PROTECTED_BRANCHES


@dataclass(frozen=True)
class GuardVerdict:
    allowed: bool
    rule: str | None = None
    reason: str | None = None


ALLOW = GuardVerdict(allowed=True)


def _reject(rule: str, reason: str) -> GuardVerdict:
    return GuardVerdict(allowed=False, rule=rule, reason=reason)


def _tokenize(command: str) -> list[str]:
    lexer = shlex.shlex(command, posix=True, punctuation_chars=True)
    lexer.whitespace_split = True
    try:
        return list(lexer)
    except ValueError:
        # Unbalanced quotes; plain whitespace split still exposes rm and its targets
        return command.split()


def _rm_invocations(command: str) -> list[list[str]]:
    """Return the argument list of every rm invocation in a command line."""
    invocations = []
    segment: list[str] = []
    for token in _tokenize(command) + [";"]:
        if token not in COMMAND_SEPARATORS:
            segment.append(token)
            continue
        for i, word in enumerate(segment):
            if word == "rm" or word.endswith("/rm"):
                invocations.append(segment[i + 1:])
                break
        segment = []
    return invocations


def _is_recursive_force_on_root(args: list[str]) -> bool:
    recursive = force = False
    targets = []
    options_done = False
    for arg in args:
        if options_done or arg == "-" or not arg.startswith("-"):
            targets.append(arg)
        elif arg == "--":
            options_done = True
        elif arg.startswith("--"):
            recursive |= arg == "--recursive"
            force |= arg == "--force"
        else:
            recursive |= "r" in arg or "R" in arg
            force |= "f" in arg
    return recursive and force and any(t in RM_ROOT_TARGETS for t in targets)


def _check_rm(command: str, context: GuardContext) -> GuardVerdict | None:
    if any(_is_recursive_force_on_root(args) for args in _rm_invocations(command)):
        return _reject("rm-root", "Blocked: destructive rm targeting / or ~")
    return None


def _check_force_push(command: str, context: GuardContext) -> GuardVerdict | None:
    if PUSH_FORCE_RE.search(command):
        return _reject("force-push", "Blocked: git push --force (use --force-with-lease instead)")
    if PUSH_F_RE.search(command):
        return _reject("force-push", "Blocked: git push -f (use --force-with-lease instead)")
    return None


def _check_drop(command: str, context: GuardContext) -> GuardVerdict | None:
    if DROP_RE.search(command):
        return _reject("drop", "Blocked: DROP DATABASE/TABLE")
    return None


def _check_commit(command: str, context: GuardContext) -> GuardVerdict | None:
    if not context.store_present or context.branch not in context.protected_branches:
        return None
    if COMMIT_RE.search(command):
        return _reject(
            "protected-commit",
            f"Blocked: direct commit on {context.branch}. Create a feature branch first.",
        )
    return None


RULES = [_check_rm, _check_force_push, _check_drop, _check_commit]


def guard_command(command: str, context: GuardContext | None = None) -> GuardVerdict:
    """Classify a command string.

    Returns:
        GuardVerdict: allowed=True, or allowed=False with the rule name and
        a reason that says what to do instead.
    """
    if context is None:
        context = GuardContext()
    if not command or not command.strip():
        return ALLOW

    for rule in RULES:
        verdict = rule(command, context)
        if verdict is not None:
            logger.info(f"[GUARD] {verdict.rule}: {command!r}")
            return verdict
    return ALLOW


def guard_context_for(project_dir: Path, config: ProjectConfig) -> GuardContext:
    """Collect the repository facts the commit rule depends on."""
    return GuardContext(
        branch=get_current_branch(project_dir),
        store_present=store_exists(config.docs_dir),
        protected_branches=tuple(config.protected_branches),
    )
