"""
Quality gate check configuration.

Loads gates.yaml to decide which external checks make up the fast and full
gates for a stack. If no config file exists, returns the built-in batteries.

CHECK BATTERIES
===============

Each stack maps to an ordered list of checks. A check has:
- name:    short identifier, also the log file name (agent_logs/<name>.log)
- command: shell-style command line, split with shlex (no shell is used)
- fast:    true if the check belongs to the fast gate

The fast gate runs only checks marked fast (type/compile checks). The full
gate runs every check in order. Example override:

    stacks:
      python:
        - {name: mypy, command: "mypy src", fast: true}
        - {name: pytest, command: "pytest -q"}
"""

import logging
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateCheck:
    """One external check."""
    name: str
    command: str
    fast: bool = False

    @property
    def argv(self) -> list[str]:
        return shlex.split(self.command)

    @property
    def binary(self) -> str:
        parts = self.argv
        return parts[0] if parts else ""


DEFAULT_STACK_CHECKS: dict[str, list[GateCheck]] = {
    "python": [
        GateCheck("mypy", "mypy .", fast=True),
        GateCheck("ruff", "ruff check ."),
        GateCheck("pytest", "pytest"),
    ],
    "rust": [
        GateCheck("cargo-fmt", "cargo fmt -- --check"),
        GateCheck("cargo-check", "cargo check", fast=True),
        GateCheck("clippy", "cargo clippy -- -D warnings"),
        GateCheck("cargo-test", "cargo test"),
    ],
    "frontend": [
        GateCheck("prettier", "npx prettier --check ."),
        GateCheck("tsc", "npx tsc --noEmit", fast=True),
        GateCheck("eslint", "npx eslint . --max-warnings 0"),
        GateCheck("vitest", "npx vitest run"),
    ],
}


@dataclass
class GateConfig:
    """Check batteries per stack, from gates.yaml merged over the defaults."""
    stacks: dict[str, list[GateCheck]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_STACK_CHECKS.items()}
    )

    def checks_for(self, stack: str | None, fast: bool) -> list[GateCheck]:
        if not stack or stack not in self.stacks:
            return []
        checks = self.stacks[stack]
        return [c for c in checks if c.fast] if fast else list(checks)


def _parse_check(entry, stack: str, index: int) -> GateCheck:
    if isinstance(entry, str):
        entry = {"command": entry}
    if not isinstance(entry, dict) or not str(entry.get("command") or "").strip():
        raise ValueError(f"stacks.{stack}[{index}] must be a command string or a mapping with 'command'")
    command = str(entry["command"])
    argv = shlex.split(command)
    if not argv or not argv[0]:
        raise ValueError(f"stacks.{stack}[{index}] has an empty command")
    name = str(entry.get("name") or argv[0])
    return GateCheck(name=name, command=command, fast=bool(entry.get("fast", False)))


def load_gate_config(config_path: Path | None) -> GateConfig:
    """Load gates.yaml and return GateConfig.

    A stack listed in the file replaces that stack's defaults entirely.
    Missing or unparsable files return the defaults.
    """
    if config_path is None or not config_path.exists():
        return GateConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
        stacks = {k: list(v) for k, v in DEFAULT_STACK_CHECKS.items()}
        if data and "stacks" in data:
            for stack, entries in (data["stacks"] or {}).items():
                stacks[stack] = [_parse_check(e, stack, i) for i, e in enumerate(entries or [])]
        return GateConfig(stacks=stacks)
    except (yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return GateConfig()


def check_binary_available(binary: str) -> bool:
    """Check if a binary is available in PATH."""
    return bool(binary) and shutil.which(binary) is not None


def missing_binaries(checks: list[GateCheck]) -> list[str]:
    """Binaries needed by checks that are not on PATH, in check order."""
    missing = []
    for check in checks:
        if not check_binary_available(check.binary) and check.binary not in missing:
            missing.append(check.binary)
    return missing
