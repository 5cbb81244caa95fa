"""
Configuration loaders for featureflow.

Project settings come from an optional featureflow.env at the project root.
Every key has a default, so a bare project with only feature-docs/ works.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from . import envparse
from .constants import DEFAULT_DOCS_DIR, STUCK_THRESHOLD_MINUTES
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "featureflow.env"
GATES_FILENAME = "gates.yaml"

VALID_STACKS = ("python", "rust", "frontend")
DEFAULT_PROTECTED_BRANCHES = ("main", "master")


@dataclass
class ProjectConfig:
    """Project-level configuration from featureflow.env"""
    project_dir: Path
    docs_dir: Path
    stack: str | None = None
    stuck_threshold_minutes: int = STUCK_THRESHOLD_MINUTES
    gate_timeout: int = 600
    gate_output_lines_fast: int = 20
    gate_output_lines_full: int = 30
    agent_logs_dir: Path | None = None
    protected_branches: tuple[str, ...] = field(default_factory=lambda: DEFAULT_PROTECTED_BRANCHES)

    @property
    def gates_file(self) -> Path:
        return self.project_dir / GATES_FILENAME

    @property
    def scripts_dir(self) -> Path:
        return self.project_dir / "scripts"


def resolve_project_dir(explicit: str | Path | None = None) -> Path:
    """Find the project root.

    Order: explicit argument, $CLAUDE_PROJECT_DIR, $PROJECT_DIR, cwd.
    Hook runners export CLAUDE_PROJECT_DIR, so hooks need no flags.
    """
    if explicit:
        return Path(explicit).resolve()
    for var in ("CLAUDE_PROJECT_DIR", "PROJECT_DIR"):
        value = os.environ.get(var)
        if value:
            return Path(value).resolve()
    return Path.cwd()


def _int_setting(env: dict, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {key} '{raw}' (expected integer), using {default}")
        return default
    if value <= 0:
        logger.warning(f"Invalid {key} '{raw}' (must be positive), using {default}")
        return default
    return value


def load_project_config(project_dir: Path) -> ProjectConfig:
    """Load featureflow.env (if any) and return ProjectConfig."""
    config_path = project_dir / CONFIG_FILENAME
    try:
        env = envparse.load_env_if_exists(config_path)
    except ValueError as e:
        raise ConfigError(f"Invalid {config_path}: {e}") from None

    stack = env.get("STACK", "").strip().lower() or None
    if stack is not None and stack not in VALID_STACKS:
        logger.warning(
            f"Unknown STACK '{stack}', expected one of: {', '.join(VALID_STACKS)}. "
            "Falling back to project scripts only."
        )
        stack = None

    logs = env.get("AGENT_LOGS_DIR", "agent_logs").strip()
    branches = tuple(
        b.strip() for b in env.get("PROTECTED_BRANCHES", ",".join(DEFAULT_PROTECTED_BRANCHES)).split(",")
        if b.strip()
    )

    return ProjectConfig(
        project_dir=project_dir,
        docs_dir=project_dir / env.get("FEATURE_DOCS_DIR", DEFAULT_DOCS_DIR),
        stack=stack,
        stuck_threshold_minutes=_int_setting(env, "STUCK_THRESHOLD_MINUTES", STUCK_THRESHOLD_MINUTES),
        gate_timeout=_int_setting(env, "GATE_TIMEOUT", 600),
        gate_output_lines_fast=_int_setting(env, "GATE_OUTPUT_LINES_FAST", 20),
        gate_output_lines_full=_int_setting(env, "GATE_OUTPUT_LINES_FULL", 30),
        agent_logs_dir=(project_dir / logs) if logs else None,
        protected_branches=branches or DEFAULT_PROTECTED_BRANCHES,
    )
