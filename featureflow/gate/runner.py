"""
Stage-aware quality gate.

Two gates:
- fast: cheapest checks only (type/compile), meant to run after every unit of work
- full: the whole battery, required before a record leaves building/ or is completed

While any record is in testing/, both gates are skipped: freshly written
tests reference code that does not exist yet, and a failing type check there
would block every other agent.
"""

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from featureflow.gate.config import GateCheck, GateConfig, load_gate_config, missing_binaries
from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_BLOCK, EXIT_WARN
from featureflow.lib.errors import GateBlocked
from featureflow.lib.types import Stage
from featureflow.workflow.resolver import dominant_stage

logger = logging.getLogger(__name__)

FAST_SCRIPT = "fast-verify.sh"
FULL_SCRIPT = "verify.sh"


class GateKind(Enum):
    FAST = "fast"
    FULL = "full"


class GateOutcome(Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TOOLING_MISSING = "tooling_missing"


EXIT_CODES = {
    GateOutcome.PASSED: EXIT_ALLOW,
    GateOutcome.SKIPPED: EXIT_ALLOW,
    GateOutcome.FAILED: EXIT_BLOCK,
    GateOutcome.TOOLING_MISSING: EXIT_WARN,
}


@dataclass
class CheckRun:
    """Result of one external check."""
    name: str
    returncode: int
    output: str
    duration: float
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


@dataclass
class GateResult:
    kind: GateKind
    outcome: GateOutcome
    reason: str
    output: str = ""
    checks: list[CheckRun] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.outcome]

    @property
    def blocks(self) -> bool:
        return self.outcome is GateOutcome.FAILED


def truncate_output(output: str, max_lines: int) -> str:
    """Keep the last max_lines lines; the end of a tool's output is where the summary is."""
    lines = output.rstrip("\n").splitlines()
    if len(lines) <= max_lines:
        return "\n".join(lines)
    dropped = len(lines) - max_lines
    return "\n".join([f"... ({dropped} lines omitted)"] + lines[-max_lines:])


def run_check(check: GateCheck, cwd: Path, timeout: int, log_dir: Path | None = None) -> CheckRun:
    """Run one check, capturing combined output.

    A timeout counts as a failure.
    """
    logger.info(f"[GATE] Running {check.name}: {check.command}")
    start = time.time()
    try:
        result = subprocess.run(
            check.argv,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
        )
        run = CheckRun(check.name, result.returncode, result.stdout or "", time.time() - start)
    except subprocess.TimeoutExpired as e:
        partial = e.output.decode(errors="replace") if isinstance(e.output, bytes) else (e.output or "")
        run = CheckRun(
            check.name, -1, partial + f"\n{check.name} timed out after {timeout}s",
            time.time() - start, timed_out=True,
        )

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            (log_dir / f"{check.name}.log").write_text(run.output)
        except OSError as e:
            logger.warning(f"Could not write {check.name} log to {log_dir}: {e}")

    logger.info(f"[GATE] {check.name} exit={run.returncode} duration={run.duration:.2f}s")
    return run


def resolve_checks(config: ProjectConfig, kind: GateKind, gate_config: GateConfig) -> list[GateCheck]:
    """Decide which checks make up a gate.

    Project scripts win: scripts/fast-verify.sh for the fast gate (falling
    back to scripts/verify.sh), scripts/verify.sh for the full gate.
    Otherwise the configured stack's battery is used.
    """
    scripts = config.scripts_dir
    candidates = [FAST_SCRIPT, FULL_SCRIPT] if kind is GateKind.FAST else [FULL_SCRIPT]
    for name in candidates:
        script = scripts / name
        if script.is_file():
            return [GateCheck(name=script.stem, command=f"bash {shlex.quote(str(script))}", fast=True)]

    return gate_config.checks_for(config.stack, fast=kind is GateKind.FAST)


def run_gate(
    config: ProjectConfig,
    kind: GateKind,
    gate_config: GateConfig | None = None,
) -> GateResult:
    """Run the fast or full gate, unless the lifecycle says to skip it.

    Returns:
        GateResult: SKIPPED while a record is in testing/ (no external call),
        TOOLING_MISSING when no checks are configured or a binary is absent,
        otherwise PASSED or FAILED with output truncated to the configured tail.
    """
    stage = dominant_stage(config.docs_dir)
    if stage is Stage.TESTING:
        reason = "A feature is in testing: failing tests are expected, skipping the gate."
        logger.info(f"[GATE] {kind.value} gate skipped (dominant stage: testing)")
        return GateResult(kind, GateOutcome.SKIPPED, reason)

    if gate_config is None:
        gate_config = load_gate_config(config.gates_file)

    checks = resolve_checks(config, kind, gate_config)
    if not checks:
        reason = (
            f"No {kind.value} gate configured: add scripts/{FULL_SCRIPT} "
            "or set STACK in featureflow.env."
        )
        logger.warning(reason)
        return GateResult(kind, GateOutcome.TOOLING_MISSING, reason)

    missing = missing_binaries(checks)
    if missing:
        reason = f"Gate tooling not installed: {', '.join(missing)}. Skipping verification."
        logger.warning(reason)
        return GateResult(kind, GateOutcome.TOOLING_MISSING, reason)

    max_lines = config.gate_output_lines_fast if kind is GateKind.FAST else config.gate_output_lines_full
    runs = []
    for check in checks:
        run = run_check(check, config.project_dir, config.gate_timeout, config.agent_logs_dir)
        runs.append(run)
        if not run.success:
            what = "timed out" if run.timed_out else f"failed (exit {run.returncode})"
            reason = f"{check.name} {what}"
            if config.agent_logs_dir is not None:
                reason += f" (see {config.agent_logs_dir.name}/{check.name}.log)"
            return GateResult(kind, GateOutcome.FAILED, reason, truncate_output(run.output, max_lines), runs)

    return GateResult(kind, GateOutcome.PASSED, "All checks passed.", checks=runs)


def require_full_gate(result: GateResult) -> None:
    """Enforce the gate at a completion boundary.

    Only a full-gate result is accepted. PASSED, SKIPPED and TOOLING_MISSING
    let the caller proceed; FAILED raises.

    Raises:
        ValueError: if handed a fast-gate result
        GateBlocked: if the full gate failed
    """
    if result.kind is not GateKind.FULL:
        raise ValueError("The fast gate cannot stand in for the full gate at a completion boundary")
    if result.blocks:
        raise GateBlocked(result)
