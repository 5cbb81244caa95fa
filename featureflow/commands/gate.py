"""
ff gate - Run the fast or full quality gate.

With --hook, the fast gate behaves as a stop hook: it reads the hook payload
from stdin and skips itself when the hook is re-entering or nothing changed.
The full gate is the task-completed hook and needs no payload.
"""

import logging
import sys

from featureflow.gate.runner import GateKind, GateOutcome, run_gate
from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW

from featureflow.commands.hooks import read_hook_payload, stop_hook_skip_reason

logger = logging.getLogger(__name__)


def cmd_gate(args, config: ProjectConfig) -> int:
    """Run a gate and map its outcome to an exit code."""
    kind = GateKind(args.kind)

    if args.hook and kind is GateKind.FAST:
        payload = read_hook_payload()
        skip = stop_hook_skip_reason(payload, config.project_dir)
        if skip:
            logger.info(f"[GATE] stop hook skipped: {skip}")
            return EXIT_ALLOW

    result = run_gate(config, kind)

    if result.outcome is GateOutcome.FAILED:
        if kind is GateKind.FULL:
            print(f"TaskCompleted BLOCKED: {result.reason}", file=sys.stderr)
        else:
            print(f"Fast verification failed: {result.reason}", file=sys.stderr)
        if result.output:
            print(result.output, file=sys.stderr)
    elif result.outcome is GateOutcome.TOOLING_MISSING:
        print(f"Warning: {result.reason}", file=sys.stderr)
    elif result.outcome is GateOutcome.SKIPPED:
        print(result.reason, file=sys.stderr)
    elif not args.hook:
        print(f"{kind.value} gate: {result.reason}")

    return result.exit_code
