"""
ff move - Move a feature to its next stage.

Leaving building/ or entering completed/ is a completion boundary: the full
gate must pass first (unless --no-gate).
"""

import sys

from featureflow.gate.runner import GateKind, require_full_gate, run_gate
from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_BLOCK, EXIT_IO_ERROR
from featureflow.lib.errors import FeatureflowError, TransitionIOError
from featureflow.lib.types import Stage, parse_stage
from featureflow.store.records import find_record, normalize_record_id
from featureflow.workflow.ownership import check_ownership
from featureflow.workflow.state_machine import can_transition, transition

from featureflow.commands.conflicts import format_conflicts


def _needs_full_gate(src: Stage, dest: Stage) -> bool:
    return src is Stage.BUILDING or dest is Stage.COMPLETED


def cmd_move(args, config: ProjectConfig) -> int:
    """Move a record between stages."""
    docs_dir = config.docs_dir
    record_id = normalize_record_id(args.id)

    if args.from_stage:
        src = args.from_stage
    else:
        record = find_record(docs_dir, record_id)
        if record is None:
            print(f"ERROR: Feature {record_id} not found in {docs_dir.name}/", file=sys.stderr)
            return EXIT_BLOCK
        src = record.stage.value

    src_stage, dest_stage = parse_stage(src), parse_stage(args.to)

    try:
        if can_transition(src, args.to):
            if dest_stage is Stage.TESTING:
                record = find_record(docs_dir, record_id, [src_stage])
                if record is not None:
                    conflicts = check_ownership(docs_dir, record_id, record.owned_files)
                    if conflicts:
                        print(f"WARNING: {record_id} overlaps in-flight features:", file=sys.stderr)
                        for line in format_conflicts(conflicts):
                            print(line, file=sys.stderr)

            if _needs_full_gate(src_stage, dest_stage) and not args.no_gate:
                result = run_gate(config, GateKind.FULL)
                if result.output:
                    print(result.output, file=sys.stderr)
                require_full_gate(result)

        moved = transition(docs_dir, record_id, src, args.to, reason=args.reason or "")
    except TransitionIOError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_IO_ERROR
    except FeatureflowError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_BLOCK

    print(f"{moved.id}: {src} -> {moved.stage.value} ({moved.relpath(docs_dir)})")
    return EXIT_ALLOW
