"""Stage transitions for feature records.

Thin destination-based API over the FSM in fsm.py. Callers say where a
record is and where it should go; this module checks the move is legal,
that the record is really there, and then fires the matching trigger.

Usage:
    from featureflow.workflow.state_machine import transition

    transition(docs_dir, "003", Stage.TESTING, Stage.BUILDING, reason="tests written")
"""

import logging
from pathlib import Path

from transitions import MachineError

from featureflow.lib.errors import ConsistencyError, InvalidTransition, RecordNotFound
from featureflow.lib.types import Stage, parse_stage
from featureflow.store.models import FeatureRecord
from featureflow.store.records import find_record, load_record_file, normalize_record_id
from featureflow.workflow.fsm import TRIGGER_FOR, RecordFSM
from featureflow.workflow.resolver import ConsistencyViolation

logger = logging.getLogger(__name__)


def _as_stage(value) -> Stage | None:
    if isinstance(value, Stage):
        return value
    stage = parse_stage(value)
    # `done` is a header spelling, not a stage name
    if stage is not None and value.strip().lower() != stage.value:
        return None
    return stage


def allowed_targets(from_stage: Stage) -> list[Stage]:
    """Stages reachable in one step from from_stage."""
    return [Stage(dest) for (src, dest) in TRIGGER_FOR if src == from_stage.value]


def can_transition(from_stage, to_stage) -> bool:
    """Check if a move between two stages is allowed."""
    src, dest = _as_stage(from_stage), _as_stage(to_stage)
    if src is None or dest is None:
        return False
    return (src.value, dest.value) in TRIGGER_FOR


def transition(
    docs_dir: Path,
    record_id: str,
    from_stage,
    to_stage,
    reason: str = "",
) -> FeatureRecord:
    """Move a record from one stage to the next.

    Args:
        docs_dir: Feature docs root
        record_id: Record id, e.g. "003"
        from_stage: Stage the caller believes the record is in
        to_stage: Target stage
        reason: Optional reason, for the log

    Returns:
        The record as reloaded from its new location

    Raises:
        InvalidTransition: the move is not forward-by-one or review -> building.
            Raised before anything is written.
        RecordNotFound: the record is not in from_stage
        ConsistencyError: the record's header already disagrees with its directory
        TransitionIOError: a write failed part-way; see its message for the fix
    """
    record_id = normalize_record_id(record_id)
    src, dest = _as_stage(from_stage), _as_stage(to_stage)
    from_name = src.value if src else str(from_stage)
    to_name = dest.value if dest else str(to_stage)

    if src is None or dest is None:
        raise InvalidTransition(from_name, to_name, record_id)

    trigger = TRIGGER_FOR.get((src.value, dest.value))
    if trigger is None:
        raise InvalidTransition(
            src.value, dest.value, record_id,
            allowed=[s.value for s in allowed_targets(src)],
        )

    record = find_record(docs_dir, record_id, [src])
    if record is None:
        raise RecordNotFound(record_id, src.value)

    if not record.is_consistent:
        raise ConsistencyError([ConsistencyViolation(
            record_id=record.id,
            path=record.path,
            stage=src,
            declared_status=record.status.raw or "",
        )])

    reason_str = f" ({reason})" if reason else ""
    logger.debug(f"[STAGE] {record_id}: requesting {src.value} -> {dest.value}{reason_str}")

    fsm = RecordFSM(record, docs_dir)
    try:
        getattr(fsm, trigger)()
    except MachineError as e:
        raise InvalidTransition(src.value, dest.value, record_id) from e

    return load_record_file(fsm.path, dest)
