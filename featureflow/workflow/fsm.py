"""Feature record lifecycle as a state machine, using the transitions library.

The lifecycle is linear with one rework edge:

    ready -> testing -> building -> review -> completed
                           ^           |
                           +-- rework -+

Usage:
    from featureflow.workflow.fsm import RecordFSM

    fsm = RecordFSM(record, docs_dir)
    fsm.start_build()   # testing -> building, persisted to disk
"""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Callable

from transitions import Machine

from featureflow.lib.errors import HeaderError, TransitionIOError
from featureflow.lib.frontmatter import parse_header, set_status
from featureflow.lib.types import Stage
from featureflow.store.models import FeatureRecord

logger = logging.getLogger(__name__)


STATES = [s.value for s in Stage]

# Each trigger becomes a method on the FSM
TRANSITIONS = [
    {"trigger": "start_tests", "source": "ready", "dest": "testing"},
    {"trigger": "start_build", "source": "testing", "dest": "building"},
    {"trigger": "submit_review", "source": "building", "dest": "review"},
    {"trigger": "approve", "source": "review", "dest": "completed"},
    {"trigger": "rework", "source": "review", "dest": "building"},
]


def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        lookup.setdefault((t["source"], t["dest"]), t["trigger"])
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


def _write_in_place(path: Path, content: str) -> None:
    """Replace a file's content via a temp file in the same directory.

    Readers see either the old or the new content, never a torn write.
    The file keeps its permission bits.
    """
    mode = stat.S_IMODE(path.stat().st_mode)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def persist_stage_change(record: FeatureRecord, docs_dir: Path, to_stage: Stage) -> Path:
    """Write a stage change to disk: rewrite the status, then move the file.

    This is the only place a transition touches the filesystem. It is two
    steps and not atomic; if the move fails after the rewrite, the record is
    left with a new status in its old directory, which the consistency scan
    reports until someone reconciles it.

    Returns:
        The record's new path.

    Raises:
        TransitionIOError: if either step fails
    """
    target_dir = docs_dir / to_stage.value
    target = target_dir / record.path.name

    if target.exists():
        raise TransitionIOError(
            record.id, "checking the target directory",
            f"{target} already exists; rename one of the two files and retry. No changes were made.",
        )

    try:
        text = record.path.read_text(encoding="utf-8")
        updated = set_status(text, to_stage)
        if parse_header(updated).status.stage is not to_stage:
            raise HeaderError(f"rewritten header of {record.path.name} does not read back as {to_stage.value}")
        _write_in_place(record.path, updated)
    except (OSError, HeaderError) as e:
        raise TransitionIOError(
            record.id, "rewriting the status field",
            f"No changes were made; fix {record.path} and retry.", e,
        ) from e

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        record.path.rename(target)
    except OSError as e:
        raise TransitionIOError(
            record.id, "moving the file",
            f"Its status now says {to_stage.value}: move {record.path} to {target_dir}/ "
            f"or set the status back to {record.stage.value}.", e,
        ) from e

    return target


class RecordFSM:
    """State machine for one feature record.

    Wraps the transitions library with record-specific logic:
    - Initial state is the directory the record lives in
    - Every state change is persisted with persist_stage_change
    - Logs all transitions
    """

    def __init__(
        self,
        record: FeatureRecord,
        docs_dir: Path,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """Initialize FSM for a record.

        Args:
            record: The record, as loaded from its current directory
            docs_dir: Feature docs root
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.record = record
        self.docs_dir = docs_dir
        self.path = record.path
        self.on_transition = on_transition

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=record.stage.value,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        """Persist the new state and log the transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        self.path = persist_stage_change(self.record, self.docs_dir, Stage(to_state))
        logger.info(f"[STAGE] {self.record.id}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        return self.machine.get_triggers(self.state)
