"""
Stage resolver.

Answers two questions from disk alone:
- what should an idle agent pick up next (find_pending_work)
- does every record's header status agree with its directory (scan_consistency)
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from featureflow.lib.errors import ConsistencyError
from featureflow.lib.types import FieldState, Stage
from featureflow.store.models import FeatureRecord
from featureflow.store.records import list_records

logger = logging.getLogger(__name__)

# Unblocking started work comes before intake, intake before review
PENDING_PRIORITY = [Stage.TESTING, Stage.READY, Stage.REVIEW]

# Most permissive first: failing tests in testing/ must not poison the gate
DOMINANT_ORDER = [Stage.TESTING, Stage.BUILDING, Stage.REVIEW]

DIRECTIVES = {
    Stage.TESTING: (
        "{title} needs implementation (status: testing)",
        "Pick up {relpath} - read the feature doc and failing tests, "
        "then implement until all tests pass.",
    ),
    Stage.READY: (
        "{title} needs tests (status: ready)",
        "Pick up {relpath} - read the feature doc and write failing tests "
        "for all acceptance criteria.",
    ),
    Stage.REVIEW: (
        "{title} needs review (status: review)",
        "Review {relpath} - check code quality, conventions, and test coverage.",
    ),
}


@dataclass(frozen=True)
class PendingWork:
    """The next piece of work for an idle agent."""
    stage: Stage
    record_id: str
    title: str
    path: Path
    summary: str
    directive: str

    def message(self) -> str:
        return f"Pending work found: {self.summary}\n{self.directive}"


@dataclass(frozen=True)
class ConsistencyViolation:
    """A record whose header status disagrees with its directory."""
    record_id: str
    path: Path
    stage: Stage                # where the file is
    declared_status: str        # what the header says

    def describe(self) -> str:
        declared = self.declared_status or "(empty)"
        return (
            f"Feature {self.record_id} ({self.path.parent.name}/{self.path.name}) "
            f"is in {self.stage.value}/ but its status is '{declared}': "
            f"update the status field to {self.stage.value} or move the file to {declared}/"
        )


def _pending_for(record: FeatureRecord, docs_dir: Path) -> PendingWork:
    summary_tpl, directive_tpl = DIRECTIVES[record.stage]
    relpath = f"{docs_dir.name}/{record.relpath(docs_dir)}"
    return PendingWork(
        stage=record.stage,
        record_id=record.id,
        title=record.display_title,
        path=record.path,
        summary=summary_tpl.format(title=record.display_title),
        directive=directive_tpl.format(relpath=relpath),
    )


def find_pending_work(docs_dir: Path) -> PendingWork | None:
    """Return the highest-priority pending record, or None if there is no work.

    Priority is testing > ready > review; within a stage the lowest id wins.
    Reads only; calling it twice with no change on disk gives the same answer.
    """
    for stage in PENDING_PRIORITY:
        records = list_records(docs_dir, stage)
        if records:
            return _pending_for(records[0], docs_dir)
    return None


def scan_consistency(docs_dir: Path) -> list[ConsistencyViolation]:
    """Compare every record's header status with its directory.

    Records without a status field are skipped (index pages, dashboards).
    `completed/` accepts the legacy `done` as well as `completed`.
    """
    violations = []
    for stage in Stage:
        for record in list_records(docs_dir, stage):
            if record.status.state is FieldState.MISSING:
                continue
            if record.status.matches(stage):
                continue
            violations.append(ConsistencyViolation(
                record_id=record.id,
                path=record.path,
                stage=stage,
                declared_status=record.status.raw or "",
            ))
    if violations:
        logger.debug(f"Consistency scan found {len(violations)} violation(s)")
    return violations


def require_consistency(docs_dir: Path) -> None:
    """Raise ConsistencyError if any record disagrees with its directory."""
    violations = scan_consistency(docs_dir)
    if violations:
        raise ConsistencyError(violations)


def legacy_status_records(docs_dir: Path) -> list[FeatureRecord]:
    """Completed records still spelled `status: done`."""
    return [r for r in list_records(docs_dir, Stage.COMPLETED) if r.status.is_legacy]


def dominant_stage(docs_dir: Path) -> Stage | None:
    """The most permissive active stage that holds a record with a status field.

    testing dominates building dominates review. Returns None if none of
    them holds such a record.
    """
    for stage in DOMINANT_ORDER:
        for record in list_records(docs_dir, stage):
            if not record.status.is_missing:
                return stage
    return None
