"""
Shared data types for featureflow.

Kept separate from store/ and workflow/ so the header parser, the store and
the state machine can all use them without circular imports.
"""

from dataclasses import dataclass
from enum import Enum

from .constants import LEGACY_COMPLETED_STATUS


class Stage(Enum):
    """Lifecycle stages, in progression order.

    Values match the stage directory names.
    """
    READY = "ready"
    TESTING = "testing"
    BUILDING = "building"
    REVIEW = "review"
    COMPLETED = "completed"

    @property
    def order(self) -> int:
        return list(Stage).index(self)

    def __lt__(self, other):
        if not isinstance(other, Stage):
            return NotImplemented
        return self.order < other.order


def parse_stage(value: str | None) -> Stage | None:
    """Parse a stage name (or the legacy `done`) into a Stage.

    Returns None for anything else.
    """
    if value is None:
        return None
    value = value.strip().lower()
    if value == LEGACY_COMPLETED_STATUS:
        return Stage.COMPLETED
    for stage in Stage:
        if stage.value == value:
            return stage
    return None


class FieldState(Enum):
    MISSING = "missing"
    INVALID = "invalid"
    VALID = "valid"


@dataclass(frozen=True)
class StatusField:
    """The `status` field of a record header.

    MISSING and INVALID are kept apart on purpose: a document with no status
    (an index or dashboard page) is ignored by the consistency scan, while a
    status with a wrong value is reported.
    """
    state: FieldState
    raw: str | None = None
    stage: Stage | None = None

    @classmethod
    def missing(cls) -> "StatusField":
        return cls(FieldState.MISSING)

    @classmethod
    def from_raw(cls, raw) -> "StatusField":
        text = "" if raw is None or raw == [] else str(raw).strip()
        stage = parse_stage(text)
        if stage is None:
            return cls(FieldState.INVALID, raw=text)
        return cls(FieldState.VALID, raw=text, stage=stage)

    @property
    def is_missing(self) -> bool:
        return self.state is FieldState.MISSING

    @property
    def is_legacy(self) -> bool:
        """True when the terminal stage is spelled `done`."""
        return self.raw is not None and self.raw.lower() == LEGACY_COMPLETED_STATUS

    def matches(self, stage: Stage) -> bool:
        return self.state is FieldState.VALID and self.stage is stage

    def __str__(self):
        if self.is_missing:
            return "(none)"
        return self.raw if self.raw else "(empty)"
