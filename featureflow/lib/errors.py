"""
Exception types for featureflow.

Blocking errors carry enough context to say what is wrong, which record is
affected, and what the minimal fix is. Advisory findings (ownership
conflicts, stuck records) are returned as values and never raised.
"""


class FeatureflowError(Exception):
    """Base class for all featureflow errors."""
    pass


class ConfigError(FeatureflowError):
    """Project configuration could not be loaded."""
    pass


class HeaderError(FeatureflowError):
    """A record header is missing or cannot be rewritten."""
    pass


class ConsistencyError(FeatureflowError):
    """One or more records disagree with the directory they live in."""

    def __init__(self, violations: list):
        self.violations = violations
        lines = [f"{len(violations)} record(s) have a status that does not match their location:"]
        for v in violations:
            lines.append(f"  - {v.describe()}")
        super().__init__("\n".join(lines))


class RecordNotFound(FeatureflowError):
    """No record with the given id exists in the expected stage."""

    def __init__(self, record_id: str, stage: str | None = None):
        self.record_id = record_id
        self.stage = stage
        where = f" in {stage}/" if stage else ""
        super().__init__(f"Feature {record_id} not found{where}")


class InvalidTransition(FeatureflowError):
    """Raised when a requested stage change is not allowed."""

    def __init__(self, from_stage: str, to_stage: str, record_id: str = "", allowed: list[str] | None = None):
        self.from_stage = from_stage
        self.to_stage = to_stage
        self.record_id = record_id
        self.allowed = allowed or []
        hint = f" (allowed from {from_stage}: {', '.join(self.allowed)})" if self.allowed else ""
        super().__init__(
            f"Invalid transition: {from_stage} -> {to_stage}"
            + (f" (feature: {record_id})" if record_id else "")
            + hint
        )


class TransitionIOError(FeatureflowError):
    """A transition failed part-way through its writes.

    There is no rollback. The message names the manual reconciliation step;
    until it is done, the consistency scan will report the record.
    """

    def __init__(self, record_id: str, step: str, remedy: str, cause: Exception | None = None):
        self.record_id = record_id
        self.step = step
        self.remedy = remedy
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Transition of feature {record_id} failed while {step}{detail}. {remedy}")


class GateBlocked(FeatureflowError):
    """The full quality gate failed at a completion boundary."""

    def __init__(self, result):
        self.result = result
        super().__init__(f"Quality gate failed: {result.reason}")
