"""
File ownership checks between in-flight features.

Advisory only: nothing is locked. A clean result says nothing about a claim
another agent makes a moment later, so callers re-check right before they
create or move a record.
"""

from dataclasses import dataclass
from pathlib import Path

from featureflow.lib.types import Stage
from featureflow.store.models import FeatureRecord
from featureflow.store.records import list_records, normalize_record_id

IN_FLIGHT_STAGES = [Stage.TESTING, Stage.BUILDING]


@dataclass(frozen=True, order=True)
class OwnershipConflict:
    """A proposed path already claimed by another in-flight feature."""
    path: str
    other_record_id: str
    other_title: str
    other_status: str


def normalize_path(path: str) -> str:
    """Canonical form for comparing repository-relative paths."""
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/")


def claimed_files(docs_dir: Path, exclude: str | None = None) -> dict[str, list[FeatureRecord]]:
    """Map each path claimed by an in-flight record to the records claiming it."""
    excluded = normalize_record_id(exclude) if exclude else None
    claims: dict[str, list[FeatureRecord]] = {}
    for stage in IN_FLIGHT_STAGES:
        for record in list_records(docs_dir, stage):
            if excluded and record.id == excluded:
                continue
            for path in record.owned_files:
                claims.setdefault(normalize_path(path), []).append(record)
    return claims


def check_ownership(docs_dir: Path, record_id: str | None, proposed_files: list[str]) -> list[OwnershipConflict]:
    """Check a proposed file set against in-flight claims.

    Args:
        docs_dir: Feature docs root
        record_id: The proposing record (excluded from the scan), or None
        proposed_files: Paths the new work wants to touch

    Returns:
        Sorted conflicts, one per (path, other record). Empty if clear.
    """
    claims = claimed_files(docs_dir, exclude=record_id)
    proposed = {normalize_path(p) for p in proposed_files if p.strip()}

    conflicts = set()
    for path in proposed & set(claims):
        for other in claims[path]:
            conflicts.add(OwnershipConflict(
                path=path,
                other_record_id=other.id,
                other_title=other.display_title,
                other_status=other.stage.value,
            ))
    return sorted(conflicts)
