"""Stuck detection for records sitting in building/."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from featureflow.lib.constants import STUCK_THRESHOLD_MINUTES
from featureflow.lib.types import Stage
from featureflow.store.records import list_records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StuckRecord:
    record_id: str
    title: str
    elapsed_minutes: int
    path: Path

    def warning(self) -> str:
        return f"Stuck: {self.title} has been in building for {self.elapsed_minutes} minutes"


def check_stuck(
    docs_dir: Path,
    threshold_minutes: int = STUCK_THRESHOLD_MINUTES,
    now: float | None = None,
) -> list[StuckRecord]:
    """Report records in building/ not modified for longer than the threshold.

    Uses the file's mtime, so any edit to the record (progress notes, a
    status rewrite) resets the clock. Detection only; nothing is changed.
    """
    now = time.time() if now is None else now
    stuck = []
    for record in list_records(docs_dir, Stage.BUILDING):
        try:
            mtime = record.path.stat().st_mtime
        except OSError:
            # Moved out of building/ since the listing
            continue
        elapsed = int((now - mtime) // 60)
        if elapsed > threshold_minutes:
            stuck.append(StuckRecord(
                record_id=record.id,
                title=record.display_title,
                elapsed_minutes=elapsed,
                path=record.path,
            ))
            logger.debug(f"[STUCK] {record.id}: {elapsed}m in building")
    return stuck


def format_stuck_warning(stuck: StuckRecord) -> str:
    return stuck.warning()
