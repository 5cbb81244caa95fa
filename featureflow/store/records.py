"""
Feature record store.

Records are Markdown files with a YAML header, one directory per stage:
  feature-docs/ready/003-login-form.md
  feature-docs/testing/004-password-reset.md
  ...

Nothing is cached. Every call re-reads the directory tree, because other
agents may move files between any two calls.
"""

import logging
import re
from pathlib import Path

from featureflow.lib.constants import (
    IDEATION_DIR,
    IDEATION_DIR_PATTERN,
    RECORD_FILE_PATTERN,
    RECORD_ID_PATTERN,
)
from featureflow.lib.frontmatter import FILES_KEY, parse_header, render_header, split_body
from featureflow.lib.types import Stage
from featureflow.lib.validate import validate_before_write
from featureflow.store.models import FeatureRecord

logger = logging.getLogger(__name__)


def stage_dir(docs_dir: Path, stage: Stage) -> Path:
    """Get the directory for a stage."""
    return docs_dir / stage.value


def store_exists(docs_dir: Path) -> bool:
    return docs_dir.is_dir()


def init_store(docs_dir: Path) -> list[Path]:
    """Create the lifecycle directories. Returns the ones that were created."""
    created = []
    for name in [IDEATION_DIR] + [s.value for s in Stage]:
        d = docs_dir / name
        if not d.exists():
            d.mkdir(parents=True)
            created.append(d)
    return created


def normalize_record_id(value: str) -> str:
    """Turn `7`, `07`, `007` or `007-login-form` into `007`.

    Non-numeric ids are returned unchanged.
    """
    value = value.strip()
    prefix = value.split("-", 1)[0]
    if RECORD_ID_PATTERN.match(prefix):
        return f"{int(prefix):03d}"
    return value


def record_id_from_path(path: Path) -> str:
    match = RECORD_FILE_PATTERN.match(path.name)
    if match:
        return match.group(1)
    return path.stem


def load_record_file(path: Path, stage: Stage) -> FeatureRecord:
    """Read one record file."""
    text = path.read_text(encoding="utf-8", errors="replace")
    header = parse_header(text)
    return FeatureRecord(
        id=record_id_from_path(path),
        title=header.title,
        status=header.status,
        stage=stage,
        path=path,
        owned_files=header.affected_files,
        body=split_body(text),
    )


def list_records(docs_dir: Path, stage: Stage) -> list[FeatureRecord]:
    """List all records in one stage, sorted by filename."""
    d = stage_dir(docs_dir, stage)
    if not d.is_dir():
        return []

    records = []
    for f in sorted(d.glob("*.md")):
        if not f.is_file():
            continue
        try:
            records.append(load_record_file(f, stage))
        except OSError as e:
            # File moved by another agent between glob and read
            logger.warning(f"Failed to read record {f}: {e}")
    return records


def list_all_records(docs_dir: Path, stages: list[Stage] | None = None) -> list[FeatureRecord]:
    """List records across stages, in stage order."""
    records = []
    for stage in stages or list(Stage):
        records.extend(list_records(docs_dir, stage))
    return records


def find_record(docs_dir: Path, record_id: str, stages: list[Stage] | None = None) -> FeatureRecord | None:
    """Find a record by id. Returns the first match in stage order."""
    wanted = normalize_record_id(record_id)
    for record in list_all_records(docs_dir, stages):
        if record.id == wanted or record.path.stem == record_id:
            return record
    return None


def next_record_id(docs_dir: Path) -> str:
    """Return the next free 3-digit record id.

    Scans every stage directory for NNN-*.md files and ideation/ for NNN-*
    folders. Ids are never reused, so completed records still count.
    """
    highest = 0

    for stage in Stage:
        d = stage_dir(docs_dir, stage)
        if not d.is_dir():
            continue
        for f in d.iterdir():
            match = RECORD_FILE_PATTERN.match(f.name)
            if match and f.is_file():
                highest = max(highest, int(match.group(1)))

    ideation = docs_dir / IDEATION_DIR
    if ideation.is_dir():
        for d in ideation.iterdir():
            match = IDEATION_DIR_PATTERN.match(d.name)
            if match and d.is_dir():
                highest = max(highest, int(match.group(1)))

    return f"{highest + 1:03d}"


def slugify(title: str, max_len: int = 48) -> str:
    """Filename-safe slug for a title."""
    slug = re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip('-')
    return slug or "feature"


def create_record(
    docs_dir: Path,
    title: str,
    affected_files: list[str],
    body: str = "",
) -> FeatureRecord:
    """Create a new record in ready/.

    Args:
        docs_dir: Feature docs root
        title: Human-readable title
        affected_files: Repository-relative paths this feature will modify
        body: Free-form Markdown body

    Returns:
        The created FeatureRecord

    Raises:
        ValidationError: if the header would be invalid
        FileExistsError: if another agent took the same id in the meantime
    """
    record_id = next_record_id(docs_dir)
    target_dir = stage_dir(docs_dir, Stage.READY)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"{record_id}-{slugify(title)}.md"

    header_data = {
        "status": Stage.READY.value,
        "title": title,
        FILES_KEY: list(affected_files),
    }
    validate_before_write(header_data, path)

    content = render_header(title, Stage.READY, affected_files)
    if body:
        content += "\n" + body.rstrip("\n") + "\n"
    else:
        content += f"\n# {title}\n"

    # 'x' mode: never overwrite a record created concurrently with the same name
    with open(path, "x", encoding="utf-8") as f:
        f.write(content)

    logger.info(f"[STAGE] {record_id}: created in {Stage.READY.value}/")
    return load_record_file(path, Stage.READY)
