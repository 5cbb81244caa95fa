"""
Record header parser.

A feature record starts with a YAML block between two `---` lines:

    ---
    status: testing
    title: Add login form
    affected-files:
      - src/login.ts
    ---

Everything after the closing marker is the body and is never interpreted.
"""

import json
import logging
import re
from dataclasses import dataclass, field

import yaml

from .errors import HeaderError
from .types import Stage, StatusField

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r'\A\s*---[ \t]*\r?\n(.*?)^---[ \t]*\r?$', re.DOTALL | re.MULTILINE)
STATUS_LINE_RE = re.compile(r'^["\']?status["\']?\s*:')
SCALAR_LINE_RE = re.compile(r'^([A-Za-z][A-Za-z0-9_-]*):\s*(.*?)\s*$')
LIST_ITEM_RE = re.compile(r'^\s+-\s+(.+?)\s*$')

FILES_KEY = "affected-files"


@dataclass
class RecordHeader:
    """Parsed record header."""
    status: StatusField
    title: str = ""
    affected_files: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict)
    present: bool = True


def _split(text: str) -> tuple[str | None, str]:
    """Return (header_block, body). header_block is None if there is no header."""
    match = HEADER_RE.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end():].lstrip("\r\n")


def _scan_lines(block: str) -> dict:
    """Line-oriented fallback for headers that are not valid YAML.

    Titles like `title: Fix: login` are common in hand-written records and
    break YAML, but the fields are still recoverable line by line.
    """
    data: dict = {}
    list_key = None
    for line in block.splitlines():
        item = LIST_ITEM_RE.match(line)
        if item and list_key:
            data[list_key].append(item.group(1).strip("'\""))
            continue
        scalar = SCALAR_LINE_RE.match(line)
        if not scalar:
            continue
        key, value = scalar.group(1), scalar.group(2)
        if value:
            data[key] = value.strip("'\"")
            list_key = None
        else:
            data[key] = []
            list_key = key
    return data


def _load_block(block: str) -> dict:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.debug(f"Header is not valid YAML, scanning lines instead: {e}")
        return _scan_lines(block)
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Header block is not a mapping, ignoring it")
        return {}
    return data


def _to_string_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        return [value] if value else []
    if isinstance(value, list):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [str(value)]


def parse_header(text: str) -> RecordHeader:
    """Parse the header of a record document.

    A document without a header, or a header without a `status` key, yields
    a MISSING status rather than an error.
    """
    block, _ = _split(text)
    if block is None:
        return RecordHeader(status=StatusField.missing(), present=False)

    data = _load_block(block)
    if "status" in data:
        status = StatusField.from_raw(data["status"])
    else:
        status = StatusField.missing()

    title = data.get("title")
    return RecordHeader(
        status=status,
        title="" if title is None else str(title).strip(),
        affected_files=_to_string_list(data.get(FILES_KEY)),
        raw=data,
    )


def split_body(text: str) -> str:
    """Return the document body (everything after the header)."""
    return _split(text)[1]


def set_status(text: str, stage: Stage) -> str:
    """Rewrite the `status:` line inside the header, preserving everything else.

    A header without a status line gets one inserted as its first field.

    Raises:
        HeaderError: if the document has no header block
    """
    lines = text.splitlines(keepends=True)
    start = None
    for i, line in enumerate(lines):
        stripped = line.strip()
        if start is None:
            if not stripped:
                continue
            if stripped != "---":
                raise HeaderError("Document has no header block")
            start = i
            continue
        if stripped == "---":
            ending = lines[start][len(lines[start].rstrip("\r\n")):] or "\n"
            lines.insert(start + 1, f"status: {stage.value}{ending}")
            return "".join(lines)
        if STATUS_LINE_RE.match(line):
            ending = line[len(line.rstrip("\r\n")):]
            lines[i] = f"status: {stage.value}{ending}"
            return "".join(lines)
    raise HeaderError("Document has no header block")


def _scalar(value: str) -> str:
    """Quote a string for the header only when YAML would misread it."""
    if not value or value != value.strip() or re.search(r'[:#\[\]{},&*!|>\'"%@`]', value):
        return json.dumps(value)
    return value


def render_header(title: str, stage: Stage, affected_files: list[str]) -> str:
    """Render a header block for a new record."""
    lines = [
        "---",
        f"status: {stage.value}",
        f"title: {_scalar(title)}",
        f"{FILES_KEY}:",
    ]
    for path in affected_files:
        lines.append(f"  - {_scalar(path)}")
    lines.append("---")
    return "\n".join(lines) + "\n"
