"""
Record header schema checks.

New records are checked against schemas/record.schema.json before they are
written, so the store never holds a header the rest of the tooling cannot
read. `ff check --strict` runs the same schema over existing records and
reports every problem instead of stopping at the first.
"""

import json
from pathlib import Path

import jsonschema

from .errors import FeatureflowError

RECORD_SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "record.schema.json"


class ValidationError(FeatureflowError):
    """A record header does not match the record schema."""

    def __init__(self, errors: list[str], path: Path | None = None):
        self.errors = errors
        self.path = path
        target = f" {path.name}" if path else ""
        super().__init__(f"Refusing to write record{target}: " + "; ".join(errors))


_record_schema: dict | None = None


def _load_record_schema() -> dict:
    global _record_schema
    if _record_schema is None:
        _record_schema = json.loads(RECORD_SCHEMA_PATH.read_text(encoding="utf-8"))
    return _record_schema


def _field_name(error: jsonschema.ValidationError) -> str:
    return ".".join(str(p) for p in error.absolute_path) or "(header)"


def collect_errors(data: dict) -> list[str]:
    """Every schema problem in a header, as `field: message` lines. Empty if valid."""
    schema = _load_record_schema()
    validator = jsonschema.validators.validator_for(schema)(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{_field_name(e)}: {e.message}" for e in errors]


def validate_before_write(data: dict, path: Path) -> None:
    """Refuse to create a record whose header fails the schema.

    Raises:
        ValidationError: listing every problem, so one edit can fix them all
    """
    errors = collect_errors(data)
    if errors:
        raise ValidationError(errors, path)
