"""
ff conflicts - Check a file set against features in testing/ and building/.
"""

from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_WARN
from featureflow.store.records import find_record, normalize_record_id
from featureflow.workflow.ownership import OwnershipConflict, check_ownership


def format_conflicts(conflicts: list[OwnershipConflict]) -> list[str]:
    """Group conflicts by the other record for display."""
    by_record: dict[str, list[OwnershipConflict]] = {}
    for c in conflicts:
        by_record.setdefault(c.other_record_id, []).append(c)

    lines = []
    for other_id, items in sorted(by_record.items()):
        lines.append(f"  {other_id} ({items[0].other_title}, {items[0].other_status}):")
        for c in items:
            lines.append(f"    - {c.path}")
    return lines


def cmd_conflicts(args, config: ProjectConfig) -> int:
    """Check file ownership conflicts."""
    record_id = normalize_record_id(args.id) if args.id else None
    files = list(args.files or [])

    # No files given: use the record's own claims
    if not files and record_id:
        record = find_record(config.docs_dir, record_id)
        if record is None:
            print(f"ERROR: Feature {record_id} not found")
            return EXIT_WARN
        files = record.owned_files

    if not files:
        print("No files to check.")
        return EXIT_ALLOW

    conflicts = check_ownership(config.docs_dir, record_id, files)
    print(f"Conflict check for: {record_id or '(new feature)'}")
    print(f"Files proposed: {len(files)}")
    print()

    if not conflicts:
        print("No conflicts with in-flight features.")
        return EXIT_ALLOW

    print(f"CONFLICTS FOUND on {len(conflicts)} file claim(s):\n")
    for line in format_conflicts(conflicts):
        print(line)
    return EXIT_WARN
