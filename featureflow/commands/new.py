"""
ff new - Create a feature record in ready/.
ff next-id - Print the next free feature number.

Creates:
- feature-docs/ready/NNN-<slug>.md with a validated header
"""

import sys

from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_BLOCK, EXIT_WARN
from featureflow.lib.validate import ValidationError
from featureflow.store.records import create_record, next_record_id
from featureflow.workflow.ownership import check_ownership

from featureflow.commands.conflicts import format_conflicts


def cmd_new(args, config: ProjectConfig) -> int:
    """Create a new feature record."""
    title = args.title.strip()
    files = list(args.files or [])

    if len(title) < 3:
        print("ERROR: Title must be at least 3 characters")
        return EXIT_BLOCK

    conflicts = check_ownership(config.docs_dir, None, files)
    if conflicts:
        print(f"CONFLICTS FOUND on {len(conflicts)} file claim(s):", file=sys.stderr)
        for line in format_conflicts(conflicts):
            print(line, file=sys.stderr)
        if not args.force:
            print("Split the feature or wait for these to complete (or pass --force).", file=sys.stderr)
            return EXIT_WARN

    try:
        record = create_record(config.docs_dir, title, files)
    except ValidationError as e:
        print(f"ERROR: {e}")
        return EXIT_BLOCK
    except FileExistsError as e:
        print(f"ERROR: Record already exists, retry: {e.filename}")
        return EXIT_BLOCK

    print(f"Created {record.relpath(config.docs_dir)}")
    return EXIT_ALLOW


def cmd_next_id(args, config: ProjectConfig) -> int:
    print(next_record_id(config.docs_dir))
    return EXIT_ALLOW
