"""
ff check - Verify every record's status matches its directory.
"""

import sys

from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_BLOCK
from featureflow.lib.frontmatter import FILES_KEY
from featureflow.lib.validate import collect_errors
from featureflow.store.records import list_all_records, store_exists
from featureflow.workflow.resolver import legacy_status_records, scan_consistency


def _schema_warnings(config: ProjectConfig) -> list[str]:
    warnings = []
    for record in list_all_records(config.docs_dir):
        if record.status.is_missing:
            continue
        data = {"status": record.status.raw, "title": record.title, FILES_KEY: record.owned_files}
        for error in collect_errors(data):
            warnings.append(f"{record.relpath(config.docs_dir)}: {error}")
    return warnings


def cmd_check(args, config: ProjectConfig) -> int:
    """Run the consistency scan."""
    docs_dir = config.docs_dir
    if not store_exists(docs_dir):
        print(f"No feature docs at {docs_dir}. Run 'ff init' first.")
        return EXIT_ALLOW

    for record in legacy_status_records(docs_dir):
        print(f"  [NOTE] {record.relpath(docs_dir)} uses legacy 'status: done' (accepted as completed)")

    if getattr(args, "strict", False):
        for warning in _schema_warnings(config):
            print(f"  [WARN] {warning}")

    violations = scan_consistency(docs_dir)
    if not violations:
        print("All feature records are consistent.")
        return EXIT_ALLOW

    print(f"INCONSISTENT: {len(violations)} record(s)", file=sys.stderr)
    for v in violations:
        print(f"  - {v.describe()}", file=sys.stderr)
    return EXIT_BLOCK
