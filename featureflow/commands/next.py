"""
ff next - Idle check: tell an idle agent what to pick up.

Output goes to stderr, where hook runners look for the directive.
Exit 2 means "keep working" (work found, or the board is inconsistent);
exit 0 lets the agent go idle.
"""

import sys

from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_BLOCK
from featureflow.store.records import store_exists
from featureflow.workflow.resolver import find_pending_work, scan_consistency
from featureflow.workflow.stuck import check_stuck, format_stuck_warning


def cmd_next(args, config: ProjectConfig) -> int:
    """Report stuck records, then the highest-priority pending work."""
    docs_dir = config.docs_dir
    if not store_exists(docs_dir):
        return EXIT_ALLOW

    for stuck in check_stuck(docs_dir, config.stuck_threshold_minutes):
        print(format_stuck_warning(stuck), file=sys.stderr)

    violations = scan_consistency(docs_dir)
    if violations:
        print("Feature board is inconsistent. Fix these before picking up work:", file=sys.stderr)
        for v in violations:
            print(f"  - {v.describe()}", file=sys.stderr)
        return EXIT_BLOCK

    work = find_pending_work(docs_dir)
    if work is None:
        return EXIT_ALLOW

    print(work.message(), file=sys.stderr)
    return EXIT_BLOCK
