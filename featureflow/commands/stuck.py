"""
ff stuck - List features sitting in building/ past the threshold.
"""

import sys

from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_WARN
from featureflow.workflow.stuck import check_stuck, format_stuck_warning


def cmd_stuck(args, config: ProjectConfig) -> int:
    threshold = args.threshold if args.threshold is not None else config.stuck_threshold_minutes
    stuck = check_stuck(config.docs_dir, threshold)
    if not stuck:
        return EXIT_ALLOW
    for s in stuck:
        print(format_stuck_warning(s), file=sys.stderr)
    return EXIT_WARN
