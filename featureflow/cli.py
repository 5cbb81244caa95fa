#!/usr/bin/env python3
"""featureflow CLI entrypoint."""

import argparse
import logging
import sys

from featureflow.lib.config import load_project_config, resolve_project_dir
from featureflow.lib.constants import EXIT_WARN
from featureflow.lib.errors import ConfigError
from featureflow.lib.types import Stage
from featureflow.commands import board as cmd_board_module
from featureflow.commands import check as cmd_check_module
from featureflow.commands import conflicts as cmd_conflicts_module
from featureflow.commands import gate as cmd_gate_module
from featureflow.commands import guard as cmd_guard_module
from featureflow.commands import move as cmd_move_module
from featureflow.commands import new as cmd_new_module
from featureflow.commands import next as cmd_next_module
from featureflow.commands import stuck as cmd_stuck_module

STAGE_CHOICES = [s.value for s in Stage]


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def get_project_config(args):
    """Load project config from --project-dir or the environment."""
    project_dir = resolve_project_dir(args.project_dir)
    return load_project_config(project_dir)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='ff', description='Feature lifecycle for multi-agent development')
    parser.add_argument('--project-dir', '-C', help='Project root (default: $CLAUDE_PROJECT_DIR, $PROJECT_DIR, cwd)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    # ff next
    p_next = subparsers.add_parser('next', help='Idle check: print the next pending work')
    p_next.set_defaults(func=cmd_next_module.cmd_next)

    # ff check
    p_check = subparsers.add_parser('check', help='Verify record status matches its directory')
    p_check.add_argument('--strict', action='store_true', help='Also validate every header against the schema')
    p_check.set_defaults(func=cmd_check_module.cmd_check)

    # ff conflicts
    p_conflicts = subparsers.add_parser('conflicts', help='Check file ownership against in-flight features')
    p_conflicts.add_argument('id', nargs='?', help='Feature ID (excluded from the scan)')
    p_conflicts.add_argument('files', nargs='*', help='Files to check (default: the feature\'s affected-files)')
    p_conflicts.set_defaults(func=cmd_conflicts_module.cmd_conflicts)

    # ff move
    p_move = subparsers.add_parser('move', help='Move a feature to another stage')
    p_move.add_argument('id', help='Feature ID, e.g. 003')
    p_move.add_argument('to', choices=STAGE_CHOICES, help='Target stage')
    p_move.add_argument('--from', dest='from_stage', help='Current stage (default: wherever the feature is)')
    p_move.add_argument('--reason', '-r', help='Reason, for the log')
    p_move.add_argument('--no-gate', action='store_true', help='Skip the full gate at completion boundaries')
    p_move.set_defaults(func=cmd_move_module.cmd_move)

    # ff gate
    p_gate = subparsers.add_parser('gate', help='Run the fast or full quality gate')
    p_gate.add_argument('kind', choices=['fast', 'full'], help='Which gate')
    p_gate.add_argument('--hook', action='store_true', help='Read the hook payload from stdin')
    p_gate.set_defaults(func=cmd_gate_module.cmd_gate)

    # ff stuck
    p_stuck = subparsers.add_parser('stuck', help='List features stuck in building/')
    p_stuck.add_argument('--threshold', '-t', type=int, help='Minutes (default: STUCK_THRESHOLD_MINUTES)')
    p_stuck.set_defaults(func=cmd_stuck_module.cmd_stuck)

    # ff guard
    p_guard = subparsers.add_parser('guard', help='Classify a shell command before it runs')
    p_guard.add_argument('shell_command', nargs=argparse.REMAINDER, help='Command to classify')
    p_guard.add_argument('--hook', action='store_true', help='Read the command from the hook payload on stdin')
    p_guard.set_defaults(func=cmd_guard_module.cmd_guard)

    # ff new
    p_new = subparsers.add_parser('new', help='Create a feature in ready/')
    p_new.add_argument('title', help='Feature title')
    p_new.add_argument('--files', '-f', nargs='*', default=[], help='Files the feature will modify')
    p_new.add_argument('--force', action='store_true', help='Create even if files overlap in-flight features')
    p_new.set_defaults(func=cmd_new_module.cmd_new)

    # ff next-id
    p_next_id = subparsers.add_parser('next-id', help='Print the next free feature number')
    p_next_id.set_defaults(func=cmd_new_module.cmd_next_id)

    # ff init
    p_init = subparsers.add_parser('init', help='Create the lifecycle directories')
    p_init.set_defaults(func=cmd_board_module.cmd_init)

    # ff list
    p_list = subparsers.add_parser('list', help='Show features per stage')
    p_list.add_argument('--all', '-a', action='store_true', help='Also list completed features')
    p_list.set_defaults(func=cmd_board_module.cmd_list)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = get_project_config(args)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_WARN

    return args.func(args, config)


if __name__ == '__main__':
    sys.exit(main())
