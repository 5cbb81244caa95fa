"""
ff guard - Classify a shell command before it runs.

    ff guard "git push --force origin main"     # command as argument
    ff guard --hook < payload.json              # PreToolUse hook payload
"""

import sys

from featureflow.guard.command_guard import guard_command, guard_context_for
from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW, EXIT_BLOCK

from featureflow.commands.hooks import hook_command, read_hook_payload


def cmd_guard(args, config: ProjectConfig) -> int:
    if args.hook:
        command = hook_command(read_hook_payload())
    else:
        command = " ".join(args.shell_command or [])

    if not command.strip():
        return EXIT_ALLOW

    verdict = guard_command(command, guard_context_for(config.project_dir, config))
    if verdict.allowed:
        return EXIT_ALLOW

    print(verdict.reason, file=sys.stderr)
    return EXIT_BLOCK
