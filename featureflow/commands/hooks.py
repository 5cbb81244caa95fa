"""
Hook adapters.

Agent hook runners pass a JSON payload on stdin and read stderr on exit 2.
These helpers turn that payload into plain values for the commands.
"""

import json
import logging
import sys
from pathlib import Path

from featureflow.git import get_untracked_files, has_tracked_changes

logger = logging.getLogger(__name__)


def read_hook_payload(stream=None) -> dict:
    """Read the hook JSON object from stdin (or the given stream).

    An empty or unparseable payload is logged and treated as {} so a
    misbehaving runner never blocks an agent by itself.
    """
    stream = stream if stream is not None else sys.stdin
    raw = stream.read()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed hook payload: {e}")
        return {}
    if not isinstance(payload, dict):
        logger.warning(f"Ignoring hook payload of type {type(payload).__name__}")
        return {}
    return payload


def hook_command(payload: dict) -> str:
    """The shell command a PreToolUse payload is about to run."""
    tool_input = payload.get("tool_input") or {}
    if not isinstance(tool_input, dict):
        return ""
    command = tool_input.get("command")
    return command if isinstance(command, str) else ""


def stop_hook_skip_reason(payload: dict, project_dir: Path) -> str | None:
    """Why the stop-hook verification can be skipped, or None to run it."""
    if payload.get("stop_hook_active") is True:
        return "stop hook already active"
    if not has_tracked_changes(project_dir) and not get_untracked_files(project_dir):
        return "working tree clean"
    return None
