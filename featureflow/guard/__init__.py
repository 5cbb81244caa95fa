"""Pre-execution command guard."""

from featureflow.guard.command_guard import (
    GuardContext,
    GuardVerdict,
    guard_command,
    guard_context_for,
)

__all__ = [
    "GuardContext",
    "GuardVerdict",
    "guard_command",
    "guard_context_for",
]
