"""Quality gate: stage-aware fast and full verification."""

from featureflow.gate.config import GateCheck, GateConfig, load_gate_config
from featureflow.gate.runner import (
    GateKind,
    GateOutcome,
    GateResult,
    require_full_gate,
    run_gate,
)

__all__ = [
    "GateCheck",
    "GateConfig",
    "load_gate_config",
    "GateKind",
    "GateOutcome",
    "GateResult",
    "require_full_gate",
    "run_gate",
]
