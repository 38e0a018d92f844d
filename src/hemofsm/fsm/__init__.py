"""Safety state machine: transition rules, critical latch and output derivation."""

from hemofsm.fsm.contracts import ControllerPolicy, CycleResult, EvaluationStage
from hemofsm.fsm.evaluator import RESET_MESSAGE, SafetyController, evaluate, reset_sensors
from hemofsm.fsm.outputs import OUTPUT_TABLE, derive_outputs, severity_tier

__all__ = [
    "ControllerPolicy",
    "CycleResult",
    "EvaluationStage",
    "OUTPUT_TABLE",
    "RESET_MESSAGE",
    "SafetyController",
    "derive_outputs",
    "evaluate",
    "reset_sensors",
    "severity_tier",
]
