"""hemofsm: deterministic safety state machine for hemodialysis control."""

from hemofsm.domain.models import ActuatorSnapshot, MachineState, SensorSnapshot, SeverityCode
from hemofsm.fsm.evaluator import SafetyController, evaluate, reset_sensors

__all__ = [
    "ActuatorSnapshot",
    "MachineState",
    "SafetyController",
    "SensorSnapshot",
    "SeverityCode",
    "evaluate",
    "reset_sensors",
]

__version__ = "0.1.0"
