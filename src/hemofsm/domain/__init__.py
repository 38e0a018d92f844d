"""Domain models for sensor input, actuator output and machine states."""

from hemofsm.domain.models import (
    ActuatorSnapshot,
    AlarmStatus,
    MachineState,
    PeltierStatus,
    SensorSnapshot,
    SeverityCode,
    SeverityTier,
)

__all__ = [
    "ActuatorSnapshot",
    "AlarmStatus",
    "MachineState",
    "PeltierStatus",
    "SensorSnapshot",
    "SeverityCode",
    "SeverityTier",
]
