"""Policy and result contracts used by the safety state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from hemofsm.domain.models import ActuatorSnapshot, MachineState, SensorSnapshot


class EvaluationStage(StrEnum):
    """Evaluator stage that decided the next state of one cycle."""

    RESET = "reset"
    LATCHED = "latched"
    FATAL_OVERRIDE = "fatal_override"
    OPERATIONAL = "operational"


@dataclass(frozen=True, slots=True)
class ControllerPolicy:
    """Behavioral switches for the controller.

    `rederive_on_reset` makes the reset path derive the idle actuator row
    instead of keeping the previous cycle's actuators with a reset message.
    """

    rederive_on_reset: bool = False


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Outcome of evaluating one control cycle."""

    previous_state: MachineState
    state: MachineState
    actuators: ActuatorSnapshot
    sensors: SensorSnapshot
    stage: EvaluationStage
    reason: str

    @property
    def changed(self) -> bool:
        """Whether the cycle moved the machine to a different state."""
        return self.state != self.previous_state

    @property
    def entered_critical(self) -> bool:
        """Whether this cycle latched the machine into a critical state."""
        return self.state.is_critical and not self.previous_state.is_critical

    def to_jsonable(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible values."""
        return {
            "previous_state": self.previous_state.name,
            "state": self.state.name,
            "stage": self.stage.value,
            "reason": self.reason,
            "actuators": self.actuators.to_jsonable(),
            "sensors": self.sensors.to_jsonable(),
        }
