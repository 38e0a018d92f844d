"""Core domain models for the hemodialysis safety state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum, StrEnum
from typing import Any


class MachineState(IntEnum):
    """Machine states in ascending severity order."""

    IDLE = 0
    NORMAL = 1
    FLOW_WARN = 2
    TEMP_WARN = 3
    O2_WARN = 4
    COND_WARN = 5
    TEMP_CRIT = 6
    PRESS_FAIL = 7
    AIR_DETECT = 8

    @property
    def is_critical(self) -> bool:
        """Whether this state is fatal and latches until reset."""
        return self >= MachineState.TEMP_CRIT

    @property
    def is_operational(self) -> bool:
        """Whether therapy is running (normal or a non-fatal warning)."""
        return MachineState.NORMAL <= self <= MachineState.COND_WARN


class SeverityCode(IntEnum):
    """Tri-state severity reported by one analogue sensor channel."""

    NORMAL = 0
    WARNING = 1
    CRITICAL = 2


class SeverityTier(StrEnum):
    """Display tier used by hosts to color or branch on machine state."""

    IDLE = "idle"
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


class PeltierStatus(StrEnum):
    """Dialysate heater/cooler command."""

    OFF = "OFF"
    ADJUSTING = "ADJUSTING"
    OFF_SAFETY = "OFF (Safety)"


class AlarmStatus(StrEnum):
    """Audible alarm command."""

    SILENT = "SILENT"
    BEEP_WARNING = "BEEP (Warning)"
    SIREN_CRITICAL = "SIREN (CRITICAL)"


_CODE_FIELDS = ("flow_code", "temp_code", "press_code", "cond_code")


@dataclass(frozen=True, slots=True)
class SensorSnapshot:
    """Sensor codes and operator commands for one control cycle.

    Command flags are one-shot: the host sets them, runs one evaluation and
    clears them before composing the next cycle's input.
    """

    flow_code: SeverityCode = SeverityCode.NORMAL
    temp_code: SeverityCode = SeverityCode.NORMAL
    press_code: SeverityCode = SeverityCode.NORMAL
    cond_code: SeverityCode = SeverityCode.NORMAL
    spo2_hypoxia: bool = False
    air_bubble: bool = False
    start_cmd: bool = False
    reset_cmd: bool = False
    stop_cmd: bool = False

    def __post_init__(self) -> None:
        for field_name in _CODE_FIELDS:
            raw = getattr(self, field_name)
            if isinstance(raw, bool):
                raise ValueError(f"{field_name} must be a severity code, got bool")
            try:
                code = SeverityCode(raw)
            except ValueError:
                raise ValueError(f"{field_name} must be one of 0, 1, 2; got {raw!r}") from None
            object.__setattr__(self, field_name, code)

    def with_changes(self, **changes: Any) -> SensorSnapshot:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_jsonable(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible values."""
        return {
            "flow_code": int(self.flow_code),
            "temp_code": int(self.temp_code),
            "press_code": int(self.press_code),
            "cond_code": int(self.cond_code),
            "spo2_hypoxia": self.spo2_hypoxia,
            "air_bubble": self.air_bubble,
            "start_cmd": self.start_cmd,
            "reset_cmd": self.reset_cmd,
            "stop_cmd": self.stop_cmd,
        }


@dataclass(frozen=True, slots=True)
class ActuatorSnapshot:
    """Actuator commands derived for one control cycle."""

    pump_on: bool = False
    safety_clamp_closed: bool = False
    peltier_status: PeltierStatus = PeltierStatus.OFF
    alarm_status: AlarmStatus = AlarmStatus.SILENT
    info_message: str = "System Ready"

    def to_jsonable(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible values."""
        return {
            "pump_on": self.pump_on,
            "safety_clamp_closed": self.safety_clamp_closed,
            "peltier_status": self.peltier_status.value,
            "alarm_status": self.alarm_status.value,
            "info_message": self.info_message,
        }
