"""State to actuator output table."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from hemofsm.domain.models import (
    ActuatorSnapshot,
    AlarmStatus,
    MachineState,
    PeltierStatus,
    SeverityTier,
)


def _running(alarm: AlarmStatus, info: str, peltier: PeltierStatus = PeltierStatus.OFF) -> ActuatorSnapshot:
    return ActuatorSnapshot(
        pump_on=True,
        safety_clamp_closed=False,
        peltier_status=peltier,
        alarm_status=alarm,
        info_message=info,
    )


def _locked(info: str, peltier: PeltierStatus = PeltierStatus.OFF) -> ActuatorSnapshot:
    return ActuatorSnapshot(
        pump_on=False,
        safety_clamp_closed=True,
        peltier_status=peltier,
        alarm_status=AlarmStatus.SIREN_CRITICAL,
        info_message=info,
    )


OUTPUT_TABLE: Mapping[MachineState, ActuatorSnapshot] = MappingProxyType(
    {
        MachineState.IDLE: ActuatorSnapshot(info_message="Standby. Waiting for Start..."),
        MachineState.NORMAL: _running(AlarmStatus.SILENT, "Therapy Running Normally."),
        MachineState.FLOW_WARN: _running(AlarmStatus.BEEP_WARNING, "Adjusting Pump Speed..."),
        MachineState.TEMP_WARN: _running(
            AlarmStatus.BEEP_WARNING,
            "Stabilizing Temperature...",
            peltier=PeltierStatus.ADJUSTING,
        ),
        MachineState.O2_WARN: _running(AlarmStatus.BEEP_WARNING, "Increasing Oxygen Flow..."),
        MachineState.COND_WARN: _running(AlarmStatus.BEEP_WARNING, "Correcting Dialysate Mix..."),
        MachineState.TEMP_CRIT: _locked(
            "DANGER! Temp Critical. System Locked.",
            peltier=PeltierStatus.OFF_SAFETY,
        ),
        MachineState.PRESS_FAIL: _locked("DANGER! Pressure Occlusion. System Locked."),
        MachineState.AIR_DETECT: _locked("EMERGENCY! Air Bubble Detected. System Locked."),
    }
)

_missing = set(MachineState) - set(OUTPUT_TABLE)
if _missing:
    raise RuntimeError(f"output table missing states: {', '.join(sorted(s.name for s in _missing))}")


def derive_outputs(state: MachineState) -> ActuatorSnapshot:
    """Return the full actuator snapshot for a machine state."""
    return OUTPUT_TABLE[state]


def severity_tier(state: MachineState) -> SeverityTier:
    """Map a state onto its display tier."""
    if state == MachineState.IDLE:
        return SeverityTier.IDLE
    if state == MachineState.NORMAL:
        return SeverityTier.NOMINAL
    if state.is_critical:
        return SeverityTier.CRITICAL
    return SeverityTier.WARNING
