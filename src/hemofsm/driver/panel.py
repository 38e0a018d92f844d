"""Sensor injection panel and text status rendering for simulator hosts."""

from __future__ import annotations

from enum import StrEnum

from hemofsm.domain.models import ActuatorSnapshot, MachineState, SensorSnapshot, SeverityCode
from hemofsm.fsm.evaluator import reset_sensors
from hemofsm.fsm.outputs import severity_tier


class PanelKey(StrEnum):
    """Keys of the operator injection panel."""

    START = "1"
    AIR_BUBBLE = "2"
    PRESSURE_FAIL = "3"
    TEMP_CRITICAL = "4"
    TEMP_WARNING = "5"
    FLOW_WARNING = "6"
    CLEAR_SENSORS = "7"
    STOP = "9"
    RESET = "0"


PANEL_LABELS: dict[PanelKey, str] = {
    PanelKey.START: "START Machine",
    PanelKey.AIR_BUBBLE: "Simulate: AIR BUBBLE (Fatal)",
    PanelKey.PRESSURE_FAIL: "Simulate: PRESSURE FAIL (Fatal)",
    PanelKey.TEMP_CRITICAL: "Simulate: TEMP CRITICAL (Fatal)",
    PanelKey.TEMP_WARNING: "Simulate: Temp Warning (Minor)",
    PanelKey.FLOW_WARNING: "Simulate: Flow Warning (Minor)",
    PanelKey.CLEAR_SENSORS: "Clear Sensors (Normal Condition)",
    PanelKey.STOP: "STOP Machine",
    PanelKey.RESET: "RESET SYSTEM (Unlock Critical)",
}


def parse_panel_key(raw: str) -> PanelKey:
    """Parse one panel key, raising `ValueError` for unknown input."""
    token = raw.strip()
    try:
        return PanelKey(token)
    except ValueError:
        valid = ", ".join(key.value for key in PanelKey)
        raise ValueError(f"unknown panel key {token!r}; expected one of: {valid}") from None


def apply_panel_key(sensors: SensorSnapshot, key: PanelKey | str) -> SensorSnapshot:
    """Clear the one-shot commands, then apply one panel key press."""
    pressed = key if isinstance(key, PanelKey) else parse_panel_key(key)
    base = sensors.with_changes(start_cmd=False, stop_cmd=False, reset_cmd=False)

    if pressed == PanelKey.START:
        return base.with_changes(start_cmd=True)
    if pressed == PanelKey.AIR_BUBBLE:
        return base.with_changes(air_bubble=True)
    if pressed == PanelKey.PRESSURE_FAIL:
        return base.with_changes(press_code=SeverityCode.CRITICAL)
    if pressed == PanelKey.TEMP_CRITICAL:
        return base.with_changes(temp_code=SeverityCode.CRITICAL)
    if pressed == PanelKey.TEMP_WARNING:
        return base.with_changes(temp_code=SeverityCode.WARNING)
    if pressed == PanelKey.FLOW_WARNING:
        return base.with_changes(flow_code=SeverityCode.WARNING)
    if pressed == PanelKey.CLEAR_SENSORS:
        return reset_sensors(base)
    if pressed == PanelKey.STOP:
        return base.with_changes(stop_cmd=True)
    return base.with_changes(reset_cmd=True)


def render_menu() -> str:
    """Render the injection panel menu."""
    lines = ["--- SENSOR INJECTION PANEL ---"]
    lines.extend(f"[{key.value}] {label}" for key, label in PANEL_LABELS.items())
    lines.append("[q] Quit")
    return "\n".join(lines)


def render_status(state: MachineState, actuators: ActuatorSnapshot, sensors: SensorSnapshot) -> str:
    """Render a text status block for one machine."""
    tier = severity_tier(state)
    pump = "[ON] Running" if actuators.pump_on else "[OFF] Stopped"
    clamp = "[CLOSED] BLOCKED" if actuators.safety_clamp_closed else "[OPEN] Flowing"
    lines = [
        f"CURRENT STATE : {state.name} [{tier.value.upper()}]",
        f"INFO          : {actuators.info_message}",
        "",
        "--- ACTUATOR STATUS ---",
        f"BLOOD PUMP    : {pump}",
        f"SAFETY CLAMP  : {clamp}",
        f"PELTIER       : {actuators.peltier_status.value}",
        f"ALARM         : {actuators.alarm_status.value}",
        "",
        "--- SENSOR INPUTS ---",
        f"Air Bubble    : {sensors.air_bubble}",
        f"Pressure Code : {int(sensors.press_code)} ({sensors.press_code.name})",
        f"Temp Code     : {int(sensors.temp_code)} ({sensors.temp_code.name})",
        f"Flow Code     : {int(sensors.flow_code)} ({sensors.flow_code.name})",
        f"Cond Code     : {int(sensors.cond_code)} ({sensors.cond_code.name})",
        f"SpO2 Hypoxia  : {sensors.spo2_hypoxia}",
    ]
    return "\n".join(lines)
