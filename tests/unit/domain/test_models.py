"""Tests for sensor/actuator value objects and machine state classes."""

from __future__ import annotations

import pytest

from hemofsm.domain.models import (
    ActuatorSnapshot,
    AlarmStatus,
    MachineState,
    PeltierStatus,
    SensorSnapshot,
    SeverityCode,
)


def test_machine_state_partitions_into_idle_operational_and_critical() -> None:
    critical = {state for state in MachineState if state.is_critical}
    operational = {state for state in MachineState if state.is_operational}

    assert critical == {MachineState.TEMP_CRIT, MachineState.PRESS_FAIL, MachineState.AIR_DETECT}
    assert operational == {
        MachineState.NORMAL,
        MachineState.FLOW_WARN,
        MachineState.TEMP_WARN,
        MachineState.O2_WARN,
        MachineState.COND_WARN,
    }
    assert not MachineState.IDLE.is_critical
    assert not MachineState.IDLE.is_operational


def test_sensor_snapshot_defaults_are_all_clear() -> None:
    sensors = SensorSnapshot()

    assert sensors.flow_code == SeverityCode.NORMAL
    assert sensors.press_code == SeverityCode.NORMAL
    assert not sensors.air_bubble
    assert not sensors.start_cmd
    assert not sensors.stop_cmd


def test_sensor_snapshot_coerces_plain_integer_codes() -> None:
    sensors = SensorSnapshot(temp_code=2, flow_code=1)  # type: ignore[arg-type]

    assert sensors.temp_code is SeverityCode.CRITICAL
    assert sensors.flow_code is SeverityCode.WARNING


@pytest.mark.parametrize("bad_code", [3, -1, "warn"])
def test_sensor_snapshot_rejects_out_of_range_codes(bad_code: object) -> None:
    with pytest.raises(ValueError, match="press_code"):
        SensorSnapshot(press_code=bad_code)  # type: ignore[arg-type]


def test_sensor_snapshot_rejects_bool_codes() -> None:
    with pytest.raises(ValueError, match="cond_code"):
        SensorSnapshot(cond_code=True)  # type: ignore[arg-type]


def test_with_changes_returns_new_snapshot() -> None:
    original = SensorSnapshot()
    changed = original.with_changes(air_bubble=True, press_code=2)

    assert changed.air_bubble is True
    assert changed.press_code is SeverityCode.CRITICAL
    assert original.air_bubble is False


def test_actuator_snapshot_power_on_defaults() -> None:
    actuators = ActuatorSnapshot()

    assert actuators.pump_on is False
    assert actuators.safety_clamp_closed is False
    assert actuators.peltier_status == PeltierStatus.OFF
    assert actuators.alarm_status == AlarmStatus.SILENT
    assert actuators.info_message == "System Ready"


def test_snapshots_serialize_to_plain_values() -> None:
    sensors = SensorSnapshot(temp_code=SeverityCode.WARNING, stop_cmd=True)
    actuators = ActuatorSnapshot(alarm_status=AlarmStatus.BEEP_WARNING)

    assert sensors.to_jsonable()["temp_code"] == 1
    assert sensors.to_jsonable()["stop_cmd"] is True
    assert actuators.to_jsonable()["alarm_status"] == "BEEP (Warning)"
