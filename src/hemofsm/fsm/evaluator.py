"""Deterministic safety state machine for hemodialysis control cycles."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import assert_never

from hemofsm.domain.models import ActuatorSnapshot, MachineState, SensorSnapshot, SeverityCode
from hemofsm.fsm.contracts import ControllerPolicy, CycleResult, EvaluationStage
from hemofsm.fsm.outputs import derive_outputs

logger = logging.getLogger(__name__)

RESET_MESSAGE = "SYSTEM RESET. Going to IDLE."

_DEFAULT_POLICY = ControllerPolicy()


def reset_sensors(sensors: SensorSnapshot) -> SensorSnapshot:
    """Clear sensor codes, flags and the start/reset commands.

    `stop_cmd` is left untouched.
    """
    return replace(
        sensors,
        air_bubble=False,
        press_code=SeverityCode.NORMAL,
        temp_code=SeverityCode.NORMAL,
        flow_code=SeverityCode.NORMAL,
        cond_code=SeverityCode.NORMAL,
        spo2_hypoxia=False,
        start_cmd=False,
        reset_cmd=False,
    )


def _fatal_override(sensors: SensorSnapshot) -> tuple[MachineState, str] | None:
    if sensors.air_bubble:
        return MachineState.AIR_DETECT, "air bubble detected"
    if sensors.press_code == SeverityCode.CRITICAL:
        return MachineState.PRESS_FAIL, "pressure code critical"
    if sensors.temp_code == SeverityCode.CRITICAL:
        return MachineState.TEMP_CRIT, "temperature code critical"
    return None


def _resolve_running(sensors: SensorSnapshot) -> tuple[MachineState, str]:
    if sensors.stop_cmd:
        return MachineState.IDLE, "stop command"
    if sensors.flow_code == SeverityCode.WARNING:
        return MachineState.FLOW_WARN, "flow code warning"
    if sensors.temp_code == SeverityCode.WARNING:
        return MachineState.TEMP_WARN, "temperature code warning"
    if sensors.spo2_hypoxia:
        return MachineState.O2_WARN, "SpO2 hypoxia"
    if sensors.cond_code == SeverityCode.WARNING:
        return MachineState.COND_WARN, "conductivity code warning"
    return MachineState.NORMAL, "no warning condition"


def _resolve_operational(state: MachineState, sensors: SensorSnapshot) -> tuple[MachineState, str]:
    match state:
        case MachineState.IDLE:
            if sensors.start_cmd:
                return MachineState.NORMAL, "start command"
            return MachineState.IDLE, "waiting for start command"
        case (
            MachineState.NORMAL
            | MachineState.FLOW_WARN
            | MachineState.TEMP_WARN
            | MachineState.O2_WARN
            | MachineState.COND_WARN
        ):
            return _resolve_running(sensors)
        case MachineState.TEMP_CRIT | MachineState.PRESS_FAIL | MachineState.AIR_DETECT:
            return state, "critical state latched"
        case _:
            assert_never(state)


def evaluate(
    state: MachineState,
    sensors: SensorSnapshot,
    *,
    previous: ActuatorSnapshot | None = None,
    policy: ControllerPolicy | None = None,
) -> CycleResult:
    """Run one control cycle and return the next state with its actuators.

    Stages run in priority order and the first one that applies decides the
    next state: reset, critical latch, fatal override, then operational
    resolution. Actuators are derived from the resulting state on every path
    except the reset path, which by default keeps `previous` and only
    replaces its info message.
    """
    active_policy = policy or _DEFAULT_POLICY

    if sensors.reset_cmd:
        if active_policy.rederive_on_reset:
            actuators = replace(derive_outputs(MachineState.IDLE), info_message=RESET_MESSAGE)
        else:
            actuators = replace(previous or ActuatorSnapshot(), info_message=RESET_MESSAGE)
        return CycleResult(
            previous_state=state,
            state=MachineState.IDLE,
            actuators=actuators,
            sensors=reset_sensors(sensors),
            stage=EvaluationStage.RESET,
            reason="reset command",
        )

    if state.is_critical:
        next_state, reason = state, "critical state latched"
        stage = EvaluationStage.LATCHED
    else:
        override = _fatal_override(sensors)
        if override is not None:
            next_state, reason = override
            stage = EvaluationStage.FATAL_OVERRIDE
        else:
            next_state, reason = _resolve_operational(state, sensors)
            stage = EvaluationStage.OPERATIONAL

    return CycleResult(
        previous_state=state,
        state=next_state,
        actuators=derive_outputs(next_state),
        sensors=sensors,
        stage=stage,
        reason=reason,
    )


class SafetyController:
    """Own the machine state across cycles and evaluate sensor snapshots."""

    def __init__(self, policy: ControllerPolicy | None = None) -> None:
        self._policy = policy or _DEFAULT_POLICY
        self._state = MachineState.IDLE
        self._actuators = ActuatorSnapshot()
        self._sensors = SensorSnapshot()
        self._cycle_count = 0

    @property
    def policy(self) -> ControllerPolicy:
        return self._policy

    @property
    def actuators(self) -> ActuatorSnapshot:
        """Actuator commands produced by the most recent cycle."""
        return self._actuators

    @property
    def sensors(self) -> SensorSnapshot:
        """Sensor snapshot as left by the most recent cycle."""
        return self._sensors

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    def current_state(self) -> MachineState:
        """Return the latched machine state."""
        return self._state

    def reset_sensors(self) -> SensorSnapshot:
        """Apply the sensor reset to the held snapshot without changing state."""
        self._sensors = reset_sensors(self._sensors)
        return self._sensors

    def step(self, sensors: SensorSnapshot) -> CycleResult:
        """Evaluate one cycle and commit its state and actuators."""
        result = evaluate(self._state, sensors, previous=self._actuators, policy=self._policy)
        self._cycle_count += 1
        self._state = result.state
        self._actuators = result.actuators
        self._sensors = result.sensors

        if result.stage == EvaluationStage.RESET:
            logger.warning(
                "cycle %d: reset from %s to %s",
                self._cycle_count,
                result.previous_state.name,
                result.state.name,
            )
        elif result.entered_critical:
            logger.critical(
                "cycle %d: %s -> %s (%s), pump stopped and clamp closed",
                self._cycle_count,
                result.previous_state.name,
                result.state.name,
                result.reason,
            )
        elif result.stage == EvaluationStage.LATCHED:
            logger.debug("cycle %d: %s latched", self._cycle_count, result.state.name)
        elif result.changed:
            logger.info(
                "cycle %d: %s -> %s (%s)",
                self._cycle_count,
                result.previous_state.name,
                result.state.name,
                result.reason,
            )
        return result
