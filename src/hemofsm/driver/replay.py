"""Replay recorded sensor frames through a safety controller."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Sequence

import numpy as np
import numpy.typing as npt

from hemofsm.domain.models import SensorSnapshot
from hemofsm.fsm.contracts import CycleResult
from hemofsm.fsm.evaluator import SafetyController
from hemofsm.sensors.quantize import (
    DEFAULT_BAND_POLICIES,
    SensorChannel,
    SeverityBandPolicy,
    quantize_reading,
    quantize_trace,
)


_SNAPSHOT_FIELDS = frozenset(field.name for field in fields(SensorSnapshot))
_FLAG_FIELDS = ("spo2_hypoxia", "air_bubble", "start_cmd", "reset_cmd", "stop_cmd")


@dataclass(frozen=True, slots=True)
class ReplayFrame:
    """Sensor input for one replayed control cycle."""

    sensors: SensorSnapshot
    label: str | None = None


def _frame_from_mapping(
    payload: Mapping[str, Any],
    *,
    index: int,
    policies: Mapping[SensorChannel, SeverityBandPolicy],
) -> ReplayFrame:
    if not isinstance(payload, Mapping):
        raise ValueError(f"frame {index} must be a JSON object")

    values = dict(payload)
    label = values.pop("label", None)
    readings = values.pop("readings", {})
    if not isinstance(readings, Mapping):
        raise ValueError(f"frame {index} readings must be a JSON object")

    unknown = set(values) - _SNAPSHOT_FIELDS
    if unknown:
        raise ValueError(f"frame {index} has unknown fields: {', '.join(sorted(unknown))}")

    for raw_channel, reading in readings.items():
        try:
            channel = SensorChannel(raw_channel)
        except ValueError:
            raise ValueError(f"frame {index} has unknown reading channel: {raw_channel}") from None
        if channel.code_field in values:
            raise ValueError(f"frame {index} sets both {channel.code_field} and a {channel.value} reading")
        if isinstance(reading, bool) or not isinstance(reading, (int, float)):
            raise ValueError(f"frame {index} reading {raw_channel} must be a number")
        values[channel.code_field] = quantize_reading(float(reading), policies[channel])

    for flag in _FLAG_FIELDS:
        if flag in values and not isinstance(values[flag], bool):
            raise ValueError(f"frame {index} field {flag} must be a boolean")

    return ReplayFrame(sensors=SensorSnapshot(**values), label=label)


def load_replay_frames(
    path: Path,
    *,
    policies: Mapping[SensorChannel, SeverityBandPolicy] = DEFAULT_BAND_POLICIES,
) -> tuple[ReplayFrame, ...]:
    """Load replay frames from a JSON document with a top-level `frames` list.

    Each frame holds `SensorSnapshot` fields; omitted fields default to
    normal/false. A frame may give raw channel values under `readings`,
    which are quantized with `policies`.
    """
    if not path.exists():
        raise FileNotFoundError(f"replay file not found: {path}")

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict) or not isinstance(payload.get("frames"), list):
        raise ValueError("replay file must contain a top-level 'frames' list")

    return tuple(
        _frame_from_mapping(frame, index=index, policies=policies)
        for index, frame in enumerate(payload["frames"])
    )


def frames_from_trace(
    readings: Mapping[SensorChannel, npt.ArrayLike],
    *,
    flags: Mapping[str, npt.ArrayLike] | None = None,
    policies: Mapping[SensorChannel, SeverityBandPolicy] = DEFAULT_BAND_POLICIES,
) -> tuple[ReplayFrame, ...]:
    """Build frames from aligned per-channel reading traces and flag traces."""
    codes: dict[str, npt.NDArray[np.int8]] = {}
    for raw_channel, trace in readings.items():
        try:
            channel = SensorChannel(raw_channel)
        except ValueError:
            raise ValueError(f"unknown reading channel: {raw_channel}") from None
        codes[channel.code_field] = quantize_trace(trace, policies[channel])
    bools: dict[str, npt.NDArray[np.bool_]] = {}
    for name, trace in (flags or {}).items():
        if name not in _FLAG_FIELDS:
            raise ValueError(f"unknown flag trace: {name}")
        flag_trace = np.asarray(trace, dtype=np.bool_)
        if flag_trace.ndim != 1:
            raise ValueError(f"flag trace {name} must be 1D")
        bools[name] = flag_trace

    lengths = {arr.shape[0] for arr in (*codes.values(), *bools.values())}
    if not lengths:
        raise ValueError("at least one reading or flag trace is required")
    if len(lengths) != 1:
        raise ValueError("all traces must have the same length")
    (num_frames,) = lengths

    frames: list[ReplayFrame] = []
    for idx in range(num_frames):
        values: dict[str, Any] = {name: int(arr[idx]) for name, arr in codes.items()}
        values.update({name: bool(arr[idx]) for name, arr in bools.items()})
        frames.append(ReplayFrame(sensors=SensorSnapshot(**values)))
    return tuple(frames)


def replay(
    frames: Sequence[ReplayFrame],
    controller: SafetyController | None = None,
) -> tuple[CycleResult, ...]:
    """Run one controller cycle per frame and return every cycle result."""
    active = controller or SafetyController()
    return tuple(active.step(frame.sensors) for frame in frames)


def timeline_to_jsonable(
    frames: Sequence[ReplayFrame],
    results: Sequence[CycleResult],
) -> dict[str, Any]:
    """Build a JSON report of a replay run."""
    if len(frames) != len(results):
        raise ValueError("frames and results must have the same length")

    cycles: list[dict[str, Any]] = []
    for idx, (frame, result) in enumerate(zip(frames, results, strict=True)):
        entry = result.to_jsonable()
        entry["cycle"] = idx + 1
        if frame.label is not None:
            entry["label"] = frame.label
        cycles.append(entry)

    final_state = results[-1].state.name if results else None
    return {
        "num_cycles": len(results),
        "final_state": final_state,
        "critical_entries": sum(1 for result in results if result.entered_critical),
        "cycles": cycles,
    }
