"""Console simulator driving the hemodialysis safety controller."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, TextIO

from hemofsm.driver.panel import apply_panel_key, parse_panel_key, render_menu, render_status
from hemofsm.driver.replay import ReplayFrame, load_replay_frames, replay, timeline_to_jsonable
from hemofsm.fsm.contracts import ControllerPolicy, CycleResult
from hemofsm.fsm.evaluator import SafetyController

BANNER = "\n".join(
    [
        "=" * 52,
        "   SMART HEMODIALYSIS CONTROL SYSTEM SIMULATION",
        "=" * 52,
    ]
)


@dataclass(frozen=True, slots=True)
class SimulatorRun:
    """Frames and cycle results produced by one simulator execution."""

    frames: tuple[ReplayFrame, ...]
    results: tuple[CycleResult, ...]
    report_path: Path | None


def build_parser() -> argparse.ArgumentParser:
    """Create CLI parser for the console simulator."""
    parser = argparse.ArgumentParser(
        prog="hemofsm-simulator",
        description=(
            "Drive the hemodialysis safety state machine from panel key presses or a recorded "
            "frame trace and print the machine status."
        ),
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--keys",
        type=str,
        default=None,
        help="Whitespace or comma separated panel keys to press in order, e.g. '1 5 7 0'.",
    )
    source.add_argument(
        "--trace",
        type=Path,
        default=None,
        help="JSON file with a top-level 'frames' list to replay, one cycle per frame.",
    )
    parser.add_argument(
        "--rederive-on-reset",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Derive idle actuator outputs on reset instead of keeping the previous outputs.",
    )
    parser.add_argument(
        "--report-path",
        type=Path,
        default=None,
        help="Optional path for a JSON timeline of every evaluated cycle.",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        default="WARNING",
        help="Log level for controller transition logging.",
    )
    return parser


def _split_keys(raw: str) -> list[str]:
    return [token for token in raw.replace(",", " ").split() if token]


def _press(controller: SafetyController, raw_key: str, out: TextIO) -> tuple[ReplayFrame, CycleResult]:
    key = parse_panel_key(raw_key)
    sensors = apply_panel_key(controller.sensors, key)
    result = controller.step(sensors)
    print(f"\n> key {key.value} ({key.name})", file=out)
    print(render_status(result.state, result.actuators, result.sensors), file=out)
    return ReplayFrame(sensors=sensors, label=key.name), result


def _idle_cycle(controller: SafetyController, out: TextIO) -> tuple[ReplayFrame, CycleResult]:
    sensors = controller.sensors.with_changes(start_cmd=False, stop_cmd=False, reset_cmd=False)
    result = controller.step(sensors)
    print(render_status(result.state, result.actuators, result.sensors), file=out)
    return ReplayFrame(sensors=sensors), result


def _run_interactive(
    controller: SafetyController,
    stdin: TextIO,
    out: TextIO,
    err: TextIO,
) -> list[tuple[ReplayFrame, CycleResult]]:
    """Read panel keys until `q` or end of input.

    An unknown key still runs one cycle with the one-shot commands cleared.
    """
    steps: list[tuple[ReplayFrame, CycleResult]] = []
    print(BANNER, file=out)
    print(render_status(controller.current_state(), controller.actuators, controller.sensors), file=out)
    while True:
        print("\n" + render_menu(), file=out)
        print("\nInput Command > ", end="", file=out)
        line = stdin.readline()
        if not line or line.strip().lower() == "q":
            break
        try:
            steps.append(_press(controller, line, out))
        except ValueError as exc:
            print(f"[ERROR] {exc}", file=err)
            steps.append(_idle_cycle(controller, out))
    return steps


def run_simulator_from_args(
    args: argparse.Namespace,
    *,
    stdin: TextIO | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> SimulatorRun:
    """Execute one simulator session from parsed CLI args."""
    stream_in = stdin or sys.stdin
    stream_out = out or sys.stdout
    stream_err = err or sys.stderr
    controller = SafetyController(ControllerPolicy(rederive_on_reset=bool(args.rederive_on_reset)))

    if args.trace is not None:
        frames = load_replay_frames(args.trace)
        results = replay(frames, controller)
        print(BANNER, file=stream_out)
        print(render_status(controller.current_state(), controller.actuators, controller.sensors), file=stream_out)
    else:
        if args.keys is not None:
            steps = [_press(controller, key, stream_out) for key in _split_keys(args.keys)]
        else:
            steps = _run_interactive(controller, stream_in, stream_out, stream_err)
        frames = tuple(frame for frame, _ in steps)
        results = tuple(result for _, result in steps)

    report_path: Path | None = None
    if args.report_path is not None:
        report_path = args.report_path
        report_path.parent.mkdir(parents=True, exist_ok=True)
        payload = timeline_to_jsonable(frames, results)
        report_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    return SimulatorRun(frames=tuple(frames), results=tuple(results), report_path=report_path)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run = run_simulator_from_args(args)
    except Exception as exc:
        print(f"[ERROR] simulator failed: {exc}", file=sys.stderr)
        return 2

    final_state = run.results[-1].state.name if run.results else "IDLE"
    print(f"\ncycles: {len(run.results)}")
    print(f"final_state: {final_state}")
    if run.report_path is not None:
        print(f"report: {run.report_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
