"""Tests for the console simulator CLI."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from hemofsm.cli import simulator
from hemofsm.domain.models import MachineState


def test_keys_mode_prints_status_and_final_state(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = simulator.main(["--keys", "1 5 4 7"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "TEMP_WARN [WARNING]" in out
    assert "TEMP_CRIT [CRITICAL]" in out
    assert "cycles: 4" in out
    assert "final_state: TEMP_CRIT" in out


def test_keys_mode_reset_writes_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    report_path = tmp_path / "out" / "timeline.json"

    exit_code = simulator.main(["--keys", "1,2,0", "--report-path", str(report_path)])

    assert exit_code == 0
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["num_cycles"] == 3
    assert payload["final_state"] == "IDLE"
    assert [cycle["label"] for cycle in payload["cycles"]] == ["START", "AIR_BUBBLE", "RESET"]
    assert payload["cycles"][2]["actuators"]["info_message"] == "SYSTEM RESET. Going to IDLE."
    assert payload["cycles"][2]["actuators"]["safety_clamp_closed"] is True
    assert f"report: {report_path}" in capsys.readouterr().out


def test_rederive_on_reset_flag_opens_clamp(tmp_path: Path) -> None:
    report_path = tmp_path / "timeline.json"

    exit_code = simulator.main(["--keys", "2 0", "--rederive-on-reset", "--report-path", str(report_path)])

    assert exit_code == 0
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["cycles"][1]["actuators"]["safety_clamp_closed"] is False


def test_trace_mode_replays_frames(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    trace = tmp_path / "frames.json"
    trace.write_text(
        json.dumps({"frames": [{"start_cmd": True}, {"press_code": 2}, {}]}),
        encoding="utf-8",
    )

    exit_code = simulator.main(["--trace", str(trace)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "PRESS_FAIL [CRITICAL]" in out
    assert "final_state: PRESS_FAIL" in out


def test_invalid_key_returns_error_code(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = simulator.main(["--keys", "1 8"])

    assert exit_code == 2
    assert "unknown panel key" in capsys.readouterr().err


def test_missing_trace_returns_error_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = simulator.main(["--trace", str(tmp_path / "missing.json")])

    assert exit_code == 2
    assert "replay file not found" in capsys.readouterr().err


def test_interactive_mode_reads_keys_until_quit() -> None:
    args = simulator.build_parser().parse_args([])
    stdin = io.StringIO("1\n6\nq\n3\n")
    out = io.StringIO()

    run = simulator.run_simulator_from_args(args, stdin=stdin, out=out, err=io.StringIO())

    assert [result.state for result in run.results] == [MachineState.NORMAL, MachineState.FLOW_WARN]
    assert "SENSOR INJECTION PANEL" in out.getvalue()
    assert run.report_path is None


def test_interactive_mode_stops_at_end_of_input() -> None:
    args = simulator.build_parser().parse_args([])

    run = simulator.run_simulator_from_args(args, stdin=io.StringIO("1\n"), out=io.StringIO())

    assert len(run.results) == 1


def test_interactive_unknown_key_still_runs_cycle_with_commands_cleared() -> None:
    args = simulator.build_parser().parse_args([])
    stdin = io.StringIO("1\n9\n8\nq\n")
    err = io.StringIO()

    run = simulator.run_simulator_from_args(args, stdin=stdin, out=io.StringIO(), err=err)

    assert [result.state for result in run.results] == [
        MachineState.NORMAL,
        MachineState.IDLE,
        MachineState.IDLE,
    ]
    assert run.results[2].sensors.stop_cmd is False
    assert run.results[2].sensors.start_cmd is False
    assert run.frames[2].label is None
    assert "unknown panel key '8'" in err.getvalue()
