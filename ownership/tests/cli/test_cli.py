# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""ownership-check command line: exit codes, human and JSON output."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ownership.cli import main as check_main


def _write_program(path: Path, statements: list[dict]) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(json.dumps({"statements": statements}), encoding="utf-8")
	return path


def _run_json(argv: list[str], capsys: pytest.CaptureFixture[str]) -> tuple[int, dict]:
	rc = check_main([*argv, "--json"])
	out = capsys.readouterr().out
	payload = json.loads(out) if out.strip() else {}
	return rc, payload


_USE_AFTER_MOVE = [
	{"op": "declare", "name": "x", "value": "hello", "line": 1},
	{"op": "move", "source": "x", "into": "y", "line": 2},
	{"op": "use", "target": "x", "line": 3, "column": 1},
]


def test_clean_program_exits_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	prog = _write_program(tmp_path / "ok.json", [{"op": "declare", "name": "x", "value": 1}, {"op": "use", "target": "x"}])
	assert check_main([str(prog)]) == 0
	captured = capsys.readouterr()
	assert captured.err == ""


def test_human_output_on_stderr(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	prog = _write_program(tmp_path / "bad.json", _USE_AFTER_MOVE)
	assert check_main([str(prog)]) == 1
	err = capsys.readouterr().err
	assert f"{prog}:3:1: error: [use-after-move] use after move of 'x' (statement 2)" in err


def test_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	prog = _write_program(tmp_path / "bad.json", _USE_AFTER_MOVE)
	rc, payload = _run_json([str(prog)], capsys)
	assert rc == 1
	assert payload["exit_code"] == 1
	diags = payload["diagnostics"]
	assert len(diags) == 1
	assert diags[0]["code"] == "use-after-move"
	assert diags[0]["phase"] == "ownership"
	assert diags[0]["file"] == str(prog)
	assert diags[0]["line"] == 3
	assert "traces" not in payload


def test_permissive_reports_warnings_and_succeeds(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	prog = _write_program(tmp_path / "bad.json", _USE_AFTER_MOVE)
	rc, payload = _run_json([str(prog), "--permissive"], capsys)
	assert rc == 0
	assert [d["severity"] for d in payload["diagnostics"]] == ["warning"]


def test_trace_includes_drops_and_reads(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	prog = _write_program(
		tmp_path / "trace.json",
		[
			{"op": "declare", "name": "a", "value": "first"},
			{"op": "declare", "name": "b", "value": [1, 2]},
			{"op": "use", "target": "b"},
		],
	)
	rc, payload = _run_json([str(prog), "--trace"], capsys)
	assert rc == 0
	trace = payload["traces"][0]
	assert [d["name"] for d in trace["drops"]] == ["b", "a"]
	assert trace["reads"] == [{"target": "b", "value": [1, 2]}]


def test_trace_human_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	prog = _write_program(tmp_path / "trace.json", [{"op": "declare", "name": "a", "value": 7}, {"op": "use", "target": "a"}])
	assert check_main([str(prog), "--trace"]) == 0
	out = capsys.readouterr().out
	assert f"{prog}: read a = 7" in out
	assert f"{prog}: drop a" in out


def test_unreadable_program_is_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	broken = tmp_path / "broken.json"
	broken.write_text("[", encoding="utf-8")
	missing = tmp_path / "missing.json"
	rc, payload = _run_json([str(broken), str(missing)], capsys)
	assert rc == 1
	assert [d["phase"] for d in payload["diagnostics"]] == ["program", "program"]
	assert payload["diagnostics"][1]["file"] == str(missing)


def test_multiple_programs_run_independently(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	first = _write_program(tmp_path / "one.json", [{"op": "declare", "name": "x", "value": 1}])
	second = _write_program(tmp_path / "two.json", [{"op": "use", "target": "x"}])
	rc, payload = _run_json([str(first), str(second)], capsys)
	assert rc == 1
	assert [(d["file"], d["code"]) for d in payload["diagnostics"]] == [(str(second), "unknown-binding")]


def test_permissive_covers_reference_resolution(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	"""Re-borrowing through a released reference only warns under --permissive."""
	prog = _write_program(
		tmp_path / "reborrow.json",
		[
			{"op": "declare", "name": "s", "value": "text"},
			{"op": "borrow", "target": "s", "label": "r"},
			{"op": "release", "label": "r"},
			{"op": "borrow", "target": "r"},
		],
	)
	rc, payload = _run_json([str(prog), "--permissive"], capsys)
	assert rc == 0
	assert payload["exit_code"] == 0
	assert [(d["code"], d["severity"]) for d in payload["diagnostics"]] == [("dangling-reference", "warning")]
	rc, payload = _run_json([str(prog)], capsys)
	assert rc == 1
	assert [d["severity"] for d in payload["diagnostics"]] == ["error"]


def test_module_entrypoint_runs_cli():
	import ownership.__main__ as entry

	assert entry.main is check_main
