#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
ownership-check: run JSON ownership programs and report violations.

Exit code is 1 when any program produced an error-severity diagnostic (or
could not be loaded), 0 otherwise. With --json a single document
`{"exit_code": ..., "diagnostics": [...]}` is printed on stdout; otherwise
diagnostics go to stderr as `file:line:col: severity: [code] message`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ownership.core.diagnostics import Diagnostic
from ownership.core.span import Span
from ownership.interpreter import Interpreter, RunResult
from ownership.program_json import ProgramFormatError, load_program
from ownership.tracker import OwnershipTracker

logger = logging.getLogger("ownership.cli")


def _configure_logging(verbosity: int) -> None:
	if verbosity <= 0:
		return
	level = logging.INFO if verbosity == 1 else logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _format_human(diag: Diagnostic, source: Path) -> str:
	file = diag.span.file or str(source)
	loc = diag.span.format()
	where = f" (statement {diag.span.path})" if diag.span.path else ""
	msg = f"[{diag.code}] {diag.message}" if diag.code else diag.message
	return f"{file}:{loc}: {diag.severity}: {msg}{where}"


def _trace_json(result: RunResult, source: Path) -> dict[str, Any]:
	return {
		"file": str(source),
		"drops": [
			{"scope": r.scope_id, "binding": r.binding_id, "name": r.name, "resource": r.rid}
			for r in result.drops
		],
		"reads": [{"target": name, "value": value} for name, value in result.reads],
	}


def _run_one(path: Path, args: argparse.Namespace) -> tuple[list[Diagnostic], RunResult | None]:
	try:
		prog = load_program(path)
	except (ProgramFormatError, OSError) as err:
		logger.info("could not load %s: %s", path, err)
		return [Diagnostic(message=str(err), code="program", phase="program", span=Span(file=str(path)))], None
	interp = Interpreter(OwnershipTracker(permissive=args.permissive), stop_on_error=args.stop_on_error)
	result = interp.run(prog)
	return result.diagnostics, result


def main(argv: list[str] | None = None) -> int:
	"""
	Run each program with a fresh tracker and report every diagnostic.

	--permissive reports violations as warnings (the run never fails on
	them); --trace additionally prints the drop log and observed reads.
	"""
	parser = argparse.ArgumentParser(prog="ownership-check", description="Check ownership programs")
	parser.add_argument("program", type=Path, nargs="+", help="Path(s) to JSON ownership program(s)")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	parser.add_argument(
		"--permissive",
		action="store_true",
		help="Record violations instead of raising; they are reported as warnings",
	)
	parser.add_argument("--stop-on-error", action="store_true", help="Stop each program at its first error")
	parser.add_argument("--trace", action="store_true", help="Also print the drop log and observed reads")
	parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug)")
	args = parser.parse_args(argv)

	_configure_logging(args.verbose)

	exit_code = 0
	payload_diags: list[dict[str, Any]] = []
	traces: list[dict[str, Any]] = []
	for path in args.program:
		diags, result = _run_one(path, args)
		if any(d.severity == "error" for d in diags):
			exit_code = 1
		if args.json:
			payload_diags.extend(d.to_json(str(path)) for d in diags)
			if args.trace and result is not None:
				traces.append(_trace_json(result, path))
			continue
		for d in diags:
			print(_format_human(d, path), file=sys.stderr)
		if args.trace and result is not None:
			for name, value in result.reads:
				print(f"{path}: read {name} = {value!r}")
			for r in result.drops:
				print(f"{path}: drop {r.name} (resource #{r.rid}) at scope {r.scope_id}")

	if args.json:
		payload: dict[str, Any] = {"exit_code": exit_code, "diagnostics": payload_diags}
		if args.trace:
			payload["traces"] = traces
		print(json.dumps(payload))
	return exit_code


__all__ = ["main"]
