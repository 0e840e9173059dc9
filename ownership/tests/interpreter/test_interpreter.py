# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""Running statement programs and attributing diagnostics to statements."""

from ownership import program as P
from ownership.interpreter import Interpreter
from ownership.program_json import program_from_json
from ownership.tracker import OwnershipTracker


def _run(statements, **kwargs):
	prog = program_from_json({"statements": statements}, file="test.json")
	tracker = kwargs.pop("tracker", None)
	return Interpreter(tracker, **kwargs).run(prog)


def test_use_after_move_is_attributed_to_statement():
	result = _run(
		[
			{"op": "declare", "name": "x", "value": {"kind": "text", "data": "hello"}, "line": 1},
			{"op": "move", "source": "x", "into": "y", "line": 2},
			{"op": "use", "target": "x", "line": 3},
		]
	)
	assert [d.code for d in result.errors] == ["use-after-move"]
	diag = result.errors[0]
	assert diag.message == "use after move of 'x'"
	assert (diag.span.file, diag.span.line, diag.span.path) == ("test.json", 3, "2")
	assert [r.name for r in result.drops] == ["y"]
	assert not result.ok


def test_execution_continues_after_error():
	result = _run(
		[
			{"op": "declare", "name": "s", "value": "hi"},
			{"op": "move", "source": "s", "into": "t"},
			{"op": "use", "target": "s"},
			{"op": "use", "target": "t"},
		]
	)
	assert len(result.errors) == 1
	assert result.reads == [("t", "hi")]


def test_stop_on_error_still_unwinds_scopes():
	result = _run(
		[
			{"op": "declare", "name": "a", "value": [1]},
			{
				"op": "scope",
				"body": [
					{"op": "declare", "name": "b", "value": [2]},
					{"op": "use", "target": "missing"},
					{"op": "declare", "name": "c", "value": [3]},
				],
			},
			{"op": "declare", "name": "d", "value": [4]},
		],
		stop_on_error=True,
	)
	assert [d.code for d in result.errors] == ["unknown-binding"]
	assert result.errors[0].span.path == "1.1"
	assert [r.name for r in result.drops] == ["b", "a"]


def test_sequential_exclusive_borrows_in_program():
	result = _run(
		[
			{"op": "declare", "name": "r", "value": [1], "mutable": True},
			{
				"op": "scope",
				"body": [
					{"op": "borrow", "target": "r", "kind": "exclusive", "label": "m"},
					{"op": "push", "target": "m", "value": 2},
				],
			},
			{"op": "borrow", "target": "r", "kind": "exclusive", "label": "m2"},
			{"op": "use", "target": "m2"},
		]
	)
	assert result.ok
	assert result.reads == [("m2", (1, 2))]


def test_reference_held_by_outer_binding_dangles():
	"""`let r; { let x = 5; r = &x; }` is rejected."""
	result = _run(
		[
			{"op": "declare", "name": "r"},
			{
				"op": "scope",
				"body": [
					{"op": "declare", "name": "x", "value": 5},
					{"op": "borrow", "target": "x", "holder": "r", "label": "rx"},
				],
			},
		]
	)
	assert [d.code for d in result.errors] == ["dangling-reference"]
	assert "does not live long enough" in result.errors[0].message


def test_labels_go_out_of_scope_with_their_holder():
	result = _run(
		[
			{"op": "declare", "name": "s", "value": "abc"},
			{"op": "scope", "body": [{"op": "borrow", "target": "s", "label": "r"}]},
			{"op": "use", "target": "r"},
			{"op": "release", "label": "r"},
		]
	)
	assert [d.code for d in result.errors] == ["dangling-reference", "unknown-borrow"]


def test_slice_label_reads_window():
	result = _run(
		[
			{"op": "declare", "name": "s", "value": "hello world"},
			{"op": "slice", "target": "s", "start": 0, "end": 5, "label": "hello"},
			{"op": "slice", "target": "s", "start": 6, "end": 12, "label": "bad"},
			{"op": "use", "target": "hello"},
		]
	)
	assert [d.code for d in result.errors] == ["bounds"]
	assert result.reads == [("hello", "hello")]


def test_move_without_target_drops_immediately():
	result = _run(
		[
			{"op": "declare", "name": "s", "value": "gone"},
			{"op": "move", "source": "s"},
			{"op": "declare", "name": "t", "value": "kept"},
		]
	)
	assert [r.name for r in result.drops] == ["s", "t"]


def test_assign_from_source_and_concat():
	result = _run(
		[
			{"op": "declare", "name": "a", "value": "Hello, "},
			{"op": "declare", "name": "b", "value": "world"},
			{"op": "concat", "left": "a", "right": "b", "into": "c"},
			{"op": "declare", "name": "d", "mutable": True},
			{"op": "assign", "target": "d", "source": "c"},
			{"op": "use", "target": "d"},
			{"op": "use", "target": "a"},
		]
	)
	assert result.reads == [("d", "Hello, world")]
	assert [d.code for d in result.errors] == ["use-after-move"]


def test_permissive_tracker_reports_warnings():
	result = _run(
		[
			{"op": "declare", "name": "s", "value": "x", "mutable": True},
			{"op": "borrow", "target": "s", "label": "r"},
			{"op": "clear", "target": "s"},
		],
		tracker=OwnershipTracker(permissive=True),
	)
	assert result.ok
	assert [(d.code, d.severity) for d in result.diagnostics] == [("borrow-conflict", "warning")]
	assert result.diagnostics[0].span.path == "2"


def test_statement_ir_can_be_built_directly():
	prog = P.Program(
		statements=[
			P.Declare(name="n", value=P.Value("scalar", 1)),
			P.Copy(source="n", into="m"),
			P.Use(target="m"),
			P.Assign(target="n"),
		]
	)
	result = Interpreter().run(prog)
	assert result.reads == [("m", 1)]
	assert [(d.phase, d.code) for d in result.errors] == [("program", "program")]
