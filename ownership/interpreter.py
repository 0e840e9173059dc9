#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Program interpreter: runs a statement tree against an OwnershipTracker.

Violations do not stop the run. Each one becomes a Diagnostic attributed to
the statement that introduced it, and execution continues with the next
statement (the rejected statement had no effect). With `stop_on_error` the
first error ends the run; open scopes are still unwound so teardown happens
on every path.

Borrow labels are scoped like reference bindings: a label lives in the frame
that holds its borrow and disappears when that frame exits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ownership import program as P
from ownership.borrows import BorrowId, BorrowRef
from ownership.core.diagnostics import Diagnostic
from ownership.core.span import Span
from ownership.errors import OwnershipError, UnknownBorrow
from ownership.scopes import DropRecord
from ownership.tracker import OwnershipTracker, Target

logger = logging.getLogger("ownership.interpreter")


class _Halt(Exception):
	"""Internal: unwind the run after the first error (stop_on_error)."""


@dataclass
class RunResult:
	"""Outcome of one program run."""

	diagnostics: List[Diagnostic] = field(default_factory=list)
	drops: List[DropRecord] = field(default_factory=list)
	reads: List[Tuple[str, Any]] = field(default_factory=list)

	@property
	def errors(self) -> List[Diagnostic]:
		return [d for d in self.diagnostics if d.severity == "error"]

	@property
	def ok(self) -> bool:
		return not self.errors


class Interpreter:
	"""Executes ownership programs statement by statement."""

	def __init__(self, tracker: Optional[OwnershipTracker] = None, *, stop_on_error: bool = False) -> None:
		self.tracker = tracker if tracker is not None else OwnershipTracker()
		self.stop_on_error = stop_on_error
		self.diagnostics: List[Diagnostic] = []
		self.reads: List[Tuple[str, Any]] = []
		# One label map per open scope, parallel to the tracker's scope stack.
		self._labels: List[Dict[str, BorrowId]] = [{} for _ in range(self.tracker.depth)]
		self._file: Optional[str] = None
		# Tracker diagnostics already attributed to a statement.
		self._seen = len(self.tracker.diagnostics)

	def run(self, prog: P.Program) -> RunResult:
		self._file = prog.file
		try:
			self._run_block(prog.statements, ())
		except _Halt:
			logger.info("stopping %s after first error", prog.file or "<program>")
		try:
			self.tracker.close()
		except OwnershipError as err:
			self._report(err, Span(file=self._file))
		logger.info(
			"ran %s: %d diagnostic(s), %d drop(s)",
			prog.file or "<program>",
			len(self.diagnostics),
			len(self.tracker.drop_log),
		)
		return RunResult(diagnostics=list(self.diagnostics), drops=self.tracker.drop_log, reads=list(self.reads))

	# ------------------------------------------------------------------

	def _run_block(self, stmts: List[P.Stmt], path: Tuple[int, ...]) -> None:
		for idx, stmt in enumerate(stmts):
			self._exec(stmt, path + (idx,))

	def _exec(self, stmt: P.Stmt, path: Tuple[int, ...]) -> None:
		span = replace(Span.from_loc(stmt.loc), path=".".join(str(p) for p in path))
		if span.file is None:
			span = span.with_file(self._file)
		errors_before = len([d for d in self.diagnostics if d.severity == "error"])
		logger.debug("%s: %s", span.path, type(stmt).__name__)
		try:
			self._dispatch(stmt, path)
		except OwnershipError as err:
			self._report(err, span)
		except P.ProgramFormatError as err:
			self.diagnostics.append(Diagnostic(message=str(err), code="program", phase="program", span=span))
		# Permissive trackers record instead of raising; attribute those here.
		for diag in self.tracker.diagnostics[self._seen :]:
			self.diagnostics.append(replace(diag, span=span, severity="warning", notes=list(diag.notes)))
		self._seen = len(self.tracker.diagnostics)
		errors_after = len([d for d in self.diagnostics if d.severity == "error"])
		if self.stop_on_error and errors_after > errors_before:
			raise _Halt()

	def _report(self, err: OwnershipError, span: Span) -> None:
		# Name resolution checks run outside the tracker; permissive runs still only warn.
		severity = "warning" if self.tracker.permissive else "error"
		notes = []
		if err.resource_id is not None:
			notes.append(f"resource #{err.resource_id}")
		self.diagnostics.append(Diagnostic(message=err.message, code=err.code, phase="ownership", severity=severity, span=span, notes=notes))

	def _dispatch(self, stmt: P.Stmt, path: Tuple[int, ...]) -> None:
		t = self.tracker
		if isinstance(stmt, P.Declare):
			t.declare(stmt.name, stmt.value.to_resource() if stmt.value is not None else None, stmt.mutable)
			return
		if isinstance(stmt, P.Scope):
			with t.scope(stmt.label):
				self._labels.append({})
				try:
					self._run_block(stmt.body, path)
				finally:
					self._labels.pop()
			return
		if isinstance(stmt, P.Move):
			if stmt.into is None:
				# Passed by value to a callee whose parameter is dropped on return.
				t.drop(stmt.source)
			else:
				t.give(stmt.source, stmt.into, stmt.mutable)
			return
		if isinstance(stmt, (P.Copy, P.Clone)):
			res = t.copy(stmt.source) if isinstance(stmt, P.Copy) else t.clone(stmt.source)
			if res is not None:
				t.declare(stmt.into, res, stmt.mutable)
			return
		if isinstance(stmt, P.Assign):
			if stmt.value is not None:
				t.assign(stmt.target, stmt.value.to_resource())
			elif stmt.source is not None:
				t.assign_from(stmt.target, stmt.source)
			else:
				raise P.ProgramFormatError("assignment needs a value or a source")
			return
		if isinstance(stmt, P.Borrow):
			holder = self._holder(stmt.holder)
			binding = self._binding_of(stmt.target)
			borrow_id = t.borrow(binding, stmt.kind, holder=holder, label=stmt.label)
			if borrow_id is not None and stmt.label is not None:
				self._bind_label(stmt.label, borrow_id)
			return
		if isinstance(stmt, P.Release):
			t.release(self._label(stmt.label))
			return
		if isinstance(stmt, P.Slice):
			holder = self._holder(stmt.holder)
			view = t.slice(self._target(stmt.target), stmt.start, stmt.end, holder=holder, label=stmt.label)
			if view is not None and stmt.label is not None:
				self._bind_label(stmt.label, view.borrow_id)
			return
		if isinstance(stmt, P.Use):
			before = len(t.diagnostics)
			value = t.read(self._target(stmt.target))
			if len(t.diagnostics) == before:
				self.reads.append((stmt.target, value))
			return
		if isinstance(stmt, P.Push):
			t.push(self._target(stmt.target), stmt.value)
			return
		if isinstance(stmt, P.Extend):
			t.extend(self._target(stmt.target), stmt.value if stmt.value is not None else ())
			return
		if isinstance(stmt, P.Clear):
			t.clear(self._target(stmt.target))
			return
		if isinstance(stmt, P.SetItem):
			t.set_item(self._target(stmt.target), stmt.index, stmt.value)
			return
		if isinstance(stmt, P.Concat):
			res = t.concat(stmt.left, self._target(stmt.right))
			if res is not None:
				t.declare(stmt.into, res, stmt.mutable)
			return
		if isinstance(stmt, P.Drop):
			t.drop(stmt.target)
			return
		raise P.ProgramFormatError(f"unsupported statement {type(stmt).__name__}")

	# ------------------------------------------------------------------
	# Name resolution

	def _find_label(self, name: str) -> Optional[BorrowId]:
		for frame in reversed(self._labels):
			if name in frame:
				return frame[name]
		return None

	def _label(self, name: str) -> BorrowRef:
		found = self._find_label(name)
		if found is None:
			raise UnknownBorrow(f"no borrow labelled '{name}' in this scope", binding=name)
		return BorrowRef(found)

	def _target(self, name: str) -> Target:
		"""Labels (references) shadow bindings of the same name."""
		found = self._find_label(name)
		if found is not None:
			return BorrowRef(found)
		return name

	def _binding_of(self, name: str) -> Any:
		"""Borrowing through a reference label re-borrows its owner."""
		found = self._find_label(name)
		if found is None:
			return name
		loan = self.tracker.borrows.get(found)
		self.tracker.borrows.require_live(loan)
		return loan.binding_id

	def _holder(self, name: Optional[str]) -> Optional[int]:
		if name is None:
			return None
		return self.tracker.binding(name).scope_id

	def _bind_label(self, label: str, borrow_id: BorrowId) -> None:
		holder = self.tracker.borrows.get(borrow_id).holder
		depth = self.tracker.scopes.frame(holder).depth
		self._labels[depth][label] = borrow_id


__all__ = ["Interpreter", "RunResult"]
