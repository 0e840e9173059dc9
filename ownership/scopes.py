#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Scope stack and drop scheduler.

Frames form a strict stack: only the innermost frame may be exited. Exiting a
frame ends the borrows it holds, then visits its bindings in reverse
declaration order and tears down every payload that is still owned. Bindings
whose payload was moved out perform no teardown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ownership.borrows import BorrowTracker
from ownership.errors import BorrowOutlivesScope, DoubleDrop, ScopeError
from ownership.value_table import Binding, BindingId, BindingState, ResourceId, ResourceState, ScopeId, ValueTable

logger = logging.getLogger("ownership.scopes")


@dataclass(eq=False)
class ScopeFrame:
	"""Ordered bindings created within one lexical region."""

	scope_id: ScopeId
	depth: int
	label: Optional[str] = None
	parent: Optional[ScopeId] = None
	bindings: List[BindingId] = field(default_factory=list)

	def describe(self) -> str:
		return f"scope {self.scope_id}" + (f" '{self.label}'" if self.label else "")


@dataclass(frozen=True)
class DropRecord:
	"""One teardown: which binding released which resource, at which scope."""

	scope_id: ScopeId
	binding_id: BindingId
	name: str
	rid: ResourceId


DropObserver = Callable[[DropRecord], None]


class ScopeStack:
	"""Nested lexical regions; pushed on entry, popped on exit."""

	def __init__(self) -> None:
		self._frames: List[ScopeFrame] = []
		self._by_id: Dict[ScopeId, ScopeFrame] = {}
		self._next_id: ScopeId = 1

	@property
	def depth(self) -> int:
		return len(self._frames)

	def frames(self) -> List[ScopeFrame]:
		return list(self._frames)

	def top(self) -> ScopeFrame:
		if not self._frames:
			raise ScopeError("no open scope")
		return self._frames[-1]

	def push(self, label: Optional[str] = None) -> ScopeFrame:
		parent = self._frames[-1].scope_id if self._frames else None
		frame = ScopeFrame(scope_id=self._next_id, depth=len(self._frames), label=label, parent=parent)
		self._next_id += 1
		self._frames.append(frame)
		self._by_id[frame.scope_id] = frame
		logger.debug("entered %s at depth %d", frame.describe(), frame.depth)
		return frame

	def is_open(self, scope_id: ScopeId) -> bool:
		frame = self._by_id.get(scope_id)
		return frame is not None and frame in self._frames

	def frame(self, scope_id: ScopeId) -> ScopeFrame:
		frame = self._by_id.get(scope_id)
		if frame is None:
			raise ScopeError(f"unknown scope {scope_id}")
		return frame

	def open_frame(self, scope_id: ScopeId) -> ScopeFrame:
		frame = self.frame(scope_id)
		if frame not in self._frames:
			raise ScopeError(f"{frame.describe()} is not open")
		return frame

	def check_pop(self, scope_id: ScopeId) -> ScopeFrame:
		"""Validate that `scope_id` is the innermost open frame."""
		frame = self.open_frame(scope_id)
		top = self._frames[-1]
		if frame is not top:
			raise ScopeError(f"cannot exit {frame.describe()} before inner {top.describe()}")
		return frame

	def pop(self, scope_id: ScopeId) -> ScopeFrame:
		frame = self.check_pop(scope_id)
		self._frames.pop()
		return frame


class DropScheduler:
	"""Deterministic teardown on scope exit."""

	def __init__(self, table: ValueTable, borrows: BorrowTracker) -> None:
		self.table = table
		self.borrows = borrows
		self.drop_log: List[DropRecord] = []
		self._observers: List[DropObserver] = []

	def on_drop(self, observer: DropObserver) -> None:
		self._observers.append(observer)

	def check_frame(self, frame: ScopeFrame) -> None:
		"""
		Validate a frame exit without touching any state.

		Borrows held by the frame itself end with it; any other live borrow on a
		binding of this frame would outlive the binding.
		"""
		held = {b.borrow_id for b in self.borrows.held_by(frame.scope_id)}
		for bid in reversed(frame.bindings):
			binding = self.table.binding(bid)
			for loan in self.borrows.active_for(bid):
				if loan.borrow_id not in held:
					raise BorrowOutlivesScope(
						f"'{binding.name}' dropped while {loan.describe()} is still active",
						binding=binding.name,
					)
			if binding.state is BindingState.OWNED:
				res = binding.resource
				if res is None or res.state is ResourceState.DROPPED:
					raise DoubleDrop(
						f"double drop of '{binding.name}'",
						binding=binding.name,
						resource_id=res.rid if res is not None else None,
					)

	def teardown_frame(self, frame: ScopeFrame) -> List[DropRecord]:
		"""End held borrows, then drop owned payloads in reverse declaration order."""
		for loan in self.borrows.held_by(frame.scope_id):
			self.borrows.release(loan.borrow_id)
		records: List[DropRecord] = []
		for bid in reversed(frame.bindings):
			binding = self.table.binding(bid)
			if binding.state is BindingState.OWNED:
				records.append(self.drop_binding(binding, frame.scope_id))
			else:
				self.table.retire(binding)
		return records

	def drop_binding(self, binding: Binding, scope_id: ScopeId) -> DropRecord:
		"""Tear down the payload of a single binding and notify observers."""
		resource = self.table.teardown(binding)
		record = DropRecord(scope_id=scope_id, binding_id=binding.bid, name=binding.name, rid=resource.rid)
		self.drop_log.append(record)
		for observer in self._observers:
			observer(record)
		return record


__all__ = ["ScopeFrame", "DropRecord", "DropObserver", "ScopeStack", "DropScheduler"]
