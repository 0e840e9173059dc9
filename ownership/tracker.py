#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
OwnershipTracker: the library surface over the value table, move engine,
borrow tracker, scope stack and drop scheduler.

Every public operation validates first and mutates last, so a rejected
operation leaves all tables untouched. In the default (strict) mode
violations raise a typed `OwnershipError`; with `permissive=True` they are
recorded as Diagnostics on `tracker.diagnostics` and the operation returns
None instead.

Targets
-------
Operations that read or write data accept a *target*:
  * a binding id (int) or a binding name (str, newest visible binding wins);
  * `tracker.via(borrow_id)` to go through an existing borrow;
  * a `SliceView`;
  * a borrow label (str) when no visible binding has that name.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

from ownership.borrows import Borrow, BorrowId, BorrowKind, BorrowRef, BorrowTracker
from ownership.core.diagnostics import Diagnostic
from ownership.core.resource_kinds import ResourceKind
from ownership.errors import (
	BorrowConflict,
	BoundsError,
	KindMismatch,
	MutabilityError,
	OwnershipError,
	UnknownBinding,
	UnknownBorrow,
	UseAfterDrop,
)
from ownership.scopes import DropObserver, DropRecord, DropScheduler, ScopeStack
from ownership.slices import SliceView, check_index, check_range
from ownership.value_table import (
	Binding,
	BindingId,
	BindingState,
	MoveEngine,
	Resource,
	ResourceId,
	ScopeId,
	ValueTable,
)

logger = logging.getLogger("ownership.tracker")

BindingRef = Union[BindingId, str]
Target = Union[BindingId, str, BorrowRef, SliceView]

F = TypeVar("F", bound=Callable[..., Any])


def _checked(fn: F) -> F:
	"""Route OwnershipErrors to diagnostics when the tracker is permissive."""

	@functools.wraps(fn)
	def wrapper(self: "OwnershipTracker", *args: Any, **kwargs: Any) -> Any:
		try:
			return fn(self, *args, **kwargs)
		except OwnershipError as err:
			if not self.permissive:
				raise
			self._record(err, fn.__name__)
			return None

	return wrapper  # type: ignore[return-value]


class OwnershipTracker:
	"""Scope-based resource tracker enforcing single ownership and borrow rules."""

	def __init__(self, *, permissive: bool = False) -> None:
		self.permissive = permissive
		self.table = ValueTable()
		self.moves = MoveEngine(self.table)
		self.borrows = BorrowTracker()
		self.scopes = ScopeStack()
		self.dropper = DropScheduler(self.table, self.borrows)
		self.diagnostics: List[Diagnostic] = []
		self.root: ScopeId = self.scopes.push("root").scope_id

	# ------------------------------------------------------------------
	# Scopes

	@_checked
	def enter_scope(self, label: Optional[str] = None) -> ScopeId:
		return self.scopes.push(label).scope_id

	@_checked
	def exit_scope(self, scope_id: ScopeId) -> List[ResourceId]:
		"""Pop the innermost scope and return the torn-down resource ids in teardown order."""
		return self._exit(scope_id)

	def _exit(self, scope_id: ScopeId) -> List[ResourceId]:
		frame = self.scopes.check_pop(scope_id)
		self.dropper.check_frame(frame)
		records = self.dropper.teardown_frame(frame)
		self.scopes.pop(scope_id)
		logger.debug("exited %s, dropped %d resource(s)", frame.describe(), len(records))
		return [r.rid for r in records]

	@_checked
	def unwind(self, scope_id: ScopeId) -> List[ResourceId]:
		"""Exit every scope above `scope_id`, then `scope_id` itself."""
		self.scopes.open_frame(scope_id)
		dropped: List[ResourceId] = []
		while True:
			top = self.scopes.top()
			dropped.extend(self._exit(top.scope_id))
			if top.scope_id == scope_id:
				return dropped

	@contextmanager
	def scope(self, label: Optional[str] = None) -> Iterator[ScopeId]:
		"""Scoped acquisition: the scope is exited on every path out of the block."""
		scope_id = self.enter_scope(label)
		try:
			yield scope_id
		finally:
			if scope_id is not None and self.scopes.is_open(scope_id):
				self.unwind(scope_id)

	def close(self) -> List[ResourceId]:
		"""Tear everything down, root scope included."""
		if not self.scopes.is_open(self.root):
			return []
		return self.unwind(self.root) or []

	@property
	def current_scope(self) -> ScopeId:
		return self.scopes.top().scope_id

	@property
	def depth(self) -> int:
		return self.scopes.depth

	@property
	def drop_log(self) -> List[DropRecord]:
		return list(self.dropper.drop_log)

	def on_drop(self, observer: DropObserver) -> None:
		self.dropper.on_drop(observer)

	# ------------------------------------------------------------------
	# Value table / move engine

	@_checked
	def declare(self, name: str, resource: Any = None, mutable: bool = False) -> BindingId:
		"""Create a binding in the current scope, optionally owning `resource`."""
		frame = self.scopes.top()
		res = Resource.of(resource) if resource is not None else None
		if res is not None:
			self.table.check_bindable(res)
		binding = self.table.new_binding(name, frame.scope_id, len(frame.bindings), mutable)
		frame.bindings.append(binding.bid)
		if res is not None:
			self.table.bind(binding, res)
		logger.debug("declared '%s' (#%d) in %s", name, binding.bid, frame.describe())
		return binding.bid

	@_checked
	def move(self, binding: BindingRef) -> Resource:
		"""Transfer ownership out of `binding`; the binding becomes unusable."""
		b = self._binding(binding)
		self.table.check_usable(b)
		self.borrows.check_can_move(b)
		return self.moves.move_out(b)

	@_checked
	def give(self, source: BindingRef, name: str, mutable: bool = False) -> BindingId:
		"""Move `source` into a new binding `name` of the current scope (`let t = s;`)."""
		b = self._binding(source)
		self.table.check_usable(b)
		self.borrows.check_can_move(b)
		frame = self.scopes.top()
		res = self.moves.move_out(b)
		target = self.table.new_binding(name, frame.scope_id, len(frame.bindings), mutable)
		frame.bindings.append(target.bid)
		self.table.bind(target, res)
		return target.bid

	@_checked
	def copy(self, binding: BindingRef) -> Resource:
		"""Trivial copy of a Copy-kind payload; the source stays valid."""
		b = self._binding(binding)
		self.table.check_usable(b)
		self.borrows.check_can_read(b)
		return self.moves.copy_out(b)

	@_checked
	def clone(self, binding: BindingRef) -> Resource:
		"""Deep copy: independent payload with equal contents and a new identity."""
		b = self._binding(binding)
		self.table.check_usable(b)
		self.borrows.check_can_read(b)
		return self.moves.clone_out(b)

	@_checked
	def assign(self, binding: BindingRef, resource: Any) -> None:
		"""Rebind `binding` to `resource`; the previous payload is torn down."""
		b = self._binding(binding)
		res = Resource.of(resource)
		self._check_assignable(b)
		self.table.check_bindable(res)
		self.borrows.check_can_assign(b)
		if b.state is BindingState.OWNED:
			self.dropper.drop_binding(b, b.scope_id)
		self.moves.assign(b, res)

	@_checked
	def assign_from(self, binding: BindingRef, source: BindingRef) -> None:
		"""`binding = source;`: move `source` into an existing binding."""
		b = self._binding(binding)
		src = self._binding(source)
		self.table.check_usable(src)
		self.borrows.check_can_move(src)
		if src is b:
			return
		self._check_assignable(b)
		self.borrows.check_can_assign(b)
		res = self.moves.move_out(src)
		if b.state is BindingState.OWNED:
			self.dropper.drop_binding(b, b.scope_id)
		self.moves.assign(b, res)

	@_checked
	def drop(self, binding: BindingRef) -> ResourceId:
		"""Explicit early teardown; the binding is moved-from afterwards."""
		b = self._binding(binding)
		self.table.check_usable(b)
		self.borrows.check_can_move(b)
		record = self.dropper.drop_binding(b, self.current_scope)
		b.state = BindingState.MOVED
		return record.rid

	# ------------------------------------------------------------------
	# Borrows and slices

	@_checked
	def borrow(
		self,
		binding: BindingRef,
		kind: Union[BorrowKind, str] = BorrowKind.SHARED,
		*,
		holder: Optional[ScopeId] = None,
		label: Optional[str] = None,
	) -> BorrowId:
		"""Borrow `binding`; the borrow ends on `release` or when `holder` exits."""
		if isinstance(kind, str):
			kind = BorrowKind.parse(kind)
		b = self._binding(binding)
		self.table.check_usable(b)
		holder_frame = self.scopes.open_frame(holder) if holder is not None else self.scopes.top()
		owner_frame = self.scopes.frame(b.scope_id)
		self.borrows.check_new(b, kind)
		self.borrows.check_holder(b, owner_frame.depth, holder_frame.depth)
		return self.borrows.issue(b, kind, holder_frame.scope_id, label=label).borrow_id

	@_checked
	def release(self, borrow: Union[BorrowId, BorrowRef, SliceView, str]) -> bool:
		"""End a borrow early. Releasing an already-ended borrow is a no-op (False)."""
		return self.borrows.release(self._borrow(borrow).borrow_id)

	@_checked
	def slice(
		self,
		target: Target,
		start: int = 0,
		end: Optional[int] = None,
		*,
		holder: Optional[ScopeId] = None,
		label: Optional[str] = None,
	) -> SliceView:
		"""Shared, bounds-checked view of `[start, end)`; `end=None` means the full length."""
		b, via = self._access(target)
		resource = self.table.check_usable(b)
		if resource.kind is ResourceKind.SCALAR:
			raise BoundsError(f"cannot slice scalar '{b.name}'", binding=b.name, resource_id=resource.rid)
		if via is not None:
			self.borrows.require_live(via)
		base_start, base_end = self._window(resource, via)
		length = base_end - base_start
		if end is None:
			end = length
		check_range(length, start, end)
		holder_frame = self.scopes.open_frame(holder) if holder is not None else self.scopes.top()
		owner_frame = self.scopes.frame(b.scope_id)
		self.borrows.check_new(b, BorrowKind.SHARED)
		self.borrows.check_holder(b, owner_frame.depth, holder_frame.depth)
		loan = self.borrows.issue(
			b,
			BorrowKind.SHARED,
			holder_frame.scope_id,
			label=label,
			window=(base_start + start, base_start + end),
		)
		return SliceView(self, loan, resource)

	def via(self, borrow_id: BorrowId) -> BorrowRef:
		"""Target marker for accessing data through an existing borrow."""
		self.borrows.get(borrow_id)
		return BorrowRef(borrow_id)

	def borrow_info(self, borrow: Union[BorrowId, BorrowRef, SliceView, str]) -> Borrow:
		return self._borrow(borrow)

	# ------------------------------------------------------------------
	# Reads

	@_checked
	def read(self, target: Target) -> Any:
		"""Snapshot of the visible contents (scalar value, str or tuple)."""
		_, resource, start, end = self._read_window(target)
		if start == 0 and end == resource.length:
			return resource.snapshot()
		window = resource.items[start:end]
		if resource.kind is ResourceKind.TEXT:
			return "".join(window)
		return tuple(window)

	@_checked
	def length(self, target: Target) -> int:
		_, _, start, end = self._read_window(target)
		return end - start

	@_checked
	def capacity(self, target: Target) -> int:
		_, resource, _, _ = self._read_window(target)
		return resource.capacity

	@_checked
	def get(self, target: Target, index: int) -> Optional[Any]:
		"""Checked element access: None when `index` is out of range."""
		_, resource, start, end = self._read_window(target)
		if index < 0 or index >= end - start:
			return None
		return resource.items[start + index]

	@_checked
	def index(self, target: Target, index: int) -> Any:
		"""Element access; BoundsError when `index` is out of range."""
		_, resource, start, end = self._read_window(target)
		check_index(end - start, index)
		return resource.items[start + index]

	@_checked
	def find(self, target: Target, item: Any) -> int:
		"""Index of the first `item`, or the length when absent."""
		_, resource, start, end = self._read_window(target)
		for idx in range(start, end):
			if resource.items[idx] == item:
				return idx - start
		return end - start

	# ------------------------------------------------------------------
	# Writes

	@_checked
	def push(self, target: Target, item: Any) -> None:
		b, resource = self._write_target(target, growing=True)
		if resource.kind is ResourceKind.TEXT and (not isinstance(item, str) or len(item) != 1):
			raise KindMismatch(f"push onto text expects a single character, got {item!r}", binding=b.name)
		resource.reserve_for(resource.length + 1)
		resource.items.append(item)

	@_checked
	def extend(self, target: Target, items: Iterable[Any]) -> None:
		"""Append many items (`push_str` for text)."""
		b, resource = self._write_target(target, growing=True)
		new_items = list(items)
		if resource.kind is ResourceKind.TEXT and not all(isinstance(it, str) and len(it) == 1 for it in new_items):
			raise KindMismatch(f"text can only be extended with characters, got {new_items!r}", binding=b.name)
		resource.reserve_for(resource.length + len(new_items))
		resource.items.extend(new_items)

	@_checked
	def clear(self, target: Target) -> None:
		"""Empty the payload; capacity is kept."""
		_, resource = self._write_target(target, growing=True)
		resource.items.clear()

	@_checked
	def set_item(self, target: Target, index: int, value: Any) -> None:
		b, resource = self._write_target(target, growing=False)
		check_index(resource.length, index)
		if resource.kind is ResourceKind.TEXT and (not isinstance(value, str) or len(value) != 1):
			raise KindMismatch(f"text items are single characters, got {value!r}", binding=b.name)
		resource.items[index] = value

	@_checked
	def concat(self, left: BindingRef, right: Target) -> Resource:
		"""
		Consume `left` and append the contents of `right` (`s1 + &s2`).

		The returned resource is `left`'s payload, in transit, ready to be bound.
		"""
		lb = self._binding(left)
		lres = self.table.check_usable(lb)
		self.borrows.check_can_move(lb)
		rb, rres, rstart, rend = self._read_window(right)
		if rb is lb:
			raise BorrowConflict(f"cannot move '{lb.name}' while borrowed", binding=lb.name)
		if not lres.growable:
			raise KindMismatch(f"cannot append to fixed-size {lres.kind.name.lower()} '{lb.name}'", binding=lb.name)
		if lres.kind is ResourceKind.TEXT and rres.kind is not ResourceKind.TEXT:
			raise KindMismatch(f"cannot append {rres.kind.name.lower()} '{rb.name}' to text '{lb.name}'", binding=lb.name)
		extra = list(rres.items[rstart:rend])
		moved = self.moves.move_out(lb)
		moved.reserve_for(moved.length + len(extra))
		moved.items.extend(extra)
		return moved

	# ------------------------------------------------------------------
	# Accessors

	def lookup(self, name: str) -> BindingId:
		"""Newest visible binding called `name`."""
		found = self._lookup(name)
		if found is None:
			raise UnknownBinding(f"cannot find value '{name}' in this scope", binding=name)
		return found.bid

	def binding(self, ref: BindingRef) -> Binding:
		return self._binding(ref)

	def state(self, ref: BindingRef) -> BindingState:
		return self._binding(ref).state

	def is_owned(self, ref: BindingRef) -> bool:
		try:
			b = self._binding(ref)
		except UnknownBinding:
			return False
		return b.state is BindingState.OWNED and b.resource is not None

	def resource_of(self, ref: BindingRef) -> Optional[Resource]:
		return self._binding(ref).resource

	def active_borrows(self, ref: BindingRef) -> List[Borrow]:
		return self.borrows.active_for(self._binding(ref).bid)

	# ------------------------------------------------------------------
	# Internals

	def _record(self, err: OwnershipError, op: str) -> None:
		diag = Diagnostic(message=err.message, code=err.code, phase="ownership", notes=[f"operation: {op}"])
		self.diagnostics.append(diag)
		logger.debug("rejected %s: %s", op, err.format_human())

	def _check_assignable(self, b: Binding) -> None:
		if b.state is BindingState.DROPPED or not self.scopes.is_open(b.scope_id):
			raise UseAfterDrop(f"assignment to '{b.name}' after its scope ended", binding=b.name)
		if not b.mutable and b.initialized_once:
			raise MutabilityError(f"cannot assign twice to immutable variable '{b.name}'", binding=b.name)

	def _lookup(self, name: str) -> Optional[Binding]:
		for frame in reversed(self.scopes.frames()):
			for bid in reversed(frame.bindings):
				binding = self.table.binding(bid)
				if binding.name == name:
					return binding
		return None

	def _binding(self, ref: BindingRef) -> Binding:
		if isinstance(ref, Binding):
			return ref
		if isinstance(ref, str):
			found = self._lookup(ref)
			if found is None:
				raise UnknownBinding(f"cannot find value '{ref}' in this scope", binding=ref)
			return found
		return self.table.binding(ref)

	def _borrow(self, ref: Union[BorrowId, BorrowRef, SliceView, str]) -> Borrow:
		if isinstance(ref, SliceView):
			return ref.borrow
		if isinstance(ref, BorrowRef):
			return self.borrows.get(ref.borrow_id)
		if isinstance(ref, str):
			loan = self.borrows.by_label(ref)
			if loan is None:
				raise UnknownBorrow(f"cannot find borrow '{ref}' in this scope", binding=ref)
			return loan
		return self.borrows.get(ref)

	def _access(self, target: Target) -> Tuple[Binding, Optional[Borrow]]:
		"""Resolve a target to its owning binding and the borrow it goes through (if any)."""
		if isinstance(target, (SliceView, BorrowRef)):
			loan = self._borrow(target)
			return self.table.binding(loan.binding_id), loan
		if isinstance(target, str):
			found = self._lookup(target)
			if found is not None:
				return found, None
			loan = self.borrows.by_label(target)
			if loan is not None:
				return self.table.binding(loan.binding_id), loan
			raise UnknownBinding(f"cannot find value '{target}' in this scope", binding=target)
		return self._binding(target), None

	@staticmethod
	def _window(resource: Resource, via: Optional[Borrow]) -> Tuple[int, int]:
		if via is not None and via.is_slice:
			assert via.start is not None and via.end is not None
			return via.start, via.end
		return 0, resource.length

	def _read_window(self, target: Target) -> Tuple[Binding, Resource, int, int]:
		b, via = self._access(target)
		if via is not None:
			self.borrows.require_live(via)
			resource = self.table.check_usable(b)
		else:
			resource = self.table.check_usable(b)
			self.borrows.check_can_read(b)
		start, end = self._window(resource, via)
		check_range(resource.length, start, end)
		return b, resource, start, end

	def _write_target(self, target: Target, *, growing: bool) -> Tuple[Binding, Resource]:
		b, via = self._access(target)
		if via is not None:
			self.borrows.check_write_through(via)
			resource = self.table.check_usable(b)
		else:
			resource = self.table.check_usable(b)
			self.borrows.check_can_mutate(b)
		if growing and not resource.growable:
			raise KindMismatch(f"cannot resize fixed-size {resource.kind.name.lower()} '{b.name}'", binding=b.name)
		return b, resource


__all__ = ["OwnershipTracker", "BindingRef", "Target"]
