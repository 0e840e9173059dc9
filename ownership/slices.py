#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Slice views: bounds-checked, non-owning windows over an owned resource.

A view is backed by a shared borrow of the owning binding, so the owner cannot
be mutated, moved or re-assigned while the view is live. Bounds are checked
when the view is built and again on every access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, List, Optional

from ownership.borrows import Borrow, BorrowRef
from ownership.core.resource_kinds import ResourceKind
from ownership.errors import BoundsError
from ownership.value_table import Resource

if TYPE_CHECKING:
	from ownership.tracker import OwnershipTracker


def check_range(length: int, start: int, end: int, *, what: str = "slice") -> None:
	"""Raise BoundsError unless `0 <= start <= end <= length`."""
	if start < 0 or end < 0:
		raise BoundsError(f"{what} [{start}..{end}] has a negative bound")
	if start > end:
		raise BoundsError(f"{what} index starts at {start} but ends at {end}")
	if end > length:
		raise BoundsError(f"{what} end {end} out of range for length {length}")


def check_index(length: int, index: int) -> None:
	"""Raise BoundsError unless `0 <= index < length`."""
	if index < 0 or index >= length:
		raise BoundsError(f"index out of bounds: the len is {length} but the index is {index}")


class SliceView:
	"""A shared, read-only window `[start, end)` over a resource."""

	def __init__(self, tracker: "OwnershipTracker", loan: Borrow, resource: Resource) -> None:
		self._tracker = tracker
		self._loan = loan
		self._resource = resource

	@property
	def borrow(self) -> Borrow:
		return self._loan

	@property
	def borrow_id(self) -> int:
		return self._loan.borrow_id

	@property
	def start(self) -> int:
		assert self._loan.start is not None
		return self._loan.start

	@property
	def end(self) -> int:
		assert self._loan.end is not None
		return self._loan.end

	@property
	def live(self) -> bool:
		return self._loan.live

	@property
	def kind(self) -> ResourceKind:
		return self._resource.kind

	def ref(self) -> BorrowRef:
		return BorrowRef(self._loan.borrow_id)

	def _check(self) -> None:
		self._tracker.borrows.require_live(self._loan)
		check_range(self._resource.length, self.start, self.end)

	def length(self) -> int:
		self._check()
		return self.end - self.start

	def __len__(self) -> int:
		return self.length()

	def __getitem__(self, index: int) -> Any:
		self._check()
		check_index(self.end - self.start, index)
		return self._resource.items[self.start + index]

	def __iter__(self) -> Iterator[Any]:
		return iter(self.to_list())

	def to_list(self) -> List[Any]:
		self._check()
		return list(self._resource.items[self.start : self.end])

	def text(self) -> str:
		"""Join the window into a string (text resources)."""
		return "".join(str(it) for it in self.to_list())

	def snapshot(self) -> Any:
		if self._resource.kind is ResourceKind.TEXT:
			return self.text()
		return tuple(self.to_list())

	def find(self, item: Any) -> int:
		"""Index of the first `item` in the window, or the window length."""
		items = self.to_list()
		for idx, value in enumerate(items):
			if value == item:
				return idx
		return len(items)

	def subslice(self, start: int = 0, end: Optional[int] = None) -> "SliceView":
		"""Narrow this view; bounds are relative to the view."""
		return self._tracker.slice(self, start, end)

	def release(self) -> bool:
		return self._tracker.release(self._loan.borrow_id)

	def __eq__(self, other: object) -> bool:
		if isinstance(other, SliceView):
			return self.snapshot() == other.snapshot()
		if isinstance(other, (str, tuple)):
			return self.snapshot() == other
		if isinstance(other, list):
			return self.to_list() == other
		return NotImplemented

	__hash__ = None  # type: ignore[assignment]

	def __repr__(self) -> str:
		state = "live" if self._loan.live else "ended"
		return f"SliceView({self._loan.binding_name}[{self.start}..{self.end}], {state})"


__all__ = ["SliceView", "check_range", "check_index"]
