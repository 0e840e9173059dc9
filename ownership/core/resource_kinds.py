# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Minimal resource-kind core shared by the value table and the move engine.

ResourceKind keeps the universe small: fixed-size scalars and arrays live
"on the stack" and may be trivially copied; growable buffers and text own an
external allocation and may only be duplicated through an explicit deep copy.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Iterable


class ResourceKind(Enum):
	"""Kinds of payloads understood by the tracker."""

	SCALAR = auto()
	FIXED_ARRAY = auto()
	BUFFER = auto()
	TEXT = auto()


GROWABLE_KINDS = frozenset({ResourceKind.BUFFER, ResourceKind.TEXT})

# Items that may sit inside a copyable fixed array.
_SCALAR_TYPES = (bool, int, float, str)

# Smallest capacity handed out by the first growth of an empty buffer.
MIN_CAPACITY = 4


def is_growable(kind: ResourceKind) -> bool:
	"""Return True for kinds with a capacity that can grow past their length."""
	return kind in GROWABLE_KINDS


def is_scalar_item(value: Any) -> bool:
	"""Return True when `value` is a plain fixed-size scalar (no allocation)."""
	if isinstance(value, str):
		return len(value) <= 1
	return isinstance(value, _SCALAR_TYPES)


def is_copy(kind: ResourceKind, items: Iterable[Any] = ()) -> bool:
	"""
	Single source of truth for copy rules.

	- Scalars are Copy.
	- Fixed arrays are Copy when every element is a scalar.
	- Growable kinds (buffers, text) are never Copy; they require a clone.
	"""
	if kind is ResourceKind.SCALAR:
		return True
	if kind is ResourceKind.FIXED_ARRAY:
		return all(is_scalar_item(it) for it in items)
	return False


def grow_capacity(capacity: int, needed: int) -> int:
	"""Return the capacity after growing to fit `needed` items (doubling)."""
	if needed <= capacity:
		return capacity
	cap = max(capacity, MIN_CAPACITY)
	while cap < needed:
		cap *= 2
	return cap


__all__ = [
	"ResourceKind",
	"GROWABLE_KINDS",
	"MIN_CAPACITY",
	"is_growable",
	"is_scalar_item",
	"is_copy",
	"grow_capacity",
]
