#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Value table and move engine: who owns what, right now.

The table records every resource and every binding. A binding moves through
`UNINIT -> OWNED -> {MOVED, DROPPED}`; assignment may bring a MOVED binding
back to OWNED. A resource is either IN_TRANSIT (produced by a move/copy/clone
and not bound yet), OWNED by exactly one binding, or DROPPED.

Policy (borrow conflicts, scope rules) lives elsewhere; this module only
answers "is this binding usable?" and performs ownership transfers once the
caller has finished all of its checks.
"""

from __future__ import annotations

import copy
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterable, List, Optional

from ownership.core.resource_kinds import ResourceKind, grow_capacity, is_copy, is_growable
from ownership.errors import (
	AlreadyOwned,
	DoubleDrop,
	NotCopyable,
	UninitializedUse,
	UnknownBinding,
	UseAfterDrop,
	UseAfterMove,
)

logger = logging.getLogger("ownership.value_table")

BindingId = int
ResourceId = int
ScopeId = int

_resource_ids = itertools.count(1)


class ResourceState(Enum):
	"""Lifecycle of a resource."""

	IN_TRANSIT = auto()  # produced by move/copy/clone, not bound yet
	OWNED = auto()
	DROPPED = auto()


class BindingState(Enum):
	"""Validity state for a binding: uninitialized, owning, moved-out or dropped."""

	UNINIT = auto()
	OWNED = auto()
	MOVED = auto()
	DROPPED = auto()


@dataclass(eq=False)
class Resource:
	"""
	An owned payload.

	Items are stored as a list for every kind (text keeps one character per
	item) so slicing and indexing are uniform. `capacity` only grows for
	growable kinds and is left alone by `clear`.
	"""

	kind: ResourceKind
	items: List[Any] = field(default_factory=list)
	capacity: int = 0
	rid: ResourceId = field(default_factory=lambda: next(_resource_ids))
	state: ResourceState = ResourceState.IN_TRANSIT
	owner: Optional[BindingId] = None

	def __post_init__(self) -> None:
		if is_growable(self.kind):
			self.capacity = max(self.capacity, len(self.items))
		else:
			self.capacity = len(self.items)

	@classmethod
	def scalar(cls, value: Any) -> "Resource":
		return cls(ResourceKind.SCALAR, [value])

	@classmethod
	def array(cls, items: Iterable[Any]) -> "Resource":
		return cls(ResourceKind.FIXED_ARRAY, list(items))

	@classmethod
	def buffer(cls, items: Iterable[Any] = (), capacity: int = 0) -> "Resource":
		return cls(ResourceKind.BUFFER, list(items), capacity=capacity)

	@classmethod
	def text(cls, value: str = "", capacity: int = 0) -> "Resource":
		return cls(ResourceKind.TEXT, list(value), capacity=capacity)

	@classmethod
	def of(cls, value: Any) -> "Resource":
		"""Infer a resource from a plain Python value (str -> text, list -> buffer, tuple -> array)."""
		if isinstance(value, Resource):
			return value
		if isinstance(value, str):
			return cls.text(value)
		if isinstance(value, list):
			return cls.buffer(value)
		if isinstance(value, tuple):
			return cls.array(value)
		return cls.scalar(value)

	@property
	def length(self) -> int:
		return len(self.items)

	@property
	def is_copy(self) -> bool:
		return is_copy(self.kind, self.items)

	@property
	def growable(self) -> bool:
		return is_growable(self.kind)

	def snapshot(self) -> Any:
		"""Return an immutable view of the contents: scalar value, str or tuple."""
		if self.kind is ResourceKind.SCALAR:
			return self.items[0]
		if self.kind is ResourceKind.TEXT:
			return "".join(self.items)
		return tuple(self.items)

	def duplicate(self) -> "Resource":
		"""Allocate an independent resource with equal contents and a fresh identity."""
		return Resource(self.kind, copy.deepcopy(self.items))

	def reserve_for(self, needed: int) -> None:
		"""Grow capacity so `needed` items fit."""
		if needed > self.capacity:
			new_cap = grow_capacity(self.capacity, needed)
			logger.debug("resource #%d grows capacity %d -> %d", self.rid, self.capacity, new_cap)
			self.capacity = new_cap

	def describe(self) -> str:
		return f"{self.kind.name.lower()} #{self.rid}"


@dataclass(eq=False)
class Binding:
	"""A name-to-resource association living in exactly one scope frame."""

	bid: BindingId
	name: str
	scope_id: ScopeId
	order: int
	mutable: bool = False
	resource: Optional[Resource] = None
	state: BindingState = BindingState.UNINIT
	initialized_once: bool = False


class ValueTable:
	"""
	Registry of bindings and resources.

	The single writer of ownership edges: `bind`/`unbind`/`teardown` keep
	`Binding.resource` and `Resource.owner` in lockstep so a live resource
	never has more than one owning binding.
	"""

	def __init__(self) -> None:
		self._bindings: Dict[BindingId, Binding] = {}
		self._resources: Dict[ResourceId, Resource] = {}
		self._next_bid: BindingId = 1

	def new_binding(self, name: str, scope_id: ScopeId, order: int, mutable: bool) -> Binding:
		binding = Binding(bid=self._next_bid, name=name, scope_id=scope_id, order=order, mutable=mutable)
		self._next_bid += 1
		self._bindings[binding.bid] = binding
		return binding

	def binding(self, bid: BindingId) -> Binding:
		try:
			return self._bindings[bid]
		except KeyError:
			raise UnknownBinding(f"no binding with id {bid}") from None

	def bindings(self) -> List[Binding]:
		return list(self._bindings.values())

	def resource(self, rid: ResourceId) -> Optional[Resource]:
		return self._resources.get(rid)

	def owner_of(self, rid: ResourceId) -> Optional[Binding]:
		res = self._resources.get(rid)
		if res is None or res.owner is None:
			return None
		return self._bindings.get(res.owner)

	def owners_of(self, rid: ResourceId) -> List[Binding]:
		"""All bindings currently pointing at `rid` (zero or one while the table is consistent)."""
		return [
			b
			for b in self._bindings.values()
			if b.state is BindingState.OWNED and b.resource is not None and b.resource.rid == rid
		]

	def live_resources(self) -> List[Resource]:
		return [r for r in self._resources.values() if r.state is ResourceState.OWNED]

	def check_usable(self, binding: Binding) -> Resource:
		"""Return the owned resource of `binding` or raise why it cannot be used."""
		if binding.state is BindingState.OWNED and binding.resource is not None:
			return binding.resource
		if binding.state is BindingState.MOVED:
			raise UseAfterMove(f"use after move of '{binding.name}'", binding=binding.name)
		if binding.state is BindingState.DROPPED:
			raise UseAfterDrop(f"use of '{binding.name}' after its scope ended", binding=binding.name)
		raise UninitializedUse(f"use of uninitialized '{binding.name}'", binding=binding.name)

	def check_bindable(self, resource: Resource) -> None:
		"""Raise unless `resource` may be given a (new) owner."""
		if resource.state is ResourceState.DROPPED:
			raise UseAfterDrop(f"{resource.describe()} was already dropped", resource_id=resource.rid)
		if resource.state is ResourceState.OWNED:
			owner = self._bindings.get(resource.owner) if resource.owner is not None else None
			owner_name = owner.name if owner is not None else "?"
			raise AlreadyOwned(
				f"{resource.describe()} is already owned by '{owner_name}'",
				binding=owner_name,
				resource_id=resource.rid,
			)

	def bind(self, binding: Binding, resource: Resource) -> None:
		"""Make `binding` the owner of an in-transit `resource`."""
		resource.state = ResourceState.OWNED
		resource.owner = binding.bid
		self._resources[resource.rid] = resource
		binding.resource = resource
		binding.state = BindingState.OWNED
		binding.initialized_once = True
		logger.debug("'%s' owns %s", binding.name, resource.describe())

	def unbind(self, binding: Binding, new_state: BindingState) -> Resource:
		"""Detach the resource from `binding`; the resource becomes in-transit."""
		resource = binding.resource
		assert resource is not None
		resource.state = ResourceState.IN_TRANSIT
		resource.owner = None
		binding.resource = None
		binding.state = new_state
		return resource

	def teardown(self, binding: Binding) -> Resource:
		"""Destroy the resource owned by `binding`."""
		resource = binding.resource
		if resource is None or resource.state is ResourceState.DROPPED:
			rid = resource.rid if resource is not None else None
			raise DoubleDrop(f"double drop of '{binding.name}'", binding=binding.name, resource_id=rid)
		resource.state = ResourceState.DROPPED
		resource.owner = None
		binding.resource = None
		binding.state = BindingState.DROPPED
		logger.debug("dropped %s owned by '%s'", resource.describe(), binding.name)
		return resource

	def retire(self, binding: Binding) -> None:
		"""Mark a binding without a resource as out of scope (no teardown)."""
		if binding.state is BindingState.UNINIT:
			binding.state = BindingState.DROPPED


class MoveEngine:
	"""
	Ownership transfers between bindings.

	Callers run borrow/scope checks first; the engine re-checks binding
	validity and then mutates the table, so a raised error never leaves a
	half-applied transfer behind.
	"""

	def __init__(self, table: ValueTable) -> None:
		self.table = table

	def move_out(self, binding: Binding) -> Resource:
		"""Transfer ownership out of `binding`, invalidating it."""
		resource = self.table.check_usable(binding)
		self.table.unbind(binding, BindingState.MOVED)
		logger.debug("moved %s out of '%s'", resource.describe(), binding.name)
		return resource

	def copy_out(self, binding: Binding) -> Resource:
		"""Trivial copy; only legal for Copy kinds."""
		resource = self.table.check_usable(binding)
		if not resource.is_copy:
			raise NotCopyable(
				f"'{binding.name}' holds a {resource.kind.name.lower()} which is not Copy; clone it instead",
				binding=binding.name,
				resource_id=resource.rid,
			)
		return resource.duplicate()

	def clone_out(self, binding: Binding) -> Resource:
		"""Deep copy: independent resource, equal contents, distinct identity."""
		resource = self.table.check_usable(binding)
		dup = resource.duplicate()
		logger.debug("cloned %s from '%s' into %s", resource.describe(), binding.name, dup.describe())
		return dup

	def assign(self, binding: Binding, resource: Resource) -> Optional[Resource]:
		"""
		Rebind `binding` to `resource`.

		Returns the previous payload, already torn down, when there was one.
		"""
		self.table.check_bindable(resource)
		previous: Optional[Resource] = None
		if binding.state is BindingState.OWNED:
			previous = self.table.teardown(binding)
		self.table.bind(binding, resource)
		return previous


__all__ = [
	"BindingId",
	"ResourceId",
	"ScopeId",
	"ResourceState",
	"BindingState",
	"Resource",
	"Binding",
	"ValueTable",
	"MoveEngine",
]
