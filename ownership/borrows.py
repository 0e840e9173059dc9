#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Borrow tracker: active loans per binding and the shared-vs-exclusive rules.

Exclusivity is evaluated over *live* borrows only. A borrow is live from its
creation until `release` or until its holder scope exits, whichever comes
first, so two sequential exclusive borrows of the same binding are fine as
long as the first one has ended when the second begins.

Lifetime containment is checked when a borrow is created: the holder scope
must be the binding's own scope or nested inside it, otherwise the reference
would dangle once the binding's scope pops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from ownership.errors import BorrowConflict, DanglingReference, MutabilityError, UnknownBorrow
from ownership.value_table import Binding, BindingId, ScopeId

logger = logging.getLogger("ownership.borrows")

BorrowId = int


class BorrowKind(Enum):
	"""Kinds of borrows."""

	SHARED = auto()
	EXCLUSIVE = auto()

	@classmethod
	def parse(cls, text: str) -> "BorrowKind":
		"""Accept `shared`/`exclusive` (and the `&`/`&mut` spellings)."""
		key = text.strip().lower()
		if key in ("shared", "&", "ref"):
			return cls.SHARED
		if key in ("exclusive", "mut", "&mut", "ref_mut"):
			return cls.EXCLUSIVE
		raise ValueError(f"unknown borrow kind {text!r}")


@dataclass(eq=False)
class Borrow:
	"""
	A loan of a binding, held by a scope.

	`start`/`end` are set for slice borrows and describe the `[start, end)`
	window over the owner's resource.
	"""

	borrow_id: BorrowId
	binding_id: BindingId
	binding_name: str
	kind: BorrowKind
	holder: ScopeId
	seq: int
	label: Optional[str] = None
	start: Optional[int] = None
	end: Optional[int] = None
	live: bool = True

	@property
	def is_slice(self) -> bool:
		return self.start is not None

	def describe(self) -> str:
		sigil = "&mut" if self.kind is BorrowKind.EXCLUSIVE else "&"
		name = f" '{self.label}'" if self.label else ""
		return f"borrow #{self.borrow_id}{name} ({sigil}{self.binding_name})"


@dataclass(frozen=True)
class BorrowRef:
	"""Marks an access that goes through an existing borrow instead of the owner."""

	borrow_id: BorrowId


class BorrowTracker:
	"""Issues, validates and ends borrows."""

	def __init__(self) -> None:
		self._borrows: Dict[BorrowId, Borrow] = {}
		self._active: Dict[BindingId, List[BorrowId]] = {}
		self._labels: Dict[str, List[BorrowId]] = {}
		self._next_id: BorrowId = 1

	def get(self, borrow_id: BorrowId) -> Borrow:
		try:
			return self._borrows[borrow_id]
		except KeyError:
			raise UnknownBorrow(f"no borrow with id {borrow_id}") from None

	def by_label(self, label: str) -> Optional[Borrow]:
		"""Newest live borrow carrying `label`; the newest ended one when none is live."""
		ids = self._labels.get(label)
		if not ids:
			return None
		for bid in reversed(ids):
			if self._borrows[bid].live:
				return self._borrows[bid]
		return self._borrows[ids[-1]]

	def active_for(self, binding_id: BindingId) -> List[Borrow]:
		return [self._borrows[b] for b in self._active.get(binding_id, [])]

	def held_by(self, scope_id: ScopeId) -> List[Borrow]:
		return [b for b in self._borrows.values() if b.live and b.holder == scope_id]

	def all_live(self) -> List[Borrow]:
		return [b for b in self._borrows.values() if b.live]

	def check_new(self, binding: Binding, kind: BorrowKind) -> None:
		"""
		Enforce the exclusivity rule for a new borrow of `binding`.

		- any number of shared borrows may coexist;
		- an exclusive borrow excludes every other borrow.
		"""
		if kind is BorrowKind.EXCLUSIVE and not binding.mutable:
			raise MutabilityError(
				f"cannot take mutable borrow of immutable '{binding.name}'",
				binding=binding.name,
			)
		for loan in self.active_for(binding.bid):
			if kind is BorrowKind.SHARED and loan.kind is BorrowKind.EXCLUSIVE:
				raise BorrowConflict(
					f"cannot take shared borrow while mutable borrow active on '{binding.name}'",
					binding=binding.name,
				)
			if kind is BorrowKind.EXCLUSIVE:
				raise BorrowConflict(
					f"cannot take mutable borrow while borrow active on '{binding.name}'",
					binding=binding.name,
				)

	def check_holder(self, binding: Binding, binding_depth: int, holder_depth: int) -> None:
		"""A borrow held by a scope outside the binding's own scope would dangle."""
		if holder_depth < binding_depth:
			raise DanglingReference(
				f"borrowed value '{binding.name}' does not live long enough",
				binding=binding.name,
			)

	def check_can_move(self, binding: Binding) -> None:
		if self._active.get(binding.bid):
			raise BorrowConflict(f"cannot move '{binding.name}' while borrowed", binding=binding.name)

	def check_can_assign(self, binding: Binding) -> None:
		if self._active.get(binding.bid):
			raise BorrowConflict(f"cannot assign to '{binding.name}' while borrowed", binding=binding.name)

	def check_can_mutate(self, binding: Binding) -> None:
		"""Direct mutation through the owner needs a mutable binding and no live borrows."""
		if not binding.mutable:
			raise MutabilityError(f"cannot mutate immutable '{binding.name}'", binding=binding.name)
		for loan in self.active_for(binding.bid):
			raise BorrowConflict(
				f"cannot mutate '{binding.name}' while {loan.describe()} is active",
				binding=binding.name,
			)

	def check_can_read(self, binding: Binding) -> None:
		"""Reading through the owner is blocked only by a live exclusive borrow."""
		for loan in self.active_for(binding.bid):
			if loan.kind is BorrowKind.EXCLUSIVE:
				raise BorrowConflict(
					f"cannot use '{binding.name}' while mutably borrowed",
					binding=binding.name,
				)

	def require_live(self, loan: Borrow) -> None:
		if not loan.live:
			raise DanglingReference(
				f"{loan.describe()} used after it ended",
				binding=loan.binding_name,
			)

	def check_write_through(self, loan: Borrow) -> None:
		self.require_live(loan)
		if loan.kind is not BorrowKind.EXCLUSIVE:
			raise MutabilityError(
				f"cannot mutate '{loan.binding_name}' through shared {loan.describe()}",
				binding=loan.binding_name,
			)

	def issue(
		self,
		binding: Binding,
		kind: BorrowKind,
		holder: ScopeId,
		*,
		label: Optional[str] = None,
		window: Optional[Tuple[int, int]] = None,
	) -> Borrow:
		"""Record a new borrow; callers must have run the checks above."""
		loan = Borrow(
			borrow_id=self._next_id,
			binding_id=binding.bid,
			binding_name=binding.name,
			kind=kind,
			holder=holder,
			seq=self._next_id,
			label=label,
			start=window[0] if window is not None else None,
			end=window[1] if window is not None else None,
		)
		self._next_id += 1
		self._borrows[loan.borrow_id] = loan
		self._active.setdefault(binding.bid, []).append(loan.borrow_id)
		if label is not None:
			self._labels.setdefault(label, []).append(loan.borrow_id)
		logger.debug("issued %s held by scope %d", loan.describe(), holder)
		return loan

	def release(self, borrow_id: BorrowId) -> bool:
		"""End a borrow. Returns False when it had already ended."""
		loan = self.get(borrow_id)
		if not loan.live:
			return False
		loan.live = False
		active = self._active.get(loan.binding_id, [])
		if borrow_id in active:
			active.remove(borrow_id)
		if not active:
			self._active.pop(loan.binding_id, None)
		logger.debug("released %s", loan.describe())
		return True


__all__ = ["BorrowId", "BorrowKind", "Borrow", "BorrowRef", "BorrowTracker"]
