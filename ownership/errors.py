# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Typed failures raised by the ownership tracker.

Every violation is a logic/contract error: none are transient and none are
retried. Each carries a stable `code` so tests, the interpreter and `--json`
output can match on it without parsing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(eq=False)
class OwnershipError(Exception):
	"""
	A structured, serializable ownership violation.

	`binding` names the offending binding (when there is one) and
	`resource_id` the resource involved, so diagnostics can point at both.
	"""

	message: str
	binding: str | None = None
	resource_id: int | None = None

	code: ClassVar[str] = "ownership"

	def __post_init__(self) -> None:
		super().__init__(self.message)

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"code": self.code,
			"message": self.message,
			"binding": self.binding,
			"resource_id": self.resource_id,
		}

	def format_human(self) -> str:
		return f"[{self.code}] {self.message}"


class UseAfterMove(OwnershipError):
	"""Access to a binding whose resource was moved out."""

	code = "use-after-move"


class BorrowConflict(OwnershipError):
	"""A new borrow (or a mutation/move) would violate shared/exclusive rules."""

	code = "borrow-conflict"


class DanglingReference(OwnershipError):
	"""A borrow would outlive the binding it references, or was used after it ended."""

	code = "dangling-reference"


class BorrowOutlivesScope(OwnershipError):
	"""Scope exit attempted while a borrow is still active on one of its bindings."""

	code = "borrow-outlives-scope"


class BoundsError(OwnershipError):
	"""A slice or index outside the valid range of a resource."""

	code = "bounds"


class DoubleDrop(OwnershipError):
	"""Teardown invoked twice on the same resource."""

	code = "double-drop"


class UseAfterDrop(OwnershipError):
	"""A resource was used (or re-bound) after its teardown."""

	code = "use-after-drop"


class UninitializedUse(OwnershipError):
	"""Access to a declared binding that was never initialized."""

	code = "uninitialized"


class NotCopyable(OwnershipError):
	"""A trivial copy was requested for a kind that needs a deep copy."""

	code = "not-copyable"


class MutabilityError(OwnershipError):
	"""Mutation through an immutable binding or a shared borrow."""

	code = "mutability"


class AlreadyOwned(OwnershipError):
	"""A resource that already has an owner was bound a second time."""

	code = "already-owned"


class UnknownBinding(OwnershipError):
	"""No visible binding with the requested name or id."""

	code = "unknown-binding"


class UnknownBorrow(OwnershipError):
	"""No borrow was ever issued with the requested id or label."""

	code = "unknown-borrow"


class ScopeError(OwnershipError):
	"""Scope stack misuse: exiting a frame that is not the innermost one."""

	code = "scope"


class KindMismatch(OwnershipError, TypeError):
	"""An operation does not apply to the kind of payload (e.g. growing a fixed array)."""

	code = "kind-mismatch"


ERROR_KINDS: tuple[type[OwnershipError], ...] = (
	UseAfterMove,
	BorrowConflict,
	DanglingReference,
	BorrowOutlivesScope,
	BoundsError,
	DoubleDrop,
	UseAfterDrop,
	UninitializedUse,
	NotCopyable,
	MutabilityError,
	AlreadyOwned,
	UnknownBinding,
	UnknownBorrow,
	ScopeError,
	KindMismatch,
)


__all__ = ["OwnershipError", "ERROR_KINDS"] + [cls.__name__ for cls in ERROR_KINDS]
