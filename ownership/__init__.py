# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
ownership: a dynamic ownership / borrow / lifetime tracker.

Modules:
  value_table: resources, bindings and the move engine
  borrows: shared/exclusive borrow tracking
  scopes: scope stack and drop scheduler
  slices: bounds-checked slice views
  tracker: the `OwnershipTracker` facade
  program / interpreter / program_json: statement IR, runner and JSON loader

The CLI entrypoint is `ownership.cli:main`.
"""

from ownership.borrows import Borrow, BorrowKind, BorrowRef
from ownership.errors import (
	AlreadyOwned,
	BorrowConflict,
	BorrowOutlivesScope,
	BoundsError,
	DanglingReference,
	DoubleDrop,
	KindMismatch,
	MutabilityError,
	NotCopyable,
	OwnershipError,
	ScopeError,
	UninitializedUse,
	UnknownBinding,
	UnknownBorrow,
	UseAfterDrop,
	UseAfterMove,
)
from ownership.scopes import DropRecord
from ownership.slices import SliceView
from ownership.tracker import OwnershipTracker
from ownership.value_table import BindingState, Resource, ResourceState
from ownership.core.resource_kinds import ResourceKind

__all__ = [
	"OwnershipTracker",
	"Resource",
	"ResourceKind",
	"ResourceState",
	"BindingState",
	"Borrow",
	"BorrowKind",
	"BorrowRef",
	"SliceView",
	"DropRecord",
	"OwnershipError",
	"UseAfterMove",
	"BorrowConflict",
	"DanglingReference",
	"BorrowOutlivesScope",
	"BoundsError",
	"DoubleDrop",
	"KindMismatch",
	"UseAfterDrop",
	"UninitializedUse",
	"NotCopyable",
	"MutabilityError",
	"AlreadyOwned",
	"UnknownBinding",
	"UnknownBorrow",
	"ScopeError",
]
