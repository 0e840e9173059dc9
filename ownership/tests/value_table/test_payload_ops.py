# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""Reads and writes on owned payloads: push/extend/clear/set and concat."""

import pytest

from ownership import (
	BindingState,
	BorrowConflict,
	BoundsError,
	KindMismatch,
	MutabilityError,
	OwnershipTracker,
	Resource,
)


def test_push_grows_capacity_by_doubling():
	t = OwnershipTracker()
	t.declare("v", Resource.buffer(), mutable=True)
	assert t.capacity("v") == 0
	t.push("v", 1)
	assert t.capacity("v") == 4
	for item in range(2, 6):
		t.push("v", item)
	assert t.length("v") == 5
	assert t.capacity("v") == 8
	assert t.read("v") == (1, 2, 3, 4, 5)


def test_clear_keeps_capacity():
	t = OwnershipTracker()
	t.declare("s", Resource.text("hello", capacity=16), mutable=True)
	t.clear("s")
	assert t.length("s") == 0
	assert t.capacity("s") == 16


def test_extend_text_like_push_str():
	t = OwnershipTracker()
	t.declare("s", "hello", mutable=True)
	t.extend("s", ", world")
	t.push("s", "!")
	assert t.read("s") == "hello, world!"
	with pytest.raises(KindMismatch):
		t.push("s", "ab")
	with pytest.raises(KindMismatch):
		t.extend("s", [1, 2])
	assert t.read("s") == "hello, world!"


def test_writes_need_a_mutable_binding():
	t = OwnershipTracker()
	t.declare("v", [1])
	with pytest.raises(MutabilityError, match="cannot mutate immutable 'v'"):
		t.push("v", 2)
	assert t.read("v") == (1,)


def test_fixed_arrays_cannot_resize():
	t = OwnershipTracker()
	t.declare("a", (1, 2), mutable=True)
	with pytest.raises(KindMismatch, match="fixed-size"):
		t.push("a", 3)
	t.set_item("a", 1, 7)
	assert t.read("a") == (1, 7)
	with pytest.raises(BoundsError):
		t.set_item("a", 2, 0)


def test_scalar_write_through_exclusive_borrow():
	"""`*r = 6` on a scalar goes through set_item at index 0."""
	t = OwnershipTracker()
	t.declare("n", 5, mutable=True)
	r = t.borrow("n", "mut")
	t.set_item(t.via(r), 0, 6)
	t.release(r)
	assert t.read("n") == 6


def test_checked_and_unchecked_indexing():
	t = OwnershipTracker()
	t.declare("v", [1, 2, 3, 4, 5])
	assert t.get("v", 100) is None
	assert t.get("v", 2) == 3
	with pytest.raises(BoundsError, match="the len is 5 but the index is 100"):
		t.index("v", 100)


def test_concat_consumes_left_operand():
	t = OwnershipTracker()
	t.declare("s1", "Hello, ")
	t.declare("s2", "world!")
	t.declare("s3", t.concat("s1", "s2"))
	assert t.read("s3") == "Hello, world!"
	assert t.state("s1") is BindingState.MOVED
	assert t.read("s2") == "world!"


def test_concat_through_slice():
	t = OwnershipTracker()
	t.declare("a", [1, 2])
	t.declare("b", [3, 4, 5])
	tail = t.slice("b", 1)
	t.declare("c", t.concat("a", tail))
	assert t.read("c") == (1, 2, 4, 5)


def test_concat_rejects_self_and_fixed_left():
	t = OwnershipTracker()
	t.declare("s", "ab")
	with pytest.raises(BorrowConflict):
		t.concat("s", "s")
	assert t.read("s") == "ab"
	t.declare("arr", (1, 2))
	with pytest.raises(KindMismatch):
		t.concat("arr", "s")
	assert t.state("arr") is BindingState.OWNED


def test_extend_text_error_names_offending_items():
	t = OwnershipTracker()
	t.declare("s", "ab", mutable=True)
	with pytest.raises(KindMismatch, match=r"\[1, 2\]"):
		t.extend("s", (n for n in (1, 2)))
	assert t.read("s") == "ab"
