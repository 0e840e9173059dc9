# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""Value table: ownership edges, binding states and teardown."""

import pytest

from ownership.core.resource_kinds import ResourceKind
from ownership.errors import AlreadyOwned, DoubleDrop, UninitializedUse, UseAfterDrop, UseAfterMove
from ownership.value_table import BindingState, Resource, ResourceState, ValueTable


def test_resource_of_infers_kind_from_python_values():
	assert Resource.of(5).kind is ResourceKind.SCALAR
	assert Resource.of("hi").kind is ResourceKind.TEXT
	assert Resource.of([1]).kind is ResourceKind.BUFFER
	assert Resource.of((1, 2)).kind is ResourceKind.FIXED_ARRAY
	res = Resource.text("abc")
	assert Resource.of(res) is res


def test_resource_identities_are_distinct():
	"""Every resource (including duplicates) gets a fresh id."""
	a = Resource.text("x")
	b = a.duplicate()
	assert a.rid != b.rid
	assert b.snapshot() == "x"
	assert b.state is ResourceState.IN_TRANSIT


def test_bind_links_binding_and_resource():
	table = ValueTable()
	b = table.new_binding("x", scope_id=1, order=0, mutable=False)
	res = Resource.scalar(1)
	table.bind(b, res)
	assert b.state is BindingState.OWNED
	assert res.owner == b.bid
	assert table.owner_of(res.rid) is b
	assert table.owners_of(res.rid) == [b]
	assert table.live_resources() == [res]


def test_check_bindable_rejects_owned_and_dropped_resources():
	table = ValueTable()
	a = table.new_binding("a", 1, 0, False)
	res = Resource.scalar(1)
	table.bind(a, res)
	with pytest.raises(AlreadyOwned) as excinfo:
		table.check_bindable(res)
	assert excinfo.value.binding == "a"
	table.teardown(a)
	with pytest.raises(UseAfterDrop):
		table.check_bindable(res)


def test_check_usable_reports_why():
	"""Each unusable state maps to its own error kind."""
	table = ValueTable()
	fresh = table.new_binding("u", 1, 0, False)
	with pytest.raises(UninitializedUse):
		table.check_usable(fresh)
	moved = table.new_binding("m", 1, 1, False)
	table.bind(moved, Resource.scalar(1))
	table.unbind(moved, BindingState.MOVED)
	with pytest.raises(UseAfterMove, match="use after move of 'm'"):
		table.check_usable(moved)
	dropped = table.new_binding("d", 1, 2, False)
	table.bind(dropped, Resource.scalar(1))
	table.teardown(dropped)
	with pytest.raises(UseAfterDrop):
		table.check_usable(dropped)


def test_teardown_twice_is_a_double_drop():
	table = ValueTable()
	b = table.new_binding("x", 1, 0, False)
	res = Resource.text("hi")
	table.bind(b, res)
	table.teardown(b)
	assert res.state is ResourceState.DROPPED
	# Force the inconsistent edge a second teardown would need.
	b.resource = res
	with pytest.raises(DoubleDrop):
		table.teardown(b)


def test_retire_marks_uninitialized_bindings_dropped():
	table = ValueTable()
	b = table.new_binding("later", 1, 0, True)
	table.retire(b)
	assert b.state is BindingState.DROPPED


def test_reserve_for_grows_only_growable_payloads():
	buf = Resource.buffer([1, 2, 3])
	assert buf.capacity == 3
	buf.reserve_for(4)
	assert buf.capacity == 4
	buf.reserve_for(5)
	assert buf.capacity == 8
	arr = Resource.array([1, 2])
	assert arr.capacity == 2
