# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""Error taxonomy: stable codes and structured payloads."""

import pytest

from ownership.errors import ERROR_KINDS, BorrowConflict, KindMismatch, OwnershipError, UseAfterMove


def test_error_codes_are_unique():
	codes = [kind.code for kind in ERROR_KINDS]
	assert len(codes) == len(set(codes))
	assert all(issubclass(kind, OwnershipError) for kind in ERROR_KINDS)


def test_error_renders_code_and_message():
	err = UseAfterMove("use after move of 'x'", binding="x", resource_id=7)
	assert str(err) == "[use-after-move] use after move of 'x'"
	assert err.to_dict() == {"code": "use-after-move", "message": "use after move of 'x'", "binding": "x", "resource_id": 7}


def test_errors_are_raisable_and_catchable_by_base():
	with pytest.raises(OwnershipError) as excinfo:
		raise BorrowConflict("conflict", binding="r")
	assert excinfo.value.code == "borrow-conflict"
	assert excinfo.value.binding == "r"


def test_kind_mismatch_is_also_a_type_error():
	"""Wrong payload kinds can be caught as plain TypeErrors."""
	with pytest.raises(TypeError):
		raise KindMismatch("cannot resize fixed-size array 'a'")
