# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
Ownership programs: a sugar-free statement tree run by the interpreter.

A program is a sequence of scoped statements. Names refer to bindings or to
borrow labels (a label plays the role of a reference binding such as
`let r = &s;`). Nodes are purely structural; every rule lives in the tracker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ownership.core.span import Span
from ownership.value_table import Resource


class ProgramFormatError(ValueError):
	"""A program (or one of its statements) is malformed."""


# Values

VALUE_KINDS = ("scalar", "array", "buffer", "text")


@dataclass
class Value:
	"""Literal payload of a declaration/assignment."""

	kind: str
	data: Any

	def __post_init__(self) -> None:
		if self.kind not in VALUE_KINDS:
			raise ProgramFormatError(f"unknown value kind {self.kind!r}; expected one of {', '.join(VALUE_KINDS)}")

	@classmethod
	def infer(cls, data: Any) -> "Value":
		"""Shorthand: str -> text, list -> buffer, tuple -> array, anything else -> scalar."""
		if isinstance(data, str):
			return cls("text", data)
		if isinstance(data, list):
			return cls("buffer", data)
		if isinstance(data, tuple):
			return cls("array", list(data))
		return cls("scalar", data)

	def to_resource(self) -> Resource:
		if self.kind == "scalar":
			return Resource.scalar(self.data)
		if self.kind == "array":
			return Resource.array(self.data)
		if self.kind == "buffer":
			return Resource.buffer(self.data)
		return Resource.text(str(self.data))


# Statements

class Stmt:
	"""Base class for all program statements."""

	loc: Span = Span()


@dataclass
class Declare(Stmt):
	"""`let [mut] name [= value];`"""
	name: str
	value: Optional[Value] = None
	mutable: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class Scope(Stmt):
	"""`{ ... }`; also used for function bodies."""
	body: List[Stmt] = field(default_factory=list)
	label: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class Move(Stmt):
	"""`let into = source;` or, without `into`, passing `source` by value to a callee."""
	source: str
	into: Optional[str] = None
	mutable: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class Copy(Stmt):
	source: str
	into: str
	mutable: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class Clone(Stmt):
	source: str
	into: str
	mutable: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class Assign(Stmt):
	"""`target = value;` or `target = source;` (moving `source`)."""
	target: str
	value: Optional[Value] = None
	source: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class Borrow(Stmt):
	"""`let label = &target;` / `&mut target`; `holder` names the binding that keeps the reference."""
	target: str
	kind: str = "shared"
	label: Optional[str] = None
	holder: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class Release(Stmt):
	"""Last use of a reference: the borrow named `label` ends here."""
	label: str
	loc: Span = field(default_factory=Span)


@dataclass
class Slice(Stmt):
	"""`let label = &target[start..end];`"""
	target: str
	start: int = 0
	end: Optional[int] = None
	label: Optional[str] = None
	holder: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class Use(Stmt):
	"""Read `target` (e.g. printing it)."""
	target: str
	loc: Span = field(default_factory=Span)


@dataclass
class Push(Stmt):
	target: str
	value: Any = None
	loc: Span = field(default_factory=Span)


@dataclass
class Extend(Stmt):
	"""`target.push_str(value)` / `target.extend(value)`."""
	target: str
	value: Any = None
	loc: Span = field(default_factory=Span)


@dataclass
class Clear(Stmt):
	target: str
	loc: Span = field(default_factory=Span)


@dataclass
class SetItem(Stmt):
	"""`target[index] = value` (also `*r = value` for scalars, index 0)."""
	target: str
	index: int = 0
	value: Any = None
	loc: Span = field(default_factory=Span)


@dataclass
class Concat(Stmt):
	"""`let into = left + &right;`"""
	left: str
	right: str
	into: str
	mutable: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class Drop(Stmt):
	"""`drop(target);`"""
	target: str
	loc: Span = field(default_factory=Span)


@dataclass
class Program:
	statements: List[Stmt] = field(default_factory=list)
	file: Optional[str] = None


__all__ = [
	"ProgramFormatError",
	"VALUE_KINDS",
	"Value",
	"Stmt",
	"Declare", "Scope", "Move", "Copy", "Clone", "Assign",
	"Borrow", "Release", "Slice", "Use",
	"Push", "Extend", "Clear", "SetItem", "Concat", "Drop",
	"Program",
]
