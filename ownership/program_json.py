# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
JSON encoding of ownership programs.

A program file is `{"statements": [...]}` (a bare list is accepted too). Each
statement is an object with an `op` key; see `_BUILDERS` for the supported
ops and their fields. Optional `line`/`column` keys end up in the statement
Span so diagnostics can point back into the file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from ownership import program as P
from ownership.borrows import BorrowKind
from ownership.core.span import Span

ProgramFormatError = P.ProgramFormatError


def load_program(path: Path) -> P.Program:
	"""Read and decode a program file."""
	try:
		raw = json.loads(Path(path).read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise ProgramFormatError(f"{path}: invalid JSON: {err.msg} (line {err.lineno})") from err
	return program_from_json(raw, file=str(path))


def program_from_json(raw: Any, *, file: Optional[str] = None) -> P.Program:
	"""Decode an already-parsed JSON document into a Program."""
	if isinstance(raw, Mapping):
		stmts = raw.get("statements")
		if not isinstance(stmts, list):
			raise ProgramFormatError("program must have a 'statements' list")
	elif isinstance(raw, list):
		stmts = raw
	else:
		raise ProgramFormatError("program must be an object or a list of statements")
	return P.Program(statements=_decode_block(stmts, "", file), file=file)


def value_from_json(raw: Any) -> P.Value:
	"""`{"kind": ..., "data": ...}` or a bare shorthand (str/list/number/bool)."""
	if isinstance(raw, Mapping):
		if "kind" not in raw:
			raise ProgramFormatError("value object needs a 'kind'")
		kind = raw["kind"]
		data = raw.get("data")
		if kind in ("array", "buffer") and not isinstance(data, list):
			raise ProgramFormatError(f"{kind} value needs a list 'data'")
		if kind == "text" and not isinstance(data, str):
			raise ProgramFormatError("text value needs a string 'data'")
		return P.Value(kind, data)
	if raw is None:
		raise ProgramFormatError("missing value")
	return P.Value.infer(raw)


def _decode_block(stmts: List[Any], prefix: str, file: Optional[str]) -> List[P.Stmt]:
	out: List[P.Stmt] = []
	for idx, raw in enumerate(stmts):
		where = f"{prefix}{idx}"
		try:
			out.append(_decode_stmt(raw, where, file))
		except ProgramFormatError as err:
			if str(err).startswith("statement "):
				raise
			raise ProgramFormatError(f"statement {where}: {err}") from None
	return out


def _decode_stmt(raw: Any, where: str, file: Optional[str]) -> P.Stmt:
	if not isinstance(raw, Mapping):
		raise ProgramFormatError("statement must be an object")
	op = raw.get("op")
	if not isinstance(op, str):
		raise ProgramFormatError("statement needs a string 'op'")
	builder = _BUILDERS.get(op)
	if builder is None:
		raise ProgramFormatError(f"unknown op {op!r}")
	loc = Span(file=raw.get("file", file), line=raw.get("line"), column=raw.get("column"), path=where)
	try:
		stmt = builder(raw, where, file)
	except KeyError as err:
		raise ProgramFormatError(f"'{op}' is missing field {err.args[0]!r}") from None
	stmt.loc = loc
	return stmt


def _name(raw: Mapping[str, Any], key: str) -> str:
	val = raw[key]
	if not isinstance(val, str) or not val:
		raise ProgramFormatError(f"field {key!r} must be a non-empty string")
	return val


def _opt_name(raw: Mapping[str, Any], key: str) -> Optional[str]:
	if raw.get(key) is None:
		return None
	return _name(raw, key)


def _int(raw: Mapping[str, Any], key: str, default: Optional[int] = None) -> Optional[int]:
	val = raw.get(key, default)
	if val is None:
		return None
	if isinstance(val, bool) or not isinstance(val, int):
		raise ProgramFormatError(f"field {key!r} must be an integer")
	return val


def _borrow_kind(raw: Mapping[str, Any]) -> str:
	val = raw.get("kind", "shared")
	try:
		BorrowKind.parse(str(val))
	except ValueError as err:
		raise ProgramFormatError(str(err)) from None
	return str(val)


def _text_or_items(raw: Mapping[str, Any]) -> Any:
	val = raw["value"]
	if isinstance(val, (str, list)):
		return val
	raise ProgramFormatError("field 'value' must be a string or a list")


_Builder = Callable[[Mapping[str, Any], str, Optional[str]], P.Stmt]

_BUILDERS: Dict[str, _Builder] = {
	"declare": lambda r, w, f: P.Declare(
		name=_name(r, "name"),
		value=value_from_json(r["value"]) if r.get("value") is not None else None,
		mutable=bool(r.get("mutable", False)),
	),
	"scope": lambda r, w, f: P.Scope(
		body=_decode_block(list(r.get("body", [])), f"{w}.", f),
		label=r.get("label"),
	),
	"move": lambda r, w, f: P.Move(source=_name(r, "source"), into=_opt_name(r, "into"), mutable=bool(r.get("mutable", False))),
	"copy": lambda r, w, f: P.Copy(source=_name(r, "source"), into=_name(r, "into"), mutable=bool(r.get("mutable", False))),
	"clone": lambda r, w, f: P.Clone(source=_name(r, "source"), into=_name(r, "into"), mutable=bool(r.get("mutable", False))),
	"assign": lambda r, w, f: P.Assign(
		target=_name(r, "target"),
		value=value_from_json(r["value"]) if r.get("value") is not None else None,
		source=_opt_name(r, "source"),
	),
	"borrow": lambda r, w, f: P.Borrow(
		target=_name(r, "target"),
		kind=_borrow_kind(r),
		label=_opt_name(r, "label"),
		holder=_opt_name(r, "holder"),
	),
	"release": lambda r, w, f: P.Release(label=_name(r, "label")),
	"slice": lambda r, w, f: P.Slice(
		target=_name(r, "target"),
		start=_int(r, "start", 0) or 0,
		end=_int(r, "end"),
		label=_opt_name(r, "label"),
		holder=_opt_name(r, "holder"),
	),
	"use": lambda r, w, f: P.Use(target=_name(r, "target")),
	"push": lambda r, w, f: P.Push(target=_name(r, "target"), value=r["value"]),
	"extend": lambda r, w, f: P.Extend(target=_name(r, "target"), value=_text_or_items(r)),
	"clear": lambda r, w, f: P.Clear(target=_name(r, "target")),
	"set": lambda r, w, f: P.SetItem(target=_name(r, "target"), index=_int(r, "index", 0) or 0, value=r["value"]),
	"concat": lambda r, w, f: P.Concat(
		left=_name(r, "left"),
		right=_name(r, "right"),
		into=_name(r, "into"),
		mutable=bool(r.get("mutable", False)),
	),
	"drop": lambda r, w, f: P.Drop(target=_name(r, "target")),
}


__all__ = ["ProgramFormatError", "load_program", "program_from_json", "value_from_json"]
