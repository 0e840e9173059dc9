# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span locates a statement of an ownership program: the file it was loaded
from, the line recorded in the program (when present) and the statement path
(`0.3.1` = statement 1 of the scope at statement 3 of the top level).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a statement location (best-effort file/line/column plus path)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	path: Optional[str] = None

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from an existing location object or mapping.

		If `loc` is already a Span, it is returned unchanged. Mappings (as found
		in JSON programs) contribute their `file`/`line`/`column` keys.
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		if isinstance(loc, dict):
			return cls(file=loc.get("file"), line=loc.get("line"), column=loc.get("column"), path=loc.get("path"))
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			path=getattr(loc, "path", None),
		)

	def with_file(self, file: Optional[str]) -> "Span":
		"""Return a copy of this span attributed to `file`."""
		return Span(file=file, line=self.line, column=self.column, path=self.path)

	def format(self) -> str:
		"""Render as `line:column`, using `?` for unknown parts."""
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Span"]
