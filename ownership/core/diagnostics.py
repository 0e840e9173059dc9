"""
Common diagnostic structure for the tracker, the interpreter and the CLI.

Strict trackers raise `OwnershipError`s; permissive trackers and the program
interpreter turn them into Diagnostics so a whole program can be reported on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents an ownership diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional phase label ("ownership" for tracker violations, "program" for
	# malformed statements). Keeps JSON output unambiguous.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Statement location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_json(self, default_file: str | None = None) -> dict[str, Any]:
		"""Return the JSON-ready form used by `--json` output."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or default_file,
			"line": self.span.line,
			"column": self.span.column,
			"path": self.span.path,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
