"""
ownership.core: shared core types/diagnostics used across the tracker.

Modules:
  - resource_kinds: ResourceKind and the copy/growth rules
  - diagnostics: Diagnostic record
  - span: statement locations
"""

__all__ = [
    "resource_kinds",
    "diagnostics",
    "span",
]
