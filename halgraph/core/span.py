# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source location attached to declarations and configuration errors.

Declarations parsed from a Blueprint file carry the file/line/column of the
module block; declarations built in code carry an empty Span.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column of a declaration."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_meta(cls, meta: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a lark `Meta` (or any object with line/column).

		Lark leaves `meta.empty` set when the rule matched nothing; that maps to
		a Span carrying only the file.
		"""
		if meta is None or getattr(meta, "empty", False):
			return cls(file=file)
		return cls(file=file, line=getattr(meta, "line", None), column=getattr(meta, "column", None))

	def is_known(self) -> bool:
		return self.file is not None or self.line is not None

	def __str__(self) -> str:
		if self.file is None and self.line is None:
			return "<unknown>"
		loc = self.file or "<input>"
		if self.line is not None:
			loc += f":{self.line}"
			if self.column is not None:
				loc += f":{self.column}"
		return loc


__all__ = ["Span"]
