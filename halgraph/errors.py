# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from halgraph.core.span import Span

# Stable reason codes. Tests and `--json` consumers key on these strings.
MALFORMED_VERSION = "MalformedVersion"
EMPTY_NAME = "EmptyName"
DUPLICATE_ROOT = "DuplicateRoot"
ROOT_NOT_FOUND = "RootNotFound"
NAME_NOT_IN_ROOT = "NameNotInRoot"
INVALID_SOURCE_EXTENSION = "InvalidSourceExtension"
NO_SOURCES = "NoSources"
NO_OUTPUTS = "NoOutputs"
UNRESOLVED_DEPENDENCY = "UnresolvedDependency"
DEPENDENCY_CYCLE = "DependencyCycle"
DUPLICATE_PACKAGE = "DuplicatePackage"
INVALID_DECLARATION = "InvalidDeclaration"
PARSE_ERROR = "ParseError"

REASON_CODES = frozenset(
	{
		MALFORMED_VERSION,
		EMPTY_NAME,
		DUPLICATE_ROOT,
		ROOT_NOT_FOUND,
		NAME_NOT_IN_ROOT,
		INVALID_SOURCE_EXTENSION,
		NO_SOURCES,
		NO_OUTPUTS,
		UNRESOLVED_DEPENDENCY,
		DEPENDENCY_CYCLE,
		DUPLICATE_PACKAGE,
		INVALID_DECLARATION,
		PARSE_ERROR,
	}
)


@dataclass(frozen=True)
class ConfigError(Exception):
	"""
	A structured, serializable graph-configuration error.

	Every error is attributed to the declaration that caused it (`module`) and,
	where it applies, the offending property (`field`) and value (`value`) so
	the message is enough to fix the declaration.
	"""

	reason_code: str
	message: str
	module: str | None = None
	field: str | None = None
	value: str | None = None
	span: Span | None = None

	def __str__(self) -> str:
		return self.format_human()

	def with_context(self, *, module: str | None = None, span: Span | None = None) -> "ConfigError":
		"""Return a copy attributed to `module`/`span` where not already set."""
		return ConfigError(
			reason_code=self.reason_code,
			message=self.message,
			module=self.module if self.module is not None else module,
			field=self.field,
			value=self.value,
			span=self.span if self.span is not None else span,
		)

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"module": self.module,
			"field": self.field,
			"value": self.value,
			"file": self.span.file if self.span is not None else None,
			"line": self.span.line if self.span is not None else None,
			"column": self.span.column if self.span is not None else None,
		}

	def format_human(self) -> str:
		parts: list[str] = []
		if self.span is not None and self.span.is_known():
			parts.append(f"{self.span}:")
		parts.append(f"[{self.reason_code}] {self.message}")
		if self.module:
			parts.append(f"module={self.module}")
		if self.field:
			parts.append(f"field={self.field}")
		if self.value is not None:
			parts.append(f"value={self.value!r}")
		return " ".join(parts)


def sort_errors(errors: list[ConfigError]) -> list[ConfigError]:
	"""Report order: by location, then module; accumulation order within a module."""
	return sorted(
		errors,
		key=lambda e: (
			(e.span.file or "") if e.span is not None else "",
			(e.span.line or 0) if e.span is not None else 0,
			e.module or "",
		),
	)


__all__ = ["ConfigError", "REASON_CODES", "sort_errors"]
