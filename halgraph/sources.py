# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field

from halgraph.errors import INVALID_SOURCE_EXTENSION, ConfigError


@dataclass(frozen=True)
class ClassifiedSources:
	"""
	Interface and type base names of a package, in declaration order.

	`IFoo.hal` contributes interface `Foo`; `types.hal` contributes type
	`types`. The marker check is a plain prefix test on the file name, so a
	type file that happens to start with the marker is an interface here.
	"""

	interfaces: tuple[str, ...] = ()
	types: tuple[str, ...] = ()
	errors: tuple[ConfigError, ...] = field(default=(), compare=False)

	@property
	def ok(self) -> bool:
		return not self.errors

	@property
	def is_empty(self) -> bool:
		return not self.interfaces and not self.types


def classify_sources(srcs: list[str], *, extension: str = ".hal", marker: str = "I") -> ClassifiedSources:
	"""
	Split `srcs` into interface and type definitions.

	Files without `extension` are reported and skipped; classification of the
	remaining files continues so one pass reports every bad name.
	"""
	interfaces: list[str] = []
	types: list[str] = []
	errors: list[ConfigError] = []
	for src in srcs:
		if not src.endswith(extension):
			errors.append(
				ConfigError(
					reason_code=INVALID_SOURCE_EXTENSION,
					message=f"source must be a {extension} file: {src}",
					field="srcs",
					value=src,
				)
			)
			continue
		name = src[: -len(extension)]
		if name.startswith(marker):
			interfaces.append(name[len(marker) :])
		else:
			types.append(name)
	return ClassifiedSources(interfaces=tuple(interfaces), types=tuple(types), errors=tuple(errors))


__all__ = ["ClassifiedSources", "classify_sources"]
