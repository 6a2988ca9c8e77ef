# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from halgraph.errors import UNRESOLVED_DEPENDENCY, ConfigError
from halgraph.fqname import FqName, parse_fq_name


@dataclass(frozen=True)
class ResolvedDependency:
	name: FqName
	target: str
	java_target: str
	is_core: bool


@dataclass(frozen=True)
class ResolvedDependencies:
	"""Declared dependencies in order; parse failures are collected, not raised."""

	deps: tuple[ResolvedDependency, ...] = ()
	errors: tuple[ConfigError, ...] = field(default=(), compare=False)

	@property
	def ok(self) -> bool:
		return not self.errors

	@property
	def targets(self) -> list[str]:
		return [d.target for d in self.deps]

	@property
	def java_targets(self) -> list[str]:
		return [d.java_target for d in self.deps]


def resolve_dependencies(names: list[str], *, core_prefixes: Iterable[str] = ()) -> ResolvedDependencies:
	"""
	Parse each dependency name and derive its native and Java target names.

	The native target of a package is its canonical name; the Java target is
	the `-V<major>.<minor>-java` library.
	"""
	prefixes = tuple(core_prefixes)
	deps: list[ResolvedDependency] = []
	errors: list[ConfigError] = []
	for raw in names:
		try:
			fq = parse_fq_name(raw)
		except ConfigError as err:
			errors.append(
				ConfigError(
					reason_code=UNRESOLVED_DEPENDENCY,
					message=f"cannot resolve dependency: {err.message} ({err.reason_code})",
					field="interfaces",
					value=raw,
				)
			)
			continue
		target = fq.string()
		deps.append(
			ResolvedDependency(
				name=fq,
				target=target,
				java_target=fq.java_name(),
				is_core=any(target.startswith(p) for p in prefixes),
			)
		)
	return ResolvedDependencies(deps=tuple(deps), errors=tuple(errors))


def filter_core(targets: Iterable[str], core_prefixes: Iterable[str]) -> list[str]:
	"""
	Drop core-framework targets.

	Core packages are linked through the transport library already; listing
	them again as explicit link dependencies produces duplicate symbols.
	"""
	prefixes = tuple(core_prefixes)
	return [t for t in targets if not any(t.startswith(p) for p in prefixes)]


def first_unique(items: Iterable[str]) -> list[str]:
	"""Remove exact duplicates, keeping the first occurrence of each item."""
	seen: set[str] = set()
	out: list[str] = []
	for item in items:
		if item in seen:
			continue
		seen.add(item)
		out.append(item)
	return out


__all__ = ["ResolvedDependency", "ResolvedDependencies", "resolve_dependencies", "filter_core", "first_unique"]
