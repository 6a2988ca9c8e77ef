# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package-root registry.

A package root maps a namespace prefix (`android.hardware`) to the directory
that holds its definitions (`hardware/interfaces`). The generator learns about
it through `-r<name>:<path>`. One registry exists per configuration run; all
roots are registered before any package is resolved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from halgraph.core.span import Span
from halgraph.errors import DUPLICATE_ROOT, ROOT_NOT_FOUND, ConfigError


@dataclass(frozen=True)
class PackageRoot:
	name: str
	path: str
	use_current: bool = False
	span: Span = field(default_factory=Span, compare=False)

	def full_root_option(self) -> str:
		return f"-r{self.name}:{self.path}"

	def current_paths(self) -> list[str]:
		"""API snapshot files that every generation under this root reads."""
		if not self.use_current:
			return []
		return [f"{self.path}/current.txt"]


def _missing_root_hint(root: str, module: str | None) -> str:
	needed = f" needed for module '{module}'" if module else ""
	return (
		f"cannot find package root specification for package root '{root}'{needed}. "
		"Either this is a misspelling of the package root, or a new hidl_package_root "
		"module needs to be added, for example:\n\n"
		"hidl_package_root {\n"
		f'    name: "{root}",\n'
		'    path: "<some path>",\n'
		"}\n\n"
		f'This corresponds to the "-r{root}:<some path>" option passed to the generator.'
	)


class PackageRootRegistry:
	"""Write-once table of package roots, keyed by identifier."""

	def __init__(self) -> None:
		self._roots: dict[str, PackageRoot] = {}

	def register(self, name: str, path: str, *, use_current: bool = False, span: Span | None = None) -> PackageRoot:
		if name in self._roots:
			prev = self._roots[name]
			raise ConfigError(
				reason_code=DUPLICATE_ROOT,
				message=f"package root '{name}' is already registered (path '{prev.path}', declared at {prev.span})",
				module=name,
				field="name",
				value=name,
				span=span,
			)
		root = PackageRoot(name=name, path=path, use_current=use_current, span=span or Span())
		self._roots[name] = root
		return root

	def get(self, name: str) -> PackageRoot | None:
		return self._roots.get(name)

	def lookup(self, name: str, *, module: str | None = None) -> PackageRoot:
		root = self._roots.get(name)
		if root is None:
			raise ConfigError(
				reason_code=ROOT_NOT_FOUND,
				message=_missing_root_hint(name, module),
				module=module,
				field="root",
				value=name,
			)
		return root

	def __contains__(self, name: object) -> bool:
		return name in self._roots

	def __iter__(self) -> Iterator[PackageRoot]:
		return iter(sorted(self._roots.values(), key=lambda r: r.name))

	def __len__(self) -> int:
		return len(self._roots)


__all__ = ["PackageRoot", "PackageRootRegistry"]
