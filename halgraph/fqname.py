# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fully-qualified HAL package names (`android.hardware.foo@1.0`).

Every target name in the graph is a pure function of an `FqName` plus an
artifact kind. Dependency edges are computed independently on each side
(the dependent names its dependency's library without looking it up), so
these derivations must never depend on anything but the value itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from halgraph.errors import EMPTY_NAME, MALFORMED_VERSION, ConfigError

VERSION_DELIMITER = "@"
PACKAGE_SEPARATOR = "."

# No leading zeros, so the canonical string reproduces the input exactly.
_VERSION_RE = re.compile(r"(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)")


@dataclass(frozen=True)
class FqName:
	"""
	Parsed package identity.

	`major`/`minor` are both set or both None; unversioned names only come
	from `parse_fq_name(..., allow_unversioned=True)` (package roots and other
	meta names).
	"""

	package: tuple[str, ...]
	major: int | None = None
	minor: int | None = None

	def __post_init__(self) -> None:
		if not self.package:
			raise ValueError("FqName requires at least one package segment")
		if (self.major is None) != (self.minor is None):
			raise ValueError("FqName major/minor must be set together")
		if self.major is not None and (self.major < 0 or self.minor < 0):  # type: ignore[operator]
			raise ValueError("FqName version components must be non-negative")

	def __str__(self) -> str:
		return self.string()

	@property
	def is_versioned(self) -> bool:
		return self.major is not None

	def pkg(self) -> str:
		return PACKAGE_SEPARATOR.join(self.package)

	def version(self) -> str:
		if self.major is None:
			return ""
		return f"{self.major}.{self.minor}"

	def string(self) -> str:
		"""Canonical form; reproduces the parsed input exactly."""
		if self.major is None:
			return self.pkg()
		return f"{self.pkg()}{VERSION_DELIMITER}{self.version()}"

	def sanitized_version(self) -> str:
		return f"V{self.major}_{self.minor}"

	def dir(self) -> str:
		"""Generated-file directory for C++ outputs, e.g. `android/hardware/foo/1.0/`."""
		return "/".join(self.package) + "/" + self.version() + "/"

	def sanitized_dir(self) -> str:
		"""Java package directory, e.g. `android/hardware/foo/V1_0/`."""
		return "/".join(self.package) + "/" + self.sanitized_version() + "/"

	def in_package(self, root: str) -> bool:
		"""True iff the dot-separated segments of `root` lead this name's package."""
		root_parts = root.split(PACKAGE_SEPARATOR)
		if len(root_parts) > len(self.package):
			return False
		return tuple(root_parts) == self.package[: len(root_parts)]

	# Target names. One per artifact kind.

	def interface_module_name(self) -> str:
		return self.string() + "_interface"

	def file_group_name(self) -> str:
		return self.string() + "_hal"

	def sources_name(self) -> str:
		return self.string() + "_genc++"

	def headers_name(self) -> str:
		return self.string() + "_genc++_headers"

	def java_name(self) -> str:
		return f"{self.pkg()}-V{self.version()}-java"

	def java_sources_name(self) -> str:
		return self.java_name() + "_gen_java"

	def java_constants_name(self) -> str:
		return f"{self.pkg()}-V{self.version()}-java-constants"

	def java_constants_sources_name(self) -> str:
		return self.java_constants_name() + "_gen_java"

	def adapter_name(self) -> str:
		return self.string() + "-adapter"

	def adapter_sources_name(self) -> str:
		return self.adapter_name() + "_genc++"

	def adapter_helper_name(self) -> str:
		return self.string() + "-adapter-helper"

	def adapter_helper_sources_name(self) -> str:
		return self.adapter_helper_name() + "_genc++"

	def adapter_helper_headers_name(self) -> str:
		return self.adapter_helper_name() + "_genc++_headers"


def parse_fq_name(raw: str, *, allow_unversioned: bool = False) -> FqName:
	"""
	Parse `pkg.path@major.minor`.

	Raises `ConfigError` with reason `MalformedVersion` when the version is
	missing (and `allow_unversioned` is false) or not `<int>.<int>` with no
	leading zeros, and `EmptyName` when the package part has no segments or an
	empty segment.
	"""
	if not isinstance(raw, str):
		raise ConfigError(reason_code=EMPTY_NAME, message=f"package name must be a string, got {type(raw).__name__}")

	pkg_part, sep, version_part = raw.partition(VERSION_DELIMITER)
	major: int | None = None
	minor: int | None = None
	if sep:
		m = _VERSION_RE.fullmatch(version_part)
		if m is None:
			raise ConfigError(
				reason_code=MALFORMED_VERSION,
				message=f"poorly formed version in '{raw}': expected '<major>.<minor>' after '@'",
				value=raw,
			)
		major = int(m.group(1))
		minor = int(m.group(2))
	elif not allow_unversioned:
		raise ConfigError(
			reason_code=MALFORMED_VERSION,
			message=f"poorly formed package name '{raw}': must match 'pkg.path@major.minor'",
			value=raw,
		)

	if not pkg_part:
		raise ConfigError(reason_code=EMPTY_NAME, message=f"package name '{raw}' has no path segments", value=raw)
	segments = tuple(pkg_part.split(PACKAGE_SEPARATOR))
	if any(not s for s in segments):
		raise ConfigError(reason_code=EMPTY_NAME, message=f"package name '{raw}' has an empty path segment", value=raw)
	return FqName(package=segments, major=major, minor=minor)


__all__ = ["FqName", "parse_fq_name", "VERSION_DELIMITER", "PACKAGE_SEPARATOR"]
