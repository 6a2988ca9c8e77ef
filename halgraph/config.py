# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Configuration tables for one graph-configuration run.

The core-framework and double-loadable prefix lists live here rather than as
module globals so a run (and a test) can swap them without touching shared
state. `load_config` overlays a JSON file onto the defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

# Packages shipped inside the transport library; never linked explicitly.
DEFAULT_CORE_PREFIXES: tuple[str, ...] = (
	"android.hidl.base@",
	"android.hidl.manager@",
)

DEFAULT_DOUBLE_LOADABLE_PREFIXES: tuple[str, ...] = (
	"android.hardware.configstore@",
	"android.hardware.graphics.allocator@",
	"android.hardware.graphics.bufferqueue@",
	"android.hardware.media.omx@",
	"android.hardware.media@",
	"android.hardware.neuralnetworks@",
	"android.hidl.allocator@",
	"android.hidl.token@",
)

DEFAULT_TRANSPORT_SHARED_LIBS: tuple[str, ...] = (
	"libhidlbase",
	"libhidltransport",
	"libhwbinder",
	"liblog",
	"libutils",
	"libcutils",
)

DEFAULT_TRANSPORT_EXPORTED_LIBS: tuple[str, ...] = (
	"libhidlbase",
	"libhidltransport",
	"libhwbinder",
	"libutils",
)

DEFAULT_ADAPTER_SHARED_LIBS: tuple[str, ...] = (
	"libbase",
	"libcutils",
	"libhidlbase",
	"libhidltransport",
	"libhwbinder",
	"liblog",
	"libutils",
)


@dataclass(frozen=True)
class HalGraphConfig:
	generator: str = "hidl-gen"
	extension: str = ".hal"
	interface_marker: str = "I"
	out_dir: str = "out/gen"
	core_prefixes: tuple[str, ...] = DEFAULT_CORE_PREFIXES
	double_loadable_prefixes: tuple[str, ...] = DEFAULT_DOUBLE_LOADABLE_PREFIXES
	transport_shared_libs: tuple[str, ...] = DEFAULT_TRANSPORT_SHARED_LIBS
	transport_exported_libs: tuple[str, ...] = DEFAULT_TRANSPORT_EXPORTED_LIBS
	adapter_shared_libs: tuple[str, ...] = DEFAULT_ADAPTER_SHARED_LIBS
	adapter_exported_shared_libs: tuple[str, ...] = ("libhidlbase", "libhidltransport")
	adapter_static_lib: str = "libhidladapter"
	cc_defaults: str = "hidl-module-defaults"
	java_defaults: str = "hidl-java-module-defaults"
	java_sdk_version: str = "core_current"
	java_libs: tuple[str, ...] = ("hwbinder.stubs",)

	def is_core_package(self, name: str) -> bool:
		return any(name.startswith(p) for p in self.core_prefixes)

	def is_double_loadable(self, name: str) -> bool:
		return any(name.startswith(p) for p in self.double_loadable_prefixes)


_STRING_FIELDS = {
	"generator",
	"extension",
	"interface_marker",
	"out_dir",
	"adapter_static_lib",
	"cc_defaults",
	"java_defaults",
	"java_sdk_version",
}
_LIST_FIELDS = {
	"core_prefixes",
	"double_loadable_prefixes",
	"transport_shared_libs",
	"transport_exported_libs",
	"adapter_shared_libs",
	"adapter_exported_shared_libs",
	"java_libs",
}


def config_from_mapping(data: dict[str, Any], *, base: HalGraphConfig | None = None) -> HalGraphConfig:
	"""Overlay a decoded config object onto `base` (defaults when omitted)."""
	if not isinstance(data, dict):
		raise ValueError("config must be a JSON object")
	if data.get("format") != "halgraph-config" or data.get("version") != 0:
		raise ValueError("unsupported config format/version")
	allowed = {"format", "version"} | _STRING_FIELDS | _LIST_FIELDS
	unknown = sorted(set(data.keys()) - allowed)
	if unknown:
		raise ValueError(f"config has unknown fields: {', '.join(unknown)}")

	updates: dict[str, Any] = {}
	for key in sorted(_STRING_FIELDS & data.keys()):
		val = data[key]
		if not isinstance(val, str) or not val:
			raise ValueError(f"config field '{key}' must be a non-empty string")
		updates[key] = val
	for key in sorted(_LIST_FIELDS & data.keys()):
		val = data[key]
		if not isinstance(val, list) or any((not isinstance(v, str) or not v) for v in val):
			raise ValueError(f"config field '{key}' must be a list of non-empty strings")
		updates[key] = tuple(val)
	return replace(base or HalGraphConfig(), **updates)


def load_config(path: Path) -> HalGraphConfig:
	data = json.loads(path.read_text(encoding="utf-8"))
	return config_from_mapping(data)


__all__ = ["HalGraphConfig", "config_from_mapping", "load_config"]
