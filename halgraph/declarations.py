# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Typed declarations for the two module types this tool understands.

`hidl_package_root` registers a package root; `hidl_interface` declares an
interface package. Every other module type in a declaration file belongs to
someone else and is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from halgraph.blueprint import ModuleDecl, load_blueprint
from halgraph.core.span import Span
from halgraph.errors import INVALID_DECLARATION, ConfigError

logger = logging.getLogger(__name__)

ROOT_MODULE_TYPE = "hidl_package_root"
INTERFACE_MODULE_TYPE = "hidl_interface"

# Property name -> value type, or a nested schema for map-valued properties.
Schema = dict[str, Any]

_MULTILIB_PROPERTIES: Schema = {"compile_multilib": str}

# Properties shared by all module kinds; copied verbatim onto every generated node.
COMMON_PROPERTIES: Schema = {
	"enabled": bool,
	"compile_multilib": str,
	"target": {"host": _MULTILIB_PROPERTIES, "android": _MULTILIB_PROPERTIES},
	"owner": str,
	"vendor": bool,
	"proprietary": bool,
	"soc_specific": bool,
	"device_specific": bool,
	"product_specific": bool,
	"product_services_specific": bool,
	"recovery": bool,
	"required": list,
	"init_rc": list,
	"vintf_fragments": list,
	"notice": str,
	"dist": {"targets": list, "dest": str, "dir": str, "suffix": str},
}

_VNDK_PROPERTIES: Schema = {
	"enabled": bool,
	"support_system_process": bool,
}


@dataclass(frozen=True)
class RootDeclaration:
	name: str
	path: str
	use_current: bool = False
	span: Span = field(default_factory=Span, compare=False)


@dataclass(frozen=True)
class InterfaceDeclaration:
	"""
	One `hidl_interface` block.

	`srcs` are relative to `dir`, the directory of the declaring file.
	`types` lists the non-typedef types of `types.hal`; it only shapes the
	Java output file names.
	"""

	name: str
	root: str
	srcs: tuple[str, ...] = ()
	interfaces: tuple[str, ...] = ()
	types: tuple[str, ...] = ()
	gen_java: bool = True
	gen_java_constants: bool = False
	common: dict[str, Any] = field(default_factory=dict, compare=False)
	vndk: dict[str, Any] | None = field(default=None, compare=False)
	dir: str = ""
	span: Span = field(default_factory=Span, compare=False)


@dataclass
class Declarations:
	roots: list[RootDeclaration] = field(default_factory=list)
	interfaces: list[InterfaceDeclaration] = field(default_factory=list)
	errors: list[ConfigError] = field(default_factory=list)

	def extend(self, other: "Declarations") -> None:
		self.roots.extend(other.roots)
		self.interfaces.extend(other.interfaces)
		self.errors.extend(other.errors)


class _PropertyReader:
	"""Type-checked access to a module's properties; problems accumulate."""

	def __init__(self, mod: ModuleDecl) -> None:
		self.mod = mod
		self.errors: list[ConfigError] = []
		self.seen: set[str] = set()

	def _err(self, prop: str, msg: str, value: Any = None) -> None:
		self.errors.append(
			ConfigError(
				reason_code=INVALID_DECLARATION,
				message=msg,
				module=self.mod.name,
				field=prop,
				value=None if value is None else str(value),
				span=self.mod.span,
			)
		)

	def string(self, prop: str, *, required: bool = False) -> str | None:
		self.seen.add(prop)
		val = self.mod.properties.get(prop)
		if val is None:
			if required:
				self._err(prop, f"{self.mod.module_type} is missing required property '{prop}'")
			return None
		if not isinstance(val, str) or not val:
			self._err(prop, f"property '{prop}' must be a non-empty string", val)
			return None
		return val

	def boolean(self, prop: str, default: bool) -> bool:
		self.seen.add(prop)
		val = self.mod.properties.get(prop)
		if val is None:
			return default
		if not isinstance(val, bool):
			self._err(prop, f"property '{prop}' must be a bool", val)
			return default
		return val

	def strings(self, prop: str) -> tuple[str, ...]:
		self.seen.add(prop)
		val = self.mod.properties.get(prop)
		if val is None:
			return ()
		if not isinstance(val, list) or any(not isinstance(v, str) for v in val):
			self._err(prop, f"property '{prop}' must be a list of strings", val)
			return ()
		return tuple(val)

	def typed_map(self, prop: str, schema: Schema) -> dict[str, Any] | None:
		self.seen.add(prop)
		val = self.mod.properties.get(prop)
		if val is None:
			return None
		return self._checked_map(prop, val, schema)

	def _checked_map(self, prop: str, val: Any, schema: Schema) -> dict[str, Any] | None:
		if not isinstance(val, dict):
			self._err(prop, f"property '{prop}' must be a map", val)
			return None
		out: dict[str, Any] = {}
		for key in sorted(val):
			want = schema.get(key)
			if want is None:
				self._err(f"{prop}.{key}", f"unknown property '{prop}.{key}'")
				continue
			checked = self._checked(f"{prop}.{key}", val[key], want)
			if checked is not None:
				out[key] = checked
		return out

	def _checked(self, prop: str, val: Any, want: type | Schema) -> Any:
		if isinstance(want, dict):
			return self._checked_map(prop, val, want)
		if not _is_instance(val, want):
			self._err(prop, f"property '{prop}' must be a {want.__name__}", val)
			return None
		return val

	def common(self) -> dict[str, Any]:
		out: dict[str, Any] = {}
		for prop, want in COMMON_PROPERTIES.items():
			if prop not in self.mod.properties:
				continue
			self.seen.add(prop)
			checked = self._checked(prop, self.mod.properties[prop], want)
			if checked is not None:
				out[prop] = checked
		return out

	def reject_unknown(self) -> None:
		for prop in sorted(set(self.mod.properties) - self.seen):
			self._err(prop, f"unrecognized property '{prop}' for {self.mod.module_type}")


def _is_instance(val: Any, want: type) -> bool:
	if want is bool:
		return isinstance(val, bool)
	if want is list:
		return isinstance(val, list) and all(isinstance(v, str) for v in val)
	return isinstance(val, want) and not isinstance(val, bool)


def _root_from_module(mod: ModuleDecl) -> tuple[RootDeclaration | None, list[ConfigError]]:
	r = _PropertyReader(mod)
	name = r.string("name", required=True)
	path = r.string("path", required=True)
	use_current = r.boolean("use_current", False)
	r.reject_unknown()
	if r.errors or name is None or path is None:
		return None, r.errors
	return RootDeclaration(name=name, path=path, use_current=use_current, span=mod.span), []


def _interface_from_module(mod: ModuleDecl, *, dir: str) -> tuple[InterfaceDeclaration | None, list[ConfigError]]:
	r = _PropertyReader(mod)
	name = r.string("name", required=True)
	root = r.string("root", required=True)
	decl = InterfaceDeclaration(
		name=name or "",
		root=root or "",
		srcs=r.strings("srcs"),
		interfaces=r.strings("interfaces"),
		types=r.strings("types"),
		gen_java=r.boolean("gen_java", True),
		gen_java_constants=r.boolean("gen_java_constants", False),
		common=r.common(),
		vndk=r.typed_map("vndk", _VNDK_PROPERTIES),
		dir=dir,
		span=mod.span,
	)
	r.reject_unknown()
	if r.errors or name is None or root is None:
		return None, r.errors
	return decl, []


def declarations_from_modules(modules: Iterable[ModuleDecl], *, dir: str = "") -> Declarations:
	out = Declarations()
	for mod in modules:
		if mod.module_type == ROOT_MODULE_TYPE:
			root, errs = _root_from_module(mod)
			out.errors.extend(errs)
			if root is not None:
				out.roots.append(root)
		elif mod.module_type == INTERFACE_MODULE_TYPE:
			iface, errs = _interface_from_module(mod, dir=dir)
			out.errors.extend(errs)
			if iface is not None:
				out.interfaces.append(iface)
		else:
			logger.warning("skipping module type %s at %s", mod.module_type, mod.span)
	return out


def load_declarations(paths: Iterable[Path], *, base_dir: Path | None = None) -> Declarations:
	"""
	Load every declaration file in `paths`.

	`dir` of each interface is the file's directory relative to `base_dir`
	(the current directory when omitted), so source paths come out relative
	to the tree root the generator runs in. A file with a syntax error
	contributes its ParseError and nothing else.
	"""
	base = (base_dir or Path.cwd()).resolve()
	out = Declarations()
	for path in paths:
		try:
			modules = load_blueprint(path)
		except ConfigError as err:
			out.errors.append(err)
			continue
		parent = path.resolve().parent
		try:
			rel = parent.relative_to(base).as_posix()
		except ValueError:
			rel = parent.as_posix()
		out.extend(declarations_from_modules(modules, dir="" if rel == "." else rel))
	return out


__all__ = [
	"RootDeclaration",
	"InterfaceDeclaration",
	"Declarations",
	"COMMON_PROPERTIES",
	"declarations_from_modules",
	"load_declarations",
]
