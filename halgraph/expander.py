# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expansion of one `hidl_interface` declaration into graph nodes.

Validation runs to completion before anything is built: every problem with
the declaration is collected, and if there is any the package contributes no
nodes at all. Generation tasks come out with unresolved root options; the
workspace fills those in once the package's dependencies are resolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from halgraph.config import HalGraphConfig
from halgraph.declarations import InterfaceDeclaration
from halgraph.deps import ResolvedDependencies, filter_core, resolve_dependencies
from halgraph.errors import NAME_NOT_IN_ROOT, NO_OUTPUTS, NO_SOURCES, ConfigError
from halgraph.fqname import FqName, parse_fq_name
from halgraph.gen_task import (
	LANG_ADAPTER_HEADERS,
	LANG_ADAPTER_MAIN,
	LANG_ADAPTER_SOURCES,
	LANG_CPP_HEADERS,
	LANG_CPP_SOURCES,
	LANG_JAVA,
	LANG_JAVA_CONSTANTS,
	GenerationTask,
)
from halgraph.nodes import FileGroupNode, LibraryNode, Node, PackageNode, TestNode
from halgraph.roots import PackageRoot, PackageRootRegistry
from halgraph.sources import ClassifiedSources, classify_sources

logger = logging.getLogger(__name__)

# C++ header prefixes generated per interface, in generator output order.
INTERFACE_HEADER_PREFIXES = ("I", "Bs", "BnHw", "BpHw", "IHw")
# Per type: plain header and transport (hw) header.
TYPE_HEADER_PREFIXES = ("", "hw")


def wrap(prefix: str, names: list[str] | tuple[str, ...], suffix: str) -> list[str]:
	return [prefix + n + suffix for n in names]


@dataclass
class ExpandedPackage:
	"""
	Result of expanding one declaration.

	`package` is None only when the name itself failed to parse; `nodes` is
	empty whenever `errors` is not.
	"""

	decl: InterfaceDeclaration
	package: PackageNode | None = None
	root: PackageRoot | None = None
	sources: ClassifiedSources | None = None
	dependencies: ResolvedDependencies | None = None
	nodes: list[Node] = field(default_factory=list)
	errors: list[ConfigError] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.errors

	@property
	def identity_ok(self) -> bool:
		"""Name parsed, root registered, and name inside the root."""
		return self.package is not None and self.root is not None and self.package.fq_name.in_package(self.root.name)

	@property
	def tasks(self) -> list[GenerationTask]:
		return [n for n in self.nodes if isinstance(n, GenerationTask)]


class _Builder:
	def __init__(
		self,
		decl: InterfaceDeclaration,
		fq: FqName,
		root: PackageRoot,
		sources: ClassifiedSources,
		deps: ResolvedDependencies,
		config: HalGraphConfig,
	) -> None:
		self.decl = decl
		self.fq = fq
		self.root = root
		self.sources = sources
		self.deps = deps
		self.config = config
		self.common: dict[str, Any] = dict(decl.common)
		self.inputs = tuple(
			[f"{decl.dir}/{s}" if decl.dir else s for s in decl.srcs] + root.current_paths()
		)

	def props(self, **extra: Any) -> dict[str, Any]:
		return {**self.common, **extra}

	def task(self, name: str, language: str, outputs: list[str]) -> GenerationTask:
		return GenerationTask(
			name=name,
			language=language,
			fq_name=self.fq,
			root=self.decl.root,
			interfaces=tuple(d.target for d in self.deps.deps),
			inputs=self.inputs,
			outputs=tuple(outputs),
			gen_dir=f"{self.config.out_dir}/{name}",
			generator=self.config.generator,
			properties=self.props(),
		)

	def java_outputs(self) -> list[str]:
		return wrap(self.fq.sanitized_dir() + "I", self.sources.interfaces, ".java") + wrap(
			self.fq.sanitized_dir(), self.decl.types, ".java"
		)

	def build(self) -> list[Node]:
		fq = self.fq
		cfg = self.config
		interfaces = list(self.sources.interfaces)
		types = list(self.sources.types)
		d = fq.dir()

		is_core = cfg.is_core_package(fq.string())
		cpp_deps = filter_core(self.deps.targets, cfg.core_prefixes)
		library_if_exists = [] if is_core else [fq.string()]
		dep_helpers = [dep.name.adapter_helper_name() for dep in self.deps.deps]

		nodes: list[Node] = [FileGroupNode(name=fq.file_group_name(), srcs=tuple(self.decl.srcs), properties=self.props())]

		nodes.append(
			self.task(fq.sources_name(), LANG_CPP_SOURCES, wrap(d, interfaces, "All.cpp") + wrap(d, types, ".cpp"))
		)
		headers: list[str] = []
		for prefix in INTERFACE_HEADER_PREFIXES:
			headers += wrap(d + prefix, interfaces, ".h")
		for prefix in TYPE_HEADER_PREFIXES:
			headers += wrap(d + prefix, types, ".h")
		nodes.append(self.task(fq.headers_name(), LANG_CPP_HEADERS, headers))

		if not is_core:
			native_props = self.props(
				recovery_available=True,
				vendor_available=True,
				double_loadable=cfg.is_double_loadable(fq.string()),
			)
			if self.decl.vndk is not None:
				native_props["vndk"] = dict(self.decl.vndk)
			nodes.append(
				LibraryNode(
					name=fq.string(),
					language="c++",
					generated_sources=(fq.sources_name(),),
					generated_headers=(fq.headers_name(),),
					shared_libs=tuple(cpp_deps + list(cfg.transport_shared_libs)),
					export_shared_lib_headers=tuple(cpp_deps + list(cfg.transport_exported_libs)),
					export_generated_headers=(fq.headers_name(),),
					defaults=(cfg.cc_defaults,),
					properties=native_props,
				)
			)

		if self.decl.gen_java:
			nodes.append(self.task(fq.java_sources_name(), LANG_JAVA, self.java_outputs()))
			nodes.append(
				LibraryNode(
					name=fq.java_name(),
					language="java",
					srcs=(":" + fq.java_sources_name(),),
					static_libs=tuple(self.deps.java_targets),
					libs=tuple(cfg.java_libs),
					defaults=(cfg.java_defaults,),
					properties=self.props(
						no_framework_libs=True,
						installable=True,
						sdk_version=cfg.java_sdk_version,
					),
				)
			)

		if self.decl.gen_java_constants:
			nodes.append(
				self.task(fq.java_constants_sources_name(), LANG_JAVA_CONSTANTS, [fq.sanitized_dir() + "Constants.java"])
			)
			nodes.append(
				LibraryNode(
					name=fq.java_constants_name(),
					language="java",
					srcs=(":" + fq.java_constants_sources_name(),),
					defaults=(cfg.java_defaults,),
					properties=self.props(no_framework_libs=True),
				)
			)

		nodes.append(self.task(fq.adapter_helper_sources_name(), LANG_ADAPTER_SOURCES, wrap(d + "A", interfaces + types, ".cpp")))
		nodes.append(self.task(fq.adapter_helper_headers_name(), LANG_ADAPTER_HEADERS, wrap(d + "A", interfaces + types, ".h")))

		helper_static = [cfg.adapter_static_lib] + dep_helpers + cpp_deps + library_if_exists
		nodes.append(
			LibraryNode(
				name=fq.adapter_helper_name(),
				language="c++",
				generated_sources=(fq.adapter_helper_sources_name(),),
				generated_headers=(fq.adapter_helper_headers_name(),),
				shared_libs=tuple(cfg.adapter_shared_libs),
				static_libs=tuple(helper_static),
				export_shared_lib_headers=tuple(cfg.adapter_exported_shared_libs),
				export_static_lib_headers=tuple(helper_static),
				export_generated_headers=(fq.adapter_helper_headers_name(),),
				defaults=(cfg.cc_defaults,),
				properties=self.props(vendor_available=True, group_static_libs=True),
			)
		)
		nodes.append(self.task(fq.adapter_sources_name(), LANG_ADAPTER_MAIN, ["main.cpp"]))
		nodes.append(
			TestNode(
				name=fq.adapter_name(),
				generated_sources=(fq.adapter_sources_name(),),
				shared_libs=tuple(cfg.adapter_shared_libs),
				static_libs=tuple(
					[cfg.adapter_static_lib, fq.adapter_helper_name()] + dep_helpers + cpp_deps + library_if_exists
				),
				properties=self.props(group_static_libs=True),
			)
		)
		return nodes


def expand_package(
	decl: InterfaceDeclaration,
	registry: PackageRootRegistry,
	config: HalGraphConfig | None = None,
) -> ExpandedPackage:
	"""
	Validate `decl` and synthesize its nodes.

	All roots must already be registered in `registry`.
	"""
	cfg = config or HalGraphConfig()
	result = ExpandedPackage(decl=decl)
	errors: list[ConfigError] = []

	fq: FqName | None = None
	try:
		fq = parse_fq_name(decl.name)
	except ConfigError as err:
		errors.append(ConfigError(reason_code=err.reason_code, message=err.message, field="name", value=decl.name))

	if fq is not None:
		result.package = PackageNode(fq_name=fq, root=decl.root, interfaces=tuple(decl.interfaces))
		if not fq.in_package(decl.root):
			errors.append(
				ConfigError(
					reason_code=NAME_NOT_IN_ROOT,
					message=f"{decl.root} must be a prefix of {fq.string()}",
					field="root",
					value=decl.root,
				)
			)

	try:
		result.root = registry.lookup(decl.root, module=decl.name)
	except ConfigError as err:
		errors.append(err)

	result.sources = classify_sources(list(decl.srcs), extension=cfg.extension, marker=cfg.interface_marker)
	errors.extend(result.sources.errors)
	if result.sources.is_empty:
		errors.append(ConfigError(reason_code=NO_SOURCES, message="no sources provided", field="srcs"))

	result.dependencies = resolve_dependencies(list(decl.interfaces), core_prefixes=cfg.core_prefixes)
	errors.extend(result.dependencies.errors)

	if decl.gen_java and not result.sources.is_empty and not result.sources.interfaces and not decl.types:
		errors.append(
			ConfigError(
				reason_code=NO_OUTPUTS,
				message="java generation has no outputs: declare 'types' or set gen_java: false",
				field="types",
			)
		)

	if errors:
		result.errors = [e.with_context(module=decl.name, span=decl.span) for e in errors]
		logger.debug("package %s failed validation with %d error(s)", decl.name, len(errors))
		return result

	assert fq is not None and result.root is not None
	result.nodes = _Builder(decl, fq, result.root, result.sources, result.dependencies, cfg).build()
	logger.info("expanded %s into %d nodes", fq.string(), len(result.nodes))
	return result


__all__ = ["ExpandedPackage", "expand_package", "wrap"]
