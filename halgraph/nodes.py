# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Graph node kinds.

The set of kinds is closed: every consumer dispatches through `node_kind`,
which raises on anything outside the union, so adding a kind means touching
each dispatch site here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Union

from halgraph.fqname import FqName
from halgraph.gen_task import GenerationTask
from halgraph.roots import PackageRoot


class NodeKind(Enum):
	ROOT = auto()
	PACKAGE = auto()
	FILE_GROUP = auto()
	GENERATION_TASK = auto()
	LIBRARY = auto()
	TEST = auto()


@dataclass(frozen=True)
class RootNode:
	root: PackageRoot

	@property
	def name(self) -> str:
		return self.root.name


@dataclass
class PackageNode:
	"""
	The declared package entity (`<fq>_interface`).

	Holds exactly one root. `full_root_option` stays None until the
	resolution pass has visited the package.
	"""

	fq_name: FqName
	root: str
	interfaces: tuple[str, ...] = ()
	full_root_option: str | None = None

	@property
	def name(self) -> str:
		return self.fq_name.interface_module_name()


@dataclass(frozen=True)
class FileGroupNode:
	name: str
	srcs: tuple[str, ...]
	properties: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class LibraryNode:
	"""A compiled library. `language` is "c++" or "java"."""

	name: str
	language: str
	srcs: tuple[str, ...] = ()
	generated_sources: tuple[str, ...] = ()
	generated_headers: tuple[str, ...] = ()
	shared_libs: tuple[str, ...] = ()
	static_libs: tuple[str, ...] = ()
	libs: tuple[str, ...] = ()
	export_shared_lib_headers: tuple[str, ...] = ()
	export_static_lib_headers: tuple[str, ...] = ()
	export_generated_headers: tuple[str, ...] = ()
	defaults: tuple[str, ...] = ()
	properties: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class TestNode:
	"""Adapter harness executable."""

	__test__ = False  # not a pytest class

	name: str
	generated_sources: tuple[str, ...] = ()
	shared_libs: tuple[str, ...] = ()
	static_libs: tuple[str, ...] = ()
	properties: dict[str, Any] = field(default_factory=dict, compare=False)


Node = Union[RootNode, PackageNode, FileGroupNode, GenerationTask, LibraryNode, TestNode]


def node_kind(node: Node) -> NodeKind:
	if isinstance(node, RootNode):
		return NodeKind.ROOT
	if isinstance(node, PackageNode):
		return NodeKind.PACKAGE
	if isinstance(node, FileGroupNode):
		return NodeKind.FILE_GROUP
	if isinstance(node, GenerationTask):
		return NodeKind.GENERATION_TASK
	if isinstance(node, LibraryNode):
		return NodeKind.LIBRARY
	if isinstance(node, TestNode):
		return NodeKind.TEST
	raise TypeError(f"unrecognized graph node: {type(node).__name__}")


def _srcs_refs(srcs: tuple[str, ...]) -> list[str]:
	# `:name` in a srcs list refers to another module's outputs.
	return [s[1:] for s in srcs if s.startswith(":")]


def node_dependencies(node: Node) -> list[str]:
	"""
	Names this node consumes.

	Names outside the graph (prebuilt transport libraries) are included; the
	graph decides which ones are internal edges.
	"""
	kind = node_kind(node)
	if kind is NodeKind.ROOT:
		return []
	if kind is NodeKind.PACKAGE:
		assert isinstance(node, PackageNode)
		return [node.root]
	if kind is NodeKind.FILE_GROUP:
		return []
	if kind is NodeKind.GENERATION_TASK:
		assert isinstance(node, GenerationTask)
		return node.dependency_names()
	if kind is NodeKind.LIBRARY:
		assert isinstance(node, LibraryNode)
		return [
			*_srcs_refs(node.srcs),
			*node.generated_sources,
			*node.generated_headers,
			*node.shared_libs,
			*node.static_libs,
			*node.libs,
		]
	if kind is NodeKind.TEST:
		assert isinstance(node, TestNode)
		return [*node.generated_sources, *node.shared_libs, *node.static_libs]
	raise AssertionError("unreachable")


def node_to_dict(node: Node) -> dict[str, Any]:
	kind = node_kind(node)
	out: dict[str, Any] = {"name": node.name, "kind": kind.name.lower()}
	if kind is NodeKind.ROOT:
		assert isinstance(node, RootNode)
		out.update(path=node.root.path, use_current=node.root.use_current, full_root_option=node.root.full_root_option())
	elif kind is NodeKind.PACKAGE:
		assert isinstance(node, PackageNode)
		out.update(
			fq_name=node.fq_name.string(),
			root=node.root,
			interfaces=list(node.interfaces),
			full_root_option=node.full_root_option,
		)
	elif kind is NodeKind.FILE_GROUP:
		assert isinstance(node, FileGroupNode)
		out.update(srcs=list(node.srcs), properties=dict(node.properties))
	elif kind is NodeKind.GENERATION_TASK:
		assert isinstance(node, GenerationTask)
		out.update(
			language=node.language,
			fq_name=node.fq_name.string(),
			inputs=list(node.inputs),
			outputs=node.output_paths(),
			depfile=node.depfile,
			gen_dir=node.gen_dir,
			root_options=list(node.root_options) if node.root_options is not None else None,
			command=node.command() if node.is_resolved else None,
			description=node.description(),
			properties=dict(node.properties),
		)
	elif kind is NodeKind.LIBRARY:
		assert isinstance(node, LibraryNode)
		out.update(
			language=node.language,
			srcs=list(node.srcs),
			generated_sources=list(node.generated_sources),
			generated_headers=list(node.generated_headers),
			shared_libs=list(node.shared_libs),
			static_libs=list(node.static_libs),
			libs=list(node.libs),
			export_shared_lib_headers=list(node.export_shared_lib_headers),
			export_static_lib_headers=list(node.export_static_lib_headers),
			export_generated_headers=list(node.export_generated_headers),
			defaults=list(node.defaults),
			properties=dict(node.properties),
		)
	elif kind is NodeKind.TEST:
		assert isinstance(node, TestNode)
		out.update(
			generated_sources=list(node.generated_sources),
			shared_libs=list(node.shared_libs),
			static_libs=list(node.static_libs),
			properties=dict(node.properties),
		)
	else:
		raise AssertionError("unreachable")
	return out


__all__ = [
	"NodeKind",
	"Node",
	"RootNode",
	"PackageNode",
	"FileGroupNode",
	"LibraryNode",
	"TestNode",
	"node_kind",
	"node_dependencies",
	"node_to_dict",
]
