# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Two-pass graph configuration.

Pass 1 (insertion): every root and package declaration is added to the
workspace. Roots go straight into the registry; packages are only recorded.

Pass 2 (resolution, `configure`): every package is expanded against the now
complete registry, then packages are visited in dependency order. A package
is finalized (its generation tasks receive root options and its nodes enter
the graph) only after each of its direct dependencies has been finalized.

A package whose dependency is missing or failed gets `UnresolvedDependency`;
packages on a dependency cycle get `DependencyCycle` and are never finalized.
Unrelated packages are unaffected by either.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable

from halgraph.config import HalGraphConfig
from halgraph.declarations import Declarations, InterfaceDeclaration, RootDeclaration
from halgraph.deps import first_unique
from halgraph.errors import DEPENDENCY_CYCLE, DUPLICATE_PACKAGE, UNRESOLVED_DEPENDENCY, ConfigError, sort_errors
from halgraph.expander import ExpandedPackage, expand_package
from halgraph.fqname import parse_fq_name
from halgraph.gen_task import GenerationTask
from halgraph.nodes import Node, PackageNode, RootNode, node_dependencies, node_to_dict
from halgraph.roots import PackageRootRegistry

logger = logging.getLogger(__name__)


@dataclass
class BuildGraph:
	"""Finalized nodes plus every configuration error of the run."""

	nodes: list[Node] = field(default_factory=list)
	errors: list[ConfigError] = field(default_factory=list)
	packages: dict[str, ExpandedPackage] = field(default_factory=dict)

	@property
	def ok(self) -> bool:
		return not self.errors

	def node(self, name: str) -> Node | None:
		for n in self.nodes:
			if n.name == name:
				return n
		return None

	def names(self) -> list[str]:
		return [n.name for n in self.nodes]

	def generation_tasks(self) -> list[GenerationTask]:
		return [n for n in self.nodes if isinstance(n, GenerationTask)]

	def errors_for(self, module: str) -> list[ConfigError]:
		return [e for e in self.errors if e.module == module]

	def edges(self) -> list[tuple[str, str]]:
		"""(consumer, producer) pairs between nodes that are both in the graph."""
		present = set(self.names())
		out: list[tuple[str, str]] = []
		for n in self.nodes:
			for dep in node_dependencies(n):
				if dep in present:
					out.append((n.name, dep))
		return out

	def check_acyclic(self) -> None:
		"""Raise AssertionError if the finalized node edges contain a cycle."""
		succ: dict[str, list[str]] = {name: [] for name in self.names()}
		indegree: dict[str, int] = {name: 0 for name in self.names()}
		for consumer, producer in self.edges():
			succ[producer].append(consumer)
			indegree[consumer] += 1
		ready = deque(sorted(name for name, deg in indegree.items() if deg == 0))
		seen = 0
		while ready:
			name = ready.popleft()
			seen += 1
			for nxt in succ[name]:
				indegree[nxt] -= 1
				if indegree[nxt] == 0:
					ready.append(nxt)
		if seen != len(indegree):
			raise AssertionError("finalized graph contains a cycle")

	def to_dict(self) -> dict[str, Any]:
		return {
			"format": "halgraph-graph",
			"version": 0,
			"ok": self.ok,
			"nodes": [node_to_dict(n) for n in self.nodes],
			"errors": [e.to_dict() for e in sort_errors(self.errors)],
		}


class Workspace:
	"""One graph-configuration run: registry, declarations and their resolution."""

	def __init__(self, config: HalGraphConfig | None = None) -> None:
		self.config = config or HalGraphConfig()
		self.registry = PackageRootRegistry()
		self.errors: list[ConfigError] = []
		self._roots: list[RootDeclaration] = []
		self._packages: list[InterfaceDeclaration] = []
		self._package_names: set[str] = set()
		self._configured = False

	# Pass 1: insertion.

	def add_root(self, decl: RootDeclaration) -> None:
		self._check_open()
		try:
			self.registry.register(decl.name, decl.path, use_current=decl.use_current, span=decl.span)
		except ConfigError as err:
			self.errors.append(err)
			return
		self._roots.append(decl)

	def add_package(self, decl: InterfaceDeclaration) -> None:
		self._check_open()
		key = _package_key(decl.name)
		if key in self._package_names:
			self.errors.append(
				ConfigError(
					reason_code=DUPLICATE_PACKAGE,
					message=f"package '{key}' is declared more than once",
					module=decl.name,
					field="name",
					value=decl.name,
					span=decl.span,
				)
			)
			return
		self._package_names.add(key)
		self._packages.append(decl)

	def add_declarations(self, decls: Declarations) -> None:
		self.errors.extend(decls.errors)
		for root in decls.roots:
			self.add_root(root)
		for pkg in decls.interfaces:
			self.add_package(pkg)

	def _check_open(self) -> None:
		if self._configured:
			raise RuntimeError("workspace is already configured; declarations are closed")

	# Pass 2: resolution.

	def configure(self) -> BuildGraph:
		self._check_open()
		self._configured = True

		graph = BuildGraph(errors=list(self.errors))
		graph.nodes.extend(RootNode(root=root) for root in self.registry)

		expanded: dict[str, ExpandedPackage] = {}
		for decl in self._packages:
			result = expand_package(decl, self.registry, self.config)
			graph.errors.extend(result.errors)
			if result.package is not None:
				# Keyed by canonical name so dependency strings find it.
				expanded[result.package.fq_name.string()] = result
			graph.packages[decl.name] = result

		order, blocked = _topological_order(expanded)
		finalized: set[str] = set()
		for key in order:
			pkg = expanded[key]
			if pkg.identity_ok:
				assert pkg.package is not None and pkg.root is not None
				pkg.package.full_root_option = pkg.root.full_root_option()
			dep_errors = self._check_dependencies(pkg, expanded, finalized)
			graph.errors.extend(dep_errors)
			if not pkg.ok or dep_errors:
				continue
			self._finalize(pkg, expanded)
			finalized.add(key)
			assert pkg.package is not None
			graph.nodes.append(pkg.package)
			graph.nodes.extend(pkg.nodes)

		graph.errors.extend(_cycle_errors(expanded, blocked))
		logger.debug(
			"configured %d of %d package(s), %d node(s), %d error(s)",
			len(finalized),
			len(self._packages),
			len(graph.nodes),
			len(graph.errors),
		)
		return graph

	def _check_dependencies(
		self,
		pkg: ExpandedPackage,
		expanded: dict[str, ExpandedPackage],
		finalized: set[str],
	) -> list[ConfigError]:
		if pkg.dependencies is None:
			return []
		errors: list[ConfigError] = []
		for dep in pkg.dependencies.deps:
			target = dep.target
			if target not in expanded:
				msg = f"dependency '{target}' has no hidl_interface declaration"
			elif target not in finalized:
				msg = f"dependency '{target}' failed to resolve"
			else:
				continue
			errors.append(
				ConfigError(
					reason_code=UNRESOLVED_DEPENDENCY,
					message=msg,
					module=pkg.decl.name,
					field="interfaces",
					value=target,
					span=pkg.decl.span,
				)
			)
		return errors

	def _finalize(self, pkg: ExpandedPackage, expanded: dict[str, ExpandedPackage]) -> None:
		assert pkg.package is not None and pkg.package.full_root_option is not None
		assert pkg.dependencies is not None
		options = [pkg.package.full_root_option]
		for dep in pkg.dependencies.deps:
			dep_pkg = expanded[dep.target].package
			assert dep_pkg is not None and dep_pkg.full_root_option is not None
			options.append(dep_pkg.full_root_option)
		options = first_unique(options)
		for task in pkg.tasks:
			task.resolve_root_options(options)
		logger.info("finalized %s with roots %s", pkg.package.fq_name.string(), " ".join(options))


def _package_key(name: str) -> str:
	"""Canonical spelling of `name`, or `name` itself when it does not parse."""
	try:
		return parse_fq_name(name).string()
	except ConfigError:
		return name


def _dependency_keys(pkg: ExpandedPackage, expanded: dict[str, ExpandedPackage]) -> list[str]:
	if pkg.dependencies is None:
		return []
	return first_unique(d.target for d in pkg.dependencies.deps if d.target in expanded)


def _topological_order(expanded: dict[str, ExpandedPackage]) -> tuple[list[str], set[str]]:
	"""
	Kahn's algorithm over declared-package edges, ties broken by name.

	Returns the visit order and the set of packages that could not be ordered
	(on a cycle or downstream of one).
	"""
	indegree = {key: 0 for key in expanded}
	dependents: dict[str, list[str]] = {key: [] for key in expanded}
	for key, pkg in expanded.items():
		for dep in _dependency_keys(pkg, expanded):
			indegree[key] += 1
			dependents[dep].append(key)

	ready = sorted(key for key, deg in indegree.items() if deg == 0)
	order: list[str] = []
	while ready:
		key = ready.pop(0)
		order.append(key)
		for nxt in sorted(dependents[key]):
			indegree[nxt] -= 1
			if indegree[nxt] == 0:
				ready.append(nxt)
				ready.sort()
	return order, set(expanded) - set(order)


def _find_cycle(start: str, expanded: dict[str, ExpandedPackage], blocked: set[str]) -> list[str] | None:
	"""Shortest dependency path start -> ... -> start within `blocked`, if any."""
	parent: dict[str, str] = {}
	queue = deque([start])
	visited: set[str] = set()
	while queue:
		key = queue.popleft()
		for dep in _dependency_keys(expanded[key], expanded):
			if dep not in blocked:
				continue
			if dep == start:
				path = [key]
				while path[-1] != start:
					path.append(parent[path[-1]])
				path.reverse()
				return path + [start]
			if dep in visited:
				continue
			visited.add(dep)
			parent[dep] = key
			queue.append(dep)
	return None


def _cycle_errors(expanded: dict[str, ExpandedPackage], blocked: set[str]) -> list[ConfigError]:
	errors: list[ConfigError] = []
	on_cycle: dict[str, list[str]] = {}
	for key in sorted(blocked):
		cycle = _find_cycle(key, expanded, blocked)
		if cycle is not None:
			on_cycle[key] = cycle
	for key in sorted(blocked):
		pkg = expanded[key]
		if key in on_cycle:
			errors.append(
				ConfigError(
					reason_code=DEPENDENCY_CYCLE,
					message="dependency cycle: " + " -> ".join(on_cycle[key]),
					module=pkg.decl.name,
					field="interfaces",
					span=pkg.decl.span,
				)
			)
			continue
		waiting = [d for d in _dependency_keys(pkg, expanded) if d in blocked]
		errors.append(
			ConfigError(
				reason_code=UNRESOLVED_DEPENDENCY,
				message=f"dependency '{waiting[0]}' is blocked by a dependency cycle",
				module=pkg.decl.name,
				field="interfaces",
				value=waiting[0],
				span=pkg.decl.span,
			)
		)
	return errors


def configure(decls: Declarations | Iterable[RootDeclaration | InterfaceDeclaration], config: HalGraphConfig | None = None) -> BuildGraph:
	"""Convenience: run both passes over `decls` and return the graph."""
	ws = Workspace(config)
	if isinstance(decls, Declarations):
		ws.add_declarations(decls)
	else:
		items = list(decls)
		for item in items:
			if isinstance(item, RootDeclaration):
				ws.add_root(item)
		for item in items:
			if isinstance(item, InterfaceDeclaration):
				ws.add_package(item)
	return ws.configure()


__all__ = ["BuildGraph", "Workspace", "configure"]
