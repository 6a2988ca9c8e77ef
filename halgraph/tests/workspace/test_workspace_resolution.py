# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging

import pytest

from halgraph.declarations import InterfaceDeclaration, RootDeclaration
from halgraph.errors import REASON_CODES
from halgraph.gen_task import GenerationTask
from halgraph.nodes import NodeKind, PackageNode, node_kind
from halgraph.workspace import Workspace, configure


def _pkg(name: str, root: str, *deps: str, srcs: tuple[str, ...] = ("IFoo.hal",)) -> InterfaceDeclaration:
	return InterfaceDeclaration(name=name, root=root, srcs=srcs, interfaces=tuple(deps))


def _codes(graph, module: str) -> list[str]:
	return [e.reason_code for e in graph.errors_for(module)]


def test_root_options_are_own_root_then_dependencies_deduplicated() -> None:
	graph = configure(
		[
			RootDeclaration(name="a", path="pa"),
			RootDeclaration(name="b", path="pb"),
			_pkg("a.z@1.0", "a", "b.y@1.0", "a.x@1.0"),
			_pkg("b.y@1.0", "b", "a.x@1.0"),
			_pkg("a.x@1.0", "a"),
		]
	)
	assert graph.ok, [e.format_human() for e in graph.errors]

	x_tasks = [t for t in graph.generation_tasks() if t.fq_name.string() == "a.x@1.0"]
	y_tasks = [t for t in graph.generation_tasks() if t.fq_name.string() == "b.y@1.0"]
	z_tasks = [t for t in graph.generation_tasks() if t.fq_name.string() == "a.z@1.0"]
	assert len(x_tasks) == len(y_tasks) == len(z_tasks) == 6
	assert all(t.root_options == ("-ra:pa",) for t in x_tasks)
	assert all(t.root_options == ("-rb:pb", "-ra:pa") for t in y_tasks)
	assert all(t.root_options == ("-ra:pa", "-rb:pb") for t in z_tasks)


def test_dependencies_finalize_before_dependents() -> None:
	graph = configure(
		[
			RootDeclaration(name="a", path="pa"),
			_pkg("a.top@1.0", "a", "a.mid@1.0"),
			_pkg("a.mid@1.0", "a", "a.low@1.0"),
			_pkg("a.low@1.0", "a"),
		]
	)
	packages = [n.fq_name.string() for n in graph.nodes if isinstance(n, PackageNode)]
	assert packages == ["a.low@1.0", "a.mid@1.0", "a.top@1.0"]
	for node in graph.nodes:
		if isinstance(node, PackageNode):
			assert node.full_root_option == "-ra:pa"
	graph.check_acyclic()


def test_graph_contains_roots_packages_and_generated_nodes() -> None:
	graph = configure(
		[
			RootDeclaration(name="pkg", path="vendor/pkg"),
			InterfaceDeclaration(name="pkg.sub@2.1", root="pkg", srcs=("ITypes.hal", "IFoo.hal", "Bar.hal")),
		]
	)
	kinds = [node_kind(n) for n in graph.nodes]
	assert kinds[:2] == [NodeKind.ROOT, NodeKind.PACKAGE]
	assert len(graph.nodes) == 13
	assert len(graph.generation_tasks()) == 6
	assert ("pkg.sub@2.1_genc++", "pkg.sub@2.1_interface") in graph.edges()
	assert ("pkg.sub@2.1_genc++", "pkg") in graph.edges()
	assert ("pkg.sub@2.1-adapter", "pkg.sub@2.1-adapter-helper") in graph.edges()
	graph.check_acyclic()


def test_generation_command_line() -> None:
	graph = configure(
		[
			RootDeclaration(name="pkg", path="vendor/pkg"),
			InterfaceDeclaration(name="pkg.sub@2.1", root="pkg", srcs=("ITypes.hal", "IFoo.hal", "Bar.hal")),
		]
	)
	task = graph.node("pkg.sub@2.1_genc++")
	assert isinstance(task, GenerationTask)
	assert task.primary_output == "out/gen/pkg.sub@2.1_genc++/pkg/sub/2.1/TypesAll.cpp"
	assert task.side_outputs == [
		"out/gen/pkg.sub@2.1_genc++/pkg/sub/2.1/FooAll.cpp",
		"out/gen/pkg.sub@2.1_genc++/pkg/sub/2.1/Bar.cpp",
	]
	assert task.depfile == "out/gen/pkg.sub@2.1_genc++/pkg/sub/2.1/TypesAll.cpp.d"
	assert task.command() == (
		"rm -rf out/gen/pkg.sub@2.1_genc++ && "
		"hidl-gen -R -p . -d out/gen/pkg.sub@2.1_genc++/pkg/sub/2.1/TypesAll.cpp.d "
		"-o out/gen/pkg.sub@2.1_genc++ -L c++-sources -rpkg:vendor/pkg pkg.sub@2.1"
	)


def test_current_txt_is_an_input_when_root_uses_it() -> None:
	graph = configure(
		[
			RootDeclaration(name="a", path="pa", use_current=True),
			_pkg("a.b@1.0", "a"),
		]
	)
	for task in graph.generation_tasks():
		assert task.inputs == ("IFoo.hal", "pa/current.txt")


def test_two_packages_in_a_cycle_are_reported_and_never_finalized() -> None:
	ws = Workspace()
	ws.add_root(RootDeclaration(name="a", path="pa"))
	ws.add_package(_pkg("a.p@1.0", "a", "a.q@1.0"))
	ws.add_package(_pkg("a.q@1.0", "a", "a.p@1.0"))
	ws.add_package(_pkg("a.free@1.0", "a"))
	graph = ws.configure()

	assert _codes(graph, "a.p@1.0") == ["DependencyCycle"]
	assert _codes(graph, "a.q@1.0") == ["DependencyCycle"]
	assert "a.p@1.0 -> a.q@1.0 -> a.p@1.0" in graph.errors_for("a.p@1.0")[0].message
	for name in ("a.p@1.0", "a.q@1.0"):
		assert all(t.root_options is None for t in graph.packages[name].tasks)
		assert graph.node(name + "_interface") is None
	assert _codes(graph, "a.free@1.0") == []
	assert graph.node("a.free@1.0") is not None


def test_self_dependency_is_a_cycle() -> None:
	graph = configure([RootDeclaration(name="a", path="pa"), _pkg("a.me@1.0", "a", "a.me@1.0")])
	assert _codes(graph, "a.me@1.0") == ["DependencyCycle"]


def test_package_downstream_of_cycle_is_unresolved() -> None:
	graph = configure(
		[
			RootDeclaration(name="a", path="pa"),
			_pkg("a.p@1.0", "a", "a.q@1.0"),
			_pkg("a.q@1.0", "a", "a.p@1.0"),
			_pkg("a.r@1.0", "a", "a.p@1.0"),
		]
	)
	assert _codes(graph, "a.r@1.0") == ["UnresolvedDependency"]
	assert "cycle" in graph.errors_for("a.r@1.0")[0].message


def test_undeclared_dependency_is_unresolved() -> None:
	graph = configure([RootDeclaration(name="a", path="pa"), _pkg("a.b@1.0", "a", "a.missing@1.0")])
	errs = graph.errors_for("a.b@1.0")
	assert [e.reason_code for e in errs] == ["UnresolvedDependency"]
	assert errs[0].value == "a.missing@1.0"
	assert graph.generation_tasks() == []


def test_failed_dependency_blocks_dependents_only() -> None:
	graph = configure(
		[
			RootDeclaration(name="a", path="pa"),
			_pkg("a.broken@1.0", "a", srcs=("IFoo.txt",)),
			_pkg("a.user@1.0", "a", "a.broken@1.0"),
			_pkg("a.sibling@1.0", "a"),
		]
	)
	assert _codes(graph, "a.broken@1.0") == ["InvalidSourceExtension", "NoSources"]
	assert _codes(graph, "a.user@1.0") == ["UnresolvedDependency"]
	assert "failed to resolve" in graph.errors_for("a.user@1.0")[0].message
	assert graph.node("a.sibling@1.0") is not None
	assert graph.node("a.user@1.0") is None


def test_missing_root_and_name_outside_root() -> None:
	graph = configure(
		[
			RootDeclaration(name="x", path="px"),
			_pkg("y.z@1.0", "x"),
			_pkg("q.r@1.0", "q"),
		]
	)
	assert _codes(graph, "y.z@1.0") == ["NameNotInRoot"]
	assert _codes(graph, "q.r@1.0") == ["RootNotFound"]
	assert graph.generation_tasks() == []
	assert [n.name for n in graph.nodes] == ["x"]


def test_root_declaration_order_is_irrelevant() -> None:
	pkg = _pkg("late.b@1.0", "late")
	ws = Workspace()
	ws.add_package(pkg)
	ws.add_root(RootDeclaration(name="late", path="pl"))
	assert ws.configure().ok


def test_duplicate_root_and_package_declarations() -> None:
	ws = Workspace()
	ws.add_root(RootDeclaration(name="a", path="pa"))
	ws.add_root(RootDeclaration(name="a", path="other"))
	ws.add_package(_pkg("a.b@1.0", "a"))
	ws.add_package(_pkg("a.b@1.0", "a"))
	graph = ws.configure()
	assert sorted(e.reason_code for e in graph.errors) == ["DuplicatePackage", "DuplicateRoot"]
	assert all(e.reason_code in REASON_CODES for e in graph.errors)
	# The first declaration of each still resolves.
	assert graph.node("a.b@1.0") is not None
	assert graph.node("a").root.path == "pa"


def test_workspace_closes_after_configure() -> None:
	ws = Workspace()
	ws.configure()
	with pytest.raises(RuntimeError):
		ws.add_root(RootDeclaration(name="a", path="pa"))
	with pytest.raises(RuntimeError):
		ws.configure()


def test_graph_dict_is_deterministic() -> None:
	decls = [
		RootDeclaration(name="a", path="pa"),
		_pkg("a.y@1.0", "a", "a.x@1.0"),
		_pkg("a.x@1.0", "a"),
	]
	first = configure(decls).to_dict()
	second = configure(list(reversed(decls))).to_dict()
	assert first == second
	assert first["format"] == "halgraph-graph"
	assert first["ok"] is True
	task = next(n for n in first["nodes"] if n["name"] == "a.y@1.0_genc++")
	assert task["kind"] == "generation_task"
	assert task["root_options"] == ["-ra:pa"]
	assert task["command"].startswith("rm -rf out/gen/a.y@1.0_genc++ && hidl-gen ")
	assert task["description"] == "HIDL c++-sources: IFoo.hal => out/gen/a.y@1.0_genc++/a/y/1.0/FooAll.cpp"


def test_equivalent_version_spelling_never_replaces_a_package() -> None:
	graph = configure(
		[
			RootDeclaration(name="a", path="pa"),
			_pkg("a.b@1.0", "a"),
			_pkg("a.b@01.0", "a", srcs=("IBar.hal",)),
		]
	)
	assert _codes(graph, "a.b@01.0") == ["MalformedVersion"]
	assert _codes(graph, "a.b@1.0") == []
	fg = graph.node("a.b@1.0_hal")
	assert fg is not None and fg.srcs == ("IFoo.hal",)
	assert len(graph.generation_tasks()) == 6


def test_progress_is_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
	with caplog.at_level(logging.INFO, logger="halgraph"):
		configure([RootDeclaration(name="a", path="pa"), _pkg("a.b@1.0", "a")])
	infos = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
	assert "expanded a.b@1.0 into 11 nodes" in infos
	assert "finalized a.b@1.0 with roots -ra:pa" in infos
