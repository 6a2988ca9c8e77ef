# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
One invocation of the external interface generator.

A task is created during package expansion with everything but its root
options. The options depend on the package roots of the task's dependencies
and are filled exactly once by the resolution pass (`resolve_root_options`).
Until then `root_options` is None and the task cannot be rendered.

Command contract (one line, executed by the build executor):

	rm -rf <gen_dir> && <generator> -R -p . -d <depfile> -o <gen_dir> -L <language> <-r...> <fqName>

The generator writes every declared output under `<gen_dir>` and a GCC-style
dependency rule into `<depfile>`.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Any

from halgraph.fqname import FqName

# Language tags understood by the generator's `-L` option.
LANG_CPP_SOURCES = "c++-sources"
LANG_CPP_HEADERS = "c++-headers"
LANG_JAVA = "java"
LANG_JAVA_CONSTANTS = "java-constants"
LANG_ADAPTER_SOURCES = "c++-adapter-sources"
LANG_ADAPTER_HEADERS = "c++-adapter-headers"
LANG_ADAPTER_MAIN = "c++-adapter-main"

LANGUAGES = (
	LANG_CPP_SOURCES,
	LANG_CPP_HEADERS,
	LANG_JAVA,
	LANG_JAVA_CONSTANTS,
	LANG_ADAPTER_SOURCES,
	LANG_ADAPTER_HEADERS,
	LANG_ADAPTER_MAIN,
)


class UnresolvedTaskError(RuntimeError):
	"""A task was rendered before its root options were resolved."""


@dataclass
class GenerationTask:
	name: str
	language: str
	fq_name: FqName
	root: str
	interfaces: tuple[str, ...]
	inputs: tuple[str, ...]
	outputs: tuple[str, ...]
	gen_dir: str
	generator: str = "hidl-gen"
	properties: dict[str, Any] = field(default_factory=dict)
	root_options: tuple[str, ...] | None = None

	def __post_init__(self) -> None:
		if self.language not in LANGUAGES:
			raise ValueError(f"unknown generator language '{self.language}'")
		if not self.outputs:
			raise ValueError(f"generation task '{self.name}' declares no outputs")

	@property
	def is_resolved(self) -> bool:
		return self.root_options is not None

	def resolve_root_options(self, options: list[str]) -> None:
		if self.root_options is not None:
			raise RuntimeError(f"root options of '{self.name}' are already resolved")
		self.root_options = tuple(options)

	def output_paths(self) -> list[str]:
		return [f"{self.gen_dir}/{out}" for out in self.outputs]

	@property
	def primary_output(self) -> str:
		return self.output_paths()[0]

	@property
	def side_outputs(self) -> list[str]:
		return self.output_paths()[1:]

	@property
	def depfile(self) -> str:
		return self.primary_output + ".d"

	def argv(self) -> list[str]:
		if self.root_options is None:
			raise UnresolvedTaskError(f"generation task '{self.name}' has unresolved root options")
		return [
			self.generator,
			"-R",
			"-p",
			".",
			"-d",
			self.depfile,
			"-o",
			self.gen_dir,
			"-L",
			self.language,
			*self.root_options,
			self.fq_name.string(),
		]

	def command(self) -> str:
		return f"rm -rf {shlex.quote(self.gen_dir)} && {shlex.join(self.argv())}"

	def description(self) -> str:
		return f"HIDL {self.language}: {' '.join(self.inputs)} => {self.primary_output}"

	def dependency_names(self) -> list[str]:
		"""Graph edges: own interface entity, each dependency's entity, the package root."""
		return [
			self.fq_name.interface_module_name(),
			*(f"{i}_interface" for i in self.interfaces),
			self.root,
		]


__all__ = [
	"GenerationTask",
	"UnresolvedTaskError",
	"LANGUAGES",
	"LANG_CPP_SOURCES",
	"LANG_CPP_HEADERS",
	"LANG_JAVA",
	"LANG_JAVA_CONSTANTS",
	"LANG_ADAPTER_SOURCES",
	"LANG_ADAPTER_HEADERS",
	"LANG_ADAPTER_MAIN",
]
