# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
halgraph: expand HAL interface package declarations into a build graph.

Configuration is a single deterministic pass in two phases: declare every
package root and interface package, then resolve packages in dependency order,
emitting generator tasks and library/test nodes for each.
"""

from __future__ import annotations

from halgraph.config import HalGraphConfig
from halgraph.declarations import InterfaceDeclaration, RootDeclaration
from halgraph.errors import ConfigError
from halgraph.fqname import FqName, parse_fq_name
from halgraph.workspace import BuildGraph, Workspace, configure

__all__ = [
	"BuildGraph",
	"ConfigError",
	"FqName",
	"HalGraphConfig",
	"InterfaceDeclaration",
	"RootDeclaration",
	"Workspace",
	"configure",
	"parse_fq_name",
]
