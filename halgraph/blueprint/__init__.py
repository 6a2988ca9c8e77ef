# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Blueprint-style declaration files.

The parser only understands the generic module syntax; which module types
and properties mean something is decided by `halgraph.declarations`.
"""

from __future__ import annotations

from .parser import ModuleDecl, load_blueprint, parse_blueprint

__all__ = ["ModuleDecl", "load_blueprint", "parse_blueprint"]
