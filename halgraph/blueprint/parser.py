# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from halgraph.core.span import Span
from halgraph.errors import PARSE_ERROR, ConfigError

_GRAMMAR_PATH = Path(__file__).with_name("blueprint.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


@dataclass(frozen=True)
class ModuleDecl:
	"""One `module_type { ... }` block with its evaluated properties."""

	module_type: str
	properties: dict[str, Any]
	span: Span = field(default_factory=Span, compare=False)

	@property
	def name(self) -> str | None:
		name = self.properties.get("name")
		return name if isinstance(name, str) else None


def _name(node: Tree) -> str:
	return node.data if isinstance(node.data, str) else node.data.value


def _parse_error(msg: str, *, span: Span) -> ConfigError:
	return ConfigError(reason_code=PARSE_ERROR, message=msg, span=span)


class _Evaluator:
	"""
	Evaluate a parse tree top to bottom.

	Variables must be assigned before use; `+=` appends to an existing
	variable and `+` concatenates strings, integers, lists or maps of the same
	type, as Blueprint does.
	"""

	def __init__(self, file: str | None) -> None:
		self.file = file
		self.variables: dict[str, Any] = {}

	def span(self, node: Tree | Token) -> Span:
		if isinstance(node, Token):
			return Span(file=self.file, line=node.line, column=node.column)
		return Span.from_meta(node.meta, file=self.file)

	def run(self, tree: Tree) -> list[ModuleDecl]:
		modules: list[ModuleDecl] = []
		for item in tree.children:
			kind = _name(item)
			if kind == "module":
				type_tok, body = item.children
				props = self.eval(body)
				modules.append(ModuleDecl(module_type=str(type_tok), properties=props, span=self.span(item)))
			elif kind == "assign":
				name_tok, expr = item.children
				if str(name_tok) in self.variables:
					raise _parse_error(f"variable '{name_tok}' is already assigned", span=self.span(name_tok))
				self.variables[str(name_tok)] = self.eval(expr)
			elif kind == "append":
				name_tok, expr = item.children
				if str(name_tok) not in self.variables:
					raise _parse_error(f"cannot append to undefined variable '{name_tok}'", span=self.span(name_tok))
				self.variables[str(name_tok)] = self._plus(self.variables[str(name_tok)], self.eval(expr), node=item)
			else:
				raise AssertionError(f"unexpected top-level node '{kind}'")
		return modules

	def eval(self, node: Tree) -> Any:
		kind = _name(node)
		if kind == "string":
			tok = node.children[0]
			try:
				return json.loads(str(tok))
			except ValueError as err:
				raise _parse_error(f"invalid string literal {tok}: {err}", span=self.span(tok)) from err
		if kind == "integer":
			return int(str(node.children[0]))
		if kind == "true":
			return True
		if kind == "false":
			return False
		if kind == "var":
			tok = node.children[0]
			if str(tok) not in self.variables:
				raise _parse_error(f"undefined variable '{tok}'", span=self.span(tok))
			return self.variables[str(tok)]
		if kind == "list":
			return [self.eval(c) for c in node.children]
		if kind == "map":
			out: dict[str, Any] = {}
			for prop in node.children:
				key_tok, expr = prop.children
				key = str(key_tok)
				if key in out:
					raise _parse_error(f"property '{key}' is set more than once", span=self.span(key_tok))
				out[key] = self.eval(expr)
			return out
		if kind == "plus":
			lhs, rhs = node.children
			return self._plus(self.eval(lhs), self.eval(rhs), node=node)
		raise AssertionError(f"unexpected expression node '{kind}'")

	def _plus(self, lhs: Any, rhs: Any, *, node: Tree) -> Any:
		# bool is an int subclass; it never concatenates.
		if isinstance(lhs, bool) or isinstance(rhs, bool) or type(lhs) is not type(rhs):
			raise _parse_error(
				f"cannot concatenate {type(lhs).__name__} and {type(rhs).__name__}",
				span=self.span(node),
			)
		if isinstance(lhs, dict):
			dup = sorted(set(lhs) & set(rhs))
			if dup:
				raise _parse_error(f"duplicate properties in map concatenation: {', '.join(dup)}", span=self.span(node))
			return {**lhs, **rhs}
		return lhs + rhs


def parse_blueprint(source: str, *, file: str | None = None) -> list[ModuleDecl]:
	"""
	Parse a Blueprint-style file into module declarations.

	Syntax and evaluation problems raise `ConfigError` with reason `ParseError`;
	one bad file stops parsing of that file only.
	"""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		raise _parse_error(
			f"syntax error: {err.__class__.__name__} at line {err.line}, column {err.column}",
			span=Span(file=file, line=err.line, column=err.column),
		) from err
	return _Evaluator(file).run(tree)


def load_blueprint(path: Path) -> list[ModuleDecl]:
	"""Read and parse one file; unreadable files are reported like syntax errors."""
	try:
		source = path.read_text(encoding="utf-8")
	except UnicodeDecodeError as err:
		raise _parse_error(f"file is not valid UTF-8: {err.reason} at byte {err.start}", span=Span(file=str(path))) from err
	except OSError as err:
		raise _parse_error(f"cannot read file: {err.strerror or err}", span=Span(file=str(path))) from err
	return parse_blueprint(source, file=str(path))


__all__ = ["ModuleDecl", "parse_blueprint", "load_blueprint"]
