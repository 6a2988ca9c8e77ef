# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

from halgraph.config import HalGraphConfig, load_config
from halgraph.core.canonical_json import canonical_json_bytes, pretty_json
from halgraph.declarations import load_declarations
from halgraph.errors import sort_errors
from halgraph.workspace import BuildGraph, Workspace


def _add_common_args(p: argparse.ArgumentParser) -> None:
	p.add_argument("files", nargs="+", type=Path, help="Declaration files (Android.bp style)")
	p.add_argument("--config", type=Path, default=None, help="Path to a halgraph-config JSON file")
	p.add_argument("--out-dir", type=str, default=None, help="Root of generated directories (default: out/gen)")
	p.add_argument(
		"--base-dir",
		type=Path,
		default=None,
		help="Tree root that source paths are relative to (default: current directory)",
	)
	p.add_argument("--json", action="store_true", help="Emit machine-readable JSON")


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="halgraph", description="Expand HAL interface packages into a build graph")
	p.add_argument("-v", "--verbose", action="count", default=0, help="Log progress to stderr (repeat for debug)")
	sub = p.add_subparsers(dest="cmd", required=True)

	expand = sub.add_parser("expand", help="Configure the graph and print (or write) it")
	_add_common_args(expand)
	expand.add_argument("-o", "--output", type=Path, default=None, help="Write canonical graph JSON to this path")

	commands = sub.add_parser("commands", help="Print the generator command of every finalized task")
	_add_common_args(commands)

	check = sub.add_parser("check", help="Validate declarations only")
	_add_common_args(check)
	return p


def _configure_logging(verbosity: int) -> None:
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _load_config(args: argparse.Namespace) -> HalGraphConfig:
	config = load_config(args.config) if args.config is not None else HalGraphConfig()
	if args.out_dir is not None:
		config = replace(config, out_dir=args.out_dir)
	return config


def _configure_graph(args: argparse.Namespace, config: HalGraphConfig) -> BuildGraph:
	decls = load_declarations(args.files, base_dir=args.base_dir)
	ws = Workspace(config)
	ws.add_declarations(decls)
	return ws.configure()


def _print_errors(graph: BuildGraph) -> None:
	for err in sort_errors(graph.errors):
		print(err.format_human(), file=sys.stderr)


def _write_bytes(path: Path, data: bytes) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	tmp = path.with_name(path.name + f".tmp.{os.getpid()}")
	tmp.write_bytes(data)
	os.replace(tmp, path)


def main(argv: list[str] | None = None) -> int:
	"""
	Exit code contract:
	- 0: every declaration resolved
	- 2: configuration errors (printed to stderr, or in the JSON report)
	"""
	p = _build_parser()
	args = p.parse_args(argv)
	_configure_logging(args.verbose)

	try:
		config = _load_config(args)
	except (OSError, ValueError) as err:
		p.error(f"cannot load config: {err}")
		return 2

	graph = _configure_graph(args, config)
	code = 0 if graph.ok else 2

	if args.cmd == "expand":
		if args.output is not None:
			_write_bytes(args.output, canonical_json_bytes(graph.to_dict()))
		elif args.json:
			print(canonical_json_bytes(graph.to_dict()).decode("utf-8"))
		else:
			print(pretty_json(graph.to_dict()))
		if not args.json:
			_print_errors(graph)
		return code

	if args.cmd == "commands":
		if args.json:
			report = {
				"exit_code": code,
				"commands": [{"name": t.name, "command": t.command()} for t in graph.generation_tasks()],
				"errors": [e.to_dict() for e in sort_errors(graph.errors)],
			}
			print(json.dumps(report, sort_keys=True, separators=(",", ":")))
			return code
		for task in graph.generation_tasks():
			print(task.command())
		_print_errors(graph)
		return code

	if args.cmd == "check":
		if args.json:
			report = {"exit_code": code, "errors": [e.to_dict() for e in sort_errors(graph.errors)]}
			print(json.dumps(report, sort_keys=True, separators=(",", ":")))
			return code
		print(
			f"check: packages={len(graph.packages)} errors={len(graph.errors)} ok={graph.ok}",
			file=sys.stderr if code != 0 else sys.stdout,
		)
		_print_errors(graph)
		return code

	raise AssertionError("unreachable")
