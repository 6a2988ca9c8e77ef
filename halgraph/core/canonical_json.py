# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
	"""
	Render JSON deterministically.

	Rules:
	- UTF-8
	- no insignificant whitespace
	- stable key ordering
	"""
	return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def pretty_json(obj: Any) -> str:
	"""Human-oriented rendering with the same key ordering as canonical bytes."""
	return json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False)


__all__ = ["canonical_json_bytes", "pretty_json"]
