# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from halgraph.config import DEFAULT_CORE_PREFIXES
from halgraph.deps import filter_core, first_unique, resolve_dependencies


def test_resolve_produces_native_and_java_targets() -> None:
	res = resolve_dependencies(["android.hidl.base@1.0", "android.hardware.foo@1.1"], core_prefixes=DEFAULT_CORE_PREFIXES)
	assert res.ok
	assert res.targets == ["android.hidl.base@1.0", "android.hardware.foo@1.1"]
	assert res.java_targets == ["android.hidl.base-V1.0-java", "android.hardware.foo-V1.1-java"]
	assert [d.is_core for d in res.deps] == [True, False]


def test_parse_failures_accumulate() -> None:
	res = resolve_dependencies(["bad", "good.pkg@1.0", "@1.0"])
	assert not res.ok
	assert [e.value for e in res.errors] == ["bad", "@1.0"]
	assert all(e.reason_code == "UnresolvedDependency" for e in res.errors)
	assert "MalformedVersion" in res.errors[0].message
	assert "EmptyName" in res.errors[1].message
	assert res.targets == ["good.pkg@1.0"]


def test_filter_core_removes_exactly_core_prefixes() -> None:
	targets = [
		"android.hidl.base@1.0",
		"android.hidl.manager@1.2",
		"android.hidl.memory@1.0",
		"android.hardware.foo@1.0",
		"android.hidl.basement@1.0",
	]
	assert filter_core(targets, DEFAULT_CORE_PREFIXES) == [
		"android.hidl.memory@1.0",
		"android.hardware.foo@1.0",
		"android.hidl.basement@1.0",
	]


def test_filter_core_is_idempotent() -> None:
	targets = ["android.hidl.base@1.0", "a.b@1.0", "android.hidl.manager@1.0", "c.d@2.0"]
	once = filter_core(targets, DEFAULT_CORE_PREFIXES)
	assert filter_core(once, DEFAULT_CORE_PREFIXES) == once


def test_first_unique_keeps_first_seen_order() -> None:
	assert first_unique(["A", "B", "A", "C", "B"]) == ["A", "B", "C"]
	assert first_unique([]) == []
	assert first_unique(["-ra:x", "-ra:y", "-ra:x"]) == ["-ra:x", "-ra:y"]
