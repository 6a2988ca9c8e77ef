# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from halgraph.errors import ConfigError
from halgraph.fqname import FqName, parse_fq_name


@pytest.mark.parametrize(
	"raw",
	[
		"android.hardware.foo@1.0",
		"pkg.sub@2.1",
		"a@0.0",
		"vendor.acme.light_ext@10.25",
	],
)
def test_parse_then_string_reproduces_input(raw: str) -> None:
	assert parse_fq_name(raw).string() == raw
	assert str(parse_fq_name(raw)) == raw


def test_parse_splits_segments_and_version() -> None:
	fq = parse_fq_name("android.hardware.foo@1.2")
	assert fq == FqName(package=("android", "hardware", "foo"), major=1, minor=2)
	assert fq.pkg() == "android.hardware.foo"
	assert fq.version() == "1.2"
	assert fq.is_versioned


@pytest.mark.parametrize(
	"raw",
	[
		"android.hardware.foo",
		"android.hardware.foo@",
		"android.hardware.foo@1",
		"android.hardware.foo@1.x",
		"android.hardware.foo@a.0",
		"android.hardware.foo@-1.0",
		"android.hardware.foo@1.0@2.0",
		"android.hardware.foo@1.0.0",
		"android.hardware.foo@01.0",
		"android.hardware.foo@1.00",
		"android.hardware.foo@1.0\n",
		"android.hardware.foo@1.0 ",
	],
)
def test_parse_rejects_malformed_versions(raw: str) -> None:
	with pytest.raises(ConfigError) as excinfo:
		parse_fq_name(raw)
	assert excinfo.value.reason_code == "MalformedVersion"
	assert excinfo.value.value == raw


@pytest.mark.parametrize("raw", ["@1.0", ".foo@1.0", "foo.@1.0", "a..b@1.0"])
def test_parse_rejects_empty_segments(raw: str) -> None:
	with pytest.raises(ConfigError) as excinfo:
		parse_fq_name(raw)
	assert excinfo.value.reason_code == "EmptyName"


def test_unversioned_names_only_when_allowed() -> None:
	fq = parse_fq_name("android.hardware", allow_unversioned=True)
	assert fq.package == ("android", "hardware")
	assert not fq.is_versioned
	assert fq.string() == "android.hardware"
	with pytest.raises(ConfigError, match="must match 'pkg.path@major.minor'"):
		parse_fq_name("android.hardware")


def test_unversioned_empty_name_is_still_rejected() -> None:
	with pytest.raises(ConfigError) as excinfo:
		parse_fq_name("", allow_unversioned=True)
	assert excinfo.value.reason_code == "EmptyName"


def test_fq_name_invariants_on_direct_construction() -> None:
	with pytest.raises(ValueError):
		FqName(package=())
	with pytest.raises(ValueError):
		FqName(package=("a",), major=1, minor=None)


@pytest.mark.parametrize(
	"name, root, expected",
	[
		("android.hardware.foo@1.0", "android.hardware", True),
		("android.hardware.foo@1.0", "android", True),
		("android.hardware.foo@1.0", "android.hardware.foo", True),
		("android.hardware.foo@1.0", "android.hard", False),
		("android.hardware.foo@1.0", "android.hardware.foo.bar", False),
		("y.z@1.0", "x", False),
	],
)
def test_in_package_is_segment_prefix(name: str, root: str, expected: bool) -> None:
	assert parse_fq_name(name).in_package(root) is expected
