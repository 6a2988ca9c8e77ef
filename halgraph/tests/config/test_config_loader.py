# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from halgraph.config import DEFAULT_CORE_PREFIXES, HalGraphConfig, config_from_mapping, load_config


def test_defaults() -> None:
	cfg = HalGraphConfig()
	assert cfg.core_prefixes == DEFAULT_CORE_PREFIXES
	assert cfg.is_core_package("android.hidl.base@1.0")
	assert cfg.is_core_package("android.hidl.manager@1.1")
	assert not cfg.is_core_package("android.hidl.memory@1.0")
	assert cfg.is_double_loadable("android.hardware.graphics.allocator@2.0")
	assert not cfg.is_double_loadable("android.hardware.graphics.mapper@2.0")


def test_load_config_overlays_defaults(tmp_path: Path) -> None:
	path = tmp_path / "halgraph.json"
	path.write_text(
		json.dumps(
			{
				"format": "halgraph-config",
				"version": 0,
				"generator": "/opt/bin/hidl-gen",
				"core_prefixes": ["vendor.core@"],
			}
		)
	)
	cfg = load_config(path)
	assert cfg.generator == "/opt/bin/hidl-gen"
	assert cfg.core_prefixes == ("vendor.core@",)
	assert cfg.out_dir == "out/gen"
	assert cfg.is_core_package("vendor.core@1.0")
	assert not cfg.is_core_package("android.hidl.base@1.0")


@pytest.mark.parametrize(
	"data, needle",
	[
		([], "JSON object"),
		({"format": "other", "version": 0}, "format/version"),
		({"format": "halgraph-config", "version": 1}, "format/version"),
		({"format": "halgraph-config", "version": 0, "colour": "red"}, "unknown fields: colour"),
		({"format": "halgraph-config", "version": 0, "out_dir": ""}, "'out_dir' must be a non-empty string"),
		({"format": "halgraph-config", "version": 0, "java_libs": "x"}, "'java_libs' must be a list"),
		({"format": "halgraph-config", "version": 0, "core_prefixes": [""]}, "'core_prefixes' must be a list"),
	],
)
def test_invalid_config_is_rejected(data, needle: str) -> None:
	with pytest.raises(ValueError) as excinfo:
		config_from_mapping(data)
	assert needle in str(excinfo.value)


def test_base_config_is_not_mutated() -> None:
	base = HalGraphConfig(out_dir="build")
	cfg = config_from_mapping({"format": "halgraph-config", "version": 0, "extension": ".hidl"}, base=base)
	assert cfg.out_dir == "build"
	assert cfg.extension == ".hidl"
	assert base.extension == ".hal"
