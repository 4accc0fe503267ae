"""
Pytest configuration and shared fixtures for multiboot-utils tests.

This module provides common fixtures and utilities used across all test modules.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest
from loguru import logger

from multiboot_utils.domain import PartitionLayout, RomHandle


# ==============================================================================
# Logging Fixtures
# ==============================================================================


@pytest.fixture
def log_records() -> List[Dict[str, Any]]:
    """
    Fixture capturing loguru records emitted during a test.

    Returns:
        List that receives each record dict (level, message, extra, ...).
    """
    records: List[Dict[str, Any]] = []
    handler_id = logger.add(
        lambda message: records.append(message.record), level="TRACE"
    )
    yield records
    logger.remove(handler_id)


def messages_at(records, level: str) -> List[str]:
    return [record["message"] for record in records if record["level"].name == level]


# ==============================================================================
# Device Catalog Fixtures
# ==============================================================================


@pytest.fixture
def device_entry() -> Dict[str, Any]:
    """
    Fixture providing a valid device catalog entry.

    Returns:
        Dict as found in a device definitions JSON file.
    """
    return {
        "id": "foo",
        "codenames": ["foo", "foolte"],
        "name": "Foo Phone",
        "architecture": "arm64-v8a",
        "block_devs": {
            "base_dirs": ["/dev/block/bootdevice/by-name"],
            "system": ["/dev/block/bootdevice/by-name/system"],
            "cache": ["/dev/block/bootdevice/by-name/cache"],
            "data": ["/dev/block/bootdevice/by-name/userdata"],
            "boot": ["/dev/block/bootdevice/by-name/boot"],
            "recovery": ["/dev/block/bootdevice/by-name/recovery"],
        },
    }


@pytest.fixture
def write_catalog(tmp_path) -> Callable[[Any], Path]:
    """Fixture returning a helper that writes a catalog JSON file."""

    def _write(entries, name: str = "devices.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_properties() -> Callable[..., Callable[[str, str], str]]:
    """Fixture returning a factory for property getters backed by a dict."""

    def _factory(**values):
        props = {key.replace("_", "."): value for key, value in values.items()}

        def _get(key: str, default: str = "") -> str:
            return props.get(key, default)

        return _get

    return _factory


# ==============================================================================
# ROM Fixtures
# ==============================================================================


@pytest.fixture
def partition_layout(tmp_path) -> PartitionLayout:
    """
    Fixture providing a partition layout rooted in a temporary directory.

    The primary ROM's system directory exists, so "primary" is installed.
    """
    root = tmp_path / "partitions"
    for name in ("system", "cache", "data", "extsd"):
        (root / name).mkdir(parents=True)
    return PartitionLayout(
        system=str(root / "system"),
        cache=str(root / "cache"),
        data=str(root / "data"),
        extsd=str(root / "extsd"),
    )


def make_rom(rom_id: str, name: str | None = None, base: Path = Path("/x")) -> RomHandle:
    return RomHandle(
        id=rom_id,
        config_path=base / rom_id / "config.json",
        system_path=base / rom_id / "system",
        cache_path=base / rom_id / "cache",
        data_path=base / rom_id / "data",
        config_name=name,
    )


class FakeRegistry:
    """Stand-in for RomRegistry returning a fixed ROM list."""

    def __init__(self, roms, layout: PartitionLayout | None = None):
        self.roms = list(roms)
        self.layout = layout or PartitionLayout(
            system="/system", cache="/cache", data="/data", extsd="/external_sd"
        )
        self.installed_calls = 0

    def installed_roms(self):
        self.installed_calls += 1
        return list(self.roms)

    def get_rom(self, rom_id):
        for rom in self.roms:
            if rom.id == rom_id:
                return rom
        return None
