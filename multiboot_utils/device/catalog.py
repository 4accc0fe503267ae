"""Device catalog parsing.

The catalog is a JSON array of device objects::

    [
      {
        "id": "hammerhead",
        "codenames": ["hammerhead"],
        "name": "Google Nexus 5",
        "architecture": "armeabi-v7a",
        "block_devs": {
          "base_dirs": ["/dev/block/platform/msm_sdcc.1/by-name"],
          "system": ["/dev/block/platform/msm_sdcc.1/by-name/system"],
          "cache": ["/dev/block/platform/msm_sdcc.1/by-name/cache"],
          "data": ["/dev/block/platform/msm_sdcc.1/by-name/userdata"],
          "boot": ["/dev/block/platform/msm_sdcc.1/by-name/boot"],
          "recovery": ["/dev/block/platform/msm_sdcc.1/by-name/recovery"]
        }
      }
    ]

Structural problems (bad JSON, wrong types) raise CatalogParseError. Missing
fields do not: they produce records that fail ``DeviceRecord.is_valid`` and are
skipped by the resolver.
"""

from __future__ import annotations

import json
from typing import Any

from multiboot_utils.domain import DeviceRecord
from multiboot_utils.exceptions import CatalogParseError

BLOCK_DEV_KEYS = ("base_dirs", "system", "cache", "data", "boot", "recovery")


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CatalogParseError(f"{where}: expected string, got {type(value).__name__}")
    return value


def _string_list(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise CatalogParseError(f"{where}: expected array, got {type(value).__name__}")
    items = []
    for index, item in enumerate(value):
        items.append(_string(item, f"{where}[{index}]"))
    return tuple(items)


def device_from_dict(data: Any, index: int = 0) -> DeviceRecord:
    """Convert one catalog entry into a DeviceRecord."""
    where = f"[{index}]"
    if not isinstance(data, dict):
        raise CatalogParseError(f"{where}: expected object, got {type(data).__name__}")

    block_devs = data.get("block_devs") or {}
    if not isinstance(block_devs, dict):
        raise CatalogParseError(f"{where}.block_devs: expected object")
    devs = {
        key: _string_list(block_devs.get(key), f"{where}.block_devs.{key}")
        for key in BLOCK_DEV_KEYS
    }

    return DeviceRecord(
        id=_string(data.get("id"), f"{where}.id"),
        codenames=frozenset(_string_list(data.get("codenames"), f"{where}.codenames")),
        name=_string(data.get("name"), f"{where}.name"),
        architecture=_string(data.get("architecture"), f"{where}.architecture"),
        base_dirs=devs["base_dirs"],
        system_block_devs=devs["system"],
        cache_block_devs=devs["cache"],
        data_block_devs=devs["data"],
        boot_block_devs=devs["boot"],
        recovery_block_devs=devs["recovery"],
    )


def parse_device_catalog(text: str) -> list[DeviceRecord]:
    """Parse catalog JSON text into device records, preserving catalog order.

    Raises:
        CatalogParseError: If the text is not JSON or not shaped like a catalog
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as error:
        raise CatalogParseError(f"Invalid JSON: {error}") from error
    if not isinstance(data, list):
        raise CatalogParseError(
            f"Expected array of devices, got {type(data).__name__}"
        )
    return [device_from_dict(item, index) for index, item in enumerate(data)]
