"""Wipe one category of a ROM's data."""

from __future__ import annotations

from typing import Mapping, Optional

from multiboot_utils.domain import WipeTarget
from multiboot_utils.exceptions import RomNotFoundError
from multiboot_utils.logging import LoggerFactory
from multiboot_utils.roms import DEFAULT_WIPE_PRIMITIVES, RomRegistry, WipePrimitive


def wipe_rom(
    target: WipeTarget,
    rom_id: str,
    registry: Optional[RomRegistry] = None,
    primitives: Mapping[WipeTarget, WipePrimitive] = DEFAULT_WIPE_PRIMITIVES,
) -> bool:
    """Resolve ``rom_id`` and run the wipe primitive for ``target`` once.

    The registry defaults to one for the detected partition layout.

    Raises:
        RomNotFoundError: If the id is not an installed ROM; nothing is wiped
    """
    log = LoggerFactory.for_wipe(rom_id)

    if registry is None:
        registry = RomRegistry.detect()
    rom = registry.get_rom(rom_id)
    if rom is None:
        raise RomNotFoundError(rom_id)

    log.info(f"Running {target.value} for {rom.display_name}")
    return primitives[target](rom)


def wipe_system(rom_id, registry=None, primitives=DEFAULT_WIPE_PRIMITIVES) -> bool:
    return wipe_rom(WipeTarget.SYSTEM, rom_id, registry, primitives)


def wipe_cache(rom_id, registry=None, primitives=DEFAULT_WIPE_PRIMITIVES) -> bool:
    return wipe_rom(WipeTarget.CACHE, rom_id, registry, primitives)


def wipe_data(rom_id, registry=None, primitives=DEFAULT_WIPE_PRIMITIVES) -> bool:
    return wipe_rom(WipeTarget.DATA, rom_id, registry, primitives)


def wipe_dalvik_cache(rom_id, registry=None, primitives=DEFAULT_WIPE_PRIMITIVES) -> bool:
    return wipe_rom(WipeTarget.DALVIK_CACHE, rom_id, registry, primitives)


def wipe_multiboot(rom_id, registry=None, primitives=DEFAULT_WIPE_PRIMITIVES) -> bool:
    return wipe_rom(WipeTarget.MULTIBOOT, rom_id, registry, primitives)
