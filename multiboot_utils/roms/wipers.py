"""Per-category wipe primitives operating on a ROM's directories."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable, Iterable

from multiboot_utils.domain import RomHandle, WipeTarget
from multiboot_utils.logging import LoggerFactory

WipePrimitive = Callable[[RomHandle], bool]


def wipe_directory(path: Path, exclusions: Iterable[str] = ()) -> bool:
    """Delete the contents of ``path`` except the top-level ``exclusions``.

    A missing directory is already wiped. Every entry is attempted even after a
    failure; the result is False if anything could not be removed.
    """
    log = LoggerFactory.for_wipe()
    excluded = set(exclusions)
    try:
        entries = list(os.scandir(path))
    except FileNotFoundError:
        return True
    except OSError as error:
        log.error(f"{path}: Failed to list directory: {error}")
        return False

    success = True
    for entry in entries:
        if entry.name in excluded:
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(entry.path)
            else:
                os.unlink(entry.path)
        except OSError as error:
            log.error(f"{entry.path}: Failed to remove: {error}")
            success = False
    return success


def remove_tree(path: Path) -> bool:
    if not path.exists() and not path.is_symlink():
        return True
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as error:
        LoggerFactory.for_wipe().error(f"{path}: Failed to remove: {error}")
        return False
    return True


def wipe_system(rom: RomHandle) -> bool:
    # The primary ROM's system partition also holds secondary ROMs
    return wipe_directory(rom.system_path, exclusions=("multiboot",))


def wipe_cache(rom: RomHandle) -> bool:
    return wipe_directory(rom.cache_path, exclusions=("multiboot",))


def wipe_data(rom: RomHandle) -> bool:
    return wipe_directory(rom.data_path, exclusions=("media", "multiboot"))


def wipe_dalvik_cache(rom: RomHandle) -> bool:
    data_ok = remove_tree(rom.data_path / "dalvik-cache")
    cache_ok = remove_tree(rom.cache_path / "dalvik-cache")
    return data_ok and cache_ok


def wipe_multiboot(rom: RomHandle) -> bool:
    return remove_tree(rom.config_path.parent)


DEFAULT_WIPE_PRIMITIVES: dict[WipeTarget, WipePrimitive] = {
    WipeTarget.SYSTEM: wipe_system,
    WipeTarget.CACHE: wipe_cache,
    WipeTarget.DATA: wipe_data,
    WipeTarget.DALVIK_CACHE: wipe_dalvik_cache,
    WipeTarget.MULTIBOOT: wipe_multiboot,
}
