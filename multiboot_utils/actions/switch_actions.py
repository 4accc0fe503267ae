"""Switch the active ROM by flashing its boot image."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Callable, Optional, Sequence

from multiboot_utils.config.settings import DEFAULT_MULTIBOOT_DIR, UtilitiesConfig
from multiboot_utils.device import resolve_device
from multiboot_utils.domain import DeviceRecord, SwitchRomResult
from multiboot_utils.exceptions import BootDeviceNotFoundError, MissingDevicesFileError
from multiboot_utils.logging import LoggerFactory
from multiboot_utils.roms import ChecksumSwitcher, SwitchPrimitive


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def select_boot_device(
    candidates: Sequence[str],
    check: Callable[[str], bool] = is_block_device,
) -> str:
    """Return the first candidate that is an existing block device.

    Raises:
        BootDeviceNotFoundError: If no candidate qualifies
    """
    for path in candidates:
        if check(path):
            return path
    raise BootDeviceNotFoundError(list(candidates))


def default_switcher(config: UtilitiesConfig) -> ChecksumSwitcher:
    return ChecksumSwitcher(
        multiboot_dir=config.multiboot_dir or Path(DEFAULT_MULTIBOOT_DIR),
        checksums_file=config.checksums_file,
    )


def switch_rom(
    rom_id: str,
    force: bool,
    config: UtilitiesConfig,
    *,
    resolver: Callable[[Path], DeviceRecord] = resolve_device,
    switcher: Optional[SwitchPrimitive] = None,
    block_device_check: Callable[[str], bool] = is_block_device,
) -> bool:
    """Make ``rom_id`` the ROM that boots next.

    Returns:
        True only when the switch primitive reports SUCCEEDED. Checksum
        failures are reported, never retried.

    Raises:
        MissingDevicesFileError: If no device definitions file is configured
        CatalogReadError, CatalogParseError, DeviceNotFoundError: From device
            resolution
        BootDeviceNotFoundError: If no boot partition candidate is a block device
    """
    log = LoggerFactory.for_switch(rom_id)

    if config.devices_file is None:
        raise MissingDevicesFileError()

    device = resolver(config.devices_file)
    boot_device = select_boot_device(device.boot_block_devs, block_device_check)
    log.debug(f"Using boot partition {boot_device}")

    if switcher is None:
        switcher = default_switcher(config)

    result = switcher(rom_id, boot_device, device.base_dirs, force)
    log.debug(result.name)

    return result is SwitchRomResult.SUCCEEDED
