"""Boot image switching primitive.

Each ROM keeps a copy of its boot image at ``<multiboot_dir>/<rom_id>/boot.img``.
Switching verifies the image against the SHA-512 recorded when the ROM was
installed and writes it to the boot partition.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Optional, Protocol, Sequence

from multiboot_utils.device.properties import read_property_file
from multiboot_utils.domain import SwitchRomResult
from multiboot_utils.logging import LoggerFactory

COPY_CHUNK_SIZE = 1024 * 1024
CHECKSUM_ALGORITHM = "sha512"


class SwitchPrimitive(Protocol):
    def __call__(
        self,
        rom_id: str,
        boot_device: str,
        block_dev_base_dirs: Sequence[str],
        force: bool,
    ) -> SwitchRomResult: ...


def compute_checksum(path: Path, algorithm: str = CHECKSUM_ALGORITHM) -> str:
    digest = hashlib.new(algorithm)
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(COPY_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def copy_to_block_device(source: Path, boot_device: str) -> None:
    with source.open("rb") as src, open(boot_device, "wb") as dest:
        for chunk in iter(lambda: src.read(COPY_CHUNK_SIZE), b""):
            dest.write(chunk)
        dest.flush()
        os.fsync(dest.fileno())


class ChecksumSwitcher:
    """Default switch primitive: verify the stored boot image, then flash it."""

    def __init__(self, multiboot_dir: Path, checksums_file: Path):
        self.multiboot_dir = Path(multiboot_dir)
        self.checksums_file = Path(checksums_file)

    def boot_image_path(self, rom_id: str) -> Path:
        return self.multiboot_dir / rom_id / "boot.img"

    def expected_checksum(self, rom_id: str) -> Optional[str]:
        value = read_property_file(self.checksums_file, f"{rom_id}/boot.img")
        if not value:
            return None
        algorithm, _, hexdigest = value.partition(":")
        if algorithm != CHECKSUM_ALGORITHM or not hexdigest:
            return None
        return hexdigest.lower()

    def __call__(
        self,
        rom_id: str,
        boot_device: str,
        block_dev_base_dirs: Sequence[str],
        force: bool,
    ) -> SwitchRomResult:
        log = LoggerFactory.for_switch(rom_id)
        log.debug(f"Block device base dirs: {', '.join(block_dev_base_dirs)}")

        image = self.boot_image_path(rom_id)
        if not image.is_file():
            log.error(f"{image}: Boot image not found")
            return SwitchRomResult.FAILED

        if force:
            log.warning("Skipping boot image checksum verification")
        else:
            expected = self.expected_checksum(rom_id)
            if expected is None:
                log.error(f"{rom_id}: No checksum recorded for boot image")
                return SwitchRomResult.CHECKSUM_NOT_FOUND
            try:
                actual = compute_checksum(image)
            except OSError as error:
                log.error(f"{image}: Failed to read: {error}")
                return SwitchRomResult.FAILED
            if actual != expected:
                log.error(f"{image}: Checksum mismatch (expected {expected}, got {actual})")
                return SwitchRomResult.CHECKSUM_INVALID

        try:
            copy_to_block_device(image, boot_device)
        except OSError as error:
            log.error(f"Failed to write {image} to {boot_device}: {error}")
            return SwitchRomResult.FAILED

        log.info(f"Flashed {image} to {boot_device}")
        return SwitchRomResult.SUCCEEDED
