"""Custom exceptions for multiboot utility operations.

This module defines a hierarchy of exceptions so that every failure reaching the
command line dispatcher carries a specific type and a readable message.

Exception Hierarchy:
    MultibootError (base)
        ├── CatalogReadError
        ├── CatalogParseError
        ├── NotFoundError
        │   ├── DeviceNotFoundError
        │   ├── BootDeviceNotFoundError
        │   └── RomNotFoundError
        ├── ArchiveError
        │   ├── ArchiveOpenError
        │   └── ArchiveWriteError
        ├── ConfigError
        │   └── MissingDevicesFileError
        └── UsageError

Usage:
    from multiboot_utils.exceptions import RomNotFoundError

    if rom is None:
        raise RomNotFoundError(rom_id)
"""

from __future__ import annotations


class MultibootError(Exception):
    """Base exception for all multiboot utility operations."""


class CatalogReadError(MultibootError, OSError):
    """Device catalog file could not be read."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"{path}: Failed to read file"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CatalogParseError(MultibootError):
    """Device catalog is not structurally valid."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class NotFoundError(MultibootError):
    """Base exception for lookups that produced no result."""


class DeviceNotFoundError(NotFoundError):
    """No device in the catalog matches the running hardware."""

    def __init__(self, codename: str):
        self.codename = codename
        super().__init__(f"Unknown device: {codename}")


class BootDeviceNotFoundError(NotFoundError):
    """None of the boot partition candidates is a block device."""

    def __init__(self, candidates: list[str]):
        self.candidates = list(candidates)
        msg = "All specified boot partition paths could not be found"
        if self.candidates:
            msg += f": {', '.join(self.candidates)}"
        super().__init__(msg)


class RomNotFoundError(NotFoundError):
    """ROM id does not refer to an installed ROM."""

    def __init__(self, rom_id: str):
        self.rom_id = rom_id
        super().__init__(f"ROM not found: {rom_id}")


class ArchiveError(MultibootError):
    """Base exception for installer archive failures."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class ArchiveOpenError(ArchiveError):
    """Archive container could not be created."""

    def __init__(self, path: str, reason: str = ""):
        msg = f"{path}: Failed to open for writing"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, path=path)


class ArchiveWriteError(ArchiveError):
    """Reading a source file or writing an archive entry failed."""


class ConfigError(MultibootError):
    """Required configuration is missing or invalid."""


class MissingDevicesFileError(ConfigError):
    """No device definitions file was configured."""

    def __init__(self):
        super().__init__("No device definitions file specified")


class UsageError(MultibootError):
    """Malformed command line invocation."""
