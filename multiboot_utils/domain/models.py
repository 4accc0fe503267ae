"""Domain model for device, ROM and installer operations.

Type-safe objects for the values passed between the device resolver, the ROM
registry, the switch/wipe dispatchers and the installer generator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


# ==============================================================================
# Device Domain
# ==============================================================================


KNOWN_ARCHITECTURES = frozenset({"armeabi-v7a", "arm64-v8a", "x86", "x86_64"})


@dataclass(frozen=True)
class DeviceRecord:
    """A device definition from the device catalog.

    Codenames are matched as a set; boot block device candidates are kept in
    priority order (first existing block device wins).
    """

    id: str = ""
    codenames: frozenset[str] = frozenset()
    name: str = ""
    architecture: str = ""
    base_dirs: tuple[str, ...] = ()
    system_block_devs: tuple[str, ...] = ()
    cache_block_devs: tuple[str, ...] = ()
    data_block_devs: tuple[str, ...] = ()
    boot_block_devs: tuple[str, ...] = ()
    recovery_block_devs: tuple[str, ...] = ()

    def validation_errors(self) -> list[str]:
        """Return the reasons this record is unusable (empty when valid)."""
        errors = []
        if not self.id:
            errors.append("missing id")
        if not self.codenames:
            errors.append("missing codenames")
        if not self.name:
            errors.append("missing name")
        if self.architecture not in KNOWN_ARCHITECTURES:
            errors.append(f"invalid architecture: {self.architecture or '(none)'}")
        if not self.system_block_devs:
            errors.append("missing system block devices")
        if not self.boot_block_devs:
            errors.append("missing boot block devices")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()

    def matches(self, *identities: str) -> bool:
        """Check if any of the hardware identity strings is one of our codenames."""
        return any(identity in self.codenames for identity in identities)


# ==============================================================================
# ROM Domain
# ==============================================================================


@dataclass(frozen=True)
class RomHandle:
    """An installed (or installable) ROM, identified by its id.

    ``config_name`` is the name from the ROM's config file, if it has one.
    """

    id: str
    config_path: Path
    system_path: Path
    cache_path: Path
    data_path: Path
    config_name: str | None = None

    @property
    def display_name(self) -> str:
        """Name shown in installer menus; falls back to the id."""
        return self.config_name or self.id


@dataclass(frozen=True)
class PartitionLayout:
    """Mount points of the real partitions backing all ROMs."""

    system: str
    cache: str
    data: str
    extsd: str


class SwitchRomResult(Enum):
    """Outcome of the boot image switch primitive."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CHECKSUM_INVALID = "checksum_invalid"
    CHECKSUM_NOT_FOUND = "checksum_not_found"


class WipeTarget(Enum):
    """Wipe categories, keyed by the command line action name."""

    SYSTEM = "wipe-system"
    CACHE = "wipe-cache"
    DATA = "wipe-data"
    DALVIK_CACHE = "wipe-dalvik-cache"
    MULTIBOOT = "wipe-multiboot"


# ==============================================================================
# Installer Domain
# ==============================================================================


class EntryKind(Enum):
    """Filesystem entry type seen while walking a template tree."""

    DIRECTORY = "directory"
    REGULAR_FILE = "file"
    SYMLINK = "symlink"
    SPECIAL = "special"


class EntryAction(Enum):
    """What the installer generator does with a visited entry."""

    IMPLICIT_DIRECTORY = "directory"
    COPY = "copy"
    TEMPLATE = "template"
    SKIP_SYMLINK = "skip-symlink"
    SKIP_SPECIAL = "skip-special"


@dataclass(frozen=True)
class ArchiveEntryPlan:
    """Classification of a single template tree entry."""

    source: Path
    relative_path: str
    kind: EntryKind
    action: EntryAction
    archive_name: str | None = None


@dataclass(frozen=True)
class TemplateTokens:
    """Ordered (token, value) substitutions applied after tab escaping."""

    pairs: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def get(self, token: str) -> str | None:
        for key, value in self.pairs:
            if key == token:
                return value
        return None
