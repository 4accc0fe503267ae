"""ROM lookup and enumeration.

ROM ids and where their files live:

    primary             <system>, <cache>, <data>
    dual                <system>/multiboot/dual/{system,cache,data}
    multi-slot-<n>      <cache>/multiboot/multi-slot-<n>/{system,cache,data}
    data-slot-<name>    <data>/multiboot/data-slot-<name>/{system,cache,data}
    extsd-slot-<name>   <extsd>/multiboot/extsd-slot-<name>/{system,cache,data}

Each ROM's config lives at ``<multiboot_dir>/<id>/config.json``.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from multiboot_utils.domain import PartitionLayout, RomHandle
from multiboot_utils.logging import get_logger

from .layout import detect_partition_layout

log = get_logger(source=__name__, tags=["roms"])

PRIMARY_ID = "primary"
DUAL_ID = "dual"

MULTI_SLOT_RE = re.compile(r"^multi-slot-(\d+)$")
DATA_SLOT_RE = re.compile(r"^data-slot-([^/]+)$")
EXTSD_SLOT_RE = re.compile(r"^extsd-slot-([^/]+)$")


@dataclass(frozen=True)
class RomConfig:
    """Per-ROM settings stored alongside the ROM's boot image."""

    name: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> Optional[RomConfig]:
        """Load a config file; missing or unreadable files yield None."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
            log.warning(f"{path}: Failed to load ROM config: {error}")
            return None
        if not isinstance(data, dict):
            log.warning(f"{path}: ROM config is not an object")
            return None
        name = data.get("name")
        return cls(name=name if isinstance(name, str) and name else None)


def _slot_sort_key(rom_id: str) -> tuple[int, str]:
    match = MULTI_SLOT_RE.match(rom_id)
    if match:
        return (int(match.group(1)), rom_id)
    return (0, rom_id)


class RomRegistry:
    """Creates RomHandle objects for a given partition layout."""

    def __init__(
        self,
        layout: PartitionLayout,
        multiboot_dir: str | os.PathLike | None = None,
    ):
        self.layout = layout
        if multiboot_dir is None:
            multiboot_dir = Path(layout.data) / "media" / "0" / "MultiBoot"
        self.multiboot_dir = Path(multiboot_dir)

    @classmethod
    def detect(cls, multiboot_dir: str | os.PathLike | None = None) -> RomRegistry:
        return cls(detect_partition_layout(), multiboot_dir=multiboot_dir)

    def _rom_base(self, rom_id: str) -> Optional[Path]:
        if rom_id == DUAL_ID:
            return Path(self.layout.system) / "multiboot" / DUAL_ID
        if MULTI_SLOT_RE.match(rom_id):
            return Path(self.layout.cache) / "multiboot" / rom_id
        if DATA_SLOT_RE.match(rom_id):
            return Path(self.layout.data) / "multiboot" / rom_id
        if EXTSD_SLOT_RE.match(rom_id):
            return Path(self.layout.extsd) / "multiboot" / rom_id
        return None

    def config_path(self, rom_id: str) -> Path:
        return self.multiboot_dir / rom_id / "config.json"

    def create_rom(self, rom_id: str) -> Optional[RomHandle]:
        """Build a handle for any well-formed ROM id, installed or not."""
        if rom_id == PRIMARY_ID:
            system_path = Path(self.layout.system)
            cache_path = Path(self.layout.cache)
            data_path = Path(self.layout.data)
        else:
            base = self._rom_base(rom_id)
            if base is None:
                return None
            system_path = base / "system"
            cache_path = base / "cache"
            data_path = base / "data"

        config_path = self.config_path(rom_id)
        config = RomConfig.load(config_path)
        return RomHandle(
            id=rom_id,
            config_path=config_path,
            system_path=system_path,
            cache_path=cache_path,
            data_path=data_path,
            config_name=config.name if config else None,
        )

    def is_installed(self, rom: RomHandle) -> bool:
        return rom.system_path.is_dir()

    def _slot_ids(self, parent: Path, pattern: re.Pattern) -> list[str]:
        try:
            names = [entry.name for entry in os.scandir(parent) if entry.is_dir()]
        except OSError:
            return []
        return sorted((name for name in names if pattern.match(name)), key=_slot_sort_key)

    def candidate_ids(self) -> list[str]:
        """All ROM ids with a directory on disk, in menu order."""
        ids = [PRIMARY_ID, DUAL_ID]
        ids.extend(
            self._slot_ids(Path(self.layout.cache) / "multiboot", MULTI_SLOT_RE)
        )
        ids.extend(self._slot_ids(Path(self.layout.data) / "multiboot", DATA_SLOT_RE))
        ids.extend(
            self._slot_ids(Path(self.layout.extsd) / "multiboot", EXTSD_SLOT_RE)
        )
        return ids

    def installed_roms(self) -> list[RomHandle]:
        """Enumerate installed ROMs; the order is stable for a given ROM set."""
        roms = []
        for rom_id in self.candidate_ids():
            rom = self.create_rom(rom_id)
            if rom is not None and self.is_installed(rom):
                roms.append(rom)
        log.debug(f"Installed ROMs: {[rom.id for rom in roms]}")
        return roms

    def get_rom(self, rom_id: str) -> Optional[RomHandle]:
        """Return the handle for an installed ROM, or None."""
        rom = self.create_rom(rom_id)
        if rom is None or not self.is_installed(rom):
            return None
        return rom
