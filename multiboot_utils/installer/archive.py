"""Installer archive generation.

Builds a flashable ZIP from a template directory. Every regular file is copied
into the archive under its path relative to the template root, with its
permission bits. The AROMA config template is rendered with the installed ROM
list and partition mount points and stored without its ``.in`` suffix.
Symlinks and special files cannot be represented and are skipped with a
warning.

Example:
    >>> from multiboot_utils.installer import generate
    >>> generate("/data/multiboot/aroma-template", "/tmp/installer.zip")
    True
"""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Callable, Optional

from multiboot_utils.__version__ import __version__
from multiboot_utils.domain import (
    ArchiveEntryPlan,
    EntryAction,
    EntryKind,
    PartitionLayout,
)
from multiboot_utils.exceptions import ArchiveOpenError, ArchiveWriteError
from multiboot_utils.logging import LoggerFactory
from multiboot_utils.roms import RomRegistry, detect_partition_layout

from .template import build_tokens, render
from .walker import walk_tree

TEMPLATE_SENTINEL_PATH = "META-INF/com/google/android/aroma-config.in"
TEMPLATE_SUFFIX = ".in"
COPY_BUFFER_SIZE = 32768
# Entries at or above this size are written with zip64 size fields
ZIP64_THRESHOLD = (1 << 32) - 1
PERMISSION_MASK = 0o777


def needs_zip64(size: int) -> bool:
    return size >= ZIP64_THRESHOLD


def external_attributes(mode: int) -> int:
    """Unix permission bits in the high 16 bits of the ZIP attribute field."""
    return (mode & PERMISSION_MASK) << 16


def plan_entry(path: Path, relative_path: str, kind: EntryKind) -> ArchiveEntryPlan:
    """Decide what the generator does with a walked entry."""
    if kind is EntryKind.DIRECTORY:
        action = EntryAction.IMPLICIT_DIRECTORY
        archive_name = None
    elif kind is EntryKind.SYMLINK:
        action = EntryAction.SKIP_SYMLINK
        archive_name = None
    elif kind is EntryKind.SPECIAL:
        action = EntryAction.SKIP_SPECIAL
        archive_name = None
    elif relative_path == TEMPLATE_SENTINEL_PATH:
        action = EntryAction.TEMPLATE
        archive_name = relative_path[: -len(TEMPLATE_SUFFIX)]
    else:
        action = EntryAction.COPY
        archive_name = relative_path
    return ArchiveEntryPlan(
        source=path,
        relative_path=relative_path,
        kind=kind,
        action=action,
        archive_name=archive_name,
    )


def make_zip_info(name: str, size: int, mode: Optional[int] = None) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name)
    info.compress_type = zipfile.ZIP_DEFLATED
    # Lets zipfile switch to zip64 for sizes its 32-bit writer cannot handle
    info.file_size = size
    if mode is not None:
        info.external_attr = external_attributes(mode)
    return info


class InstallerArchiveGenerator:
    """Tree visitor that writes walked files into a ZIP archive."""

    def __init__(
        self,
        archive_path: str | os.PathLike,
        render_config: Callable[[bytes], bytes],
    ):
        self.archive_path = Path(archive_path)
        self.render_config = render_config
        self.log = LoggerFactory.for_installer()
        self.entries: list[str] = []
        self.plans: list[ArchiveEntryPlan] = []
        self._zip: Optional[zipfile.ZipFile] = None

    def on_open(self) -> None:
        try:
            self._zip = zipfile.ZipFile(
                self.archive_path, "w", compression=zipfile.ZIP_DEFLATED
            )
        except OSError as error:
            raise ArchiveOpenError(
                str(self.archive_path), error.strerror or str(error)
            ) from error

    def on_close(self, success: bool) -> bool:
        if self._zip is None:
            return False
        zip_file, self._zip = self._zip, None
        try:
            zip_file.close()
        except (OSError, ValueError) as error:
            self.log.error(f"{self.archive_path}: Failed to close archive: {error}")
            return False
        if not success:
            self.log.warning(f"{self.archive_path}: Archive closed after a failure")
        return True

    def on_directory_enter(self, path: Path, relative_path: str) -> None:
        self.plans.append(plan_entry(path, relative_path, EntryKind.DIRECTORY))
        self.log.trace(f"Entering {relative_path}/")

    def on_symlink(self, path: Path, relative_path: str) -> None:
        self.plans.append(plan_entry(path, relative_path, EntryKind.SYMLINK))
        self.log.warning(f"Ignoring symlink when creating zip: {path}")

    def on_special(self, path: Path, relative_path: str) -> None:
        self.plans.append(plan_entry(path, relative_path, EntryKind.SPECIAL))
        self.log.warning(f"Ignoring special file when creating zip: {path}")

    def on_regular_file(self, path: Path, relative_path: str) -> None:
        plan = plan_entry(path, relative_path, EntryKind.REGULAR_FILE)
        self.plans.append(plan)
        self.log.debug(f"{path} -> {plan.archive_name}")
        if plan.action is EntryAction.TEMPLATE:
            self._add_templated(plan)
        else:
            self._add_file(plan)
        self.entries.append(plan.archive_name)

    def _add_templated(self, plan: ArchiveEntryPlan) -> None:
        try:
            data = plan.source.read_bytes()
        except OSError as error:
            raise ArchiveWriteError(
                f"Failed to read: {plan.source}: {error}", path=str(plan.source)
            ) from error

        data = self.render_config(data)
        info = make_zip_info(plan.archive_name, len(data))
        try:
            with self._zip.open(info, "w", force_zip64=needs_zip64(len(data))) as entry:
                entry.write(data)
        except (OSError, RuntimeError, zipfile.LargeZipFile) as error:
            raise ArchiveWriteError(
                f"Failed to write data: [memory] -> {plan.archive_name}: {error}",
                path=str(self.archive_path),
            ) from error

    def _add_file(self, plan: ArchiveEntryPlan) -> None:
        try:
            source = open(plan.source, "rb")
        except OSError as error:
            raise ArchiveWriteError(
                f"{plan.source}: Failed to open for reading: {error}",
                path=str(plan.source),
            ) from error

        with source:
            try:
                st = os.fstat(source.fileno())
            except OSError as error:
                raise ArchiveWriteError(
                    f"{plan.source}: Failed to stat: {error}", path=str(plan.source)
                ) from error

            info = make_zip_info(plan.archive_name, st.st_size, st.st_mode)
            try:
                with self._zip.open(
                    info, "w", force_zip64=needs_zip64(st.st_size)
                ) as entry:
                    self._copy_stream(plan.source, source, entry)
            except (OSError, RuntimeError, zipfile.LargeZipFile) as error:
                raise ArchiveWriteError(
                    f"Failed to write data: {plan.source}: {error}",
                    path=str(self.archive_path),
                ) from error

    def _copy_stream(self, source_path: Path, source, entry) -> None:
        while True:
            try:
                chunk = source.read(COPY_BUFFER_SIZE)
            except OSError as error:
                raise ArchiveWriteError(
                    f"{source_path}: Failed to read file: {error}",
                    path=str(source_path),
                ) from error
            if not chunk:
                break
            self.log.trace(f"{source_path}: {len(chunk)} bytes")
            entry.write(chunk)


def generate(
    source_dir: str | os.PathLike,
    archive_path: str | os.PathLike,
    *,
    layout: Optional[PartitionLayout] = None,
    registry: Optional[RomRegistry] = None,
    version: str = __version__,
) -> bool:
    """Build the installer archive for the currently installed ROMs.

    Returns:
        True if every entry was written and the archive was finalized

    Raises:
        ArchiveOpenError: If the archive cannot be created; nothing is walked
        ArchiveWriteError: If a file cannot be read or an entry cannot be
            written; the partial archive is still closed
    """
    log = LoggerFactory.for_installer()

    if layout is None:
        layout = detect_partition_layout()
    if registry is None:
        registry = RomRegistry(layout)

    roms = registry.installed_roms()
    tokens = build_tokens(roms, layout, version)
    log.debug(f"Generating installer with {len(roms)} ROM(s)")

    generator = InstallerArchiveGenerator(
        archive_path, lambda data: render(data, tokens)
    )
    try:
        success = walk_tree(source_dir, generator)
    except OSError as error:
        raise ArchiveWriteError(
            f"{source_dir}: Failed to walk template directory: {error}",
            path=str(source_dir),
        ) from error

    skipped = [
        plan
        for plan in generator.plans
        if plan.action in (EntryAction.SKIP_SYMLINK, EntryAction.SKIP_SPECIAL)
    ]
    if success:
        log.info(
            f"Wrote {len(generator.entries)} entries to {archive_path}"
            f" ({len(skipped)} skipped)"
        )
    else:
        log.error(f"{archive_path}: Failed to finalize archive")
    return success
