"""Domain models for multiboot utility operations."""

from __future__ import annotations

from .models import (
    ArchiveEntryPlan,
    DeviceRecord,
    EntryAction,
    EntryKind,
    PartitionLayout,
    RomHandle,
    SwitchRomResult,
    TemplateTokens,
    WipeTarget,
)


__all__ = [
    "ArchiveEntryPlan",
    "DeviceRecord",
    "EntryAction",
    "EntryKind",
    "PartitionLayout",
    "RomHandle",
    "SwitchRomResult",
    "TemplateTokens",
    "WipeTarget",
]
