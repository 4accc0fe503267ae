"""Installed ROM lookup plus the switch and wipe primitives.

Main Functions:
    - RomRegistry: Create handles for ROM ids and enumerate installed ROMs
    - detect_partition_layout(): Find the real system/cache/data/extsd mounts
    - ChecksumSwitcher: Verify and flash a ROM's boot image
    - DEFAULT_WIPE_PRIMITIVES: Wipe function for each WipeTarget
"""

from .boot_image import ChecksumSwitcher, SwitchPrimitive, compute_checksum
from .layout import detect_partition_layout
from .registry import RomConfig, RomRegistry
from .wipers import DEFAULT_WIPE_PRIMITIVES, WipePrimitive

__all__ = [
    "ChecksumSwitcher",
    "DEFAULT_WIPE_PRIMITIVES",
    "RomConfig",
    "RomRegistry",
    "SwitchPrimitive",
    "WipePrimitive",
    "compute_checksum",
    "detect_partition_layout",
]
