"""Token substitution for the AROMA installer config.

Substitutions are literal and global, applied in a fixed order. Tabs are
escaped first so that generated text is never escaped. Tokens missing from the
template are simply not substituted.
"""

from __future__ import annotations

from typing import Sequence

from multiboot_utils.domain import PartitionLayout, RomHandle, TemplateTokens

# Menu entries 1..BASE_OFFSET are fixed items in the installer template
BASE_OFFSET = 2

TAB_ESCAPE = ("\t", "\\t")

VERSION_TOKEN = "@MBTOOL_VERSION@"
ROM_MENU_ITEMS_TOKEN = "@ROM_MENU_ITEMS@"
ROM_SELECTION_ITEMS_TOKEN = "@ROM_SELECTION_ITEMS@"
FIRST_INDEX_TOKEN = "@FIRST_INDEX@"
LAST_INDEX_TOKEN = "@LAST_INDEX@"
SYSTEM_MOUNT_POINT_TOKEN = "@SYSTEM_MOUNT_POINT@"
CACHE_MOUNT_POINT_TOKEN = "@CACHE_MOUNT_POINT@"
DATA_MOUNT_POINT_TOKEN = "@DATA_MOUNT_POINT@"
EXTSD_MOUNT_POINT_TOKEN = "@EXTSD_MOUNT_POINT@"

MENU_ITEM_FORMAT = '"{name}", "", "@default",\n'

SELECTION_ITEM_FORMAT = (
    'if prop("operations.prop", "selected") == "{index}" then\n'
    '    setvar("romid", "{rom_id}");\n'
    '    setvar("romname", "{name}");\n'
    "endif;\n"
)


def menu_index(position: int) -> int:
    """Installer menu index of the ROM at 0-based ``position``."""
    return BASE_OFFSET + position + 1


def first_index() -> int:
    return BASE_OFFSET + 1


def last_index(count: int) -> int:
    return BASE_OFFSET + count


def build_menu_items(roms: Sequence[RomHandle]) -> str:
    return "".join(MENU_ITEM_FORMAT.format(name=rom.display_name) for rom in roms)


def build_selection_items(roms: Sequence[RomHandle]) -> str:
    return "".join(
        SELECTION_ITEM_FORMAT.format(
            index=menu_index(position), rom_id=rom.id, name=rom.display_name
        )
        for position, rom in enumerate(roms)
    )


def build_tokens(
    roms: Sequence[RomHandle],
    layout: PartitionLayout,
    version: str,
) -> TemplateTokens:
    """Build the ordered substitution list for the installed ROMs."""
    return TemplateTokens(
        pairs=(
            (VERSION_TOKEN, version),
            (ROM_MENU_ITEMS_TOKEN, build_menu_items(roms)),
            (ROM_SELECTION_ITEMS_TOKEN, build_selection_items(roms)),
            (FIRST_INDEX_TOKEN, str(first_index())),
            (LAST_INDEX_TOKEN, str(last_index(len(roms)))),
            (SYSTEM_MOUNT_POINT_TOKEN, layout.system),
            (CACHE_MOUNT_POINT_TOKEN, layout.cache),
            (DATA_MOUNT_POINT_TOKEN, layout.data),
            (EXTSD_MOUNT_POINT_TOKEN, layout.extsd),
        )
    )


def render_text(text: str, tokens: TemplateTokens) -> str:
    text = text.replace(*TAB_ESCAPE)
    for token, value in tokens:
        text = text.replace(token, value)
    return text


def render(template: bytes, tokens: TemplateTokens) -> bytes:
    """Render template bytes. Bytes that are not UTF-8 pass through unchanged."""
    text = template.decode("utf-8", errors="surrogateescape")
    return render_text(text, tokens).encode("utf-8", errors="surrogateescape")
