"""AROMA installer archive generation.

Main Functions:
    - generate(): Build the installer ZIP from a template directory
    - render(): Apply template tokens to the AROMA config
    - build_tokens(): Build the token list for a set of installed ROMs
    - walk_tree(): Depth-first walk with per-entry-type callbacks
"""

from .archive import (
    TEMPLATE_SENTINEL_PATH,
    ZIP64_THRESHOLD,
    InstallerArchiveGenerator,
    generate,
    needs_zip64,
    plan_entry,
)
from .template import build_tokens, render
from .walker import classify_entry, walk_tree

__all__ = [
    "InstallerArchiveGenerator",
    "TEMPLATE_SENTINEL_PATH",
    "ZIP64_THRESHOLD",
    "build_tokens",
    "classify_entry",
    "generate",
    "needs_zip64",
    "plan_entry",
    "render",
    "walk_tree",
]
