"""Detection of the real partition mount points."""

from __future__ import annotations

import os
from pathlib import Path

from multiboot_utils.domain import PartitionLayout

EXTSD_CANDIDATES = ("/raw/extsd", "/external_sd", "/extSdCard")
DEFAULT_EXTSD = "/external_sd"


def _prefer_raw(name: str, root: Path) -> str:
    raw = f"/raw/{name}"
    if (root / raw.lstrip("/")).exists():
        return raw
    return f"/{name}"


def detect_partition_layout(root: str | os.PathLike = "/") -> PartitionLayout:
    """Return mount points, preferring ``/raw/<name>`` when it is mounted.

    ``root`` only changes where existence is checked; the returned values are
    always absolute device paths.
    """
    root = Path(root)
    extsd = DEFAULT_EXTSD
    for candidate in EXTSD_CANDIDATES:
        if (root / candidate.lstrip("/")).exists():
            extsd = candidate
            break
    return PartitionLayout(
        system=_prefer_raw("system", root),
        cache=_prefer_raw("cache", root),
        data=_prefer_raw("data", root),
        extsd=extsd,
    )
