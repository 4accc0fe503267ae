"""Android system property lookup.

Properties are read with the ``getprop`` tool when it is available. Outside a
running Android system (recovery images without ``getprop``, host machines) the
standard property files are scanned instead.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Optional

from multiboot_utils.logging import get_logger

log = get_logger(source=__name__, tags=["device", "props"])

PROPERTY_FILES = (
    Path("/default.prop"),
    Path("/system/build.prop"),
    Path("/vendor/build.prop"),
)

GETPROP_TIMEOUT_SECONDS = 5


def _getprop(key: str) -> Optional[str]:
    getprop_path = shutil.which("getprop")
    if not getprop_path:
        return None
    try:
        result = subprocess.run(
            [getprop_path, key],
            check=True,
            text=True,
            capture_output=True,
            timeout=GETPROP_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as error:
        log.debug(f"getprop {key} failed: {error}")
        return None
    return result.stdout.strip()


def read_property_file(path: Path, key: str) -> Optional[str]:
    """Return the last value assigned to ``key`` in a ``key=value`` file."""
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return None
    value = None
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        name, _, raw_value = line.partition("=")
        if name.strip() == key:
            value = raw_value.strip()
    return value


def get_property(
    key: str,
    default: str = "",
    property_files: Iterable[Path] = PROPERTY_FILES,
) -> str:
    """Look up a system property, returning ``default`` when unset or empty."""
    value = _getprop(key)
    if not value:
        for path in property_files:
            value = read_property_file(path, key)
            if value:
                break
    return value or default
