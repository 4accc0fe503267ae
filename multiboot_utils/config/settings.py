"""Settings storage and the per-invocation configuration value."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from multiboot_utils.__version__ import __version__


SETTINGS_PATH = Path(
    os.environ.get(
        "MULTIBOOT_UTILS_SETTINGS_PATH",
        Path.home() / ".config" / "multiboot-utils" / "settings.json",
    )
)

DEVICES_FILE_ENV = "MULTIBOOT_UTILS_DEVICES_FILE"

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_CHECKSUMS_FILE = "/data/multiboot/checksums.prop"
DEFAULT_MULTIBOOT_DIR = "/data/media/0/MultiBoot"

DEFAULT_SETTINGS: dict[str, Any] = {
    "devices_file": None,
    "log_dir": None,
    "checksums_file": DEFAULT_CHECKSUMS_FILE,
    "multiboot_dir": None,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def _optional_path(value: Any) -> Path | None:
    if value in (None, ""):
        return None
    return Path(value)


@dataclass(frozen=True)
class UtilitiesConfig:
    """Configuration threaded explicitly into the device and ROM operations.

    Built once at startup; nothing below the dispatcher reads settings or
    environment variables on its own.
    """

    devices_file: Path | None = None
    version: str = __version__
    checksums_file: Path = Path(DEFAULT_CHECKSUMS_FILE)
    multiboot_dir: Path | None = None

    @classmethod
    def from_settings(
        cls, devices_override: str | os.PathLike | None = None
    ) -> UtilitiesConfig:
        """Build a config from the loaded settings.

        Precedence for the device definitions file: explicit override (the
        ``--devices`` option), then the settings file, then
        ``$MULTIBOOT_UTILS_DEVICES_FILE``.
        """
        devices_file = (
            _optional_path(devices_override)
            or _optional_path(get_setting("devices_file"))
            or _optional_path(os.environ.get(DEVICES_FILE_ENV))
        )
        checksums_file = _optional_path(get_setting("checksums_file")) or Path(
            DEFAULT_CHECKSUMS_FILE
        )
        return cls(
            devices_file=devices_file,
            checksums_file=checksums_file,
            multiboot_dir=_optional_path(get_setting("multiboot_dir")),
        )


load_settings()
