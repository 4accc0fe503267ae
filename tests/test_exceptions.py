"""Tests for the exception hierarchy."""

import pytest

from multiboot_utils.exceptions import (
    ArchiveError,
    ArchiveOpenError,
    ArchiveWriteError,
    BootDeviceNotFoundError,
    CatalogParseError,
    CatalogReadError,
    ConfigError,
    DeviceNotFoundError,
    MissingDevicesFileError,
    MultibootError,
    NotFoundError,
    RomNotFoundError,
    UsageError,
)


class TestHierarchy:
    """Every error the dispatcher handles derives from MultibootError."""

    @pytest.mark.parametrize(
        "error",
        [
            CatalogReadError("/x"),
            CatalogParseError("bad"),
            DeviceNotFoundError("foo"),
            BootDeviceNotFoundError([]),
            RomNotFoundError("dual"),
            ArchiveOpenError("/out.zip"),
            ArchiveWriteError("write failed"),
            MissingDevicesFileError(),
            UsageError("usage"),
        ],
    )
    def test_base_class(self, error):
        assert isinstance(error, MultibootError)

    def test_not_found_family(self):
        assert issubclass(DeviceNotFoundError, NotFoundError)
        assert issubclass(BootDeviceNotFoundError, NotFoundError)
        assert issubclass(RomNotFoundError, NotFoundError)

    def test_archive_family(self):
        assert issubclass(ArchiveOpenError, ArchiveError)
        assert issubclass(ArchiveWriteError, ArchiveError)

    def test_catalog_read_is_os_error(self):
        assert isinstance(CatalogReadError("/x"), OSError)

    def test_missing_devices_file_is_config_error(self):
        assert isinstance(MissingDevicesFileError(), ConfigError)


class TestMessages:
    """Tests for exception attributes and messages."""

    def test_catalog_read_reason(self):
        error = CatalogReadError("/sdcard/devices.json", "Permission denied")

        assert str(error) == "/sdcard/devices.json: Failed to read file: Permission denied"
        assert error.path == "/sdcard/devices.json"

    def test_catalog_parse_prefixes_path(self):
        assert str(CatalogParseError("Invalid JSON", path="/d.json")) == "/d.json: Invalid JSON"
        assert str(CatalogParseError("Invalid JSON")) == "Invalid JSON"

    def test_boot_device_candidates(self):
        error = BootDeviceNotFoundError(["/dev/a", "/dev/b"])

        assert error.candidates == ["/dev/a", "/dev/b"]
        assert "/dev/a, /dev/b" in str(error)

    def test_archive_open(self):
        error = ArchiveOpenError("/out.zip", "No such file or directory")

        assert error.path == "/out.zip"
        assert str(error) == "/out.zip: Failed to open for writing: No such file or directory"

    def test_rom_not_found(self):
        assert str(RomNotFoundError("dual")) == "ROM not found: dual"
