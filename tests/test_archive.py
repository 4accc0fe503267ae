"""Tests for installer archive generation."""

import os
import zipfile
from pathlib import Path

import pytest

from conftest import FakeRegistry, make_rom, messages_at
from multiboot_utils.domain import EntryAction, EntryKind, PartitionLayout
from multiboot_utils.exceptions import ArchiveOpenError, ArchiveWriteError
from multiboot_utils.installer import archive, walk_tree
from multiboot_utils.installer.archive import (
    InstallerArchiveGenerator,
    generate,
    needs_zip64,
    plan_entry,
)

LAYOUT = PartitionLayout(
    system="/raw/system", cache="/raw/cache", data="/raw/data", extsd="/external_sd"
)
CONFIG_IN = "META-INF/com/google/android/aroma-config.in"
CONFIG_OUT = "META-INF/com/google/android/aroma-config"


@pytest.fixture
def template_dir(tmp_path):
    """A minimal AROMA template tree."""
    root = tmp_path / "template"
    config = root / CONFIG_IN
    config.parent.mkdir(parents=True)
    config.write_text(
        'ini_set("rom_version", "@MBTOOL_VERSION@");\n'
        "menu:\n@ROM_MENU_ITEMS@"
        "range @FIRST_INDEX@-@LAST_INDEX@\n"
        "\tmount @SYSTEM_MOUNT_POINT@\n",
        encoding="utf-8",
    )
    binary = root / "META-INF" / "com" / "google" / "android" / "update-binary"
    binary.write_bytes(b"\x7fELF" + bytes(range(256)) * 64)
    binary.chmod(0o755)
    (root / "exynos4" / "data").mkdir(parents=True)
    (root / "exynos4" / "data" / "notes.txt").write_text("@MBTOOL_VERSION@")
    return root


@pytest.fixture
def registry():
    return FakeRegistry([make_rom("primary"), make_rom("dual", name="Second")])


def run_generate(template_dir, tmp_path, registry, **kwargs):
    archive_path = tmp_path / "installer.zip"
    result = generate(
        template_dir,
        archive_path,
        layout=LAYOUT,
        registry=registry,
        version="9.9.9",
        **kwargs,
    )
    return result, archive_path


# ==============================================================================
# Helpers
# ==============================================================================


class TestNeedsZip64:
    """Tests for needs_zip64()."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, False),
            (2**32 - 2, False),
            (2**32 - 1, True),
            (2**32, True),
        ],
    )
    def test_threshold(self, size, expected):
        assert needs_zip64(size) is expected


class TestPlanEntry:
    """Tests for plan_entry()."""

    def test_sentinel_is_templated(self):
        plan = plan_entry(Path("/t") / CONFIG_IN, CONFIG_IN, EntryKind.REGULAR_FILE)

        assert plan.action is EntryAction.TEMPLATE
        assert plan.archive_name == CONFIG_OUT

    def test_other_in_files_copied_verbatim(self):
        plan = plan_entry(Path("/t/x.in"), "other/aroma-config.in", EntryKind.REGULAR_FILE)

        assert plan.action is EntryAction.COPY
        assert plan.archive_name == "other/aroma-config.in"

    @pytest.mark.parametrize(
        "kind,action",
        [
            (EntryKind.DIRECTORY, EntryAction.IMPLICIT_DIRECTORY),
            (EntryKind.SYMLINK, EntryAction.SKIP_SYMLINK),
            (EntryKind.SPECIAL, EntryAction.SKIP_SPECIAL),
        ],
    )
    def test_non_files_not_archived(self, kind, action):
        plan = plan_entry(Path("/t/x"), "x", kind)

        assert plan.action is action
        assert plan.archive_name is None


# ==============================================================================
# generate()
# ==============================================================================


class TestGenerate:
    """Tests for generate()."""

    def test_end_to_end(self, template_dir, tmp_path, registry):
        """Test the archive holds rendered config and copied files."""
        result, archive_path = run_generate(template_dir, tmp_path, registry)

        assert result is True
        with zipfile.ZipFile(archive_path) as zf:
            names = zf.namelist()
            config = zf.read(CONFIG_OUT).decode("utf-8")
            notes = zf.read("exynos4/data/notes.txt")

        assert CONFIG_IN not in names
        assert 'ini_set("rom_version", "9.9.9");' in config
        assert '"primary", "", "@default",\n"Second", "", "@default",\n' in config
        assert "range 3-4\n" in config
        assert "\\tmount /raw/system" in config
        assert notes == b"@MBTOOL_VERSION@"

    def test_no_directory_entries(self, template_dir, tmp_path, registry):
        _, archive_path = run_generate(template_dir, tmp_path, registry)

        with zipfile.ZipFile(archive_path) as zf:
            assert not any(name.endswith("/") for name in zf.namelist())

    def test_bytes_and_permissions_preserved(self, template_dir, tmp_path, registry):
        binary = template_dir / "META-INF" / "com" / "google" / "android" / "update-binary"
        _, archive_path = run_generate(template_dir, tmp_path, registry)

        with zipfile.ZipFile(archive_path) as zf:
            info = zf.getinfo("META-INF/com/google/android/update-binary")
            data = zf.read(info)

        assert data == binary.read_bytes()
        assert (info.external_attr >> 16) & 0o777 == 0o755
        assert info.compress_type == zipfile.ZIP_DEFLATED

    def test_zero_roms(self, template_dir, tmp_path):
        result, archive_path = run_generate(template_dir, tmp_path, FakeRegistry([]))

        assert result is True
        with zipfile.ZipFile(archive_path) as zf:
            assert "range 3-2\n" in zf.read(CONFIG_OUT).decode("utf-8")

    def test_rom_list_queried_once(self, template_dir, tmp_path, registry):
        run_generate(template_dir, tmp_path, registry)

        assert registry.installed_calls == 1

    def test_symlink_skipped_with_warning(
        self, template_dir, tmp_path, registry, log_records
    ):
        (template_dir / "link").symlink_to(template_dir / "exynos4")

        result, archive_path = run_generate(template_dir, tmp_path, registry)

        assert result is True
        with zipfile.ZipFile(archive_path) as zf:
            assert not any(name.startswith("link") for name in zf.namelist())
        warnings = messages_at(log_records, "WARNING")
        assert any("Ignoring symlink" in message for message in warnings)

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires mkfifo")
    def test_fifo_skipped(self, template_dir, tmp_path, registry, log_records):
        os.mkfifo(template_dir / "pipe")

        result, archive_path = run_generate(template_dir, tmp_path, registry)

        assert result is True
        with zipfile.ZipFile(archive_path) as zf:
            assert "pipe" not in zf.namelist()
        warnings = messages_at(log_records, "WARNING")
        assert any("Ignoring special file" in message for message in warnings)

    def test_open_failure(self, template_dir, tmp_path, registry):
        """Test an uncreatable archive fails before any entry is read."""
        archive_path = tmp_path / "missing-dir" / "installer.zip"

        with pytest.raises(ArchiveOpenError) as exc_info:
            generate(template_dir, archive_path, layout=LAYOUT, registry=registry)

        assert str(archive_path) in str(exc_info.value)
        assert not archive_path.exists()

    def test_read_failure_closes_archive(self, template_dir, tmp_path, registry, mocker):
        """Test an unreadable file aborts generation but finalizes the archive."""

        def failing_open(path, mode="r", *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(path))

        mocker.patch.object(archive, "open", failing_open, create=True)

        with pytest.raises(ArchiveWriteError, match="Failed to open for reading"):
            run_generate(template_dir, tmp_path, registry)

        with zipfile.ZipFile(tmp_path / "installer.zip") as zf:
            assert zf.testzip() is None

    def test_zip64_decided_per_entry(self, template_dir, tmp_path, registry, mocker):
        """Test every entry's size is checked against the zip64 threshold."""
        spy = mocker.spy(archive, "needs_zip64")

        run_generate(template_dir, tmp_path, registry)

        sizes = sorted(call.args[0] for call in spy.call_args_list)
        assert len(sizes) == 3
        assert all(size < archive.ZIP64_THRESHOLD for size in sizes)

    def test_missing_template_dir(self, tmp_path, registry):
        with pytest.raises(ArchiveWriteError):
            run_generate(tmp_path / "nope", tmp_path, registry)


class TestInstallerArchiveGenerator:
    """Tests for InstallerArchiveGenerator callbacks."""

    def test_close_without_open(self, tmp_path):
        generator = InstallerArchiveGenerator(tmp_path / "a.zip", lambda data: data)

        assert generator.on_close(True) is False

    def test_close_failure_reported(self, tmp_path, mocker):
        generator = InstallerArchiveGenerator(tmp_path / "a.zip", lambda data: data)
        fake_zip = mocker.Mock()
        fake_zip.close.side_effect = OSError("disk full")
        generator._zip = fake_zip

        assert generator.on_close(True) is False
        fake_zip.close.assert_called_once()

    def test_entries_recorded(self, template_dir, tmp_path):
        generator = InstallerArchiveGenerator(tmp_path / "a.zip", lambda data: data)
        generator.on_open()
        generator.on_regular_file(template_dir / CONFIG_IN, CONFIG_IN)

        assert generator.on_close(True) is True
        assert generator.entries == [CONFIG_OUT]

    def test_plans_record_every_visited_entry(self, template_dir, tmp_path):
        """Test directories and skipped entries are planned alongside files."""
        (template_dir / "link").symlink_to(template_dir / "exynos4")
        generator = InstallerArchiveGenerator(tmp_path / "a.zip", lambda data: data)

        assert walk_tree(template_dir, generator) is True

        actions = {plan.relative_path: plan.action for plan in generator.plans}
        assert actions["META-INF"] is EntryAction.IMPLICIT_DIRECTORY
        assert actions["exynos4/data"] is EntryAction.IMPLICIT_DIRECTORY
        assert actions["link"] is EntryAction.SKIP_SYMLINK
        assert actions[CONFIG_IN] is EntryAction.TEMPLATE
        assert actions["exynos4/data/notes.txt"] is EntryAction.COPY

    def test_skipped_count_logged(self, template_dir, tmp_path, registry, log_records):
        (template_dir / "link").symlink_to(template_dir / "exynos4")

        run_generate(template_dir, tmp_path, registry)

        assert any("(1 skipped)" in message for message in messages_at(log_records, "INFO"))
