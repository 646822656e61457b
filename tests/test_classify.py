"""Tests for file classification and fallback dispatch."""

import os
import stat
from types import SimpleNamespace

import pytest

from pylsfd import classify
from pylsfd.classify import (
    BLOCK_DEVICE,
    CHAR_DEVICE,
    GENERIC,
    REGULAR,
    FileClass,
    dispose_file,
    format_device,
    make_file,
    register,
    render_column,
)
from pylsfd.columns import Column
from pylsfd.idcache import UsernameCache
from pylsfd.models import Association, Process


def fake_stat(mode: int, dev: int = 0, ino: int = 1, rdev: int = 0) -> SimpleNamespace:
    return SimpleNamespace(st_mode=mode, st_dev=dev, st_ino=ino, st_rdev=rdev)


@pytest.fixture
def proc() -> Process:
    return Process(pid=1234, command="demo", uid=os.getuid())


@pytest.fixture
def usernames() -> UsernameCache:
    return UsernameCache()


@pytest.fixture(autouse=True)
def isolated_registry(monkeypatch):
    """Keep register() calls from leaking between tests."""
    monkeypatch.setattr(classify, "_CLASSES", dict(classify._CLASSES))


class TestClassify:
    """Tests for mode -> FileClass mapping."""

    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            (stat.S_IFREG, REGULAR),
            (stat.S_IFCHR, CHAR_DEVICE),
            (stat.S_IFBLK, BLOCK_DEVICE),
            (stat.S_IFDIR, GENERIC),
            (stat.S_IFIFO, GENERIC),
            (stat.S_IFSOCK, GENERIC),
            (stat.S_IFLNK, GENERIC),
            (0, GENERIC),
        ],
    )
    def test_classify_by_format(self, fmt, expected):
        """Test each file format maps to one variant, whatever the permission bits."""
        assert classify.classify(fmt | 0o644) is expected
        assert classify.classify(fmt | 0o7777) is expected

    def test_every_chain_ends_at_generic(self):
        """Test specialised variants fall back to GENERIC."""
        for variant in (REGULAR, CHAR_DEVICE, BLOCK_DEVICE, GENERIC):
            assert list(variant.chain())[-1] is GENERIC

    def test_chain_order(self):
        """Test chain() yields most specific first."""
        assert list(CHAR_DEVICE.chain()) == [CHAR_DEVICE, GENERIC]
        assert list(GENERIC.chain()) == [GENERIC]


class TestRender:
    """Tests for cooperative column rendering."""

    def test_regular_file_columns(self, proc, usernames):
        """Test a regular file renders its own TYPE and generic columns."""
        dev = os.makedev(8, 1)
        file = make_file(fake_stat(stat.S_IFREG | 0o644, dev=dev, ino=999), "/tmp/a", 0)

        assert render_column(proc, file, Column.TYPE, usernames) == "regular"
        assert render_column(proc, file, Column.DEVICE, usernames) == "8,1"
        assert render_column(proc, file, Column.INODE, usernames) == 999
        assert render_column(proc, file, Column.NAME, usernames) == "/tmp/a"
        assert render_column(proc, file, Column.FD, usernames) == 0
        assert render_column(proc, file, Column.ASSOC, usernames) == "0"

    def test_process_columns(self, proc, usernames):
        """Test process-level columns come from the owning Process."""
        file = make_file(fake_stat(stat.S_IFREG), "/tmp/a", 3)

        assert render_column(proc, file, Column.COMMAND, usernames) == "demo"
        assert render_column(proc, file, Column.PID, usernames) == 1234
        assert render_column(proc, file, Column.UID, usernames) == os.getuid()
        assert render_column(proc, file, Column.USER, usernames) == usernames.get(os.getuid())

    def test_char_device_uses_rdev(self, proc, usernames):
        """Test character devices show the device they represent."""
        file = make_file(
            fake_stat(stat.S_IFCHR | 0o666, dev=os.makedev(0, 5), rdev=os.makedev(1, 3)),
            "/dev/null",
            1,
        )

        assert file.variant is CHAR_DEVICE
        assert render_column(proc, file, Column.TYPE, usernames) == "character device"
        assert render_column(proc, file, Column.DEVICE, usernames) == "1,3"
        # not claimed by the device variant, falls through to generic
        assert render_column(proc, file, Column.NAME, usernames) == "/dev/null"

    def test_block_device_uses_rdev(self, proc, usernames):
        """Test block devices show the device they represent."""
        file = make_file(fake_stat(stat.S_IFBLK | 0o660, rdev=os.makedev(8, 16)), "/dev/sdb", 4)

        assert file.variant is BLOCK_DEVICE
        assert render_column(proc, file, Column.TYPE, usernames) == "block device"
        assert render_column(proc, file, Column.DEVICE, usernames) == "8,16"

    @pytest.mark.parametrize(
        ("fmt", "label"),
        [
            (stat.S_IFDIR, "directory"),
            (stat.S_IFIFO, "fifo"),
            (stat.S_IFSOCK, "socket"),
            (stat.S_IFLNK, "symbolic link"),
            (0, "unknown"),
        ],
    )
    def test_generic_type(self, proc, usernames, fmt, label):
        """Test the generic variant names other file formats."""
        file = make_file(fake_stat(fmt), "socket:[1]", 5)
        assert render_column(proc, file, Column.TYPE, usernames) == label

    def test_special_slot_has_empty_fd(self, proc, usernames):
        """Test FD is empty for cwd/exe/root and namespaces."""
        file = make_file(fake_stat(stat.S_IFDIR), "/home", Association.CWD)

        assert render_column(proc, file, Column.FD, usernames) is None
        assert render_column(proc, file, Column.ASSOC, usernames) == "cwd"

    def test_unclaimed_column_is_empty(self, usernames):
        """Test a column no link claims renders as None."""
        silent = FileClass("silent", parent=None)
        file = make_file(fake_stat(stat.S_IFREG), "/tmp/a", 0)
        file.variant = silent
        assert render_column(Process(pid=1), file, Column.NAME, usernames) is None

    def test_user_without_uid(self, usernames):
        """Test USER is empty when the process owner is unknown."""
        file = make_file(fake_stat(stat.S_IFREG), "/tmp/a", 0)
        assert render_column(Process(pid=1), file, Column.USER, usernames) is None

    def test_format_device(self):
        """Test device numbers render as major,minor."""
        assert format_device(os.makedev(259, 7)) == "259,7"
        assert format_device(0) == "0,0"


class TestExtension:
    """Tests for registering new file kinds."""

    def test_register_new_variant(self, proc, usernames):
        """Test a registered variant overrides some columns and defers the rest."""

        def render(proc, file, column, usernames):
            if column is Column.TYPE:
                return "unix socket"
            return NotImplemented

        socket_class = FileClass("sock", parent=GENERIC, render=render)
        register(stat.S_IFSOCK, socket_class)

        file = make_file(fake_stat(stat.S_IFSOCK | 0o777, ino=77), "socket:[77]", 9)
        assert file.variant is socket_class
        assert render_column(proc, file, Column.TYPE, usernames) == "unix socket"
        assert render_column(proc, file, Column.INODE, usernames) == 77

    def test_register_indirect_parent(self):
        """Test variants may reach GENERIC through another variant."""
        tty = FileClass("tty", parent=CHAR_DEVICE)
        register(stat.S_IFCHR, tty)
        assert classify.classify(stat.S_IFCHR) is tty

    def test_register_rejects_orphan(self):
        """Test a variant that does not fall back to GENERIC is refused."""
        with pytest.raises(ValueError, match="orphan"):
            register(stat.S_IFSOCK, FileClass("orphan"))
        assert classify.classify(stat.S_IFSOCK) is GENERIC

    def test_setup_runs_generic_first_and_dispose_specific_first(self):
        """Test payload setup and disposal walk the chain in opposite orders."""
        calls: list[str] = []

        def setup(file, st):
            # the parent's payload is already there
            assert "cdev" in file.payloads
            file.payloads["tty"] = "pts"
            calls.append("setup:tty")

        def dispose(file):
            assert "cdev" in file.payloads
            file.payloads.pop("tty")
            calls.append("dispose:tty")

        tty = FileClass("tty", parent=CHAR_DEVICE, setup=setup, dispose=dispose)
        register(stat.S_IFCHR, tty)

        file = make_file(fake_stat(stat.S_IFCHR, rdev=os.makedev(136, 0)), "/dev/pts/0", 0)
        assert file.payloads == {"cdev": os.makedev(136, 0), "tty": "pts"}

        dispose_file(file)
        assert calls == ["setup:tty", "dispose:tty"]
        assert file.payloads == {}


class TestDispose:
    """Tests for releasing variant payloads."""

    def test_device_payload_released(self):
        """Test disposing a device file drops its private data."""
        file = make_file(fake_stat(stat.S_IFBLK, rdev=os.makedev(8, 0)), "/dev/sda", 3)
        assert "bdev" in file.payloads

        dispose_file(file)
        assert file.payloads == {}

    def test_dispose_is_idempotent(self):
        """Test disposing twice is harmless."""
        file = make_file(fake_stat(stat.S_IFCHR, rdev=os.makedev(1, 3)), "/dev/null", 1)
        dispose_file(file)
        dispose_file(file)
        assert file.payloads == {}
