#!/usr/bin/env python3
"""Tests for the alloc and sparse image commands."""

import errno
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from imgalloc.allocate import allocate, sparse_allocate
from imgalloc.backends import NativeAllocator, ZeroFillAllocator, native_available
from imgalloc.errors import (
    DriveRegistrationError,
    ImageIOError,
    InvalidSizeFormat,
    PreconditionFailed,
    SizeOverflowError,
)
from imgalloc.interfaces.allocator import Allocator

requires_native = pytest.mark.skipif(
    not native_available(), reason="posix_fallocate not available"
)


def current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def closing_then_failing_close():
    real_close = os.close

    def fake_close(fd):
        real_close(fd)
        raise OSError(errno.EIO, "Input/output error")

    return fake_close


class TestAllocate:
    """Test fully allocated images."""

    @pytest.mark.parametrize("allocator", [
        ZeroFillAllocator(),
        ZeroFillAllocator(chunk_size=512),
        pytest.param(NativeAllocator(), marks=requires_native),
    ])
    def test_creates_zero_filled_image(self, temp_dir, registry, allocator):
        path = temp_dir / "disk.img"

        result = allocate(registry, path, "4K", allocator=allocator)

        assert result == path
        assert path.stat().st_size == 4096
        assert path.read_bytes() == bytes(4096)
        drives = registry.drives()
        assert len(drives) == 1
        assert drives[0].path == path
        assert drives[0].format == "raw"

    def test_registers_exactly_once(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"

        allocate(mock_drives, path, "8s", allocator=ZeroFillAllocator())

        mock_drives.add_drive.assert_called_once_with(path)
        assert path.stat().st_size == 4096

    def test_accepts_string_path(self, temp_dir, registry):
        path = temp_dir / "disk.img"
        allocate(registry, str(path), "1", allocator=ZeroFillAllocator())
        assert path.stat().st_size == 1024

    def test_bare_number_is_kilobytes(self, temp_dir, registry):
        path = temp_dir / "disk.img"
        allocate(registry, path, "3", allocator=ZeroFillAllocator())
        assert path.stat().st_size == 3 * 1024

    def test_truncates_existing_file(self, temp_dir, registry):
        path = temp_dir / "disk.img"
        path.write_bytes(b"\xff" * 10000)

        allocate(registry, path, "1K", allocator=ZeroFillAllocator())

        assert path.read_bytes() == bytes(1024)

    @pytest.mark.parametrize("allocator", [
        ZeroFillAllocator(),
        pytest.param(NativeAllocator(), marks=requires_native),
    ])
    def test_zero_size_creates_empty_image(self, temp_dir, registry, allocator):
        path = temp_dir / "empty.img"
        allocate(registry, path, "0", allocator=allocator)
        assert path.stat().st_size == 0

    def test_wrapped_size_creates_empty_image(self, temp_dir, registry):
        path = temp_dir / "wrapped.img"
        allocate(registry, path, "16E", allocator=ZeroFillAllocator())
        assert path.stat().st_size == 0

    def test_negative_offset_fails_and_removes_file(self, temp_dir, mock_drives):
        path = temp_dir / "huge.img"

        with pytest.raises(ImageIOError) as exc_info:
            allocate(mock_drives, path, "8E", allocator=ZeroFillAllocator())

        assert exc_info.value.operation == "write"
        assert exc_info.value.errno == errno.EINVAL
        assert not path.exists()
        mock_drives.add_drive.assert_not_called()

    def test_checked_mode_rejects_before_creating(self, temp_dir, mock_drives):
        path = temp_dir / "huge.img"

        with pytest.raises(SizeOverflowError):
            allocate(mock_drives, path, "8E", allocator=ZeroFillAllocator(), checked=True)

        assert not path.exists()

    def test_mode_respects_umask(self, temp_dir, registry):
        path = temp_dir / "private.img"
        allocate(registry, path, "1K", allocator=ZeroFillAllocator(), mode=0o640)
        assert path.stat().st_mode & 0o777 == 0o640 & ~current_umask()

    def test_default_allocator_is_selected(self, temp_dir, registry):
        path = temp_dir / "disk.img"
        with patch("imgalloc.backends.native_available", return_value=False):
            allocate(registry, path, "4K")
        assert path.read_bytes() == bytes(4096)


class TestAllocateFailures:
    """Every failure leaves nothing behind."""

    def test_invalid_size_has_no_side_effects(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"

        with pytest.raises(InvalidSizeFormat):
            allocate(mock_drives, path, "abc", allocator=ZeroFillAllocator())

        assert not path.exists()
        mock_drives.is_configurable.assert_not_called()
        mock_drives.add_drive.assert_not_called()

    def test_configuration_closed(self, temp_dir, launched_registry):
        path = temp_dir / "disk.img"

        with pytest.raises(PreconditionFailed):
            allocate(launched_registry, path, "4K", allocator=ZeroFillAllocator())

        assert not path.exists()

    def test_configuration_closed_leaves_existing_file(self, temp_dir, launched_registry):
        path = temp_dir / "disk.img"
        path.write_bytes(b"keep")

        with pytest.raises(PreconditionFailed):
            allocate(launched_registry, path, "4K", allocator=ZeroFillAllocator())

        assert path.read_bytes() == b"keep"

    def test_open_failure(self, temp_dir, mock_drives):
        path = temp_dir / "missing-dir" / "disk.img"

        with pytest.raises(ImageIOError) as exc_info:
            allocate(mock_drives, path, "4K", allocator=ZeroFillAllocator())

        assert exc_info.value.operation == "open"
        assert exc_info.value.errno == errno.ENOENT
        assert not path.exists()

    def test_allocator_failure_removes_file(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"
        allocator = MagicMock(spec=Allocator)
        allocator.name = "native"
        allocator.allocate.side_effect = OSError(errno.ENOSPC, "No space left on device")

        with pytest.raises(ImageIOError) as exc_info:
            allocate(mock_drives, path, "4K", allocator=allocator)

        assert exc_info.value.operation == "fallocate"
        assert "No space left on device" in str(exc_info.value)
        assert not path.exists()
        mock_drives.add_drive.assert_not_called()

    def test_write_failure_removes_file(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"

        with patch("imgalloc.backends.zero_fill.os.write", side_effect=OSError(errno.EIO, "I/O")):
            with pytest.raises(ImageIOError) as exc_info:
                allocate(mock_drives, path, "4K", allocator=ZeroFillAllocator())

        assert exc_info.value.operation == "write"
        assert not path.exists()

    def test_close_failure_removes_file(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"

        with patch("imgalloc.allocate.os.close", side_effect=closing_then_failing_close()):
            with pytest.raises(ImageIOError) as exc_info:
                allocate(mock_drives, path, "4K", allocator=ZeroFillAllocator())

        assert exc_info.value.operation == "close"
        assert not path.exists()
        mock_drives.add_drive.assert_not_called()

    def test_registration_failure_removes_file(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"
        mock_drives.add_drive.side_effect = DriveRegistrationError("rejected")

        with pytest.raises(DriveRegistrationError):
            allocate(mock_drives, path, "4K", allocator=ZeroFillAllocator())

        assert not path.exists()

    def test_cleanup_failure_does_not_mask_error(self, temp_dir, mock_drives):
        path = temp_dir / "disk.img"
        mock_drives.add_drive.side_effect = DriveRegistrationError("rejected")

        with patch.object(Path, "unlink", side_effect=PermissionError(errno.EACCES, "denied")):
            with pytest.raises(DriveRegistrationError):
                allocate(mock_drives, path, "4K", allocator=ZeroFillAllocator())

        assert path.exists()


class TestSparseAllocate:
    """Test sparse images."""

    def test_creates_sparse_image(self, temp_dir, registry):
        path = temp_dir / "sparse.img"

        result = sparse_allocate(registry, path, "4K")

        assert result == path
        assert path.stat().st_size == 4096
        assert path.read_bytes() == bytes(4096)
        assert [d.path for d in registry.drives()] == [path]

    def test_large_logical_size(self, temp_dir, registry):
        path = temp_dir / "big.img"
        sparse_allocate(registry, path, "1G")
        assert path.stat().st_size == 1024**3

    def test_single_sector(self, temp_dir, registry):
        path = temp_dir / "sector.img"
        sparse_allocate(registry, path, "1s")
        assert path.stat().st_size == 512

    def test_registers_exactly_once(self, temp_dir, mock_drives):
        path = temp_dir / "sparse.img"
        sparse_allocate(mock_drives, path, "4K")
        mock_drives.add_drive.assert_called_once_with(path)

    def test_zero_size_fails_seek(self, temp_dir, mock_drives):
        path = temp_dir / "sparse.img"

        with pytest.raises(ImageIOError) as exc_info:
            sparse_allocate(mock_drives, path, "0")

        assert exc_info.value.operation == "lseek"
        assert not path.exists()
        mock_drives.add_drive.assert_not_called()

    def test_configuration_closed(self, temp_dir, launched_registry):
        path = temp_dir / "sparse.img"

        with pytest.raises(PreconditionFailed):
            sparse_allocate(launched_registry, path, "4K")

        assert not path.exists()

    def test_invalid_size(self, temp_dir, mock_drives):
        path = temp_dir / "sparse.img"

        with pytest.raises(InvalidSizeFormat):
            sparse_allocate(mock_drives, path, "1S")

        assert not path.exists()

    def test_short_write_fails(self, temp_dir, mock_drives):
        path = temp_dir / "sparse.img"

        with patch("imgalloc.allocate.os.write", return_value=0):
            with pytest.raises(ImageIOError) as exc_info:
                sparse_allocate(mock_drives, path, "4K")

        assert exc_info.value.operation == "write"
        assert not path.exists()

    def test_registration_failure_removes_file(self, temp_dir, mock_drives):
        path = temp_dir / "sparse.img"
        mock_drives.add_drive.side_effect = DriveRegistrationError("rejected")

        with pytest.raises(DriveRegistrationError):
            sparse_allocate(mock_drives, path, "4K")

        assert not path.exists()


class TestExistingDrives:
    """Images that are already registered are never overwritten."""

    @pytest.mark.parametrize("create", [
        lambda drives, path: allocate(drives, path, "4K", allocator=ZeroFillAllocator()),
        lambda drives, path: sparse_allocate(drives, path, "4K"),
    ])
    def test_registered_path_is_left_alone(self, temp_dir, registry, create):
        path = temp_dir / "disk.img"
        path.write_bytes(b"\x01" * 512)
        registry.add_drive(path)

        with pytest.raises(DriveRegistrationError, match="already added"):
            create(registry, path)

        assert path.read_bytes() == b"\x01" * 512
        assert [d.path for d in registry.drives()] == [path]

    def test_registered_path_through_other_spelling(self, temp_dir, registry, monkeypatch):
        path = temp_dir / "disk.img"
        allocate(registry, path, "1K", allocator=ZeroFillAllocator())
        monkeypatch.chdir(temp_dir)

        with pytest.raises(DriveRegistrationError):
            allocate(registry, "disk.img", "4K", allocator=ZeroFillAllocator())

        assert path.stat().st_size == 1024


class TestInvalidPaths:
    """Paths the OS cannot represent are reported, not raised."""

    @pytest.mark.parametrize("create", [
        lambda drives, path: allocate(drives, path, "4K", allocator=ZeroFillAllocator()),
        lambda drives, path: sparse_allocate(drives, path, "4K"),
    ])
    def test_embedded_nul(self, temp_dir, mock_drives, create):
        path = str(temp_dir / "a\x00b.img")

        with pytest.raises(ImageIOError) as exc_info:
            create(mock_drives, path)

        assert exc_info.value.operation == "open"
        assert "embedded null byte" in str(exc_info.value)
        assert list(temp_dir.iterdir()) == []
        mock_drives.add_drive.assert_not_called()
