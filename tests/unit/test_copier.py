from __future__ import annotations

import os
import stat

import pytest

from dit_core.errors import CopyError
from dit_sync.copier import FILE_MODE, TMP_PREFIX, copy_file
from tests.framework import read_file, write_file


def test_copies_bytes_into_new_directories(tmp_path):
    src = write_file(tmp_path / "src" / "f.bin", b"\x00\x01payload")
    dest = tmp_path / "dest" / "deep" / "er" / "f.bin"
    assert copy_file(src, dest) == 9
    assert read_file(dest) == b"\x00\x01payload"
    assert stat.S_IMODE(os.stat(dest).st_mode) == FILE_MODE


def test_preserves_times(tmp_path):
    src = write_file(tmp_path / "src.txt", "x")
    os.utime(src, ns=(1_000_000_000, 2_000_000_000))
    dest = tmp_path / "out.txt"
    copy_file(src, dest)
    assert os.stat(dest).st_mtime_ns == 2_000_000_000


def test_times_can_be_left_alone(tmp_path):
    src = write_file(tmp_path / "src.txt", "x")
    os.utime(src, ns=(1_000_000_000, 2_000_000_000))
    dest = tmp_path / "out.txt"
    copy_file(src, dest, preserve_times=False)
    assert os.stat(dest).st_mtime_ns != 2_000_000_000


def test_replaces_existing_file(tmp_path):
    src = write_file(tmp_path / "src.txt", "new")
    dest = write_file(tmp_path / "dest.txt", "old content")
    copy_file(src, dest)
    assert read_file(dest) == b"new"
    assert not [p for p in tmp_path.iterdir() if p.name.startswith(TMP_PREFIX)]


def test_missing_source_raises_and_leaves_no_temp(tmp_path):
    dest_dir = tmp_path / "dest"
    with pytest.raises(CopyError):
        copy_file(tmp_path / "missing", dest_dir / "f")
    assert list(dest_dir.iterdir()) == []


def test_parent_that_is_a_file_raises(tmp_path):
    src = write_file(tmp_path / "src.txt", "x")
    write_file(tmp_path / "blocker", "file")
    with pytest.raises(CopyError, match="could not create temp file"):
        copy_file(src, tmp_path / "blocker" / "f.txt")
