from __future__ import annotations

from pathlib import Path

import pytest

from dit_core.errors import CopyError
from dit_core.models import FileVariant, OutputItem, Root, RootKind, WriteAction
from dit_sync.conflict import write_conflict_path
from dit_sync.writer import UNKNOWN_SIZE, decide_write, max_write_conflicts, occupant_size
from tests.framework import write_file


def _item(tmp_path: Path, relpath: str, data: str) -> OutputItem:
    src_root = Root(path=tmp_path / "src", kind=RootKind.READ, index=0)
    write_file(src_root.path / relpath, data)
    return OutputItem(relpath=relpath, source=FileVariant(src_root, relpath, len(data)))


def _dest(tmp_path: Path) -> Root:
    p = tmp_path / "dest"
    p.mkdir(exist_ok=True)
    return Root(path=p, kind=RootKind.WRITE, index=0)


def test_missing_destination_is_copied(tmp_path):
    d = decide_write(_item(tmp_path, "a/b.txt", "data"), _dest(tmp_path))
    assert d.action is WriteAction.COPY
    assert d.copy_needed
    assert d.dest_path == tmp_path / "dest" / "a" / "b.txt"


def test_same_size_destination_is_skipped(tmp_path):
    dest = _dest(tmp_path)
    write_file(dest.path / "b.txt", "DATA")
    d = decide_write(_item(tmp_path, "b.txt", "data"), dest)
    assert d.action is WriteAction.SKIP
    assert not d.copy_needed


def test_different_size_goes_to_first_write_conflict_slot(tmp_path):
    dest = _dest(tmp_path)
    write_file(dest.path / "photo.jpg", "old")
    d = decide_write(_item(tmp_path, "photo.jpg", "new photo"), dest)
    assert d.action is WriteAction.CONFLICT
    assert d.dest_relpath == "photo.__WRITE_MERGE_CONFLICT__01.jpg"
    assert d.copy_needed


def test_occupied_slots_are_skipped(tmp_path):
    dest = _dest(tmp_path)
    write_file(dest.path / "photo.jpg", "old")
    write_file(dest.path / "photo.__WRITE_MERGE_CONFLICT__01.jpg", "other")
    d = decide_write(_item(tmp_path, "photo.jpg", "new photo"), dest)
    assert d.dest_relpath == "photo.__WRITE_MERGE_CONFLICT__02.jpg"


def test_slot_already_holding_same_size_is_reused(tmp_path):
    dest = _dest(tmp_path)
    write_file(dest.path / "photo.jpg", "old")
    write_file(dest.path / "photo.__WRITE_MERGE_CONFLICT__01.jpg", "new photo")
    d = decide_write(_item(tmp_path, "photo.jpg", "new photo"), dest)
    assert d.action is WriteAction.CONFLICT
    assert d.dest_relpath == "photo.__WRITE_MERGE_CONFLICT__01.jpg"
    assert not d.copy_needed


def test_directory_in_the_way_is_a_conflict(tmp_path):
    dest = _dest(tmp_path)
    (dest.path / "thing").mkdir()
    assert occupant_size(dest.path / "thing") == UNKNOWN_SIZE
    d = decide_write(_item(tmp_path, "thing", "x"), dest)
    assert d.action is WriteAction.CONFLICT
    assert d.dest_relpath == "thing.__WRITE_MERGE_CONFLICT__01"


def test_file_in_place_of_parent_directory_counts_as_missing(tmp_path):
    dest = _dest(tmp_path)
    write_file(dest.path / "sub", "not a dir")
    assert occupant_size(dest.path / "sub" / "a.txt") is None


def test_conflict_slots_are_capped_at_the_padding_width(tmp_path):
    dest = _dest(tmp_path)
    write_file(dest.path / "photo.jpg", "old")
    assert max_write_conflicts(2) == 99
    for ordinal in range(1, 100):
        write_file(dest.path / write_conflict_path("photo.jpg", ordinal, 2), "old")

    with pytest.raises(CopyError, match="no free conflict name"):
        decide_write(_item(tmp_path, "photo.jpg", "new photo"), dest, width=2)
    assert not (dest.path / "photo.__WRITE_MERGE_CONFLICT__100.jpg").exists()

    d = decide_write(_item(tmp_path, "photo.jpg", "new photo"), dest, width=3)
    assert d.dest_relpath == "photo.__WRITE_MERGE_CONFLICT__001.jpg"
