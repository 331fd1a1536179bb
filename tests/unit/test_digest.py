from __future__ import annotations

import hashlib

import pytest

from dit_core.digest import BUF_SIZE, hash_file
from dit_core.errors import HashError


def test_hash_matches_sha256_of_whole_file(tmp_path):
    data = b"0123456789" * (BUF_SIZE // 3)
    p = tmp_path / "big.bin"
    p.write_bytes(data)
    assert hash_file(p) == hashlib.sha256(data).hexdigest()


def test_empty_file(tmp_path):
    p = tmp_path / "empty"
    p.write_bytes(b"")
    assert hash_file(p) == hashlib.sha256(b"").hexdigest()


def test_same_size_different_content_differs(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_bytes(b"abc")
    b.write_bytes(b"abd")
    assert hash_file(a) != hash_file(b)


def test_missing_file_raises_hash_error(tmp_path):
    with pytest.raises(HashError, match="error reading file"):
        hash_file(tmp_path / "gone")
