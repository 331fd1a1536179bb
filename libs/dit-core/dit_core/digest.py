"""Content digests for equality testing."""

import hashlib
from pathlib import Path

from dit_core.errors import HashError

BUF_SIZE = 8192


def hash_file(path: Path) -> str:
    """
    Return the SHA-256 hex digest of the full contents of ``path``.

    The file is streamed in ``BUF_SIZE`` chunks and never held in memory.

    Raises:
        HashError: if the file is missing or cannot be read.
    """
    hasher = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(BUF_SIZE)
                if not chunk:
                    break
                hasher.update(chunk)
    except OSError as e:
        raise HashError(f"error reading file: '{path}': {e}") from e
    return hasher.hexdigest()
