"""Byte copy from a source file to a destination path."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from dit_core.errors import CopyError

logger = logging.getLogger(__name__)

COPY_BUF_SIZE = 1024 * 1024
FILE_MODE = 0o644
# hidden, so a half-written file is never picked up if the destination is later read
TMP_PREFIX = ".__tmp_dit_"


def copy_file(src: Path, dest: Path, *, preserve_times: bool = True) -> int:
    """
    Copy ``src`` to ``dest`` and return the number of bytes written.

    Missing parent directories are created. Bytes go to a temp file next to
    ``dest`` which is renamed into place only after its size matches the
    source, so ``dest`` is either the old file or the complete new one.

    Raises:
        CopyError: on any I/O failure; the temp file is removed.
    """
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=TMP_PREFIX, dir=dest.parent)
    except OSError as e:
        raise CopyError(f"could not create temp file for '{dest}': {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fdst:
            with open(src, "rb") as fsrc:
                shutil.copyfileobj(fsrc, fdst, COPY_BUF_SIZE)
                src_stat = os.fstat(fsrc.fileno())
            fdst.flush()
            written = os.fstat(fdst.fileno()).st_size
        if written != src_stat.st_size:
            raise CopyError(
                f"size mismatch copying '{src}' to '{dest}': "
                f"wrote {written} of {src_stat.st_size} bytes"
            )
        os.chmod(tmp_path, FILE_MODE)
        if preserve_times:
            os.utime(tmp_path, ns=(src_stat.st_atime_ns, src_stat.st_mtime_ns))
        os.replace(tmp_path, dest)
    except OSError as e:
        _discard(tmp_path)
        raise CopyError(f"could not copy '{src}' to '{dest}': {e}") from e
    except CopyError:
        _discard(tmp_path)
        raise

    logger.info(f"{src} -> {dest}")
    return written


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Could not remove temp file {tmp_path}: {e}")
