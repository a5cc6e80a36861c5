"""
GridBridge UK - Atomic File Publishing

Replaces published files so that concurrent readers see either the old or
the new content, never a partial write, and provides the read/write lock
used to serialise archive updates. Locks are handed to each store rather
than shared globally, so they can be scoped per file or directory.
"""

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)

TMP_PREFIX = ".tmp."

PUBLIC_MODE = 0o644
PRIVATE_MODE = 0o600


# =============================================================================
# Locking
# =============================================================================

class ReadWriteLock:
    """Many readers or one writer.

    The writing thread may re-enter the write side and may also take the
    read side, so a load inside an update cycle does not deadlock.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = None
        self._writer_depth = 0

    def _is_writer(self) -> bool:
        return self._writer == threading.get_ident()

    def acquire_read(self):
        with self._cond:
            if self._is_writer():
                self._writer_depth += 1
                return
            while self._writer is not None:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            if self._is_writer():
                self._writer_depth -= 1
                return
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            if self._is_writer():
                self._writer_depth += 1
                return
            while self._writer is not None or self._readers > 0:
                self._cond.wait()
            self._writer = threading.get_ident()
            self._writer_depth = 1

    def release_write(self):
        with self._cond:
            if not self._is_writer():
                raise RuntimeError("release_write() by a thread not holding the lock")
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


# =============================================================================
# Publishing
# =============================================================================

def publish_file(path: Union[str, Path], data: bytes) -> bool:
    """Atomically replace ``path`` with ``data``.

    Returns False without touching the file if it already holds exactly
    ``data``, True once it has been created or replaced.

    The result is world-readable unless the file name starts with ".",
    in which case only the owner can read it. Callers are responsible for
    holding any lock that guards the target.
    """
    path = Path(path)
    if not path.name:
        raise ValueError("inappropriate file name")
    if not data:
        raise ValueError("inappropriate file content")

    try:
        if path.read_bytes() == data:
            return False
        existed = True
    except FileNotFoundError:
        existed = False

    directory = path.parent
    fd, tmp_name = tempfile.mkstemp(prefix=TMP_PREFIX, dir=directory)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if tmp_path.stat().st_size != len(data):
            raise OSError(f"temporary file {tmp_path} not written correctly")

        mode = PRIVATE_MODE if path.name.startswith(".") else PUBLIC_MODE
        os.chmod(tmp_path, mode)

        try:
            os.replace(tmp_path, path)
        except OSError:
            if not existed:
                raise
            # Some platforms cannot rename over an existing file.
            path.unlink()
            os.rename(tmp_path, path)
            logger.warning("Atomic replacement not possible for %s: used explicit delete", path)

        logger.info("%s %s", "Updated" if existed else "Created", path)
        return True
    finally:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
