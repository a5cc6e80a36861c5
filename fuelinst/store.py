"""
GridBridge UK - FUELINST Archive Store

Persists the archive as a gzip-compressed legacy CSV envelope.
"""

import gzip
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple, Union

from .legacy_csv import decode, encode
from .models import Row
from .publish import ReadWriteLock, publish_file

logger = logging.getLogger(__name__)

Publisher = Callable[[Path, bytes], bool]


class ArchiveStore:
    """Load and save one archive file.

    ``lock`` guards the file's read/modify/write cycle; hold ``lock.write()``
    across load, transform and save. ``publisher`` performs the atomic
    replace and reports whether anything changed.
    """

    def __init__(
        self,
        path: Union[str, Path],
        lock: Optional[ReadWriteLock] = None,
        publisher: Publisher = publish_file,
    ):
        self.path = Path(path)
        self.lock = lock if lock is not None else ReadWriteLock()
        self.publisher = publisher

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Tuple[Row, ...]:
        """Load the archive; a missing file is an empty archive."""
        with self.lock.read():
            try:
                raw = self.path.read_bytes()
            except FileNotFoundError:
                logger.info("No archive at %s yet", self.path)
                return ()
        try:
            data = gzip.decompress(raw)
        except (OSError, EOFError) as e:
            logger.warning("Unreadable archive %s: %s", self.path, e)
            raise OSError(f"archive {self.path} is not valid gzip: {e}") from e
        rows = decode(data)
        logger.debug("Loaded %d rows from %s", len(rows), self.path)
        return rows

    def save(self, rows: Sequence[Sequence[str]]) -> bool:
        """Publish ``rows``; returns True if the file content changed."""
        # mtime=0 keeps identical rows byte-identical, so unchanged saves are no-ops.
        data = gzip.compress(encode(rows), mtime=0)
        with self.lock.write():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return self.publisher(self.path, data)
