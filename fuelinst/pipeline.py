"""
GridBridge UK - FUELINST Archive Update Pipeline

decode -> validate/repair -> merge onto stored archive -> trim -> save

The load/transform/save cycle runs under the store's write lock. Any
validation error propagates before the archive is touched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Sequence, Tuple, Union

from . import legacy_csv, stream_json
from .archive import append_new_rows, trim_rows
from .config import ArchiveConfig
from .models import Row
from .results import Updated, rows_or
from .store import ArchiveStore
from .validator import validate_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateReport:
    """Outcome of one archive update cycle."""

    candidate_rows: int
    repair: Optional[str]
    appended: int
    trimmed: int
    published: bool
    archive_rows: int

    def to_dict(self) -> dict:
        return {
            "candidate_rows": self.candidate_rows,
            "repair": self.repair,
            "appended": self.appended,
            "trimmed": self.trimmed,
            "published": self.published,
            "archive_rows": self.archive_rows,
        }


def update_archive(
    store: ArchiveStore,
    candidate: Sequence[Sequence[str]],
    config: Optional[ArchiveConfig] = None,
    now: Optional[datetime] = None,
) -> UpdateReport:
    """Validate ``candidate`` and fold it into the archive held by ``store``."""
    config = config or ArchiveConfig()
    now = now or datetime.now(timezone.utc)
    newest_allowed = now + config.freshness_tolerance

    checked = validate_rows(candidate, newest_allowed, repair=config.repair)
    repair = checked.description if isinstance(checked, Updated) else None
    rows: Tuple[Row, ...] = rows_or(checked, tuple(tuple(r) for r in candidate))

    with store.lock.write():
        existing = store.load()

        merged = append_new_rows(existing, rows)
        archive = rows_or(merged, existing)
        appended = len(archive) - len(existing)

        trimmed_result = trim_rows(archive, config.max_hours_span)
        trimmed = len(archive) - len(rows_or(trimmed_result, archive))
        archive = rows_or(trimmed_result, archive)

        published = False
        if archive and (merged.changed or trimmed_result.changed):
            published = store.save(archive)

    report = UpdateReport(
        candidate_rows=len(candidate),
        repair=repair,
        appended=appended,
        trimmed=trimmed,
        published=published,
        archive_rows=len(archive),
    )
    logger.info(
        "Archive %s: %d appended, %d trimmed, %d rows%s",
        store.path,
        appended,
        trimmed,
        len(archive),
        "" if published else " (unchanged on disk)",
    )
    return report


def ingest_legacy_csv(
    store: ArchiveStore,
    data: Union[str, bytes],
    config: Optional[ArchiveConfig] = None,
    now: Optional[datetime] = None,
) -> UpdateReport:
    """Decode a legacy CSV envelope and update the archive with it."""
    config = config or ArchiveConfig()
    rows = legacy_csv.decode(data, header_check=config.header_check)
    logger.info("Decoded %d legacy FUELINST rows", len(rows))
    return update_archive(store, rows, config=config, now=now)


def ingest_stream_json(
    store: ArchiveStore,
    payload: Union[str, bytes, list, dict[str, Any]],
    config: Optional[ArchiveConfig] = None,
    now: Optional[datetime] = None,
) -> UpdateReport:
    """Decode stream JSON, rebuild legacy rows and update the archive."""
    config = config or ArchiveConfig()
    grouped = stream_json.decode(payload, clamp_non_negative=config.clamp_non_negative)
    rows = stream_json.intervals_to_rows(grouped, config.template)
    logger.info("Decoded %d FUELINST stream intervals", len(rows))
    return update_archive(store, rows, config=config, now=now)
