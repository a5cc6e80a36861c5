"""
GridBridge UK - FUELINST Archive Merge and Trim

Pure functions over immutable row sequences. Neither re-validates its
input: callers are expected to have run ``validate_rows`` first so that
rows are ordered by timestamp.
"""

import logging
from datetime import timedelta
from typing import Optional, Sequence

from .errors import FormatError
from .models import TIMESTAMP_FIELD, format_timestamp, parse_timestamp
from .results import Result, Unchanged, Updated

logger = logging.getLogger(__name__)


def append_new_rows(
    existing: Optional[Sequence[Sequence[str]]],
    candidate: Optional[Sequence[Sequence[str]]],
) -> Result:
    """Extend ``existing`` with the rows of ``candidate`` strictly newer than it.

    No existing row is altered, and nothing older than (or as old as) the
    newest existing row is inserted. With no existing data the candidate
    becomes the archive as-is.

    Raises FormatError if a row to be added does not have the same field
    count as the archive (or, for a new archive, as the first candidate row).
    """
    if not candidate:
        return Unchanged("no candidate rows")
    candidate = tuple(tuple(row) for row in candidate)
    if not existing:
        _check_width(candidate, len(candidate[0]))
        return Updated(candidate, f"started archive with {len(candidate)} rows")

    last_existing = existing[-1][TIMESTAMP_FIELD]
    if candidate[-1][TIMESTAMP_FIELD] <= last_existing:
        return Unchanged(f"nothing newer than {last_existing}")

    # Usually only a few trailing rows are new, so scan back from the end.
    # Fixed-width timestamps compare correctly as strings.
    first_new = len(candidate) - 1
    for i in range(len(candidate) - 2, -1, -1):
        if candidate[i][TIMESTAMP_FIELD] <= last_existing:
            break
        first_new = i

    to_append = candidate[first_new:]
    _check_width(to_append, len(existing[-1]), offset=first_new)
    logger.info("Appending %d rows after %s", len(to_append), last_existing)
    return Updated(
        tuple(tuple(row) for row in existing) + to_append,
        f"appended {len(to_append)} rows after {last_existing}",
    )


def _check_width(rows: Sequence[Sequence[str]], width: int, offset: int = 0):
    """Raise FormatError unless every row has ``width`` fields."""
    for i, row in enumerate(rows):
        if len(row) != width:
            raise FormatError(
                f"row has {len(row)} fields, archive rows have {width}",
                line=",".join(row),
                index=offset + i,
            )


def trim_rows(rows: Optional[Sequence[Sequence[str]]], max_hours_span: int) -> Result:
    """Drop the oldest rows so at most ``max_hours_span`` hours are covered.

    Rows timestamped exactly ``max_hours_span`` hours before the newest row
    are kept. Fewer than two rows are never trimmed.
    """
    if max_hours_span <= 0:
        raise ValueError(f"max_hours_span must be positive, got {max_hours_span}")
    if rows is None or len(rows) < 2:
        return Unchanged("too few rows to trim")

    last = parse_timestamp(rows[-1][TIMESTAMP_FIELD])
    first = parse_timestamp(rows[0][TIMESTAMP_FIELD])
    oldest_allowed = last - timedelta(hours=max_hours_span)
    if first >= oldest_allowed:
        return Unchanged(f"span within {max_hours_span} hours")

    cutoff = format_timestamp(oldest_allowed)
    first_kept = len(rows) - 1
    for i in range(1, len(rows) - 1):
        if rows[i][TIMESTAMP_FIELD] >= cutoff:
            first_kept = i
            break

    kept = tuple(tuple(row) for row in rows[first_kept:])
    logger.info("Trimmed %d rows older than %s", first_kept, cutoff)
    return Updated(kept, f"dropped {first_kept} rows older than {cutoff}")
