"""
GridBridge UK - FUELINST Row Validation and Repair

Checks an ordered row sequence for the invariants the archive and the
downstream intensity calculation rely on: correct record type, well-formed
14-character timestamps, strictly increasing time, and nothing newer
than the present.

In repair mode, out-of-order and duplicate-timestamp rows are removed
instead of rejected. Structural and freshness problems are never repaired.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from .errors import FormatError, FreshnessViolation, OrderingViolation
from .models import (
    RECORD_TYPE,
    TIMESTAMP_FIELD,
    TIMESTAMP_LENGTH,
    TYPE_FIELD,
    parse_timestamp,
)
from .results import Result, Unchanged, Updated

logger = logging.getLogger(__name__)

# Lexically before any real row timestamp.
TIMESTAMP_JUST_TOO_OLD = "0" * TIMESTAMP_LENGTH

# Type, date, settlement period, timestamp and at least one value.
MIN_ROW_FIELDS = 5


def check_row_structure(row: Optional[Sequence[str]], index: int, record_type: str = RECORD_TYPE):
    """Raise FormatError unless ``row`` has the basic legacy row shape."""
    if row is None:
        raise FormatError("missing row", index=index)
    if len(row) < MIN_ROW_FIELDS:
        raise FormatError(
            f"too few fields ({len(row)} < {MIN_ROW_FIELDS})", line=",".join(row), index=index
        )
    if row[TYPE_FIELD] != record_type:
        raise FormatError(f"not a {record_type} row", line=",".join(row), index=index)
    if len(row[TIMESTAMP_FIELD]) != TIMESTAMP_LENGTH:
        raise FormatError(
            f"timestamp is not {TIMESTAMP_LENGTH} characters", line=",".join(row), index=index
        )


def validate_rows(
    rows: Sequence[Sequence[str]],
    newest_possible_valid_record: datetime,
    repair: bool = False,
    record_type: str = RECORD_TYPE,
) -> Result:
    """Validate ``rows`` in a single pass.

    Returns ``Unchanged`` if no problems were found, or in repair mode
    ``Updated`` with the offending rows removed (order otherwise kept) and
    a description of the first repair made.

    Raises FormatError for structural faults, OrderingViolation (strict
    mode only) at the first decreasing or repeated timestamp, and
    FreshnessViolation if the newest kept row is later than
    ``newest_possible_valid_record``.

    A repeated timestamp also condemns the row immediately before it:
    upstream republication has been seen to resend an interval under the
    stamp of its neighbour, so neither copy can be trusted. This is a
    heuristic; the earlier row may well have been correct.
    """
    last_timestamp = TIMESTAMP_JUST_TOO_OLD
    to_delete: set[int] = set()
    first_repair: Optional[str] = None

    for i, row in enumerate(rows):
        check_row_structure(row, i, record_type)
        timestamp = row[TIMESTAMP_FIELD]

        if timestamp < last_timestamp:
            if not repair:
                raise OrderingViolation("decreasing timestamp", i, timestamp, last_timestamp)
            to_delete.add(i)
            if first_repair is None:
                first_repair = (
                    f"dropped out-of-order row {i} with timestamp {timestamp} "
                    f"(before {last_timestamp})"
                )
            # The earlier high-water mark stays authoritative.
            continue

        if timestamp == last_timestamp:
            if not repair:
                raise OrderingViolation("duplicate timestamp", i, timestamp, last_timestamp)
            to_delete.add(i)
            if i > 0:
                to_delete.add(i - 1)
            if first_repair is None:
                first_repair = (
                    f"dropped rows {max(i - 1, 0)} and {i} sharing duplicate timestamp {timestamp}"
                )

        last_timestamp = timestamp

    kept = tuple(tuple(row) for i, row in enumerate(rows) if i not in to_delete)

    if kept:
        newest = kept[-1][TIMESTAMP_FIELD]
        if parse_timestamp(newest) > newest_possible_valid_record:
            raise FreshnessViolation(newest, newest_possible_valid_record)

    if not to_delete:
        return Unchanged("no problems found")

    logger.warning(
        "Repaired %d of %d rows; first repair: %s", len(to_delete), len(rows), first_repair
    )
    return Updated(kept, first_repair)
