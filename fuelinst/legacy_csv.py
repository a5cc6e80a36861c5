"""
GridBridge UK - Legacy FUELINST CSV Codec

Reads and writes the positional CSV envelope used by the old BMRS feed
and by the on-disk archive:

    HDR[,description]
    FUELINST,20221104,20,20221104095000,14429,0,0,4649,...
    ...
    FTR,<data row count>

No quoting or escaping is supported: a comma inside a field is not
representable.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple, Union

from .errors import FormatError, IntegrityError
from .models import RECORD_TYPE, TYPE_FIELD, Row

logger = logging.getLogger(__name__)

HEADER_TAG = "HDR"
FOOTER_TAG = "FTR"
ENCODING = "ascii"

# Rows need at least type, date, settlement period and timestamp.
MIN_ENCODED_FIELDS = 4


# =============================================================================
# Decode
# =============================================================================

def decode(data: Union[str, bytes], header_check: Optional[str] = None) -> Tuple[Row, ...]:
    """Parse a full envelope into data rows (HDR and FTR are not returned).

    If ``header_check`` is given, the header's description field must equal
    it exactly. A FTR row ends parsing and its count must match the number
    of data rows read. Rows are returned in input order, unfiltered.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise FormatError(f"non-ASCII content ({e})") from e
    return decode_lines(data.splitlines(), header_check=header_check)


def decode_lines(lines: Iterable[str], header_check: Optional[str] = None) -> Tuple[Row, ...]:
    it = iter(lines)
    header = next(it, None)
    if header is None:
        raise FormatError("empty input, missing header (HDR) row")
    hdr = header.split(",")
    if hdr[0] != HEADER_TAG:
        raise FormatError("missing header (HDR) row", line=header)
    if header_check is not None:
        description = hdr[1] if len(hdr) > 1 else None
        if description != header_check:
            raise FormatError(
                f"wrong header (HDR) description, expected {header_check!r}", line=header
            )

    rows: list[Row] = []
    previous: Sequence[str] = ()
    footer_seen = False
    for line in it:
        if not line:
            raise FormatError("unexpected empty row", index=len(rows))
        fields = line.split(",")
        tag = fields[TYPE_FIELD]
        if not tag:
            raise FormatError("unexpected empty type", line=line, index=len(rows))

        if tag == FOOTER_TAG:
            _check_footer(fields, len(rows), line)
            footer_seen = True
            break

        row = _share_repeated_values(fields, previous)
        rows.append(row)
        previous = row

    if not footer_seen:
        logger.warning("No footer (FTR) row after %d data rows", len(rows))
    return tuple(rows)


def _check_footer(fields: Sequence[str], row_count: int, line: str):
    if len(fields) < 2:
        raise FormatError("footer (FTR) data row count missing", line=line)
    try:
        expected = int(fields[1], 10)
    except ValueError as e:
        raise FormatError("footer (FTR) data row count malformed", line=line) from e
    if expected != row_count:
        raise IntegrityError(
            f"footer (FTR) data row count wrong: footer says {expected}, read {row_count}",
            line=line,
        )


def _share_repeated_values(fields: Sequence[str], previous: Sequence[str]) -> Row:
    # Successive rows repeat most values; reuse the earlier string objects.
    shared = []
    for i, value in enumerate(fields):
        if value == "0":
            value = "0"
        elif i < len(previous) and previous[i] == value:
            value = previous[i]
        shared.append(value)
    return tuple(shared)


# =============================================================================
# Encode
# =============================================================================

def encode(rows: Iterable[Sequence[str]], record_type: str = RECORD_TYPE) -> bytes:
    """Serialise rows to the envelope, ASCII, newline-terminated.

    Only structural checks are made here: each row needs at least the
    leading four fields and must carry ``record_type``.
    """
    lines = [HEADER_TAG]
    count = 0
    for row in rows:
        if len(row) < MIN_ENCODED_FIELDS:
            raise FormatError(
                f"too few fields for {record_type}", line=",".join(row), index=count
            )
        if row[TYPE_FIELD] != record_type:
            raise FormatError(f"not {record_type} record", line=",".join(row), index=count)
        lines.append(",".join(row))
        count += 1
    lines.append(f"{FOOTER_TAG},{count}")
    text = "\n".join(lines) + "\n"
    try:
        return text.encode(ENCODING)
    except UnicodeEncodeError as e:
        raise FormatError(f"non-ASCII field content ({e})") from e
