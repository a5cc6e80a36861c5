"""
GridBridge UK - FUELINST Row Model

Canonical in-memory shapes shared by both wire formats:

- Row: the legacy positional record, a tuple of strings
  ``(type, YYYYMMDD, settlementPeriod, YYYYMMDDHHmmss, v1, ..., vN)``
- Sample: one fuel type's generation in one interval
- FuelTemplate: field names index-aligned with Row positions
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Sequence, Tuple

from .errors import FormatError


# =============================================================================
# Constants
# =============================================================================

RECORD_TYPE = "FUELINST"

# Field offsets within a legacy row.
TYPE_FIELD = 0
DATE_FIELD = 1
SETTLEMENT_PERIOD_FIELD = 2
TIMESTAMP_FIELD = 3
FIRST_VALUE_FIELD = 4

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
TIMESTAMP_LENGTH = 14
DATE_FORMAT = "%Y%m%d"

Row = Tuple[str, ...]


# =============================================================================
# Timestamps
# =============================================================================

def parse_timestamp(raw: str) -> datetime:
    """Parse a 14-character row timestamp into an aware UTC datetime."""
    if len(raw) != TIMESTAMP_LENGTH or not raw.isdigit():
        raise FormatError("malformed row timestamp", line=raw)
    try:
        return datetime.strptime(raw, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise FormatError(f"unparseable row timestamp ({e})", line=raw) from e


def format_timestamp(when: datetime) -> str:
    """Format an instant as the fixed-width, lexically ordered row timestamp."""
    return _as_utc(when).strftime(TIMESTAMP_FORMAT)


def format_date(when: datetime) -> str:
    return _as_utc(when).strftime(DATE_FORMAT)


def _as_utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        raise ValueError(f"naive datetime not allowed: {when!r}")
    return when.astimezone(timezone.utc)


# =============================================================================
# Samples
# =============================================================================

@dataclass(frozen=True)
class Sample:
    """Generation (MW) by one fuel type in one timed interval.

    ``settlement_period`` is the 1-based half-hour slot of the UTC day and
    is carried through so legacy rows can be rebuilt from stream data.
    """

    time: datetime
    fuel_type: str
    generation: int
    settlement_period: int

    def __post_init__(self):
        if self.time.tzinfo is None:
            raise ValueError("sample time must be timezone-aware")
        if not self.fuel_type:
            raise ValueError("sample fuel type must be non-empty")
        if self.settlement_period < 1:
            raise ValueError(
                f"settlement period must be >= 1, got {self.settlement_period}"
            )

    def clamped(self) -> "Sample":
        """Copy with generation clamped to be non-negative."""
        if self.generation >= 0:
            return self
        return Sample(self.time, self.fuel_type, 0, self.settlement_period)


# =============================================================================
# Templates
# =============================================================================

@dataclass(frozen=True)
class FuelTemplate:
    """Ordered row field names, eg ``type,date,settlementperiod,timestamp,CCGT,...``.

    Positions from FIRST_VALUE_FIELD onward name fuel types. Empty names
    are placeholders for columns that are not mapped.
    """

    names: Tuple[str, ...]

    @classmethod
    def parse(cls, template: str) -> "FuelTemplate":
        names = tuple(name.strip() for name in template.split(","))
        if len(names) <= FIRST_VALUE_FIELD:
            raise ValueError(
                f"template must name at least one fuel after the first "
                f"{FIRST_VALUE_FIELD} fields: {template!r}"
            )
        return cls(names)

    @property
    def fuel_types(self) -> Tuple[str, ...]:
        """Fuel names by position, including empty placeholders."""
        return self.names[FIRST_VALUE_FIELD:]

    @property
    def field_count(self) -> int:
        return len(self.names)

    def __str__(self) -> str:
        return ",".join(self.names)


def named_fields(template: FuelTemplate, row: Sequence[str]) -> dict[str, str]:
    """Convert a positional row to ``{name: value}``.

    Empty template names and empty values are skipped; the shorter of
    template and row governs.
    """
    result = {}
    for name, value in zip(template.names, row):
        if name and value:
            result[name] = value
    return result


def named_fields_rows(template: FuelTemplate, rows: Iterable[Sequence[str]]) -> list[dict[str, str]]:
    return [named_fields(template, row) for row in rows]
