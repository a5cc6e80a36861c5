"""
GridBridge UK - FUELINST Stream JSON Codec

Decodes the Elexon Insights ``/datasets/FUELINST/stream`` format, one flat
object per fuel type per interval:

    {"dataset": "FUELINST", "publishTime": "2024-02-12T17:50:00Z",
     "startTime": "2024-02-12T17:45:00Z", "settlementDate": "2024-02-12",
     "settlementPeriod": 36, "fuelType": "BIOMASS", "generation": 2249}

and rebuilds legacy rows from it so the archive keeps one format whichever
feed the data came from.

``startTime`` is the canonical instant: ``publishTime`` can lump several
intervals together when upstream processing is delayed.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import FormatError, IntegrityError
from .models import (
    RECORD_TYPE,
    FuelTemplate,
    Row,
    Sample,
    format_date,
    format_timestamp,
)

logger = logging.getLogger(__name__)

# time -> fuel type -> Sample, ordered by time ascending.
GroupedIntervals = dict[datetime, dict[str, Sample]]

ABSENT_GENERATION = "0"


# =============================================================================
# Wire Model
# =============================================================================

class StreamRecord(BaseModel):
    """One FUELINST stream record as published upstream."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    dataset: str
    publishTime: Optional[datetime] = None
    startTime: datetime
    settlementDate: Optional[date] = None
    settlementPeriod: int = Field(ge=1)
    fuelType: str = Field(pattern=r"^[A-Z0-9]+$")
    generation: int

    @field_validator("dataset")
    @classmethod
    def check_dataset(cls, v: str) -> str:
        if v != RECORD_TYPE:
            raise ValueError(f"not a {RECORD_TYPE} dataset: {v!r}")
        return v

    @field_validator("publishTime", "startTime")
    @classmethod
    def require_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        if v.tzinfo is None:
            raise ValueError("timestamp must carry a UTC offset")
        return v.astimezone(timezone.utc)

    def to_sample(self, clamp_non_negative: bool = False) -> Sample:
        sample = Sample(
            time=self.startTime,
            fuel_type=self.fuelType,
            generation=self.generation,
            settlement_period=self.settlementPeriod,
        )
        return sample.clamped() if clamp_non_negative else sample


# =============================================================================
# Decode
# =============================================================================

def parse_records(payload: Union[str, bytes, list, Mapping[str, Any]]) -> list[StreamRecord]:
    """Validate every record in a stream payload.

    Accepts raw JSON text, an already-decoded list, or the ``{"data": [...]}``
    wrapper returned by the non-stream endpoint.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise FormatError(f"invalid JSON ({e.msg})", index=e.pos) from e
    if isinstance(payload, Mapping) and "data" in payload:
        payload = payload["data"]
    if not isinstance(payload, list):
        raise FormatError(f"expected a JSON array, got {type(payload).__name__}")

    records = []
    for i, item in enumerate(payload):
        try:
            records.append(StreamRecord.model_validate(item))
        except ValidationError as e:
            raise FormatError(
                f"invalid {RECORD_TYPE} stream record ({e.error_count()} errors: "
                f"{e.errors()[0]['msg']})",
                line=json.dumps(item, default=str),
                index=i,
            ) from e
    return records


def decode(
    payload: Union[str, bytes, list, Mapping[str, Any]],
    clamp_non_negative: bool = False,
) -> GroupedIntervals:
    """Decode a stream payload into samples grouped by interval start.

    Within one interval a repeated fuel type overwrites the earlier
    sample (upstream may resend).
    """
    grouped: dict[datetime, dict[str, Sample]] = {}
    for record in parse_records(payload):
        sample = record.to_sample(clamp_non_negative)
        interval = grouped.setdefault(sample.time, {})
        if sample.fuel_type in interval:
            logger.debug("Replacing resent %s sample at %s", sample.fuel_type, sample.time)
        interval[sample.fuel_type] = sample
    return dict(sorted(grouped.items()))


# =============================================================================
# Legacy Row Synthesis
# =============================================================================

def interval_to_row(time: datetime, mix: Mapping[str, Sample], template: FuelTemplate) -> Row:
    """Build one legacy row for the interval starting at ``time``.

    Template fuel positions absent from ``mix`` (or with an empty name)
    become "0". Each sample must agree with the interval's time, its own
    map key and the interval's settlement period.
    """
    if not mix:
        raise IntegrityError(f"no samples for interval {time.isoformat()}")
    settlement_period = next(iter(mix.values())).settlement_period

    for fuel_type, sample in mix.items():
        if sample.fuel_type != fuel_type:
            raise IntegrityError(
                f"sample fuel type {sample.fuel_type} filed under {fuel_type}"
            )
        if sample.time != time:
            raise IntegrityError(
                f"{fuel_type} sample time {sample.time.isoformat()} "
                f"does not match interval {time.isoformat()}"
            )
        if sample.settlement_period != settlement_period:
            raise IntegrityError(
                f"{fuel_type} settlement period {sample.settlement_period} "
                f"does not match interval period {settlement_period} at {time.isoformat()}"
            )

    values = []
    for fuel_type in template.fuel_types:
        sample = mix.get(fuel_type) if fuel_type else None
        values.append(str(sample.generation) if sample is not None else ABSENT_GENERATION)

    return (
        RECORD_TYPE,
        format_date(time),
        str(settlement_period),
        format_timestamp(time),
        *values,
    )


def intervals_to_rows(grouped: GroupedIntervals, template: FuelTemplate) -> tuple[Row, ...]:
    """Convert every interval, in time order, to legacy rows."""
    unmapped = _unmapped_fuel_types(grouped.values(), template)
    if unmapped:
        logger.warning("Fuel types not in template, dropped: %s", ", ".join(sorted(unmapped)))
    return tuple(
        interval_to_row(time, grouped[time], template) for time in sorted(grouped)
    )


def _unmapped_fuel_types(mixes: Iterable[Mapping[str, Sample]], template: FuelTemplate) -> set[str]:
    known = set(template.fuel_types)
    return {fuel for mix in mixes for fuel in mix if fuel not in known}
