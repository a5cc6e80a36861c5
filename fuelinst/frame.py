"""
GridBridge UK - FUELINST Frames

Wide-format pandas view of archive rows: one row per interval, one column
per fuel type, indexed by UTC timestamp.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from .models import (
    FIRST_VALUE_FIELD,
    SETTLEMENT_PERIOD_FIELD,
    TIMESTAMP_FIELD,
    TIMESTAMP_FORMAT,
    FuelTemplate,
    named_fields,
)


def rows_to_frame(rows: Sequence[Sequence[str]], template: FuelTemplate) -> pd.DataFrame:
    """Convert legacy rows to a generation-by-fuel DataFrame (MW, int64).

    Columns follow the template's non-empty fuel names; values missing from
    a short row, or empty, read as 0.
    """
    fuel_columns = [(i, name) for i, name in enumerate(template.names) if i >= FIRST_VALUE_FIELD and name]
    if not rows:
        empty = pd.DataFrame(
            {name: pd.Series(dtype=np.int64) for _, name in fuel_columns},
            index=pd.DatetimeIndex([], tz="UTC", name="timestamp"),
        )
        empty.insert(0, "settlement_period", pd.Series(dtype=np.int64))
        return empty

    index = pd.to_datetime(
        [row[TIMESTAMP_FIELD] for row in rows], format=TIMESTAMP_FORMAT, utc=True
    ).rename("timestamp")

    values = np.zeros((len(rows), len(fuel_columns)), dtype=np.int64)
    for r, row in enumerate(rows):
        for c, (i, _) in enumerate(fuel_columns):
            if i < len(row) and row[i]:
                values[r, c] = int(row[i])

    df = pd.DataFrame(values, index=index, columns=[name for _, name in fuel_columns])
    df.insert(
        0,
        "settlement_period",
        np.array([int(row[SETTLEMENT_PERIOD_FIELD]) for row in rows], dtype=np.int64),
    )
    return df


def latest_generation(rows: Sequence[Sequence[str]], template: FuelTemplate) -> dict[str, int]:
    """Generation by fuel type for the newest row; empty if there are no rows."""
    if not rows:
        return {}
    fields = named_fields(template, rows[-1])
    return {
        name: int(fields[name])
        for name in template.fuel_types
        if name in fields
    }


def total_generation(df: pd.DataFrame) -> pd.Series:
    """Sum of all fuel columns per interval."""
    return df.drop(columns=["settlement_period"]).sum(axis=1)
