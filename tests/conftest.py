"""Shared fixtures for FUELINST tests."""

from datetime import datetime, timedelta, timezone

import pytest

from fuelinst.models import FuelTemplate

TEMPLATE = "type,date,settlementperiod,timestamp,CCGT,OIL,COAL,NUCLEAR,WIND,PS,NPSHYD,OCGT,OTHER,INTFR,INTIRL"

SAMPLE_CSV = (
    "HDR\r\n"
    "FUELINST,20011111,34,20011111165500,16000,123,20100,7800,1000,400,700,0,0,0,0\r\n"
    "FTR,1"
)


def make_row(timestamp: str, *values: str, period: str = "1") -> tuple:
    """Legacy row with the given 14-character timestamp."""
    values = values or ("100", "0", "5")
    return ("FUELINST", timestamp[:8], period, timestamp, *values)


def hourly_rows(start: datetime, count: int, step: timedelta = timedelta(hours=1)) -> tuple:
    return tuple(
        make_row((start + i * step).strftime("%Y%m%d%H%M%S"), str(i), "0", "7")
        for i in range(count)
    )


@pytest.fixture
def template():
    return FuelTemplate.parse(TEMPLATE)


@pytest.fixture
def far_future():
    return datetime(2100, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def stream_records():
    """Two intervals of stream JSON, BIOMASS resent in the first."""
    return [
        {"dataset": "FUELINST", "publishTime": "2024-02-12T17:50:00Z", "startTime": "2024-02-12T17:45:00Z",
         "settlementDate": "2024-02-12", "settlementPeriod": 36, "fuelType": "BIOMASS", "generation": 2249},
        {"dataset": "FUELINST", "publishTime": "2024-02-12T17:50:00Z", "startTime": "2024-02-12T17:45:00Z",
         "settlementDate": "2024-02-12", "settlementPeriod": 36, "fuelType": "CCGT", "generation": 6030},
        {"dataset": "FUELINST", "publishTime": "2024-02-12T17:55:00Z", "startTime": "2024-02-12T17:50:00Z",
         "settlementDate": "2024-02-12", "settlementPeriod": 36, "fuelType": "CCGT", "generation": 6100},
        {"dataset": "FUELINST", "publishTime": "2024-02-12T17:55:00Z", "startTime": "2024-02-12T17:50:00Z",
         "settlementDate": "2024-02-12", "settlementPeriod": 36, "fuelType": "PS", "generation": -350},
        {"dataset": "FUELINST", "publishTime": "2024-02-12T17:56:00Z", "startTime": "2024-02-12T17:45:00Z",
         "settlementDate": "2024-02-12", "settlementPeriod": 36, "fuelType": "BIOMASS", "generation": 864},
    ]
