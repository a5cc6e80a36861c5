"""
GridBridge UK - FUELINST Ingestion and Archive

Ingests Elexon instantaneous generation-by-fuel-type (FUELINST) data from
either wire format, validates and repairs the time series, and maintains a
time-bounded archive on disk:

- Legacy CSV envelope (HDR / FUELINST rows / FTR), also the archive format
- Insights stream JSON (one record per fuel type per interval)
"""

from .errors import (
    FuelinstError,
    FormatError,
    IntegrityError,
    OrderingViolation,
    FreshnessViolation,
    FetchError,
)
from .models import Row, Sample, FuelTemplate, named_fields, parse_timestamp, format_timestamp
from .results import Unchanged, Updated
from .validator import validate_rows
from .archive import append_new_rows, trim_rows
from .store import ArchiveStore
from .publish import ReadWriteLock, publish_file
from .config import ArchiveConfig
from .pipeline import UpdateReport, update_archive, ingest_legacy_csv, ingest_stream_json
from . import legacy_csv, stream_json

__all__ = [
    "FuelinstError",
    "FormatError",
    "IntegrityError",
    "OrderingViolation",
    "FreshnessViolation",
    "FetchError",
    "Row",
    "Sample",
    "FuelTemplate",
    "named_fields",
    "parse_timestamp",
    "format_timestamp",
    "Unchanged",
    "Updated",
    "validate_rows",
    "append_new_rows",
    "trim_rows",
    "ArchiveStore",
    "ReadWriteLock",
    "publish_file",
    "ArchiveConfig",
    "UpdateReport",
    "update_archive",
    "ingest_legacy_csv",
    "ingest_stream_json",
    "legacy_csv",
    "stream_json",
]

__version__ = "0.1.0"
