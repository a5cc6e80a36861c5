"""
GridBridge UK - FUELINST Configuration

Defaults plus environment overrides for the archive update cycle.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from .models import FuelTemplate

# ============================================================================
# Defaults
# ============================================================================

DATA_DIR = Path("out")
DEFAULT_ARCHIVE_PATH = DATA_DIR / "FUELINST.longstore.csv.gz"

# Row field names; positions 4 onward are Elexon fuel type codes.
DEFAULT_TEMPLATE = (
    "type,date,settlementperiod,timestamp,"
    "CCGT,OIL,COAL,NUCLEAR,WIND,PS,NPSHYD,OCGT,OTHER,"
    "INTFR,INTIRL,INTNED,INTEW,BIOMASS,INTNEM,INTELEC,INTIFA2,INTNSL,INTVKL,INTGRNL"
)

HOURS_PER_DAY = 24
HOURS_PER_WEEK = 7 * HOURS_PER_DAY

# Header description used by the old BMRS FUELINST CSV download.
LEGACY_HEADER_DESCRIPTION = "INSTANTANEOUS GENERATION BY FUEL TYPE DATA"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ArchiveConfig:
    archive_path: Path = DEFAULT_ARCHIVE_PATH
    template: FuelTemplate = field(default_factory=lambda: FuelTemplate.parse(DEFAULT_TEMPLATE))
    max_hours_span: int = HOURS_PER_WEEK
    freshness_tolerance: timedelta = timedelta(0)
    repair: bool = True
    clamp_non_negative: bool = True
    header_check: Optional[str] = None

    def __post_init__(self):
        if self.max_hours_span <= 0:
            raise ValueError(f"max_hours_span must be positive, got {self.max_hours_span}")
        if self.freshness_tolerance < timedelta(0):
            raise ValueError("freshness_tolerance must not be negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> "ArchiveConfig":
        """Build a config, overriding defaults from ``FUELINST_*`` variables."""
        kwargs = {}
        if "FUELINST_ARCHIVE_PATH" in environ:
            kwargs["archive_path"] = Path(environ["FUELINST_ARCHIVE_PATH"])
        if "FUELINST_TEMPLATE" in environ:
            kwargs["template"] = FuelTemplate.parse(environ["FUELINST_TEMPLATE"])
        if "FUELINST_MAX_HOURS_SPAN" in environ:
            kwargs["max_hours_span"] = int(environ["FUELINST_MAX_HOURS_SPAN"])
        if "FUELINST_FRESHNESS_TOLERANCE_S" in environ:
            kwargs["freshness_tolerance"] = timedelta(
                seconds=float(environ["FUELINST_FRESHNESS_TOLERANCE_S"])
            )
        if "FUELINST_REPAIR" in environ:
            kwargs["repair"] = _parse_bool("FUELINST_REPAIR", environ["FUELINST_REPAIR"])
        if "FUELINST_CLAMP" in environ:
            kwargs["clamp_non_negative"] = _parse_bool("FUELINST_CLAMP", environ["FUELINST_CLAMP"])
        if "FUELINST_HEADER_CHECK" in environ:
            kwargs["header_check"] = environ["FUELINST_HEADER_CHECK"]
        return cls(**kwargs)


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
