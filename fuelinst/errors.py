"""
GridBridge UK - FUELINST Errors

Exception hierarchy for ingestion, validation and archive maintenance.
"""

from typing import Optional


class FuelinstError(Exception):
    """Base class for all FUELINST pipeline errors."""

    def __init__(self, message: str, line: Optional[str] = None, index: Optional[int] = None):
        self.line = line
        self.index = index
        detail = message
        if index is not None:
            detail += f" (at index {index})"
        if line is not None:
            detail += f": {line!r}"
        super().__init__(detail)


class FormatError(FuelinstError):
    """Malformed envelope, header, footer, record or row structure."""


class IntegrityError(FuelinstError):
    """Data is well-formed but internally inconsistent (eg truncated transfer)."""


class OrderingViolation(FuelinstError):
    """A row timestamp is not strictly after its predecessor."""

    def __init__(self, message: str, index: int, timestamp: str, previous: str):
        self.timestamp = timestamp
        self.previous = previous
        super().__init__(f"{message}: {timestamp} after {previous}", index=index)


class FreshnessViolation(FuelinstError):
    """The newest record is later than the newest possible valid record."""

    def __init__(self, timestamp: str, newest_allowed):
        self.timestamp = timestamp
        self.newest_allowed = newest_allowed
        super().__init__(
            f"newest record {timestamp} is later than {newest_allowed.isoformat()}"
        )


class FetchError(FuelinstError):
    """Remote data could not be fetched."""
