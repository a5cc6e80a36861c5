"""
GridBridge UK - Transformation Results

Every archive transformation (repair, merge, trim) returns one of two
explicit variants instead of an optional value, so "nothing to do" can
never be confused with an error. Errors are raised, not returned.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .models import Row


@dataclass(frozen=True)
class Unchanged:
    """Success, input left as-is (eg no problems found, nothing to append)."""

    reason: str = ""

    @property
    def changed(self) -> bool:
        return False


@dataclass(frozen=True)
class Updated:
    """Success with a new immutable row sequence."""

    rows: Tuple[Row, ...]
    description: str = ""

    @property
    def changed(self) -> bool:
        return True


Result = Union[Unchanged, Updated]


def rows_or(result: Result, current: Tuple[Row, ...]) -> Tuple[Row, ...]:
    """Rows carried by ``result``, or ``current`` when nothing changed."""
    if isinstance(result, Updated):
        return result.rows
    return current
