"""
Row-level instruction records and the verbosity policy that decides when
plain rows are written out one by one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RowType(str, Enum):
    CAST_ON = "cast_on"
    SETUP_ROW = "setup_row"
    PLAIN_ROW = "plain_row"
    SHAPING_ROW = "shaping_row"
    BIND_OFF = "bind_off"


class DetailLevel(str, Enum):
    """How much of the pattern is written row by row."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"


@dataclass(frozen=True)
class DetailPolicy:
    """
    Thresholds for collapsing a run of plain rows into one grouped instruction.

    A run longer than the threshold for the active level is collapsed;
    FULL detail never collapses. Collapsing changes wording only, never the
    number of rows worked.
    """

    minimal_threshold: int = 10
    standard_threshold: int = 20

    def __post_init__(self) -> None:
        if self.minimal_threshold < 1 or self.standard_threshold < 1:
            raise ValueError("collapse thresholds must be at least 1")

    def collapses(self, level: DetailLevel, row_span: int) -> bool:
        match level:
            case DetailLevel.MINIMAL:
                return row_span > self.minimal_threshold
            case DetailLevel.STANDARD:
                return row_span > self.standard_threshold
            case _:
                return False


def is_right_side(row_number: int) -> bool:
    """Flat construction: odd rows face the right side."""
    return row_number % 2 == 1


@dataclass(frozen=True)
class RowInstruction:
    """
    One written step of a piece.

    ``stitch_count`` is the count after the row is worked. A collapsed run of
    plain rows is a single instruction with ``end_row`` set to its last row.
    """

    row_number: int
    section: str
    text: str
    stitch_count: int
    row_type: RowType
    is_right_side: bool
    notes: tuple[str, ...] = ()
    stitches_changed: int = 0
    end_row: int | None = None

    @property
    def last_row(self) -> int:
        return self.end_row if self.end_row is not None else self.row_number

    @property
    def row_span(self) -> int:
        return self.last_row - self.row_number + 1
