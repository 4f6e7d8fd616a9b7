"""
Core type definitions for the shared utilities layer.

GaugeSpec and StitchPatternSpec are frozen, but unlike most stitchcraft
dataclasses they do not raise on non-positive numbers: calculators must be
able to report invalid gauges as zeroed results, so the rules live in
``validation_errors()`` instead of ``__post_init__``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stitchcraft.errors import ValidationError


class Unit(str, Enum):
    """Length unit for targets, gauges and finished dimensions."""

    CM = "cm"
    INCH = "inch"

    @classmethod
    def parse(cls, value: str | Unit) -> Unit:
        """Accept an enum member or a common spelling ("in", "inches", "centimeters")."""
        if isinstance(value, Unit):
            return value
        try:
            return _UNIT_ALIASES[str(value).strip().lower()]
        except KeyError:
            raise ValidationError(f"Unknown length unit {value!r}") from None


_UNIT_ALIASES: dict[str, Unit] = {
    "cm": Unit.CM,
    "centimeter": Unit.CM,
    "centimeters": Unit.CM,
    "centimetre": Unit.CM,
    "centimetres": Unit.CM,
    "inch": Unit.INCH,
    "inches": Unit.INCH,
    "in": Unit.INCH,
    '"': Unit.INCH,
}


class Axis(str, Enum):
    """Which gauge density applies: stitches run across, rows run up."""

    STITCHES = "stitches"
    ROWS = "rows"


def _is_positive_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class GaugeSpec:
    """
    Stitches and rows produced over ``ref_length`` units of fabric.

    The conventional swatch is 10 cm (or 4 inches); ``ref_length`` makes the
    reference explicit instead of baking it into the counts.
    """

    stitches: float
    rows: float
    ref_length: float = 10.0
    unit: Unit = Unit.CM

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", Unit.parse(self.unit))

    def validation_errors(self) -> list[str]:
        """Return one message per non-positive or missing field; empty when valid."""
        errors: list[str] = []
        if not _is_positive_number(self.stitches):
            errors.append("Gauge stitches must be greater than 0")
        if not _is_positive_number(self.rows):
            errors.append("Gauge rows must be greater than 0")
        if not _is_positive_number(self.ref_length):
            errors.append("Gauge reference length must be greater than 0")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()

    def count(self, axis: Axis) -> float:
        return self.stitches if axis == Axis.STITCHES else self.rows

    def per_unit(self, axis: Axis) -> float:
        """Stitches (or rows) per single unit of length."""
        return self.count(axis) / self.ref_length


@dataclass(frozen=True)
class StitchPatternSpec:
    """A stitch pattern and the repeat its cast-on must honour.

    ``name`` is None for the craft's default fabric; the template engine
    fills in that craft's own name when it writes the rows.
    """

    name: str | None = None
    horizontal_repeat: int = 1
    vertical_repeat: int = 1
    classification: str = "basic"

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if not isinstance(self.horizontal_repeat, int) or self.horizontal_repeat < 1:
            errors.append("Horizontal repeat must be at least 1")
        if not isinstance(self.vertical_repeat, int) or self.vertical_repeat < 1:
            errors.append("Vertical repeat must be at least 1")
        return errors
