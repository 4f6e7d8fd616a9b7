"""
Gauge conversion: physical dimensions to stitch/row counts and back, plus
pattern-gauge versus knitter-gauge comparison.

Dimensions are converted into the gauge's own unit before any ratio is
applied. All functions are pure and raise ValidationError on non-positive
inputs instead of clamping.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from stitchcraft.errors import ValidationError

from .types import Axis, GaugeSpec, Unit

CM_PER_INCH: float = 2.54


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up.

    The intermediate ``round(value, 9)`` absorbs float noise such as
    ``50 * 2.2 == 110.00000000000001``.
    """
    return math.floor(round(value, 9) + 0.5)


def round_dimension(value: float) -> float:
    """Round a physical dimension to 2 decimal places."""
    return round(value, 2)


def convert_length(value: float, from_unit: Unit, to_unit: Unit) -> float:
    """Convert a length between centimeters and inches."""
    from_unit = Unit.parse(from_unit)
    to_unit = Unit.parse(to_unit)
    if from_unit == to_unit:
        return value
    if from_unit == Unit.INCH:
        return value * CM_PER_INCH
    return value / CM_PER_INCH


def require_valid_gauge(gauge: GaugeSpec) -> None:
    errors = gauge.validation_errors()
    if errors:
        raise ValidationError(errors)


def _require_positive(value: object, label: str) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        raise ValidationError(f"{label} must be greater than 0")


def raw_count(
    gauge: GaugeSpec,
    target_dimension: float,
    unit: Unit | str | None = None,
    axis: Axis = Axis.STITCHES,
) -> float:
    """Unrounded stitch or row count for ``target_dimension``."""
    require_valid_gauge(gauge)
    _require_positive(target_dimension, "Target dimension")
    source_unit = Unit.parse(unit) if unit is not None else gauge.unit
    dimension = convert_length(target_dimension, source_unit, gauge.unit)
    return dimension * gauge.per_unit(axis)


def target_to_count(
    gauge: GaugeSpec,
    target_dimension: float,
    unit: Unit | str | None = None,
    axis: Axis = Axis.STITCHES,
) -> int:
    """
    Convert a physical dimension to an integer stitch or row count.

    Args:
        gauge: Gauge to apply.
        target_dimension: Dimension in ``unit`` (defaults to the gauge unit).
        unit: Unit of ``target_dimension``.
        axis: STITCHES for widths, ROWS for lengths.

    Returns:
        The count rounded to the nearest integer, halves rounding up.

    Raises:
        ValidationError: If any gauge field or the dimension is not positive.
    """
    return round_half_up(raw_count(gauge, target_dimension, unit, axis))


def count_to_dimension(
    gauge: GaugeSpec,
    count: float,
    axis: Axis = Axis.STITCHES,
    unit: Unit | str | None = None,
) -> float:
    """
    Convert a stitch or row count back to a physical dimension.

    The result is expressed in ``unit`` (defaults to the gauge unit) and
    rounded to 2 decimal places.
    """
    require_valid_gauge(gauge)
    if not isinstance(count, (int, float)) or isinstance(count, bool) or count < 0:
        raise ValidationError("Count must be zero or greater")
    dimension = count / gauge.per_unit(axis)
    target_unit = Unit.parse(unit) if unit is not None else gauge.unit
    return round_dimension(convert_length(dimension, gauge.unit, target_unit))


@dataclass(frozen=True)
class GaugeComparison:
    """Result of knitting a pattern's stitch count at a different gauge.

    All dimensions are in ``unit``, the pattern gauge's unit.
    """

    original_dimension: float
    dimension_with_user_gauge: float
    adjusted_count: int
    unit: Unit
    axis: Axis

    @property
    def difference(self) -> float:
        return round_dimension(self.dimension_with_user_gauge - self.original_dimension)

    @property
    def percent_difference(self) -> float:
        return round_dimension(self.difference / self.original_dimension * 100)


def compare_gauges(
    pattern_gauge: GaugeSpec,
    user_gauge: GaugeSpec,
    pattern_count: int,
    axis: Axis = Axis.STITCHES,
) -> GaugeComparison:
    """
    Compare what ``pattern_count`` produces at the pattern gauge and at the
    knitter's own gauge, and how many stitches would reproduce the original.

    The pattern gauge's unit is the common unit; the user gauge is rescaled
    into it before comparison.
    """
    require_valid_gauge(pattern_gauge)
    require_valid_gauge(user_gauge)
    _require_positive(pattern_count, "Pattern count")

    pattern_per_unit = pattern_gauge.per_unit(axis)
    # density per one pattern-unit of length
    user_per_unit = user_gauge.per_unit(axis) * convert_length(
        1.0, pattern_gauge.unit, user_gauge.unit
    )

    original = pattern_count / pattern_per_unit
    with_user_gauge = pattern_count / user_per_unit
    return GaugeComparison(
        original_dimension=round_dimension(original),
        dimension_with_user_gauge=round_dimension(with_user_gauge),
        adjusted_count=round_half_up(original * user_per_unit),
        unit=pattern_gauge.unit,
        axis=axis,
    )
