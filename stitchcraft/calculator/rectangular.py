"""
Rectangular piece calculator: target width and length → cast-on stitches and
total rows.

Algorithm
---------
1. Raw stitches and rows from the gauge ratio (targets converted into the
   gauge unit first). Rows round to the nearest integer, halves up.
2. Stitches round to the nearest multiple of the stitch pattern's horizontal
   repeat, ties going to the larger multiple. A repeat of 1 is plain rounding.
3. Actual width and length are recomputed from the rounded counts, so callers
   see the size the fabric will really have.
4. Advisory warnings flag large dimensional drift and counts outside the
   practical range.

Invalid input (non-positive target, any non-positive gauge field) produces a
result whose counts are all zero and whose ``errors`` say why; nothing is
partially computed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from stitchcraft.utilities.conversion import (
    convert_length,
    count_to_dimension,
    raw_count,
    round_half_up,
)
from stitchcraft.utilities.repeats import round_to_repeat
from stitchcraft.utilities.types import Axis, GaugeSpec, StitchPatternSpec, Unit

# Advisory limits; exceeding them never blocks a calculation.
WIDTH_DRIFT_LIMIT: float = 1.0
LENGTH_DRIFT_LIMIT: float = 0.5
MIN_PRACTICAL_STITCHES: int = 20
MAX_PRACTICAL_STITCHES: int = 400
MIN_PRACTICAL_ROWS: int = 10
MAX_PRACTICAL_ROWS: int = 1000

# validate_rectangular_piece_input thresholds, in cm
_LARGE_WIDTH_CM: float = 200.0
_LARGE_LENGTH_CM: float = 300.0


def _fmt(value: float) -> str:
    return f"{value:g}"


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class RectangularPieceInput:
    """Inputs for one rectangular piece.

    Attributes:
        target_width: Finished width in ``unit``.
        target_length: Finished length in ``unit``.
        gauge: Gauge the piece is worked at.
        stitch_pattern: Stitch pattern whose horizontal repeat the cast-on honours.
        unit: Unit of the targets; defaults to the gauge unit.
        component_key: Identifier used in log records.
    """

    target_width: float
    target_length: float
    gauge: GaugeSpec
    stitch_pattern: StitchPatternSpec = field(default_factory=StitchPatternSpec)
    unit: Unit | None = None
    component_key: str = "piece"

    @property
    def dimension_unit(self) -> Unit:
        return self.unit if self.unit is not None else self.gauge.unit


@dataclass(frozen=True)
class PieceCalculation:
    """
    Stitch and row counts for a rectangular piece.

    ``actual_width`` and ``actual_length`` are in ``unit`` (the unit of the
    targets) and rounded to 2 decimal places.
    """

    cast_on_stitches: int
    total_rows: int
    actual_width: float
    actual_length: float
    unit: Unit
    raw_stitches: float = 0.0
    raw_rows: float = 0.0
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.errors

    @classmethod
    def rejected(cls, errors: list[str], unit: Unit) -> PieceCalculation:
        """Zeroed result for invalid input."""
        return cls(
            cast_on_stitches=0,
            total_rows=0,
            actual_width=0.0,
            actual_length=0.0,
            unit=unit,
            errors=tuple(errors),
        )


@runtime_checkable
class PieceCalculator(Protocol):
    """Protocol for calculators that size a rectangular piece."""

    def calculate(self, piece_input: RectangularPieceInput) -> PieceCalculation: ...


class RectangularPieceCalculator:
    """Deterministic calculator enforcing stitch-pattern repeat rounding."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def calculate(self, pi: RectangularPieceInput) -> PieceCalculation:
        """
        Size one rectangular piece.

        Parameters
        ----------
        pi:
            Target dimensions, gauge and stitch pattern.

        Returns
        -------
        PieceCalculation
            Counts, actual dimensions and advisory warnings, or a zeroed
            result with ``errors`` when the input is invalid.
        """
        unit = pi.dimension_unit
        errors = _input_errors(pi)
        if errors:
            self._logger.debug("rejected piece %r: %s", pi.component_key, "; ".join(errors))
            return PieceCalculation.rejected(errors, unit)

        gauge = pi.gauge
        raw_stitches = raw_count(gauge, pi.target_width, unit, Axis.STITCHES)
        raw_rows = raw_count(gauge, pi.target_length, unit, Axis.ROWS)
        total_rows = round_half_up(raw_rows)

        repeat = pi.stitch_pattern.horizontal_repeat
        warnings: list[str] = []
        if repeat <= 1:
            cast_on = round_to_repeat(raw_stitches, 1)
        else:
            cast_on = round_to_repeat(raw_stitches, repeat)
            if abs(cast_on - raw_stitches) >= 1:
                warnings.append(
                    f"Cast-on stitches adjusted from {round_half_up(raw_stitches)} to "
                    f"{cast_on} to fit "
                    f"{repeat}-stitch {pi.stitch_pattern.name or 'pattern'} repeat"
                )

        actual_width = count_to_dimension(gauge, cast_on, Axis.STITCHES, unit)
        actual_length = count_to_dimension(gauge, total_rows, Axis.ROWS, unit)

        if abs(actual_width - pi.target_width) > WIDTH_DRIFT_LIMIT:
            warnings.append(
                f"Width adjusted from {_fmt(pi.target_width)} {unit.value} to "
                f"{_fmt(actual_width)} {unit.value} due to stitch pattern repeat"
            )
        if abs(actual_length - pi.target_length) > LENGTH_DRIFT_LIMIT:
            warnings.append(
                f"Length adjusted from {_fmt(pi.target_length)} {unit.value} to "
                f"{_fmt(actual_length)} {unit.value} due to row rounding"
            )
        warnings.extend(_practical_range_warnings(cast_on, total_rows))

        self._logger.debug(
            "piece %r: %d sts x %d rows (raw %.2f x %.2f)",
            pi.component_key,
            cast_on,
            total_rows,
            raw_stitches,
            raw_rows,
        )
        return PieceCalculation(
            cast_on_stitches=cast_on,
            total_rows=total_rows,
            actual_width=actual_width,
            actual_length=actual_length,
            unit=unit,
            raw_stitches=raw_stitches,
            raw_rows=raw_rows,
            warnings=tuple(warnings),
        )


def _input_errors(pi: RectangularPieceInput) -> list[str]:
    errors: list[str] = []
    if not _is_number(pi.target_width) or pi.target_width <= 0:
        errors.append("Target width must be greater than 0")
    if not _is_number(pi.target_length) or pi.target_length <= 0:
        errors.append("Target length must be greater than 0")
    errors.extend(pi.gauge.validation_errors())
    return errors


def _practical_range_warnings(cast_on: int, total_rows: int) -> list[str]:
    warnings: list[str] = []
    if cast_on > MAX_PRACTICAL_STITCHES:
        warnings.append(
            "Very wide piece - consider breaking into sections or double-check measurements"
        )
    elif cast_on < MIN_PRACTICAL_STITCHES:
        warnings.append("Very narrow piece - double-check measurements")
    if total_rows > MAX_PRACTICAL_ROWS:
        warnings.append(
            "Very long piece - consider breaking into sections or double-check measurements"
        )
    elif total_rows < MIN_PRACTICAL_ROWS:
        warnings.append("Very short piece - double-check measurements")
    return warnings


def calculate_rectangular_piece(
    target_width: float,
    target_length: float,
    gauge: GaugeSpec,
    stitch_pattern: StitchPatternSpec | None = None,
    unit: Unit | None = None,
) -> PieceCalculation:
    """Functional shorthand for ``RectangularPieceCalculator().calculate(...)``."""
    return RectangularPieceCalculator().calculate(
        RectangularPieceInput(
            target_width=target_width,
            target_length=target_length,
            gauge=gauge,
            stitch_pattern=stitch_pattern or StitchPatternSpec(),
            unit=unit,
        )
    )


@dataclass(frozen=True)
class InputValidation:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_rectangular_piece_input(
    target_width: object,
    target_length: object,
    gauge: GaugeSpec | None,
    stitch_pattern: StitchPatternSpec | None,
    component_key: object,
    unit: Unit = Unit.CM,
) -> InputValidation:
    """
    Pre-flight check of raw, possibly incomplete, piece input.

    Unlike :meth:`RectangularPieceCalculator.calculate` this accepts missing
    values and reports each problem, plus "unusually large" warnings for
    widths over 200 cm and lengths over 300 cm.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for label, value, limit in (
        ("Target width", target_width, _LARGE_WIDTH_CM),
        ("Target length", target_length, _LARGE_LENGTH_CM),
    ):
        if not _is_number(value):
            errors.append(f"{label} is required and must be a number")
        elif value <= 0:  # type: ignore[operator]
            errors.append(f"{label} must be greater than 0")
        elif convert_length(float(value), unit, Unit.CM) > limit:  # type: ignore[arg-type]
            warnings.append(f"{label} is unusually large (>{_fmt(limit)} cm)")

    if gauge is None:
        errors.append("Gauge is required")
    else:
        errors.extend(gauge.validation_errors())

    if stitch_pattern is None:
        errors.append("Stitch pattern is required")
    elif not isinstance(stitch_pattern.horizontal_repeat, int) or stitch_pattern.horizontal_repeat < 1:
        errors.append("Horizontal repeat must be a positive integer")

    if not isinstance(component_key, str) or not component_key:
        errors.append("Component key is required and must be a string")

    return InputValidation(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))
