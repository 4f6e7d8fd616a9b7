"""
Triangular shawl calculator.

Three construction methods are supported, keyed by ShawlConstruction:

  top_down_center_out  cast on 3, increase 4 every 2nd row (1 at each edge,
                       2 either side of the centre spine)
  side_to_side         cast on 4 at one point, increase 1 every 2nd row to
                       full depth, then decrease 1 every 2nd row back to 4
  bottom_up            cast on the full wingspan, decrease 1 at each edge
                       every 2nd row until 3 stitches remain

Any other key raises UnsupportedConstructionError; there is no sensible
fallback shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stitchcraft.errors import UnsupportedConstructionError, ValidationError
from stitchcraft.schemas.shaping import (
    ShapingCategory,
    ShapingEvent,
    ShapingPhase,
    ShapingSchedule,
)
from stitchcraft.utilities.conversion import convert_length, raw_count, round_half_up
from stitchcraft.utilities.types import Axis, GaugeSpec, Unit

_SHAPING_FREQUENCY = 2
# Only part of a top-down shawl's last row spans the wingspan.
_TOP_DOWN_WINGSPAN_FACTOR = 0.7


class ShawlConstruction(str, Enum):
    TOP_DOWN_CENTER_OUT = "top_down_center_out"
    SIDE_TO_SIDE = "side_to_side"
    BOTTOM_UP = "bottom_up"

    @classmethod
    def parse(cls, key: str | ShawlConstruction) -> ShawlConstruction:
        if isinstance(key, ShawlConstruction):
            return key
        try:
            return cls(str(key).strip().lower())
        except ValueError:
            raise UnsupportedConstructionError(str(key), (c.value for c in cls)) from None


@dataclass(frozen=True)
class ShawlCalculation:
    """Counts, shaping and achieved size of a triangular shawl.

    Dimensions are in ``unit`` and rounded to one decimal place.
    """

    construction: ShawlConstruction
    cast_on_stitches: int
    total_rows: int
    final_stitch_count: int
    max_stitch_count: int
    actual_wingspan: float
    actual_depth: float
    unit: Unit
    schedule: ShapingSchedule
    setup_note: str
    warnings: tuple[str, ...] = ()


def _events(count: int, delta: int, first_offset: int) -> tuple[ShapingEvent, ...]:
    # one action on the first row of each 2-row interval
    return tuple(
        ShapingEvent(
            row_offset=first_offset + i * _SHAPING_FREQUENCY,
            stitch_delta=delta,
            category=ShapingCategory.SHAWL,
        )
        for i in range(count)
    )


def _drift_warning(label: str, actual: float, target: float, limit: float, unit: Unit) -> list[str]:
    if abs(actual - target) > target * limit:
        return [
            f"Actual {label} ({actual:.1f} {unit.value}) differs from target "
            f"({target:g} {unit.value}) by more than {limit:.0%}"
        ]
    return []


def calculate_triangular_shawl(
    construction: str | ShawlConstruction,
    target_wingspan: float,
    target_depth: float,
    gauge: GaugeSpec,
    unit: Unit | None = None,
) -> ShawlCalculation:
    """
    Calculate a triangular shawl.

    Args:
        construction: A ShawlConstruction or its string key.
        target_wingspan: Edge-to-edge width of the finished shawl.
        target_depth: Centre depth of the finished shawl.
        gauge: Gauge the shawl is worked at.
        unit: Unit of the targets; defaults to the gauge unit.

    Returns:
        ShawlCalculation with a single- or two-phase ShapingSchedule.

    Raises:
        UnsupportedConstructionError: If the construction key is unknown.
        ValidationError: If a target or gauge field is not positive.
    """
    method = ShawlConstruction.parse(construction)
    unit = unit if unit is not None else gauge.unit
    # raw_count validates gauge and targets
    wingspan_sts = raw_count(gauge, target_wingspan, unit, Axis.STITCHES)
    depth_sts = raw_count(gauge, target_depth, unit, Axis.STITCHES)
    depth_rows = raw_count(gauge, target_depth, unit, Axis.ROWS)

    def to_length(count: float, axis: Axis) -> float:
        return convert_length(count / gauge.per_unit(axis), gauge.unit, unit)

    match method:
        case ShawlConstruction.TOP_DOWN_CENTER_OUT:
            cast_on = 3
            increases = round_half_up(depth_rows) // _SHAPING_FREQUENCY
            if increases < 1:
                raise ValidationError("Target depth is too small for a top-down shawl")
            phases = (
                ShapingPhase(
                    "Increase 4 stitches every 2nd row (1 at each end, 2 at center spine)",
                    _events(increases, 4, 0),
                ),
            )
            total_rows = increases * _SHAPING_FREQUENCY
            final = cast_on + 4 * increases
            max_count = final
            actual_depth = to_length(total_rows, Axis.ROWS)
            actual_wingspan = to_length(final * _TOP_DOWN_WINGSPAN_FACTOR, Axis.STITCHES)
            setup = "Start with 3 stitches. Place markers for center spine if desired."
            warnings = _drift_warning("depth", actual_depth, target_depth, 0.10, unit)
            warnings += _drift_warning("wingspan", actual_wingspan, target_wingspan, 0.15, unit)

        case ShawlConstruction.SIDE_TO_SIDE:
            cast_on = 4
            increases = max(0, round_half_up(depth_sts) - cast_on)
            if increases < 1:
                raise ValidationError("Target depth is too small for a side-to-side shawl")
            phase_rows = increases * _SHAPING_FREQUENCY
            phases = (
                ShapingPhase(
                    "Increase 1 stitch on one edge every 2nd row until maximum depth",
                    _events(increases, 1, 0),
                ),
                ShapingPhase(
                    "Decrease 1 stitch on same edge every 2nd row to form second half",
                    _events(increases, -1, phase_rows),
                ),
            )
            total_rows = 2 * phase_rows
            final = cast_on
            max_count = cast_on + increases
            actual_wingspan = to_length(total_rows, Axis.ROWS)
            actual_depth = to_length(max_count, Axis.STITCHES)
            setup = "Start with 4 stitches at one point of the triangle."
            warnings = _drift_warning("wingspan", actual_wingspan, target_wingspan, 0.10, unit)
            warnings += _drift_warning("depth", actual_depth, target_depth, 0.15, unit)

        case ShawlConstruction.BOTTOM_UP:
            final = 3
            cast_on = round_half_up(wingspan_sts)
            if (cast_on - final) % 2:
                # decreases come in pairs; keep the point at exactly 3 stitches
                cast_on += 1
            decreases = (cast_on - final) // 2
            if decreases < 1:
                raise ValidationError("Target wingspan is too small for a bottom-up shawl")
            phases = (
                ShapingPhase(
                    "Decrease 1 stitch at each end every 2nd row until 3 stitches remain",
                    _events(decreases, -2, 0),
                ),
            )
            total_rows = decreases * _SHAPING_FREQUENCY
            max_count = cast_on
            actual_depth = to_length(total_rows, Axis.ROWS)
            actual_wingspan = to_length(cast_on, Axis.STITCHES)
            setup = f"Start with {cast_on} stitches for full wingspan."
            warnings = _drift_warning("depth", actual_depth, target_depth, 0.10, unit)
            warnings += _drift_warning("wingspan", actual_wingspan, target_wingspan, 0.05, unit)

    schedule = ShapingSchedule(cast_on, final, phases)
    schedule.verify()
    return ShawlCalculation(
        construction=method,
        cast_on_stitches=cast_on,
        total_rows=total_rows,
        final_stitch_count=final,
        max_stitch_count=max_count,
        actual_wingspan=round(actual_wingspan, 1),
        actual_depth=round(actual_depth, 1),
        unit=unit,
        schedule=schedule,
        setup_note=setup,
        warnings=tuple(warnings),
    )
