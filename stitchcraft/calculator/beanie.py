"""
Beanie calculator.

A beanie is three stacked sections, worked from the brim up:

  brim   ``brim_depth`` (default 5 cm) at the cast-on count
  body   straight up to the start of the crown
  crown  one decrease per crown section on every decrease row, spaced by
         the crown style, until one stitch per section remains

The cast-on takes negative ease off the head circumference (9%, held
between 2 and 5 cm) and is rounded to a multiple of both the stitch-pattern
repeat and the number of crown sections, so every section decreases evenly.

  crown style       sections  decrease every
  classic_tapered   8         2nd row
  slouchy           6         3rd row
  flat_top          8         row
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from stitchcraft.errors import UnsupportedConstructionError, ValidationError
from stitchcraft.schemas.shaping import ShapingEvent, ShapingPhase, ShapingSchedule
from stitchcraft.utilities.conversion import (
    convert_length,
    count_to_dimension,
    raw_count,
    round_half_up,
)
from stitchcraft.utilities.repeats import round_to_repeat
from stitchcraft.utilities.shaping import every_phrase
from stitchcraft.utilities.types import Axis, GaugeSpec, StitchPatternSpec, Unit

CROWN_SECTION = "Crown Shaping"

_EASE_FRACTION = 0.09
_MIN_EASE_CM = 2.0
_MAX_EASE_CM = 5.0
_DEFAULT_BRIM_CM = 5.0
# The crown takes roughly a third of the finished height.
_CROWN_HEIGHT_FRACTION = 0.33
_ADJUSTMENT_LIMIT_CM = 1.0
_MIN_USUAL_STITCHES = 60
_MAX_USUAL_STITCHES = 200
_MAX_USUAL_ROWS = 150


class CrownStyle(str, Enum):
    CLASSIC_TAPERED = "classic_tapered"
    SLOUCHY = "slouchy"
    FLAT_TOP = "flat_top"

    @classmethod
    def parse(cls, key: str | CrownStyle) -> CrownStyle:
        if isinstance(key, CrownStyle):
            return key
        try:
            return cls(str(key).strip().lower())
        except ValueError:
            raise UnsupportedConstructionError(str(key), (c.value for c in cls)) from None

    @property
    def sections(self) -> int:
        return _CROWN_SHAPES[self][0]

    @property
    def every_n_rows(self) -> int:
        return _CROWN_SHAPES[self][1]


_CROWN_SHAPES: dict[CrownStyle, tuple[int, int]] = {
    CrownStyle.CLASSIC_TAPERED: (8, 2),
    CrownStyle.SLOUCHY: (6, 3),
    CrownStyle.FLAT_TOP: (8, 1),
}


@dataclass(frozen=True)
class BeanieCalculation:
    """Counts, crown shaping and achieved size of a beanie.

    ``negative_ease``, ``working_circumference`` and the actual dimensions
    are in ``unit``.
    """

    crown_style: CrownStyle
    cast_on_stitches: int
    brim_rows: int
    body_rows: int
    crown_rows: int
    final_stitch_count: int
    negative_ease: float
    working_circumference: float
    actual_circumference: float
    actual_height: float
    unit: Unit
    schedule: ShapingSchedule
    warnings: tuple[str, ...] = ()

    @property
    def total_rows(self) -> int:
        return self.brim_rows + self.body_rows + self.crown_rows

    @property
    def decrease_rows(self) -> int:
        return len(self.schedule.events)


def _positive(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _rows(gauge: GaugeSpec, length_cm: float) -> int:
    if length_cm <= 0:
        return 0
    return round_half_up(raw_count(gauge, length_cm, Unit.CM, Axis.ROWS))


def calculate_beanie(
    head_circumference: float,
    height: float,
    gauge: GaugeSpec,
    crown_style: str | CrownStyle = CrownStyle.CLASSIC_TAPERED,
    stitch_pattern: StitchPatternSpec | None = None,
    brim_depth: float | None = None,
    unit: Unit | None = None,
    setup_rows: int = 0,
) -> BeanieCalculation:
    """
    Calculate a beanie from head circumference and finished height.

    Args:
        head_circumference: Measured head circumference (ease is applied here).
        height: Finished height from brim edge to crown.
        gauge: Gauge the beanie is worked at.
        crown_style: A CrownStyle or its string key.
        stitch_pattern: Pattern whose horizontal repeat the cast-on honours.
        brim_depth: Brim depth; 5 cm when omitted.
        unit: Unit of the measurements; defaults to the gauge unit.
        setup_rows: Rows worked before the body rows (a crochet foundation
            row), counted as part of the brim.

    Raises:
        UnsupportedConstructionError: If the crown style is unknown.
        ValidationError: If a measurement or gauge field is not positive, or
            the circumference is too small for the crown sections.
    """
    style = CrownStyle.parse(crown_style)
    unit = unit if unit is not None else gauge.unit
    pattern = stitch_pattern or StitchPatternSpec()

    errors: list[str] = []
    if not _positive(head_circumference):
        errors.append("Head circumference must be greater than 0")
    if not _positive(height):
        errors.append("Height must be greater than 0")
    if brim_depth is not None and not _positive(brim_depth):
        errors.append("Brim depth must be greater than 0")
    errors.extend(gauge.validation_errors())
    if errors:
        raise ValidationError(errors)

    circumference_cm = convert_length(head_circumference, unit, Unit.CM)
    ease_cm = min(_MAX_EASE_CM, max(_MIN_EASE_CM, circumference_cm * _EASE_FRACTION))
    working_cm = circumference_cm - ease_cm
    if working_cm <= 0:
        raise ValidationError("Head circumference is smaller than the negative ease")

    sections, every = style.sections, style.every_n_rows
    repeat = max(pattern.horizontal_repeat, 1)
    raw_stitches = raw_count(gauge, working_cm, Unit.CM, Axis.STITCHES)
    cast_on = round_to_repeat(raw_stitches, math.lcm(repeat, sections))
    if cast_on < 2 * sections:
        raise ValidationError(
            f"Head circumference is too small for {sections} crown sections"
        )

    warnings: list[str] = []
    if abs(cast_on - raw_stitches) >= 1:
        fit = f"divide into {sections} crown sections"
        if repeat > 1:
            fit += f" and fit {repeat}-stitch {pattern.name or 'pattern'} repeat"
        warnings.append(
            f"Cast-on stitches adjusted from {round_half_up(raw_stitches)} to {cast_on} to {fit}"
        )

    height_cm = convert_length(height, unit, Unit.CM)
    brim_cm = _DEFAULT_BRIM_CM
    if brim_depth is not None:
        brim_cm = convert_length(brim_depth, unit, Unit.CM)
    brim_rows = _rows(gauge, brim_cm)
    body_rows = _rows(gauge, height_cm - brim_cm - height_cm * _CROWN_HEIGHT_FRACTION)
    decreases = cast_on // sections - 1
    crown_rows = decreases + (decreases - 1) * (every - 1)

    crown_start = max(0, brim_rows + body_rows - setup_rows)
    events = tuple(
        ShapingEvent(
            row_offset=crown_start + i * every,
            stitch_delta=-sections,
            section_tag=CROWN_SECTION,
        )
        for i in range(decreases)
    )
    phase = ShapingPhase(
        f"Decrease {sections} stitches evenly {every_phrase(every)} until {sections} remain", events
    )
    schedule = ShapingSchedule(cast_on, sections, (phase,))
    schedule.verify()

    total_rows = brim_rows + body_rows + crown_rows
    actual_circumference = count_to_dimension(gauge, cast_on, Axis.STITCHES, unit)
    actual_height = count_to_dimension(gauge, total_rows, Axis.ROWS, unit)
    working = convert_length(working_cm, Unit.CM, unit)
    ease = convert_length(ease_cm, Unit.CM, unit)
    limit = convert_length(_ADJUSTMENT_LIMIT_CM, Unit.CM, unit)

    if abs(actual_circumference - working) > limit:
        warnings.append(
            f"Circumference adjusted from {working:.1f} {unit.value} to "
            f"{actual_circumference:.1f} {unit.value} to fit the cast-on"
        )
    if abs(actual_height - height) > limit:
        warnings.append(
            f"Height adjusted from {height:g} {unit.value} to {actual_height:.1f} "
            f"{unit.value} due to row rounding"
        )
    warnings.append(
        f"Applied {ease:.1f} {unit.value} negative ease for a snug fit "
        f"({working:.1f} {unit.value} working circumference)"
    )
    if cast_on > _MAX_USUAL_STITCHES:
        warnings.append("Very large beanie - double-check head circumference measurement")
    if cast_on < _MIN_USUAL_STITCHES:
        warnings.append("Very small beanie - double-check head circumference measurement")
    if total_rows > _MAX_USUAL_ROWS:
        warnings.append("Very tall beanie - double-check height measurement")

    return BeanieCalculation(
        crown_style=style,
        cast_on_stitches=cast_on,
        brim_rows=brim_rows,
        body_rows=body_rows,
        crown_rows=crown_rows,
        final_stitch_count=sections,
        negative_ease=round(ease, 1),
        working_circumference=round(working, 1),
        actual_circumference=actual_circumference,
        actual_height=actual_height,
        unit=unit,
        schedule=schedule,
        warnings=tuple(warnings),
    )
