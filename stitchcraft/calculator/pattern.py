"""
Pattern calculator: a CalculationRequest → one ComponentCalculation per
garment component.

Each component is sized by the rectangular calculator unless its attributes
ask for something else:

  construction: triangular_shawl   sized by the shawl calculator
                                   (``shawl_method`` picks the method)
  end_width                        linear taper from the cast-on width to
                                   end_width over ``shaping_rows`` rows
                                   (default: every body row)
  shaping_schedule                 explicit list of shaping event mappings
  construction: beanie             sized by the beanie calculator from the
                                   head circumference (``crown_style``,
                                   ``brim_depth``)
  construction: hammer_sleeve      the sleeve cap of a hammer sleeve
                                   (``total_shoulder_width``,
                                   ``neckline_width``; width is the upper
                                   arm and length the armhole depth)

A failing component (invalid numbers, unknown construction, unusable
shaping) is reported in its own ``errors`` and never stops its siblings.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from stitchcraft.errors import (
    ShapingDataError,
    StitchcraftError,
    UnsupportedConstructionError,
    ValidationError,
)
from stitchcraft.schemas.pattern import (
    CalculatedPattern,
    CalculatedPiece,
    CalculationRequest,
    ComponentTarget,
    CraftType,
    FinishedDimensions,
)
from stitchcraft.schemas.shaping import (
    ShapingCategory,
    ShapingEvent,
    ShapingSchedule,
)
from stitchcraft.utilities.conversion import target_to_count
from stitchcraft.utilities.shaping import (
    ShapingInterval,
    calculate_shaping_intervals,
    describe_intervals,
)
from stitchcraft.utilities.types import Axis, Unit

from .beanie import calculate_beanie
from .hammer_sleeve import calculate_hammer_sleeve
from .rectangular import RectangularPieceCalculator, RectangularPieceInput
from .shawl import calculate_triangular_shawl

TRIANGULAR_SHAWL = "triangular_shawl"
BEANIE = "beanie"
HAMMER_SLEEVE = "hammer_sleeve"
_SUPPORTED_CONSTRUCTIONS = ("rectangular", TRIANGULAR_SHAWL, BEANIE, HAMMER_SLEEVE)


@dataclass(frozen=True)
class ComponentCalculation:
    """Calculated counts for one component, or the errors that prevented them."""

    component_key: str
    display_name: str
    cast_on_stitches: int
    total_rows: int
    final_stitch_count: int
    finished_dimensions: FinishedDimensions
    shaping: ShapingSchedule | None = None
    construction_notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_calculated_piece(self, stitch_pattern_name: str | None = None) -> CalculatedPiece:
        return CalculatedPiece(
            piece_key=self.component_key,
            display_name=self.display_name,
            cast_on_stitches=self.cast_on_stitches,
            total_rows=self.total_rows,
            final_stitch_count=self.final_stitch_count,
            finished_dimensions=self.finished_dimensions,
            shaping=self.shaping,
            construction_notes=self.construction_notes,
            stitch_pattern_name=stitch_pattern_name,
        )


@dataclass(frozen=True)
class PatternCalculation:
    """Per-component results for a whole request, in request order."""

    request: CalculationRequest
    components: tuple[ComponentCalculation, ...]
    calculated_at: datetime | None = None

    @property
    def successful(self) -> tuple[ComponentCalculation, ...]:
        return tuple(c for c in self.components if c.passed)

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(
            f"{c.display_name}: {w}" for c in self.components for w in (*c.warnings, *c.errors)
        )

    def component(self, key: str) -> ComponentCalculation:
        for c in self.components:
            if c.component_key == key:
                return c
        raise KeyError(f"No component {key!r} in this calculation")

    def to_calculated_pattern(self) -> CalculatedPattern:
        """Pieces for the instruction engine: every component that calculated."""
        name = self.request.stitch_pattern.name
        return CalculatedPattern(
            craft_type=self.request.craft_type,
            garment_type=self.request.garment.garment_type,
            pieces=tuple(c.to_calculated_piece(name) for c in self.successful),
            calculated_at=self.calculated_at,
        )


class PatternCalculator:
    """Sizes every component of a garment; see the module docstring for attributes."""

    def __init__(
        self,
        piece_calculator: RectangularPieceCalculator | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._pieces = piece_calculator or RectangularPieceCalculator(self._logger)

    def calculate(
        self, request: CalculationRequest, calculated_at: datetime | None = None
    ) -> PatternCalculation:
        results = tuple(self.calculate_component(request, c) for c in request.garment.components)
        return PatternCalculation(request=request, components=results, calculated_at=calculated_at)

    def calculate_component(
        self, request: CalculationRequest, target: ComponentTarget
    ) -> ComponentCalculation:
        try:
            construction = str(target.attributes.get("construction", "rectangular")).lower()
            if construction == TRIANGULAR_SHAWL:
                return self._shawl(request, target)
            if construction == BEANIE:
                return self._beanie(request, target)
            if construction == HAMMER_SLEEVE:
                return self._hammer_sleeve(request, target)
            if construction != "rectangular":
                raise UnsupportedConstructionError(construction, _SUPPORTED_CONSTRUCTIONS)
            return self._rectangular(request, target)
        except (StitchcraftError, ValueError, TypeError) as exc:
            self._logger.warning("component %r failed: %s", target.key, exc)
            return _failed(target, request.units.dimension_unit, str(exc))

    # ── Rectangular and tapered pieces ────────────────────────────────────────

    def _rectangular(self, request: CalculationRequest, target: ComponentTarget) -> ComponentCalculation:
        unit = request.units.dimension_unit
        if target.width is None:
            raise ValidationError("Target width or circumference is required")
        if target.target_length is None:
            raise ValidationError("Target length is required")

        piece = self._pieces.calculate(
            RectangularPieceInput(
                target_width=target.width,
                target_length=target.target_length,
                gauge=request.gauge,
                stitch_pattern=request.stitch_pattern,
                unit=unit,
                component_key=target.key,
            )
        )
        if not piece.passed:
            return _failed(target, unit, *piece.errors)

        notes: list[str] = []
        warnings = list(piece.warnings)
        repeat = request.stitch_pattern.horizontal_repeat
        if repeat > 1:
            notes.append(
                f"Starting stitch count is a multiple of {repeat} for the "
                f"{request.stitch_pattern.name or 'stitch pattern'} repeat"
            )

        circumference = None
        if target.target_width is None and target.target_circumference is not None:
            circumference = piece.actual_width
            notes.append(
                f"Worked flat to a circumference of {piece.actual_width:g} {unit.value}; "
                "seam the side edges to close"
            )

        schedule = None
        attrs = target.attributes
        body_rows = piece.total_rows - _setup_rows(request.craft_type)
        if "shaping_schedule" in attrs:
            schedule = _explicit_schedule(attrs["shaping_schedule"], piece.cast_on_stitches)
        elif "end_width" in attrs:
            schedule, taper_notes, taper_warnings = _taper_schedule(
                request, attrs, piece.cast_on_stitches, body_rows
            )
            notes.extend(taper_notes)
            warnings.extend(taper_warnings)

        final = schedule.final_stitch_count if schedule else piece.cast_on_stitches
        return ComponentCalculation(
            component_key=target.key,
            display_name=target.name,
            cast_on_stitches=piece.cast_on_stitches,
            total_rows=piece.total_rows,
            final_stitch_count=final,
            finished_dimensions=FinishedDimensions(
                width=piece.actual_width,
                length=piece.actual_length,
                unit=unit,
                circumference=circumference,
            ),
            shaping=schedule,
            construction_notes=tuple(notes),
            warnings=tuple(warnings),
        )

    # ── Triangular shawls ─────────────────────────────────────────────────────

    def _shawl(self, request: CalculationRequest, target: ComponentTarget) -> ComponentCalculation:
        method = target.attributes.get("shawl_method")
        if method is None:
            raise ValidationError("shawl_method is required for a triangular shawl")
        if target.width is None or target.target_length is None:
            raise ValidationError("Shawl wingspan (width) and depth (length) are required")

        unit = request.units.dimension_unit
        shawl = calculate_triangular_shawl(
            method, target.width, target.target_length, request.gauge, unit
        )
        notes = [shawl.setup_note] + [phase.name for phase in shawl.schedule.phases]
        return ComponentCalculation(
            component_key=target.key,
            display_name=target.name,
            cast_on_stitches=shawl.cast_on_stitches,
            total_rows=shawl.total_rows,
            final_stitch_count=shawl.final_stitch_count,
            finished_dimensions=FinishedDimensions(
                width=shawl.actual_wingspan, length=shawl.actual_depth, unit=unit
            ),
            shaping=shawl.schedule,
            construction_notes=tuple(notes),
            warnings=shawl.warnings,
        )

    # ── Beanies ───────────────────────────────────────────────────────────────

    def _beanie(self, request: CalculationRequest, target: ComponentTarget) -> ComponentCalculation:
        if target.width is None:
            raise ValidationError("Head circumference is required for a beanie")
        if target.target_length is None:
            raise ValidationError("Beanie height (length) is required")

        unit = request.units.dimension_unit
        attrs = target.attributes
        beanie = calculate_beanie(
            target.width,
            target.target_length,
            request.gauge,
            crown_style=attrs.get("crown_style", "classic_tapered"),
            stitch_pattern=request.stitch_pattern,
            brim_depth=attrs.get("brim_depth"),
            unit=unit,
            setup_rows=_setup_rows(request.craft_type),
        )
        notes = [
            f"Worked in the round on {beanie.cast_on_stitches} stitches",
            f"Brim: {beanie.brim_rows} rows",
            *(phase.name for phase in beanie.schedule.phases),
            f"Cut the yarn and draw it through the final "
            f"{beanie.final_stitch_count} stitches to close the crown",
        ]
        self._logger.debug(
            "beanie %r: %s crown, %d sts x %d rows",
            target.key,
            beanie.crown_style.value,
            beanie.cast_on_stitches,
            beanie.total_rows,
        )
        return ComponentCalculation(
            component_key=target.key,
            display_name=target.name,
            cast_on_stitches=beanie.cast_on_stitches,
            total_rows=beanie.total_rows,
            final_stitch_count=beanie.final_stitch_count,
            finished_dimensions=FinishedDimensions(
                width=round(beanie.actual_circumference / 2, 2),
                length=beanie.actual_height,
                unit=unit,
                circumference=beanie.actual_circumference,
            ),
            shaping=beanie.schedule,
            construction_notes=tuple(notes),
            warnings=beanie.warnings,
        )

    # ── Hammer sleeves ────────────────────────────────────────────────────────

    def _hammer_sleeve(
        self, request: CalculationRequest, target: ComponentTarget
    ) -> ComponentCalculation:
        attrs = target.attributes
        missing = [k for k in ("total_shoulder_width", "neckline_width") if k not in attrs]
        if target.width is None:
            missing.insert(0, "width (upper arm)")
        if target.target_length is None:
            missing.append("length (armhole depth)")
        if missing:
            raise ValidationError(f"A hammer sleeve needs {', '.join(missing)}")

        unit = request.units.dimension_unit
        sleeve = calculate_hammer_sleeve(
            attrs["total_shoulder_width"],
            target.width,
            target.target_length,
            attrs["neckline_width"],
            request.gauge,
            unit,
        )
        notes = (
            f"Sleeve cap: {sleeve.cap_width_stitches} stitches for {sleeve.cap_rows} rows "
            "to match the armhole depth",
            f"Shoulder extension: {sleeve.extension_width_stitches} stitches for "
            f"{sleeve.extension_rows} rows, joined along the shoulder to the neckline",
            f"Front and back: bind off {sleeve.cutout_stitches} stitches at each armhole, "
            f"leaving {sleeve.shoulder_strap_stitches}-stitch shoulder straps "
            f"({sleeve.body_width_stitches} stitches across at the chest)",
        )
        return ComponentCalculation(
            component_key=target.key,
            display_name=target.name,
            cast_on_stitches=sleeve.cap_width_stitches,
            total_rows=sleeve.cap_rows,
            final_stitch_count=sleeve.cap_width_stitches,
            finished_dimensions=FinishedDimensions(
                width=sleeve.actual_upper_arm_width,
                length=sleeve.actual_armhole_depth,
                unit=unit,
            ),
            construction_notes=notes,
            warnings=sleeve.warnings,
        )


def _setup_rows(craft: CraftType) -> int:
    """Rows worked before the body: the crochet foundation row counts as row 1."""
    return 1 if CraftType(craft) == CraftType.CROCHET else 0


def _failed(target: ComponentTarget, unit: Unit, *errors: str) -> ComponentCalculation:
    return ComponentCalculation(
        component_key=target.key,
        display_name=target.name,
        cast_on_stitches=0,
        total_rows=0,
        final_stitch_count=0,
        finished_dimensions=FinishedDimensions(width=0.0, length=0.0, unit=unit),
        errors=tuple(errors),
    )


def _explicit_schedule(entries: Any, cast_on: int) -> ShapingSchedule:
    if not isinstance(entries, (list, tuple)):
        raise ShapingDataError("shaping_schedule must be a list of event mappings")
    events = []
    for index, entry in enumerate(entries):
        if isinstance(entry, ShapingEvent):
            events.append(entry)
        elif isinstance(entry, Mapping):
            events.append(ShapingEvent.from_mapping(entry, index))
        else:
            raise ShapingDataError(f"expected a mapping, got {type(entry).__name__}", index)
    return ShapingSchedule.single_phase("Shaping", cast_on, tuple(events))


def _taper_schedule(
    request: CalculationRequest,
    attrs: Mapping[str, Any],
    cast_on: int,
    body_rows: int,
) -> tuple[ShapingSchedule, list[str], list[str]]:
    unit = request.units.dimension_unit
    end_count = target_to_count(request.gauge, attrs["end_width"], unit, Axis.STITCHES)
    delta = end_count - cast_on
    warnings: list[str] = []
    if delta % 2:
        # shape symmetrically, one stitch at each edge
        delta -= 1 if delta > 0 else -1
        warnings.append(f"End stitch count adjusted to {cast_on + delta} for symmetrical shaping")
    if cast_on + delta < 1:
        raise ShapingDataError(f"tapering to {cast_on + delta} stitches leaves nothing to work")

    category = ShapingCategory.parse(attrs.get("shaping_category", ShapingCategory.BODY))
    if category.is_coordinated:
        raise ShapingDataError(f"{category.value} shaping cannot be expressed as a taper")

    shaping_rows = body_rows
    if "shaping_length" in attrs:
        shaping_rows = target_to_count(request.gauge, attrs["shaping_length"], unit, Axis.ROWS)
    elif "shaping_rows" in attrs:
        shaping_rows = int(attrs["shaping_rows"])
    start = int(attrs.get("shaping_start_row", 0))
    if start < 0 or start + shaping_rows > body_rows:
        raise ShapingDataError(
            f"shaping over rows {start}-{start + shaping_rows - 1} does not fit in "
            f"{body_rows} body rows"
        )

    intervals = calculate_shaping_intervals(delta, shaping_rows)
    events = intervals_to_events(intervals, category, start, attrs.get("section_tag"))

    notes = [describe_intervals(intervals)] if intervals else []
    if not intervals:
        notes.append(f"No shaping needed to reach {attrs['end_width']:g} {unit.value}")
    schedule = ShapingSchedule.single_phase(category.section_title, cast_on, events)
    return schedule, notes, warnings


def intervals_to_events(
    intervals: list[ShapingInterval],
    category: ShapingCategory = ShapingCategory.BODY,
    start_offset: int = 0,
    section_tag: str | None = None,
) -> tuple[ShapingEvent, ...]:
    """One event per shaping action, each on the first row of its interval."""
    events: list[ShapingEvent] = []
    offset = start_offset
    for interval in intervals:
        step = interval.stitch_delta // interval.times
        for _ in range(interval.times):
            events.append(ShapingEvent(offset, step, category, section_tag))
            offset += interval.every_n_rows
    return tuple(events)
