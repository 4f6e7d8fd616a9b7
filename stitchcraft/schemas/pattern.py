"""
Calculation requests and calculated pieces.

A CalculationRequest is what the surrounding application hands in; a
CalculatedPattern is what the instruction engine consumes. Both are created
fresh per request and never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from stitchcraft.utilities.types import GaugeSpec, StitchPatternSpec, Unit

from .shaping import ShapingSchedule


class CraftType(str, Enum):
    KNITTING = "knitting"
    CROCHET = "crochet"


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class UnitsSpec:
    dimension_unit: Unit = Unit.CM
    gauge_unit: Unit = Unit.CM


@dataclass(frozen=True)
class ComponentTarget:
    """
    Finished (ease-adjusted) size of one garment component.

    Either ``target_width`` or ``target_circumference`` gives the width;
    ``attributes`` carries free-form options such as ``end_width`` for a
    tapered piece or ``construction: triangular_shawl``.
    """

    key: str
    target_length: float | None
    target_width: float | None = None
    target_circumference: float | None = None
    display_name: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=_empty)

    @property
    def name(self) -> str:
        return self.display_name or self.key.replace("_", " ").title()

    @property
    def width(self) -> float | None:
        return self.target_width if self.target_width is not None else self.target_circumference


@dataclass(frozen=True)
class GarmentDefinition:
    garment_type: str
    components: tuple[ComponentTarget, ...]
    measurements: Mapping[str, float] = field(default_factory=_empty)


@dataclass(frozen=True)
class CalculationRequest:
    """Everything the calculators need for one pattern."""

    craft_type: CraftType
    gauge: GaugeSpec
    garment: GarmentDefinition
    stitch_pattern: StitchPatternSpec = field(default_factory=StitchPatternSpec)
    units: UnitsSpec = field(default_factory=UnitsSpec)


@dataclass(frozen=True)
class FinishedDimensions:
    width: float
    length: float
    unit: Unit = Unit.CM
    circumference: float | None = None


@dataclass(frozen=True)
class CalculatedPiece:
    """A piece ready for instruction generation.

    Counts are not validated here; the instruction engine rejects an
    unusable piece on its own without affecting sibling pieces.
    """

    piece_key: str
    display_name: str
    cast_on_stitches: int
    total_rows: int
    final_stitch_count: int
    finished_dimensions: FinishedDimensions
    shaping: ShapingSchedule | None = None
    construction_notes: tuple[str, ...] = ()
    stitch_pattern_name: str | None = None

    @property
    def has_shaping(self) -> bool:
        return self.shaping is not None and bool(self.shaping.events)


@dataclass(frozen=True)
class CalculatedPattern:
    craft_type: CraftType
    garment_type: str
    pieces: tuple[CalculatedPiece, ...]
    calculated_at: datetime | None = None
