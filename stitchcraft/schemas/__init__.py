"""Frozen data model shared across the calculators, processor and engine."""

from .instruction import DetailLevel, DetailPolicy, RowInstruction, RowType, is_right_side
from .pattern import (
    CalculatedPattern,
    CalculatedPiece,
    CalculationRequest,
    ComponentTarget,
    CraftType,
    FinishedDimensions,
    GarmentDefinition,
    UnitsSpec,
)
from .shaping import ShapingCategory, ShapingEvent, ShapingPhase, ShapingSchedule

__all__ = [
    # instruction
    "DetailLevel",
    "DetailPolicy",
    "RowInstruction",
    "RowType",
    "is_right_side",
    # pattern
    "CalculatedPattern",
    "CalculatedPiece",
    "CalculationRequest",
    "ComponentTarget",
    "CraftType",
    "FinishedDimensions",
    "GarmentDefinition",
    "UnitsSpec",
    # shaping
    "ShapingCategory",
    "ShapingEvent",
    "ShapingPhase",
    "ShapingSchedule",
]
