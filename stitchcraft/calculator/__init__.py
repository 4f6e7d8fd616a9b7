"""Dimension → stitch/row calculators."""

from .beanie import BeanieCalculation, CrownStyle, calculate_beanie
from .hammer_sleeve import HammerSleeveCalculation, calculate_hammer_sleeve
from .pattern import (
    ComponentCalculation,
    PatternCalculation,
    PatternCalculator,
    intervals_to_events,
)
from .rectangular import (
    InputValidation,
    PieceCalculation,
    RectangularPieceCalculator,
    RectangularPieceInput,
    calculate_rectangular_piece,
    validate_rectangular_piece_input,
)
from .shawl import ShawlCalculation, ShawlConstruction, calculate_triangular_shawl

__all__ = [
    "BeanieCalculation",
    "ComponentCalculation",
    "CrownStyle",
    "HammerSleeveCalculation",
    "InputValidation",
    "PatternCalculation",
    "PatternCalculator",
    "PieceCalculation",
    "RectangularPieceCalculator",
    "RectangularPieceInput",
    "ShawlCalculation",
    "ShawlConstruction",
    "calculate_beanie",
    "calculate_hammer_sleeve",
    "calculate_rectangular_piece",
    "calculate_triangular_shawl",
    "intervals_to_events",
    "validate_rectangular_piece_input",
]
