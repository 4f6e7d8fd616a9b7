"""Pattern-level orchestration of instruction generation."""

from .engine import (
    LONG_PIECE_ROWS,
    ConstructionSummary,
    InstructionMetadata,
    InstructionOptions,
    PatternInstructionEngine,
    PatternInstructionResult,
    PieceInstructions,
)

__all__ = [
    "LONG_PIECE_ROWS",
    "ConstructionSummary",
    "InstructionMetadata",
    "InstructionOptions",
    "PatternInstructionEngine",
    "PatternInstructionResult",
    "PieceInstructions",
]
