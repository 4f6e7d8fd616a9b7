"""
Shared utilities for the stitchcraft calculators.

Provides deterministic tools used by every calculator: unit and gauge
conversion, pattern repeat arithmetic, and shaping rate distribution.
"""

from .conversion import (
    CM_PER_INCH,
    GaugeComparison,
    compare_gauges,
    convert_length,
    count_to_dimension,
    raw_count,
    round_half_up,
    target_to_count,
)
from .repeats import is_repeat_multiple, round_to_repeat
from .shaping import (
    ShapingAction,
    ShapingInterval,
    calculate_shaping_intervals,
    describe_intervals,
    every_phrase,
    ordinal,
)
from .types import Axis, GaugeSpec, StitchPatternSpec, Unit

__all__ = [
    # types
    "Axis",
    "GaugeSpec",
    "StitchPatternSpec",
    "Unit",
    # conversion
    "CM_PER_INCH",
    "GaugeComparison",
    "compare_gauges",
    "convert_length",
    "count_to_dimension",
    "raw_count",
    "round_half_up",
    "target_to_count",
    # repeats
    "is_repeat_multiple",
    "round_to_repeat",
    # shaping
    "ShapingAction",
    "ShapingInterval",
    "calculate_shaping_intervals",
    "describe_intervals",
    "every_phrase",
    "ordinal",
]
