"""Shaping schedule expansion: linear events and coordinated multi-row generators."""

from .coordinated import COORDINATED_GENERATORS, PlannedRow, armhole_rows, neckline_rows, raglan_rows
from .processor import ProcessedShaping, ShapingScheduleProcessor

__all__ = [
    "COORDINATED_GENERATORS",
    "PlannedRow",
    "ProcessedShaping",
    "ShapingScheduleProcessor",
    "armhole_rows",
    "neckline_rows",
    "raglan_rows",
]
