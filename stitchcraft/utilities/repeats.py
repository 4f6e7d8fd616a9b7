"""
Pattern repeat arithmetic: snapping a raw stitch count to a repeat multiple.
"""

from __future__ import annotations

import math

from stitchcraft.errors import ValidationError

from .conversion import round_half_up


def round_to_repeat(raw_count: float, repeat: int) -> int:
    """
    Round ``raw_count`` to the nearest multiple of ``repeat``.

    Picks the multiple closest to raw_count. On a tie (raw count exactly
    half-way between two multiples) the larger multiple wins, the usual
    knitting preference for slightly more ease over slightly less. A
    repeat of 1 is plain half-up rounding.

    The result is never smaller than one full repeat: stitch counts must be
    positive.

    Raises:
        ValidationError: If repeat < 1 or raw_count is negative.
    """
    if repeat < 1:
        raise ValidationError(f"Stitch repeat must be at least 1, got {repeat}")
    if raw_count < 0:
        raise ValidationError(f"Raw stitch count must not be negative, got {raw_count}")

    if repeat == 1:
        return max(round_half_up(raw_count), 1)

    lower = math.floor(round(raw_count / repeat, 9)) * repeat
    candidates = [c for c in (lower, lower + repeat) if c >= repeat] or [repeat]
    return min(candidates, key=lambda c: (abs(c - raw_count), -c))


def is_repeat_multiple(count: int, repeat: int) -> bool:
    return repeat <= 1 or count % repeat == 0
