"""
Shaping rate calculator: distribute increases/decreases evenly across a section.

Given the total stitch change needed and the number of rows available,
produces shaping intervals that spread the work as evenly as possible.

When the division is uneven, two intervals are returned: one at the more
frequent rate and one at the less frequent rate ("decrease every 4th row
7 times, then every 5th row 3 times").
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stitchcraft.errors import ShapingDataError


class ShapingAction(str, Enum):
    """Direction of a shaping operation."""

    INCREASE = "increase"
    DECREASE = "decrease"

    @classmethod
    def for_delta(cls, stitch_delta: int) -> ShapingAction:
        return cls.INCREASE if stitch_delta > 0 else cls.DECREASE


@dataclass(frozen=True)
class ShapingInterval:
    """A single shaping instruction: perform action every N rows, repeated M times."""

    action: ShapingAction
    every_n_rows: int
    times: int
    stitches_per_action: int

    @property
    def total_rows(self) -> int:
        return self.every_n_rows * self.times

    @property
    def stitch_delta(self) -> int:
        sign = 1 if self.action == ShapingAction.INCREASE else -1
        return sign * self.stitches_per_action * self.times


def calculate_shaping_intervals(
    stitch_delta: int,
    section_depth_rows: int,
    stitches_per_action: int = 2,
) -> list[ShapingInterval]:
    """
    Distribute shaping evenly across a section.

    Args:
        stitch_delta: Total stitch change. Positive = increases, negative = decreases.
        section_depth_rows: Number of rows available for shaping.
        stitches_per_action: Stitches changed per shaping row (default 2: one each side).

    Returns:
        List of ShapingInterval(s). Empty if stitch_delta is 0.
        One interval if shaping divides evenly, two if uneven.

    Raises:
        ShapingDataError: If section_depth_rows < 1, stitches_per_action < 1,
            the delta is not a whole number of actions, or there are not
            enough rows.
    """
    if stitch_delta == 0:
        return []

    if section_depth_rows < 1:
        raise ShapingDataError(f"section_depth_rows must be >= 1, got {section_depth_rows}")
    if stitches_per_action < 1:
        raise ShapingDataError(f"stitches_per_action must be >= 1, got {stitches_per_action}")

    action = ShapingAction.for_delta(stitch_delta)
    abs_delta = abs(stitch_delta)

    if abs_delta % stitches_per_action != 0:
        raise ShapingDataError(
            f"stitch_delta ({stitch_delta}) must be divisible by "
            f"stitches_per_action ({stitches_per_action})"
        )

    num_actions = abs_delta // stitches_per_action

    if num_actions > section_depth_rows:
        raise ShapingDataError(
            f"Not enough rows ({section_depth_rows}) for {num_actions} shaping actions "
            f"(need at least 1 row per action)"
        )

    base_interval = section_depth_rows // num_actions
    remainder = section_depth_rows % num_actions

    if remainder == 0:
        return [
            ShapingInterval(
                action=action,
                every_n_rows=base_interval,
                times=num_actions,
                stitches_per_action=stitches_per_action,
            )
        ]

    # `remainder` actions get the longer interval; the frequent one is listed first.
    intervals = [
        ShapingInterval(
            action=action,
            every_n_rows=base_interval,
            times=num_actions - remainder,
            stitches_per_action=stitches_per_action,
        ),
        ShapingInterval(
            action=action,
            every_n_rows=base_interval + 1,
            times=remainder,
            stitches_per_action=stitches_per_action,
        ),
    ]
    return [i for i in intervals if i.times > 0]


def ordinal(n: int) -> str:
    """English ordinal: 1st, 2nd, 3rd, 4th, 11th, 12th, 13th, 21st, ..."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def every_phrase(n: int) -> str:
    """Row interval phrase such as "every row" or "every 2nd row"."""
    return "every row" if n == 1 else f"every {ordinal(n)} row"


def describe_intervals(intervals: list[ShapingInterval]) -> str:
    """Render intervals as one sentence, e.g.
    "Decrease 2 stitches every 4th row 7 times, then every 5th row 3 times."
    """
    if not intervals:
        return ""
    first = intervals[0]
    verb = "Increase" if first.action == ShapingAction.INCREASE else "Decrease"
    noun = "stitch" if first.stitches_per_action == 1 else "stitches"
    parts = [f"{verb} {first.stitches_per_action} {noun} {every_phrase(first.every_n_rows)} {_times(first.times)}"]
    for interval in intervals[1:]:
        parts.append(f"then {every_phrase(interval.every_n_rows)} {_times(interval.times)}")
    return ", ".join(parts) + "."


def _times(n: int) -> str:
    return "once" if n == 1 else f"{n} times"
