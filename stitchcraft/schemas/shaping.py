"""
Declarative shaping schedule: which rows change the stitch count, by how much,
and which section of the written pattern they belong to.

Shaping categories form a closed set. Armhole, neckline and raglan shaping
need several coordinated rows per event; every other category is linear
(one row per event).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stitchcraft.errors import ShapingDataError
from stitchcraft.utilities.shaping import ShapingAction


class ShapingCategory(str, Enum):
    WAIST = "waist"
    BUST = "bust"
    SLEEVE = "sleeve"
    BODY = "body"
    SHAWL = "shawl"
    ARMHOLE = "armhole"
    NECKLINE = "neckline"
    RAGLAN = "raglan"

    @classmethod
    def parse(cls, value: str | ShapingCategory) -> ShapingCategory:
        """Resolve a category name; unknown names are an error, never "body"."""
        if isinstance(value, ShapingCategory):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            known = ", ".join(c.value for c in cls)
            raise ShapingDataError(
                f"unknown shaping category {value!r} (expected one of: {known})"
            ) from None

    @property
    def is_coordinated(self) -> bool:
        return self in _COORDINATED

    @property
    def section_title(self) -> str:
        return _SECTION_TITLES.get(self, "Body Shaping")


_COORDINATED = frozenset({ShapingCategory.ARMHOLE, ShapingCategory.NECKLINE, ShapingCategory.RAGLAN})

_SECTION_TITLES: dict[ShapingCategory, str] = {
    ShapingCategory.WAIST: "Waist Shaping",
    ShapingCategory.BUST: "Bust Shaping",
    ShapingCategory.SLEEVE: "Sleeve Shaping",
    ShapingCategory.SHAWL: "Shawl Shaping",
    ShapingCategory.ARMHOLE: "Armhole Shaping",
    ShapingCategory.NECKLINE: "Neckline Shaping",
    ShapingCategory.RAGLAN: "Raglan Shaping",
}


@dataclass(frozen=True)
class ShapingEvent:
    """
    One entry of a shaping schedule.

    ``row_offset`` counts from 0 at the first body row (the first row after
    cast-on, or after the foundation row in crochet). ``stitch_delta`` is the
    net change of the whole event; for coordinated categories it is spread
    over several rows using ``every_n_rows``, ``bind_off_stitches`` and
    ``stitches_per_row``.

    Values are not checked at construction so that a schedule can carry a
    malformed entry to the processor, which replaces it with a placeholder.
    """

    row_offset: int
    stitch_delta: int
    category: ShapingCategory = ShapingCategory.BODY
    section_tag: str | None = None
    instruction: str | None = None
    every_n_rows: int = 2
    bind_off_stitches: int = 0
    stitches_per_row: int = 2

    @property
    def action(self) -> ShapingAction:
        return ShapingAction.for_delta(self.stitch_delta)

    @property
    def section(self) -> str:
        return self.section_tag or self.category.section_title

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if self.row_offset < 0:
            errors.append(f"row offset must not be negative, got {self.row_offset}")
        if self.stitch_delta == 0:
            errors.append("stitch delta must not be zero")
        if self.every_n_rows < 1:
            errors.append(f"every_n_rows must be at least 1, got {self.every_n_rows}")
        if self.stitches_per_row < 1:
            errors.append(f"stitches_per_row must be at least 1, got {self.stitches_per_row}")
        if self.bind_off_stitches < 0:
            errors.append(f"bind_off_stitches must not be negative, got {self.bind_off_stitches}")
        return errors

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], index: int | None = None) -> ShapingEvent:
        """Build an event from a plain mapping (e.g. parsed JSON).

        Raises:
            ShapingDataError: If a required key is missing, a number cannot be
                read, or the category is unknown.
        """
        try:
            return cls(
                row_offset=_as_int(data["row_offset"], "row_offset"),
                stitch_delta=_as_int(data["stitch_delta"], "stitch_delta"),
                category=ShapingCategory.parse(data.get("category", ShapingCategory.BODY)),
                section_tag=data.get("section_tag"),
                instruction=data.get("instruction"),
                every_n_rows=_as_int(data.get("every_n_rows", 2), "every_n_rows"),
                bind_off_stitches=_as_int(data.get("bind_off_stitches", 0), "bind_off_stitches"),
                stitches_per_row=_as_int(data.get("stitches_per_row", 2), "stitches_per_row"),
            )
        except KeyError as exc:
            raise ShapingDataError(f"missing required key {exc.args[0]!r}", index) from None
        except ShapingDataError as exc:
            raise ShapingDataError(exc.detail, index) from None


def _as_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != int(value):
        raise ShapingDataError(f"{name} must be a whole number, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class ShapingPhase:
    """A named run of events, e.g. "Increase to full depth"."""

    name: str
    events: tuple[ShapingEvent, ...] = ()

    @property
    def stitch_delta(self) -> int:
        return sum(e.stitch_delta for e in self.events)


@dataclass(frozen=True)
class ShapingSchedule:
    """
    Ordered shaping events grouped into phases.

    Invariant: applying every event delta to ``starting_stitch_count`` reaches
    ``final_stitch_count``. Checked by :meth:`verify`, not at construction.
    """

    starting_stitch_count: int
    final_stitch_count: int
    phases: tuple[ShapingPhase, ...] = field(default_factory=tuple)

    @property
    def events(self) -> tuple[ShapingEvent, ...]:
        return tuple(e for phase in self.phases for e in phase.events)

    @property
    def net_delta(self) -> int:
        return sum(phase.stitch_delta for phase in self.phases)

    def verify(self) -> None:
        """Raise ShapingDataError if the deltas do not reach the final count,
        or if the final count is below 1."""
        if self.final_stitch_count < 1:
            raise ShapingDataError(
                f"schedule ends at {self.final_stitch_count} stitches; at least 1 must remain"
            )
        reached = self.starting_stitch_count + self.net_delta
        if reached != self.final_stitch_count:
            raise ShapingDataError(
                f"schedule starts at {self.starting_stitch_count} stitches and its deltas "
                f"reach {reached}, but declares {self.final_stitch_count}"
            )

    @classmethod
    def single_phase(
        cls, name: str, starting_stitch_count: int, events: tuple[ShapingEvent, ...]
    ) -> ShapingSchedule:
        """Schedule with one phase whose final count is derived from the events."""
        final = starting_stitch_count + sum(e.stitch_delta for e in events)
        return cls(starting_stitch_count, final, (ShapingPhase(name, events),))
