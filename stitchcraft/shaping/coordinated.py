"""
Generators for shaping that needs several coordinated rows per event.

Each generator takes one ShapingEvent, the row its shaping starts on and the
stitch count before it, and returns the PlannedRows that realise it. A
generator raises ShapingDataError when the event cannot be worked as given;
it never guesses.

  armhole   bind off at the start of the next 2 rows, then decrease
            ``stitches_per_row`` every ``every_n_rows`` rows
  neckline  bind off (or skip) the centre stitches, then decrease 1 at each
            neck edge every ``every_n_rows`` rows, both sides at once
  raglan    4 raglan lines (8 stitches per row) or a flat piece's 2 raglan
            edges (2 stitches per row) every ``every_n_rows`` rows
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from stitchcraft.errors import ShapingDataError
from stitchcraft.schemas.shaping import ShapingCategory, ShapingEvent
from stitchcraft.templates.engine import InstructionTemplateEngine


def _empty() -> Mapping[str, object]:
    return MappingProxyType({})


@dataclass(frozen=True)
class PlannedRow:
    """
    A shaping row whose position and delta are known but whose text is not
    yet rendered (the text quotes the running stitch count).

    ``category``/``variant`` name the template to render; ``values`` holds
    the placeholders other than rowNumber and stitchCount.
    """

    row_number: int
    section: str
    stitch_delta: int
    category: str
    variant: str
    values: Mapping[str, object] = field(default_factory=_empty)
    notes: tuple[str, ...] = ()
    placeholder: bool = False


Generator = Callable[[ShapingEvent, int, int, InstructionTemplateEngine], list[PlannedRow]]


def _decrease_row(
    engine: InstructionTemplateEngine, row: int, section: str, stitches: int
) -> PlannedRow:
    return PlannedRow(
        row_number=row,
        section=section,
        stitch_delta=-stitches,
        category="shaping_row",
        variant="decrease",
        values={"shapingInstructions": engine.shaping_phrase(-stitches, row)},
    )


def armhole_rows(
    event: ShapingEvent, first_row: int, stitches_before: int, engine: InstructionTemplateEngine
) -> list[PlannedRow]:
    if event.stitch_delta >= 0:
        raise ShapingDataError("armhole shaping must decrease")
    total = -event.stitch_delta
    if total % 2:
        raise ShapingDataError(
            f"armhole shaping must remove an even number of stitches, got {total}"
        )
    if total >= stitches_before:
        raise ShapingDataError(f"armhole removes {total} of only {stitches_before} stitches")

    bind = event.bind_off_stitches or total // 4
    remaining = total - 2 * bind
    if remaining < 0:
        raise ShapingDataError(
            f"binding off {bind} stitches on each side exceeds the {total} stitches to remove"
        )
    per_row = event.stitches_per_row
    if remaining % per_row:
        raise ShapingDataError(
            f"{remaining} stitches left after the bind-offs cannot be decreased "
            f"{per_row} at a time"
        )

    section = event.section
    rows: list[PlannedRow] = []
    start = first_row
    if bind:
        for offset, variant in enumerate(("bind_off_first", "bind_off_second")):
            rows.append(
                PlannedRow(first_row + offset, section, -bind, "armhole", variant, {"count": bind})
            )
        start = first_row + 2
    for k in range(remaining // per_row):
        rows.append(_decrease_row(engine, start + k * event.every_n_rows, section, per_row))
    return rows


def _center_stitches(total: int) -> int:
    center = total // 2
    if (total - center) % 2:
        center += 1
    return center


def neckline_rows(
    event: ShapingEvent, first_row: int, stitches_before: int, engine: InstructionTemplateEngine
) -> list[PlannedRow]:
    if event.stitch_delta >= 0:
        raise ShapingDataError("neckline shaping must decrease")
    total = -event.stitch_delta
    center = event.bind_off_stitches or _center_stitches(total)
    edge_decreases = total - center
    if edge_decreases < 0 or edge_decreases % 2:
        raise ShapingDataError(
            f"after {center} center stitches, {edge_decreases} stitches cannot be split "
            "evenly between the two neck edges"
        )
    side = (stitches_before - center) // 2
    if center >= stitches_before or side - edge_decreases // 2 < 1:
        raise ShapingDataError(
            f"neckline removes {total} stitches; {stitches_before} are not enough for two shoulders"
        )

    section = event.section
    rows = [
        PlannedRow(first_row, section, -center, "neckline", "center", {"count": center, "sideCount": side})
    ]
    for k in range(1, edge_decreases // 2 + 1):
        rows.append(
            PlannedRow(first_row + k * event.every_n_rows, section, -2, "neckline", "decrease")
        )
    return rows


_RAGLAN_LINES_PER_ROW = 8


def raglan_rows(
    event: ShapingEvent, first_row: int, stitches_before: int, engine: InstructionTemplateEngine
) -> list[PlannedRow]:
    per_row = event.stitches_per_row
    if per_row not in (2, _RAGLAN_LINES_PER_ROW):
        raise ShapingDataError(
            f"raglan shaping works 2 or {_RAGLAN_LINES_PER_ROW} stitches per row, got {per_row}"
        )
    total = abs(event.stitch_delta)
    if total % per_row:
        raise ShapingDataError(f"raglan change of {total} is not a multiple of {per_row}")

    direction = "increase" if event.stitch_delta > 0 else "decrease"
    sign = 1 if event.stitch_delta > 0 else -1
    section = event.section
    rows: list[PlannedRow] = []
    for k in range(total // per_row):
        row = first_row + k * event.every_n_rows
        if per_row == _RAGLAN_LINES_PER_ROW:
            rows.append(PlannedRow(row, section, sign * per_row, "raglan", direction))
        else:
            rows.append(
                PlannedRow(
                    row,
                    section,
                    sign * per_row,
                    "shaping_row",
                    direction,
                    {"shapingInstructions": engine.shaping_phrase(sign * per_row, row)},
                )
            )
    return rows


COORDINATED_GENERATORS: Mapping[ShapingCategory, Generator] = MappingProxyType(
    {
        ShapingCategory.ARMHOLE: armhole_rows,
        ShapingCategory.NECKLINE: neckline_rows,
        ShapingCategory.RAGLAN: raglan_rows,
    }
)
