"""
ShapingScheduleProcessor: expands a declarative shaping schedule into
row-by-row instructions for the body of a piece.

Processing runs in two passes:

  1. Plan. Events are taken in row order. Linear events become one shaping
     row each; armhole, neckline and raglan events go to their coordinated
     generator. An event that cannot be planned (ShapingDataError) is
     replaced by a placeholder row and a warning; its siblings still run.
  2. Assemble. Planned rows are sorted, the gaps between them are filled
     with plain rows (collapsed per the DetailPolicy), and the running stitch
     count is threaded through so every row quotes its own count.

Row side follows row parity: odd rows are right-side rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import chain

from stitchcraft.errors import ShapingDataError
from stitchcraft.schemas.instruction import (
    DetailLevel,
    DetailPolicy,
    RowInstruction,
    RowType,
    is_right_side,
)
from stitchcraft.schemas.shaping import ShapingEvent, ShapingSchedule
from stitchcraft.templates.engine import InstructionTemplateEngine

from .coordinated import COORDINATED_GENERATORS, PlannedRow


@dataclass(frozen=True)
class ProcessedShaping:
    """Body rows of a piece and the stitch count they finish on."""

    instructions: tuple[RowInstruction, ...]
    final_stitch_count: int
    warnings: tuple[str, ...] = ()

    @property
    def sections(self) -> tuple[str, ...]:
        """Section names in first-appearance order."""
        return tuple(dict.fromkeys(i.section for i in self.instructions))


class ShapingScheduleProcessor:
    """
    Turns a ShapingSchedule into RowInstructions for body rows
    ``start_row``..``end_row`` inclusive.

    Parameters
    ----------
    engine:
        Template engine for the piece's craft.
    detail_level, policy:
        Decide when a run of plain rows is collapsed into one instruction.
    stitch_pattern:
        Name used in plain-row text; defaults to the craft's default pattern.
    """

    def __init__(
        self,
        engine: InstructionTemplateEngine,
        detail_level: DetailLevel = DetailLevel.STANDARD,
        policy: DetailPolicy | None = None,
        stitch_pattern: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._level = detail_level
        self._policy = policy or DetailPolicy()
        self._stitch_pattern = stitch_pattern
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    @property
    def body_section(self) -> str:
        return self._engine.section("body")

    # ── Public API ─────────────────────────────────────────────────────────────

    def plain_rows(
        self, first_row: int, last_row: int, stitch_count: int, section: str | None = None
    ) -> list[RowInstruction]:
        """Plain rows ``first_row``..``last_row``, collapsed when the run is long enough."""
        if last_row < first_row:
            return []
        section = section or self.body_section
        span = last_row - first_row + 1
        if span > 1 and self._policy.collapses(self._level, span):
            text = self._engine.plain_rows(first_row, last_row, stitch_count, self._stitch_pattern)
            return [
                RowInstruction(
                    row_number=first_row,
                    section=section,
                    text=text,
                    stitch_count=stitch_count,
                    row_type=RowType.PLAIN_ROW,
                    is_right_side=is_right_side(first_row),
                    end_row=last_row,
                )
            ]
        return [
            RowInstruction(
                row_number=row,
                section=section,
                text=self._engine.plain_row(row, stitch_count, self._stitch_pattern),
                stitch_count=stitch_count,
                row_type=RowType.PLAIN_ROW,
                is_right_side=is_right_side(row),
            )
            for row in range(first_row, last_row + 1)
        ]

    def process(
        self,
        schedule: ShapingSchedule,
        start_row: int,
        end_row: int,
        stitch_count: int,
    ) -> ProcessedShaping:
        """
        Expand ``schedule`` over body rows ``start_row``..``end_row``.

        Args:
            schedule: Shaping to apply; event offsets count from ``start_row``.
            start_row: First body row number.
            end_row: Last body row number.
            stitch_count: Stitches on the needle (or hook) before ``start_row``.

        Returns:
            ProcessedShaping with every body row accounted for, the running
            stitch count after the last row, and any recovery warnings.

        Raises:
            ShapingDataError: If the schedule declares fewer than 1 final stitch.
        """
        if schedule.final_stitch_count < 1:
            raise ShapingDataError(
                f"schedule ends at {schedule.final_stitch_count} stitches; at least 1 must remain"
            )
        warnings: list[str] = []
        if schedule.starting_stitch_count != stitch_count:
            warnings.append(
                f"Shaping schedule starts at {schedule.starting_stitch_count} stitches "
                f"but the piece starts at {stitch_count}"
            )

        planned = self._plan(schedule, start_row, end_row, stitch_count, warnings)
        instructions, final = self._assemble(planned, start_row, end_row, stitch_count)

        if final != schedule.final_stitch_count:
            warnings.append(
                f"Shaping ends at {final} stitches; the schedule expects "
                f"{schedule.final_stitch_count}"
            )
        return ProcessedShaping(tuple(instructions), final, tuple(warnings))

    # ── Pass 1: plan ───────────────────────────────────────────────────────────

    def _plan(
        self,
        schedule: ShapingSchedule,
        start_row: int,
        end_row: int,
        stitch_count: int,
        warnings: list[str],
    ) -> list[PlannedRow]:
        planned: list[PlannedRow] = []
        occupied: set[int] = set()
        ordered = sorted(enumerate(schedule.events), key=lambda pair: pair[1].row_offset)
        for index, event in ordered:
            try:
                rows = self._plan_event(event, start_row, end_row, stitch_count, planned, occupied)
            except ShapingDataError as exc:
                placeholder = self._placeholder(event, start_row, end_row, occupied)
                if placeholder is None:
                    message = (
                        f'Shaping event {index + 1} in "{event.section}" dropped, no free '
                        f"body row for a placeholder: {exc.detail}"
                    )
                    rows = []
                else:
                    message = (
                        f'Shaping event {index + 1} in "{event.section}" replaced with a '
                        f"placeholder: {exc.detail}"
                    )
                    rows = [placeholder]
                self._logger.warning(message)
                warnings.append(message)
            for row in rows:
                occupied.add(row.row_number)
            planned.extend(rows)
        return planned

    def _plan_event(
        self,
        event: ShapingEvent,
        start_row: int,
        end_row: int,
        stitch_count: int,
        planned: list[PlannedRow],
        occupied: set[int],
    ) -> list[PlannedRow]:
        problems = event.validation_errors()
        if problems:
            raise ShapingDataError("; ".join(problems))

        first_row = start_row + event.row_offset
        before = stitch_count + sum(p.stitch_delta for p in planned if p.row_number < first_row)
        if event.category.is_coordinated:
            generator = COORDINATED_GENERATORS[event.category]
            rows = generator(event, first_row, before, self._engine)
        else:
            rows = [
                PlannedRow(
                    row_number=first_row,
                    section=event.section,
                    stitch_delta=event.stitch_delta,
                    category="shaping_row",
                    variant=event.action.value,
                    values={
                        "shapingInstructions": event.instruction
                        or self._engine.shaping_phrase(
                            event.stitch_delta, first_row, event.category.value
                        )
                    },
                )
            ]

        for row in rows:
            if row.row_number > end_row:
                raise ShapingDataError(
                    f"row {row.row_number} is past the last body row ({end_row})"
                )
            if row.row_number in occupied:
                raise ShapingDataError(f"row {row.row_number} already has a shaping instruction")

        # Running count over every planned row, not only this event's.
        running = stitch_count
        for row in sorted(chain(planned, rows), key=lambda p: p.row_number):
            running += row.stitch_delta
            if running < 1:
                raise ShapingDataError(
                    f"shaping would leave {running} stitches on row {row.row_number}"
                )
        return rows

    def _placeholder(
        self, event: ShapingEvent, start_row: int, end_row: int, occupied: set[int]
    ) -> PlannedRow | None:
        """Placeholder on the free body row nearest the event; None when every row is taken."""
        if end_row < start_row:
            return None
        target = min(max(start_row + event.row_offset, start_row), end_row)
        row_number = next(
            (
                r
                for r in chain(range(target, end_row + 1), range(target - 1, start_row - 1, -1))
                if r not in occupied
            ),
            None,
        )
        if row_number is None:
            return None
        return PlannedRow(
            row_number=row_number,
            section=event.section,
            stitch_delta=0,
            category="shaping_row",
            variant="placeholder",
            values={"section": event.section},
            notes=(self._engine.note("placeholder"),),
            placeholder=True,
        )

    # ── Pass 2: assemble ───────────────────────────────────────────────────────

    def _assemble(
        self, planned: list[PlannedRow], start_row: int, end_row: int, stitch_count: int
    ) -> tuple[list[RowInstruction], int]:
        instructions: list[RowInstruction] = []
        count = stitch_count
        cursor = start_row
        previous: PlannedRow | None = None
        for step in sorted(planned, key=lambda p: p.row_number):
            if step.row_number > cursor:
                section = (
                    previous.section
                    if previous is not None and previous.section == step.section
                    else self.body_section
                )
                instructions.extend(self.plain_rows(cursor, step.row_number - 1, count, section))
            count += step.stitch_delta
            instructions.append(self._render(step, count))
            cursor = max(cursor, step.row_number + 1)
            previous = step
        instructions.extend(self.plain_rows(cursor, end_row, count))
        return instructions, count

    def _render(self, step: PlannedRow, count: int) -> RowInstruction:
        if step.placeholder:
            text = self._engine.placeholder_row(step.row_number, count, step.section)
        elif step.category == "shaping_row":
            text = self._engine.shaping_row(
                step.row_number, step.stitch_delta, count, str(step.values["shapingInstructions"])
            )
        else:
            text = self._engine.render(
                step.category,
                step.variant,
                rowNumber=step.row_number,
                stitchCount=count,
                **step.values,
            )
        return RowInstruction(
            row_number=step.row_number,
            section=step.section,
            text=text,
            stitch_count=count,
            row_type=RowType.SHAPING_ROW,
            is_right_side=is_right_side(step.row_number),
            notes=step.notes,
            stitches_changed=step.stitch_delta,
        )
