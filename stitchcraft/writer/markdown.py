"""
MarkdownWriter — renders a piece's instruction steps as a markdown document.

A piece document is laid out as:

  1. ``## Display Name`` followed by the bold summary lines (cast-on or
     foundation chain, total rows, final stitch count, finished dimensions).
  2. One ``### Section`` header each time the section changes, followed by
     the step texts of that section. Step notes follow their step in italics.
  3. An optional construction-notes list.

Every label comes from the craft's phrase table, so the writer itself never
names a craft.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from stitchcraft.schemas.instruction import RowInstruction
from stitchcraft.schemas.pattern import CalculatedPiece, FinishedDimensions
from stitchcraft.templates.engine import InstructionTemplateEngine, render_template
from stitchcraft.templates.registry import AbbreviationTable


@dataclass(frozen=True)
class WriterInput:
    """Complete input bundle for writing one piece."""

    piece: CalculatedPiece
    steps: tuple[RowInstruction, ...]
    construction_notes: tuple[str, ...] = ()


@runtime_checkable
class PieceWriter(Protocol):
    """Protocol for piece document writers."""

    def write(self, writer_input: WriterInput) -> str: ...


def _format_dimensions(dims: FinishedDimensions) -> str:
    unit = dims.unit.value
    text = f"{dims.width:g} {unit} wide × {dims.length:g} {unit} long"
    if dims.circumference is not None:
        text += f" ({dims.circumference:g} {unit} around)"
    return text


class MarkdownWriter:
    """Deterministic markdown writer bound to one craft's labels."""

    def __init__(self, engine: InstructionTemplateEngine) -> None:
        self._engine = engine

    def header(self, piece: CalculatedPiece) -> list[str]:
        label = self._engine.label
        return [
            f"## {piece.display_name}",
            "",
            f"**{label('cast_on')}:** {piece.cast_on_stitches} stitches",
            f"**{label('total_rows')}:** {piece.total_rows}",
            f"**{label('final_stitch_count')}:** {piece.final_stitch_count}",
            f"**{label('finished_dimensions')}:** {_format_dimensions(piece.finished_dimensions)}",
        ]

    def write(self, wi: WriterInput) -> str:
        """
        Render the full document for one piece.

        Parameters
        ----------
        wi:
            The piece, its ordered steps and the construction notes to list.

        Returns
        -------
        str
            Markdown text; no trailing newline.
        """
        lines = self.header(wi.piece)
        section: str | None = None
        for step in wi.steps:
            if step.section != section:
                section = step.section
                lines += ["", f"### {section}", ""]
            lines.append(step.text)
            lines.extend(f"*{note}*" for note in step.notes)

        if wi.construction_notes:
            lines += ["", f"### {self._engine.label('construction_notes')}", ""]
            lines.extend(f"- {note}" for note in wi.construction_notes)
        return "\n".join(lines)


def render_glossary(table: AbbreviationTable, title: str) -> str:
    """Markdown table of every abbreviation, sorted by abbreviation."""
    lines = [
        f"## {title}",
        "",
        "| Abbreviation | Full Term | Description |",
        "|---|---|---|",
    ]
    lines.extend(
        f"| {e.abbreviation} | {e.term} | {e.description} |" for e in table.sorted_entries()
    )
    return "\n".join(lines)


def render_introduction(
    garment_type: str, piece_names: Sequence[str], engine: InstructionTemplateEngine
) -> str:
    """Pattern title plus the list of pieces it covers."""
    garment_name = garment_type.replace("_", " ").replace("-", " ").title()
    lines = [
        render_template(engine.label("pattern_title"), {"garmentName": garment_name}),
        "",
        engine.label("pieces_intro"),
        "",
    ]
    lines.extend(f"- {name}" for name in piece_names)
    return "\n".join(lines)
