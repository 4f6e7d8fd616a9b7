"""Tests for writer.markdown — piece documents, glossary and introduction."""

import pytest

from stitchcraft.schemas.instruction import RowInstruction, RowType
from stitchcraft.schemas.pattern import CalculatedPiece, CraftType, FinishedDimensions
from stitchcraft.templates.engine import InstructionTemplateEngine
from stitchcraft.templates.registry import default_registry
from stitchcraft.utilities.types import Unit
from stitchcraft.writer.markdown import (
    MarkdownWriter,
    PieceWriter,
    WriterInput,
    render_glossary,
    render_introduction,
)


@pytest.fixture(scope="module")
def knitting():
    return InstructionTemplateEngine.for_craft(CraftType.KNITTING)


@pytest.fixture(scope="module")
def crochet():
    return InstructionTemplateEngine.for_craft(CraftType.CROCHET)


def _piece(**overrides):
    fields = dict(
        piece_key="front",
        display_name="Front",
        cast_on_stitches=110,
        total_rows=180,
        final_stitch_count=110,
        finished_dimensions=FinishedDimensions(width=50.0, length=60.0),
    )
    fields.update(overrides)
    return CalculatedPiece(**fields)


def _steps():
    return (
        RowInstruction(0, "Cast On", "CO 110 sts.", 110, RowType.CAST_ON, True, notes=("Use a stretchy cast-on",)),
        RowInstruction(1, "Body", "Rows 1-180: Work even.", 110, RowType.PLAIN_ROW, True, end_row=180),
        RowInstruction(181, "Bind Off", "BO all 110 sts loosely.", 0, RowType.BIND_OFF, True),
    )


# ── Piece documents ────────────────────────────────────────────────────────────


class TestMarkdownWriter:
    def test_satisfies_protocol(self, knitting):
        assert isinstance(MarkdownWriter(knitting), PieceWriter)

    def test_header(self, knitting):
        assert MarkdownWriter(knitting).header(_piece()) == [
            "## Front",
            "",
            "**Cast On:** 110 stitches",
            "**Total Rows:** 180",
            "**Final Stitch Count:** 110",
            "**Finished Dimensions:** 50 cm wide × 60 cm long",
        ]

    def test_crochet_header_label(self, crochet):
        header = MarkdownWriter(crochet).header(_piece())
        assert header[2] == "**Foundation Chain:** 110 stitches"

    def test_circumference(self, knitting):
        dims = FinishedDimensions(width=20.5, length=8.0, unit=Unit.INCH, circumference=20.5)
        header = MarkdownWriter(knitting).header(_piece(finished_dimensions=dims))
        assert header[-1] == "**Finished Dimensions:** 20.5 inch wide × 8 inch long (20.5 inch around)"

    def test_full_document(self, knitting):
        text = MarkdownWriter(knitting).write(WriterInput(_piece(), _steps()))
        assert text == "\n".join(
            [
                "## Front",
                "",
                "**Cast On:** 110 stitches",
                "**Total Rows:** 180",
                "**Final Stitch Count:** 110",
                "**Finished Dimensions:** 50 cm wide × 60 cm long",
                "",
                "### Cast On",
                "",
                "CO 110 sts.",
                "*Use a stretchy cast-on*",
                "",
                "### Body",
                "",
                "Rows 1-180: Work even.",
                "",
                "### Bind Off",
                "",
                "BO all 110 sts loosely.",
            ]
        )

    def test_section_header_only_on_change(self, knitting):
        steps = (
            RowInstruction(1, "Waist Shaping", "Row 1", 98, RowType.SHAPING_ROW, True),
            RowInstruction(2, "Waist Shaping", "Row 2", 98, RowType.PLAIN_ROW, False),
            RowInstruction(3, "Body", "Row 3", 98, RowType.PLAIN_ROW, True),
            RowInstruction(4, "Waist Shaping", "Row 4", 96, RowType.SHAPING_ROW, False),
        )
        text = MarkdownWriter(knitting).write(WriterInput(_piece(), steps))
        assert text.count("### Waist Shaping") == 2
        assert text.count("### Body") == 1

    def test_construction_notes(self, knitting):
        wi = WriterInput(_piece(), _steps(), ("Seam the sides", "Block to size"))
        text = MarkdownWriter(knitting).write(wi)
        assert text.endswith("### Construction Notes\n\n- Seam the sides\n- Block to size")

    def test_no_construction_notes_section_when_empty(self, knitting):
        text = MarkdownWriter(knitting).write(WriterInput(_piece(), _steps()))
        assert "Construction Notes" not in text
        assert not text.endswith("\n")


# ── Glossary and introduction ──────────────────────────────────────────────────


class TestGlossary:
    @pytest.fixture(scope="class")
    def glossary(self):
        return render_glossary(default_registry().abbreviation_table("knitting"), "Knitting Abbreviations")

    def test_table_header(self, glossary):
        lines = glossary.split("\n")
        assert lines[:4] == [
            "## Knitting Abbreviations",
            "",
            "| Abbreviation | Full Term | Description |",
            "|---|---|---|",
        ]

    def test_rows_sorted_by_abbreviation(self, glossary):
        rows = glossary.split("\n")[4:]
        assert rows[0] == "| beg | beginning | Beginning of the row |"
        assert rows[-1].startswith("| yo | yarn over |")
        assert len(rows) == len(default_registry().abbreviation_table("knitting").entries)


class TestIntroduction:
    def test_knitting(self, knitting):
        text = render_introduction("baby_blanket", ["Front", "Back"], knitting)
        assert text == (
            "# Baby Blanket Knitting Pattern\n"
            "\n"
            "This pattern includes instructions for the following pieces:\n"
            "\n"
            "- Front\n"
            "- Back"
        )

    def test_crochet_title(self, crochet):
        text = render_introduction("market-tote", ["Panel"], crochet)
        assert text.startswith("# Market Tote Crochet Pattern")
