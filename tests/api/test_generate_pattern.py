"""Tests for api.generate — generate_pattern() end to end."""

from datetime import datetime, timezone

import pytest

from stitchcraft.api.generate import GeneratedPattern, generate_pattern
from stitchcraft.api.requests import request_from_mapping
from stitchcraft.errors import ValidationError
from stitchcraft.orchestrator.engine import InstructionOptions
from stitchcraft.schemas.instruction import RowType
from stitchcraft.schemas.pattern import (
    CalculationRequest,
    ComponentTarget,
    CraftType,
    GarmentDefinition,
)
from stitchcraft.utilities.types import GaugeSpec

_FIXED_TIME = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _blanket(*components, craft="knitting", gauge=None, stitch_pattern=None):
    data = {
        "craft_type": craft,
        "gauge": gauge or {"stitches": 22, "rows": 30},
        "garment": {
            "garment_type": "baby_blanket",
            "components": list(components) or [{"key": "body", "target_width": 50, "target_length": 60}],
        },
    }
    if stitch_pattern:
        data["stitch_pattern"] = stitch_pattern
    return data


# ── Plain pieces ───────────────────────────────────────────────────────────────


class TestKnittedBlanket:
    @pytest.fixture(scope="class")
    def result(self):
        return generate_pattern(_blanket(), clock=lambda: _FIXED_TIME)

    def test_returns_generated_pattern(self, result):
        assert isinstance(result, GeneratedPattern)
        assert result.success
        assert result.warnings == ()

    def test_counts(self, result):
        body = result.calculation.component("body")
        assert (body.cast_on_stitches, body.total_rows) == (110, 180)

    def test_instructions(self, result):
        steps = result.instructions.pieces["body"].instruction_steps
        assert [s.text for s in steps] == [
            "Using your main needles, CO 110 sts.",
            "Rows 1-180: Work in Stockinette St for 180 rows. (110 sts)",
            "BO all 110 sts loosely.",
        ]

    def test_introduction(self, result):
        assert result.instructions.pattern_introduction.startswith("# Baby Blanket Knitting Pattern")

    def test_timestamps_come_from_clock(self, result):
        assert result.calculation.calculated_at == _FIXED_TIME
        assert result.instructions.metadata.generated_at == _FIXED_TIME

    def test_accepts_a_request_object(self):
        request = request_from_mapping(_blanket())
        result = generate_pattern(request, clock=lambda: _FIXED_TIME)
        assert result.instructions.pieces["body"].construction_summary.cast_on_stitches == 110


class TestCrochetLace:
    @pytest.fixture(scope="class")
    def panel(self):
        data = _blanket(
            {"key": "panel", "target_width": 41, "target_length": 50},
            craft="crochet",
            gauge={"stitches": 20, "rows": 28},
            stitch_pattern={"name": "Lace", "horizontal_repeat": 4},
        )
        return generate_pattern(data)

    def test_repeat_rounding(self, panel):
        component = panel.calculation.component("panel")
        assert component.cast_on_stitches == 84
        assert "Cast-on stitches adjusted from 82 to 84 to fit 4-stitch Lace repeat" in component.warnings
        assert "Panel: Cast-on stitches adjusted from 82 to 84 to fit 4-stitch Lace repeat" in panel.warnings

    def test_chain_and_foundation(self, panel):
        steps = panel.instructions.pieces["panel"].instruction_steps
        assert steps[0].text == "Using your hook, ch 85 sts."
        assert steps[1].text == "Row 1: Work 84 sc starting in 2nd ch from hook. (84 sts)"
        assert steps[-1].row_number == 141

    def test_request_built_without_a_pattern_name(self):
        request = CalculationRequest(
            craft_type=CraftType.CROCHET,
            gauge=GaugeSpec(stitches=20, rows=20),
            garment=GarmentDefinition("scarf", (ComponentTarget("scarf", 20, target_width=20),)),
        )
        piece = generate_pattern(request).instructions.pieces["scarf"]
        assert "Stockinette" not in piece.markdown_instructions
        body = piece.instruction_steps[2]
        assert (body.row_number, body.end_row) == (2, 40)
        assert "for 39 rows. (40 sts)" in body.text

    def test_repeat_note(self, panel):
        notes = panel.instructions.pieces["panel"].construction_notes
        assert notes[0] == "Starting stitch count is a multiple of 4 for the Lace repeat"


# ── Shaped pieces ──────────────────────────────────────────────────────────────


class TestShapedPieces:
    def test_bottom_up_shawl(self):
        shawl = {
            "key": "shawl",
            "target_width": 100,
            "target_length": 70,
            "attributes": {"construction": "triangular_shawl", "shawl_method": "bottom_up"},
        }
        result = generate_pattern(_blanket(shawl, gauge={"stitches": 20, "rows": 28}))
        steps = result.instructions.pieces["shawl"].instruction_steps
        assert steps[0].text == "Using your main needles, CO 201 sts."
        assert steps[-1].text == "BO all 3 sts loosely."
        assert steps[-1].row_number == 199
        shaping = [s for s in steps if s.row_type is RowType.SHAPING_ROW]
        assert len(shaping) == 99
        assert all(s.is_right_side for s in shaping)
        assert result.warnings == ()

    def test_tapered_sleeve(self):
        sleeve = {"key": "sleeve", "target_width": 50, "target_length": 40, "attributes": {"end_width": 40}}
        result = generate_pattern(_blanket(sleeve, gauge={"stitches": 20, "rows": 28}))
        piece = result.instructions.pieces["sleeve"]
        assert piece.construction_summary.final_stitch_count == 80
        assert piece.instruction_steps[-1].text == "BO all 80 sts loosely."
        assert piece.construction_notes[-1] == "Piece includes shaping - pay attention to stitch counts"
        assert result.warnings == ()

    def test_beanie_crown(self):
        hat = {
            "key": "hat",
            "target_circumference": 56,
            "target_length": 22,
            "attributes": {"construction": "beanie"},
        }
        result = generate_pattern(_blanket(hat), InstructionOptions(use_abbreviations=False))
        piece = result.instructions.pieces["hat"]
        shaping = [s for s in piece.instruction_steps if s.row_type is RowType.SHAPING_ROW]
        assert len(shaping) == 13
        assert shaping[0].text.startswith("Row 45 ")
        assert shaping[0].text.endswith("Decrease 8 stitches evenly across. (104 sts)")
        assert piece.construction_summary.final_stitch_count == 8
        assert "Cut the yarn and draw it through the final 8 stitches to close the crown" in (
            piece.construction_notes
        )

    def test_detail_option_is_passed_through(self):
        result = generate_pattern(_blanket(), InstructionOptions(detail_level="full"))
        assert len(result.instructions.pieces["body"].instruction_steps) == 182


# ── Failures ───────────────────────────────────────────────────────────────────


class TestFailures:
    def test_failed_component_left_out(self):
        result = generate_pattern(
            _blanket(
                {"key": "body", "target_width": 50, "target_length": 60},
                {"key": "edging", "target_width": 0, "target_length": 60},
            )
        )
        assert result.success
        assert list(result.instructions.pieces) == ["body"]
        assert "Edging: Target width must be greater than 0" in result.warnings

    def test_nothing_calculates(self):
        result = generate_pattern(_blanket({"key": "body", "target_width": 0, "target_length": 0}))
        assert not result.success
        assert result.instructions.error == "No pieces could be generated"

    def test_unparseable_request(self):
        with pytest.raises(ValidationError):
            generate_pattern({"craft_type": "knitting"})
