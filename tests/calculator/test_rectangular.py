"""Tests for calculator.rectangular — repeat-aware stitch and row counts."""

import logging

import pytest

from stitchcraft.calculator.rectangular import (
    PieceCalculation,
    PieceCalculator,
    RectangularPieceCalculator,
    RectangularPieceInput,
    calculate_rectangular_piece,
    validate_rectangular_piece_input,
)
from stitchcraft.utilities.types import GaugeSpec, StitchPatternSpec, Unit


@pytest.fixture(scope="module")
def dk_gauge():
    return GaugeSpec(stitches=22, rows=30, ref_length=10, unit=Unit.CM)


@pytest.fixture(scope="module")
def gauge_20():
    return GaugeSpec(stitches=20, rows=28, ref_length=10, unit=Unit.CM)


# ── Counts and actual dimensions ───────────────────────────────────────────────


class TestRectangularCounts:
    def test_plain_piece(self, dk_gauge):
        """22 sts / 30 rows per 10 cm, 50 × 60 cm, no repeat → 110 sts × 180 rows."""
        result = calculate_rectangular_piece(50, 60, dk_gauge)
        assert result.passed
        assert result.cast_on_stitches == 110
        assert result.total_rows == 180
        assert result.actual_width == 50.0
        assert result.actual_length == 60.0
        assert result.warnings == ()

    def test_repeat_tie_rounds_up(self, gauge_20):
        """41 cm at 2 sts/cm is 82 sts; with a 4-stitch repeat that becomes 84, not 80."""
        lace = StitchPatternSpec(name="Lace", horizontal_repeat=4)
        result = calculate_rectangular_piece(41, 50, gauge_20, lace)
        assert result.cast_on_stitches == 84
        assert result.raw_stitches == pytest.approx(82.0)
        assert result.actual_width == 42.0
        assert result.warnings == ("Cast-on stitches adjusted from 82 to 84 to fit 4-stitch Lace repeat",)

    def test_exact_multiple_has_no_adjustment_warning(self, gauge_20):
        rib = StitchPatternSpec(name="2x2 Rib", horizontal_repeat=4)
        result = calculate_rectangular_piece(40, 50, gauge_20, rib)
        assert result.cast_on_stitches == 80
        assert result.warnings == ()

    def test_adjustment_measured_from_raw_count(self):
        """80.9 raw stitches become 80; under one stitch of change is not reported."""
        gauge = GaugeSpec(stitches=809, rows=28, ref_length=100)
        result = calculate_rectangular_piece(10, 50, gauge, StitchPatternSpec("Rib", 4))
        assert result.raw_stitches == pytest.approx(80.9)
        assert result.cast_on_stitches == 80
        assert not any(w.startswith("Cast-on stitches adjusted") for w in result.warnings)

    def test_actual_size_comes_from_rounded_counts(self, gauge_20):
        result = calculate_rectangular_piece(43, 50, gauge_20, StitchPatternSpec("Cable", 10))
        assert result.cast_on_stitches == 90
        assert result.actual_width == 45.0
        assert "Width adjusted from 43 cm to 45 cm due to stitch pattern repeat" in result.warnings

    def test_length_drift_warning(self):
        gauge = GaugeSpec(stitches=20, rows=7)
        result = calculate_rectangular_piece(50, 52, gauge)
        assert result.total_rows == 36
        assert result.actual_length == pytest.approx(51.43)
        assert "Length adjusted from 52 cm to 51.43 cm due to row rounding" in result.warnings

    def test_targets_in_another_unit(self):
        """50 cm against a per-4-inch gauge: 19.69 in × 5 sts/in → 98 sts → 49.78 cm."""
        gauge = GaugeSpec(stitches=20, rows=28, ref_length=4, unit=Unit.INCH)
        result = calculate_rectangular_piece(50, 60, gauge, unit=Unit.CM)
        assert result.cast_on_stitches == 98
        assert result.unit is Unit.CM
        assert result.actual_width == pytest.approx(49.78)

    @pytest.mark.parametrize("repeat", [2, 3, 4, 5, 8, 12])
    def test_cast_on_always_a_repeat_multiple(self, gauge_20, repeat):
        spec = StitchPatternSpec(horizontal_repeat=repeat)
        for tenth in range(50, 1500, 13):
            result = calculate_rectangular_piece(tenth / 10, 30, gauge_20, spec)
            assert result.cast_on_stitches % repeat == 0

    @pytest.mark.parametrize("repeat", [1, 6])
    def test_wider_target_never_fewer_stitches(self, gauge_20, repeat):
        spec = StitchPatternSpec(horizontal_repeat=repeat)
        counts = [
            calculate_rectangular_piece(tenth / 10, 30, gauge_20, spec).cast_on_stitches
            for tenth in range(10, 1500, 7)
        ]
        assert counts == sorted(counts)

    def test_deterministic(self, dk_gauge):
        spec = StitchPatternSpec(horizontal_repeat=6)
        assert calculate_rectangular_piece(47.3, 61.1, dk_gauge, spec) == calculate_rectangular_piece(
            47.3, 61.1, dk_gauge, spec
        )


# ── Advisory range warnings ────────────────────────────────────────────────────


class TestPracticalRange:
    def test_narrow(self, gauge_20):
        result = calculate_rectangular_piece(5, 60, gauge_20)
        assert "Very narrow piece - double-check measurements" in result.warnings
        assert result.passed

    def test_wide(self, gauge_20):
        result = calculate_rectangular_piece(250, 60, gauge_20)
        assert any(w.startswith("Very wide piece") for w in result.warnings)

    def test_short(self, gauge_20):
        result = calculate_rectangular_piece(50, 2, gauge_20)
        assert "Very short piece - double-check measurements" in result.warnings

    def test_long(self, gauge_20):
        result = calculate_rectangular_piece(50, 400, gauge_20)
        assert any(w.startswith("Very long piece") for w in result.warnings)


# ── Invalid input ──────────────────────────────────────────────────────────────


class TestInvalidInput:
    def test_zero_width_zeroes_everything(self, dk_gauge):
        result = calculate_rectangular_piece(0, 60, dk_gauge)
        assert not result.passed
        assert result.errors == ("Target width must be greater than 0",)
        assert (result.cast_on_stitches, result.total_rows) == (0, 0)
        assert (result.actual_width, result.actual_length) == (0.0, 0.0)

    def test_negative_length(self, dk_gauge):
        result = calculate_rectangular_piece(50, -1, dk_gauge)
        assert result.errors == ("Target length must be greater than 0",)

    def test_invalid_gauge(self):
        result = calculate_rectangular_piece(50, 60, GaugeSpec(stitches=22, rows=0))
        assert result.errors == ("Gauge rows must be greater than 0",)
        assert result.cast_on_stitches == 0

    def test_every_problem_reported(self):
        result = calculate_rectangular_piece(0, 0, GaugeSpec(stitches=0, rows=30))
        assert len(result.errors) == 3

    def test_rejected_helper(self):
        result = PieceCalculation.rejected(["bad"], Unit.INCH)
        assert result.errors == ("bad",)
        assert result.unit is Unit.INCH


class TestRectangularPieceCalculator:
    def test_satisfies_protocol(self):
        assert isinstance(RectangularPieceCalculator(), PieceCalculator)

    def test_uses_injected_logger(self, dk_gauge, caplog):
        logger = logging.getLogger("tests.rectangular")
        caplog.set_level(logging.DEBUG, logger="tests.rectangular")
        RectangularPieceCalculator(logger).calculate(
            RectangularPieceInput(50, 60, dk_gauge, component_key="back")
        )
        assert any("back" in r.getMessage() for r in caplog.records if r.name == "tests.rectangular")

    def test_dimension_unit_defaults_to_gauge_unit(self):
        gauge = GaugeSpec(20, 28, 4, Unit.INCH)
        assert RectangularPieceInput(20, 24, gauge).dimension_unit is Unit.INCH


# ── Pre-flight validation ──────────────────────────────────────────────────────


class TestValidateRectangularPieceInput:
    def test_valid(self, dk_gauge):
        result = validate_rectangular_piece_input(50, 60, dk_gauge, StitchPatternSpec(), "front")
        assert result.is_valid
        assert result.errors == ()
        assert result.warnings == ()

    def test_missing_values(self):
        result = validate_rectangular_piece_input(None, "60", None, None, None)
        assert not result.is_valid
        assert result.errors == (
            "Target width is required and must be a number",
            "Target length is required and must be a number",
            "Gauge is required",
            "Stitch pattern is required",
            "Component key is required and must be a string",
        )

    def test_non_positive(self, dk_gauge):
        result = validate_rectangular_piece_input(-1, 0, dk_gauge, StitchPatternSpec(), "front")
        assert result.errors == (
            "Target width must be greater than 0",
            "Target length must be greater than 0",
        )

    def test_unusually_large_warnings(self, dk_gauge):
        result = validate_rectangular_piece_input(250, 320, dk_gauge, StitchPatternSpec(), "blanket")
        assert result.is_valid
        assert result.warnings == (
            "Target width is unusually large (>200 cm)",
            "Target length is unusually large (>300 cm)",
        )

    def test_large_limits_apply_in_cm(self, dk_gauge):
        """100 inches is 254 cm."""
        result = validate_rectangular_piece_input(
            100, 10, dk_gauge, StitchPatternSpec(), "blanket", unit=Unit.INCH
        )
        assert result.warnings == ("Target width is unusually large (>200 cm)",)

    def test_bad_repeat_and_gauge(self):
        result = validate_rectangular_piece_input(
            50, 60, GaugeSpec(0, 30), StitchPatternSpec(horizontal_repeat=0), "front"
        )
        assert result.errors == (
            "Gauge stitches must be greater than 0",
            "Horizontal repeat must be a positive integer",
        )
