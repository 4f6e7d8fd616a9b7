"""Tests for calculator.hammer_sleeve — sleeve cap, shoulder extension and body cutout."""

import pytest

from stitchcraft.calculator.hammer_sleeve import calculate_hammer_sleeve
from stitchcraft.errors import ValidationError
from stitchcraft.utilities.types import GaugeSpec, Unit


@pytest.fixture(scope="module")
def gauge():
    return GaugeSpec(stitches=20, rows=28)


class TestHammerSleeveCounts:
    @pytest.fixture(scope="class")
    def sleeve(self, gauge):
        return calculate_hammer_sleeve(44, 32, 20, 20, gauge)

    def test_cap(self, sleeve):
        """32 cm upper arm at 2 sts/cm, 20 cm armhole at 2.8 rows/cm."""
        assert sleeve.cap_width_stitches == 64
        assert sleeve.cap_rows == 56

    def test_shoulder_extension(self, sleeve):
        """(44 - 20) / 2 = 12 cm of extension beside a 10 cm strap."""
        assert sleeve.extension_width_stitches == 24
        assert sleeve.extension_rows == 10
        assert sleeve.shoulder_strap_stitches == 20

    def test_body_cutout(self, sleeve):
        assert sleeve.cutout_stitches == 64
        assert sleeve.body_width_stitches == 168

    def test_actual_dimensions(self, sleeve):
        assert sleeve.actual_shoulder_width == 44.0
        assert sleeve.actual_upper_arm_width == 32.0
        assert sleeve.actual_armhole_depth == 20.0
        assert sleeve.unit is Unit.CM
        assert sleeve.warnings == ()

    def test_inches(self):
        gauge = GaugeSpec(stitches=20, rows=28, ref_length=4, unit=Unit.INCH)
        sleeve = calculate_hammer_sleeve(17, 12, 8, 8, gauge)
        assert sleeve.unit is Unit.INCH
        assert (sleeve.cap_width_stitches, sleeve.cap_rows) == (60, 56)
        assert sleeve.shoulder_strap_stitches == 20
        assert sleeve.actual_upper_arm_width == 12.0


# ── Advisory warnings ──────────────────────────────────────────────────────────


class TestHammerSleeveWarnings:
    def test_wide_extension(self, gauge):
        sleeve = calculate_hammer_sleeve(80, 32, 20, 20, gauge)
        assert sleeve.warnings == (
            "Shoulder extension width (30.0 cm) is quite large. Maximum recommended: 25.0 cm",
        )

    def test_arm_and_armhole_ranges(self, gauge):
        sleeve = calculate_hammer_sleeve(44, 12, 40, 20, gauge)
        assert sleeve.warnings == (
            "Upper arm width (12.0 cm) is quite small for an adult garment",
            "Armhole depth (40.0 cm) is quite deep",
        )

    def test_large_arm_and_shallow_armhole(self, gauge):
        sleeve = calculate_hammer_sleeve(44, 55, 12, 20, gauge)
        assert sleeve.warnings == (
            "Upper arm width (55.0 cm) is quite large",
            "Armhole depth (12.0 cm) is quite shallow",
        )


# ── Invalid input ──────────────────────────────────────────────────────────────


class TestHammerSleeveValidation:
    def test_non_positive(self, gauge):
        with pytest.raises(ValidationError) as exc:
            calculate_hammer_sleeve(0, 32, -1, 20, gauge)
        assert exc.value.messages == (
            "Total shoulder width must be greater than 0",
            "Armhole depth must be greater than 0",
        )

    def test_neckline_wider_than_shoulders(self, gauge):
        with pytest.raises(ValidationError, match="Neckline width must be smaller"):
            calculate_hammer_sleeve(40, 32, 20, 40, gauge)

    def test_extension_too_narrow(self, gauge):
        with pytest.raises(ValidationError) as exc:
            calculate_hammer_sleeve(28, 32, 20, 20, gauge)
        assert exc.value.messages == (
            "Shoulder extension width (4.0 cm) is too small. Minimum: 5.0 cm",
        )

    def test_invalid_gauge(self):
        with pytest.raises(ValidationError, match="Gauge stitches must be greater than 0"):
            calculate_hammer_sleeve(44, 32, 20, 20, GaugeSpec(stitches=0, rows=28))
