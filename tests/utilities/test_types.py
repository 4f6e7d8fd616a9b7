"""Tests for utilities.types — Unit, Axis, GaugeSpec, StitchPatternSpec."""

import pytest

from stitchcraft.errors import ValidationError
from stitchcraft.utilities.types import Axis, GaugeSpec, StitchPatternSpec, Unit


class TestUnit:
    def test_values(self):
        assert Unit.CM.value == "cm"
        assert Unit.INCH.value == "inch"

    def test_is_str(self):
        assert isinstance(Unit.CM, str)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("cm", Unit.CM),
            ("Centimeters", Unit.CM),
            (" in ", Unit.INCH),
            ("inches", Unit.INCH),
            (Unit.INCH, Unit.INCH),
        ],
    )
    def test_parse_aliases(self, text, expected):
        assert Unit.parse(text) is expected

    def test_parse_unknown_raises(self):
        with pytest.raises(ValidationError, match="Unknown length unit"):
            Unit.parse("furlong")


class TestGaugeSpec:
    def test_defaults(self):
        gauge = GaugeSpec(stitches=22, rows=30)
        assert gauge.ref_length == 10.0
        assert gauge.unit is Unit.CM

    def test_is_frozen(self):
        gauge = GaugeSpec(stitches=22, rows=30)
        with pytest.raises(AttributeError):
            gauge.stitches = 20  # type: ignore[misc]

    def test_unit_string_is_coerced(self):
        assert GaugeSpec(20, 28, 4, "inches").unit is Unit.INCH  # type: ignore[arg-type]

    def test_valid_gauge_has_no_errors(self):
        gauge = GaugeSpec(stitches=22, rows=30)
        assert gauge.validation_errors() == []
        assert gauge.is_valid

    def test_non_positive_fields_are_reported_not_raised(self):
        gauge = GaugeSpec(stitches=0, rows=-3, ref_length=0)
        assert gauge.validation_errors() == [
            "Gauge stitches must be greater than 0",
            "Gauge rows must be greater than 0",
            "Gauge reference length must be greater than 0",
        ]
        assert not gauge.is_valid

    def test_missing_field_is_reported(self):
        gauge = GaugeSpec(stitches=None, rows=30)  # type: ignore[arg-type]
        assert gauge.validation_errors() == ["Gauge stitches must be greater than 0"]

    def test_per_unit(self):
        gauge = GaugeSpec(stitches=22, rows=30)
        assert gauge.per_unit(Axis.STITCHES) == pytest.approx(2.2)
        assert gauge.per_unit(Axis.ROWS) == pytest.approx(3.0)


class TestStitchPatternSpec:
    def test_defaults(self):
        spec = StitchPatternSpec()
        assert spec.name is None
        assert spec.horizontal_repeat == 1
        assert spec.vertical_repeat == 1
        assert spec.validation_errors() == []

    def test_zero_repeat_is_reported(self):
        spec = StitchPatternSpec(name="Seed", horizontal_repeat=0)
        assert spec.validation_errors() == ["Horizontal repeat must be at least 1"]

    def test_non_integer_repeat_is_reported(self):
        spec = StitchPatternSpec(vertical_repeat=1.5)  # type: ignore[arg-type]
        assert spec.validation_errors() == ["Vertical repeat must be at least 1"]
