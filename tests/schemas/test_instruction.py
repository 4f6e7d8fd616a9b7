"""Tests for schemas.instruction — DetailPolicy, row side, RowInstruction."""

import pytest

from stitchcraft.schemas.instruction import (
    DetailLevel,
    DetailPolicy,
    RowInstruction,
    RowType,
    is_right_side,
)


class TestDetailPolicy:
    def test_default_thresholds(self):
        policy = DetailPolicy()
        assert policy.minimal_threshold == 10
        assert policy.standard_threshold == 20

    @pytest.mark.parametrize(
        "level, span, expected",
        [
            (DetailLevel.STANDARD, 20, False),
            (DetailLevel.STANDARD, 21, True),
            (DetailLevel.MINIMAL, 10, False),
            (DetailLevel.MINIMAL, 11, True),
            (DetailLevel.FULL, 1000, False),
        ],
    )
    def test_collapses(self, level, span, expected):
        assert DetailPolicy().collapses(level, span) is expected

    def test_custom_thresholds(self):
        policy = DetailPolicy(minimal_threshold=2, standard_threshold=5)
        assert policy.collapses(DetailLevel.STANDARD, 6)
        assert not policy.collapses(DetailLevel.STANDARD, 5)

    def test_rejects_zero_threshold(self):
        with pytest.raises(ValueError, match="at least 1"):
            DetailPolicy(minimal_threshold=0)


class TestRowSide:
    def test_odd_rows_are_right_side(self):
        assert is_right_side(1)
        assert is_right_side(181)

    def test_even_rows_are_wrong_side(self):
        assert not is_right_side(2)
        assert not is_right_side(0)


class TestRowInstruction:
    def test_single_row_span(self):
        row = RowInstruction(5, "Body", "Row 5", 100, RowType.PLAIN_ROW, True)
        assert row.last_row == 5
        assert row.row_span == 1

    def test_collapsed_span(self):
        row = RowInstruction(2, "Body", "Rows 2-40", 100, RowType.PLAIN_ROW, False, end_row=40)
        assert row.last_row == 40
        assert row.row_span == 39

    def test_row_type_values(self):
        assert [t.value for t in RowType] == [
            "cast_on",
            "setup_row",
            "plain_row",
            "shaping_row",
            "bind_off",
        ]
