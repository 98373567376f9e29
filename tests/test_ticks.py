"""
Tests for tick selection and label formatting.
"""

import pytest

from scatterscale.axis.ticks import (
    LABEL_DATE,
    LABEL_DATETIME,
    LABEL_DATETIME_MS,
    LINEAR_TICKS,
    decompose,
    format_number,
    format_timestamp,
    nice_step,
    pick_tick,
    step_decimals,
)


class TestPickTick:
    """Test nearest-candidate selection."""

    def test_exact_match(self):
        assert pick_tick(LINEAR_TICKS, 2.0) == 2

    def test_nearest(self):
        assert pick_tick(LINEAR_TICKS, 1.88) == 2
        assert pick_tick(LINEAR_TICKS, 3.8) == 5
        assert pick_tick(LINEAR_TICKS, 3.7) == 2.5

    def test_tie_goes_to_first_candidate(self):
        """1.5 is as close to 1 as to 2."""
        assert pick_tick(LINEAR_TICKS, 1.5) == 1

    def test_empty_candidates(self):
        with pytest.raises(ValueError):
            pick_tick((), 1.0)


class TestDecompose:
    """Test base-10 mantissa/exponent split."""

    def test_positive(self):
        mantissa, exponent = decompose(18.8)
        assert mantissa == pytest.approx(1.88)
        assert exponent == 1

    def test_small(self):
        mantissa, exponent = decompose(0.004)
        assert mantissa == pytest.approx(4.0)
        assert exponent == -3

    def test_zero(self):
        assert decompose(0.0) == (0.0, 0)

    def test_nice_step(self):
        assert nice_step(20.0) == 20.0
        assert nice_step(18.8) == 20.0
        assert nice_step(0.38) == pytest.approx(0.5)

    def test_step_decimals(self):
        assert step_decimals(20.0) == 0
        assert step_decimals(2.5) == 1
        assert step_decimals(0.25) == 2


class TestFormatting:
    """Test axis label text."""

    def test_integers_have_no_decimal_point(self):
        assert format_number(20.0) == "20"
        assert format_number(-3.0) == "-3"

    def test_float_drift_is_hidden(self):
        assert format_number(0.1 + 0.2) == "0.3"

    def test_exponential_form(self):
        assert format_number(1e10) == "1e10"
        assert format_number(1.23456789e-8) == "1.23457e-8"

    def test_timestamp_granularities(self):
        # 2020-01-02 03:04:05.678 UTC
        instant = 1577934245678
        assert format_timestamp(instant, LABEL_DATE) == ("02/01/2020",)
        assert format_timestamp(instant, LABEL_DATETIME) == ("02/01/2020", "03:04:05")
        assert format_timestamp(instant, LABEL_DATETIME_MS) == (
            "02/01/2020",
            "03:04:05.678",
        )
