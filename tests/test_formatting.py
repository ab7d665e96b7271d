import math

import pytest

import strudelest.formatting


def test_round_half_up_rounds_halves_towards_positive_infinity () -> None:

	"""2.5 goes to 3 and -2.5 goes to -2, unlike Python's banker's rounding."""

	assert strudelest.formatting.round_half_up(2.5) == 3
	assert strudelest.formatting.round_half_up(-2.5) == -2
	assert strudelest.formatting.round_half_up(2.4999) == 2


def test_quantize_snaps_to_step () -> None:

	"""Values snap to the nearest step multiple."""

	assert strudelest.formatting.format_number(strudelest.formatting.quantize(0.33, 0.05)) == "0.35"
	assert strudelest.formatting.format_number(strudelest.formatting.quantize(1.1, 0.25)) == "1"


def test_quantize_passes_through_bad_input () -> None:

	"""Non-finite values and non-positive steps are returned unchanged."""

	assert math.isnan(strudelest.formatting.quantize(math.nan, 0.05))
	assert strudelest.formatting.quantize(0.33, 0) == 0.33


@pytest.mark.parametrize("value, expected", [
	(0.30000000000000004, "0.3"),
	(4.0, "4"),
	(4, "4"),
	(0.125, "0.125"),
	(0.1234, "0.123"),
	(-0.0001, "0"),
	(math.inf, "0"),
])
def test_format_number (value: float, expected: str) -> None:

	"""Numbers print with at most three decimals and no trailing zeros."""

	assert strudelest.formatting.format_number(value) == expected


def test_format_cps () -> None:

	"""Tempo statements divide bpm by 120 and keep three decimals."""

	assert strudelest.formatting.format_cps(120) == "1.000"
	assert strudelest.formatting.format_cps(132) == "1.100"
	assert strudelest.formatting.format_cps(90) == "0.750"


def test_clamp () -> None:

	"""Values are kept inside the range."""

	assert strudelest.formatting.clamp(0, 1, 1.5) == 1
	assert strudelest.formatting.clamp(0, 1, -0.5) == 0
	assert strudelest.formatting.clamp(0, 1, 0.4) == 0.4
