import math
import typing


def round_half_up (value: float) -> int:

	"""Round to the nearest integer, halves towards positive infinity."""

	return int(math.floor(value + 0.5))


def round_to (value: float, places: int = 3) -> float:

	"""Round to a fixed number of decimal places, matching the printed value."""

	return float(f"{value:.{places}f}")


def quantize (value: float, step: float) -> float:

	"""
	Snap a value to the nearest multiple of ``step``.

	Non-finite values and non-positive steps pass through unchanged.
	"""

	if not math.isfinite(value) or step <= 0:
		return value

	return round_half_up(value / step) * step


def format_number (value: typing.Union[int, float]) -> str:

	"""
	Print a number with at most three decimals and no trailing zeros.

	``0.30000000000000004`` prints as ``0.3``, ``4.0`` as ``4``; non-finite
	values print as ``0``.
	"""

	if not math.isfinite(value):
		return "0"

	text = f"{value:.3f}"

	if "." in text:
		text = text.rstrip("0").rstrip(".")

	if text == "-0":
		return "0"

	return text


def format_cps (bpm: float) -> str:

	"""Convert bpm to cycles per second (bpm / 120) printed with three decimals."""

	return f"{bpm / 120:.3f}"


def clamp (minimum: float, maximum: float, value: float) -> float:

	"""Clamp ``value`` into ``[minimum, maximum]``."""

	return max(minimum, min(maximum, value))
