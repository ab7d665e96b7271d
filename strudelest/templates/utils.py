"""Helpers shared by template ``derive_runtime`` functions."""

import math
import typing

import strudelest.formatting
import strudelest.rng
import strudelest.rules


clamp = strudelest.formatting.clamp


def to_number (value: typing.Any, fallback: float) -> float:

	"""Read a numeric parameter, accepting numeric strings."""

	if isinstance(value, bool):
		return fallback

	if isinstance(value, (int, float)) and math.isfinite(value):
		return float(value)

	if isinstance(value, str):
		try:
			parsed = float(value)
		except ValueError:
			return fallback
		if math.isfinite(parsed):
			return parsed

	return fallback


def to_boolean (value: typing.Any, fallback: bool = False) -> bool:

	"""Read a boolean parameter; anything that is not a bool gives ``fallback``."""

	if isinstance(value, bool):
		return value

	return fallback


def r3 (value: float) -> float:

	"""Round to three decimals."""

	return strudelest.formatting.round_to(value, 3)


def gain (value: float) -> strudelest.rules.LayerBase:

	"""Shorthand for a gain-only override."""

	return strudelest.rules.LayerBase(gain=r3(value))


def optional_stream (seed: str, name: str) -> strudelest.rng.SeededRandom:

	"""Return the private stream a template uses for optional-layer choices."""

	return strudelest.rng.SeededRandom(f"{seed}:{name}:optional")


def pick_one (rng: strudelest.rng.SeededRandom, options: typing.Sequence[str]) -> str:

	"""Choose one option uniformly with a single draw."""

	if not options:
		return ""

	return options[math.floor(rng.random() * len(options))]


def mute_unselected (options: typing.Iterable[str], keep: typing.Iterable[str]) -> typing.Dict[str, strudelest.rules.LayerBase]:

	"""Return zero-gain overrides for every option not in ``keep``."""

	keep_set = set(keep)

	return {option: strudelest.rules.LayerBase(gain=0) for option in options if option not in keep_set}
