"""Pattern-language note names.

Names are lowercase pitch class plus octave, with C4 = 60 (Middle C)::

	import strudelest.constants.note_names as note_names

	note_names.note_name(61)                      # "db4"
	note_names.note_name(61, prefer_sharps=True)  # "c#4"
"""

import typing


SHARP_NAMES: typing.Tuple[str, ...] = ("c", "c#", "d", "d#", "e", "f", "f#", "g", "g#", "a", "a#", "b")
FLAT_NAMES: typing.Tuple[str, ...] = ("c", "db", "d", "eb", "e", "f", "gb", "g", "ab", "a", "bb", "b")


def note_name (pitch: int, prefer_sharps: bool = False) -> str:

	"""Spell a MIDI note number, using flats unless ``prefer_sharps`` is set."""

	names = SHARP_NAMES if prefer_sharps else FLAT_NAMES
	octave = pitch // 12 - 1

	return f"{names[pitch % 12]}{octave}"
