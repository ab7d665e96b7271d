"""General MIDI Level 1 drum notes and their pattern tokens.

Standard MIDI percussion is played on channel 10 (0-indexed channel 9). The
importer turns each drum hit into one of four sample tokens (``bd``, ``sd``,
``hh``, ``cr``) using :data:`DRUM_TOKENS`::

	import strudelest.constants.gm_drums as gm_drums

	gm_drums.drum_token(gm_drums.KICK_1)        # "bd"
	gm_drums.drum_token(gm_drums.HI_HAT_OPEN)   # "hh"
	gm_drums.drum_token(41)                     # "sd" (nearest: 40)
"""

import typing


DRUM_CHANNEL = 9

DEFAULT_TOKEN = "bd"


# ─── Note constants ──────────────────────────────────────────────────

KICK_2 = 35
KICK_1 = 36
SNARE_1 = 38
SNARE_2 = 40
HI_HAT_CLOSED = 42
HI_HAT_PEDAL = 44
LOW_TOM = 45
HI_HAT_OPEN = 46
LOW_MID_TOM = 47
CRASH_1 = 49
HIGH_TOM = 50
CRASH_2 = 57


# ─── Token table ─────────────────────────────────────────────────────
#
# Order matters: on an equal-distance miss the earlier entry wins.

DRUM_TOKENS: typing.List[typing.Tuple[int, str]] = [
	(KICK_2, "bd"),
	(KICK_1, "bd"),
	(SNARE_1, "sd"),
	(SNARE_2, "sd"),
	(HI_HAT_CLOSED, "hh"),
	(HI_HAT_PEDAL, "hh"),
	(HI_HAT_OPEN, "hh"),
	(LOW_TOM, "sd"),
	(LOW_MID_TOM, "sd"),
	(HIGH_TOM, "sd"),
	(CRASH_1, "cr"),
	(CRASH_2, "cr"),
]


def drum_token_lookup (note: int) -> typing.Tuple[str, bool]:

	"""
	Return ``(token, fallback)`` for a drum note.

	An exact table hit gives ``fallback=False``; anything else takes the
	nearest table entry by pitch distance and reports ``fallback=True``.
	"""

	for table_note, token in DRUM_TOKENS:
		if table_note == note:
			return token, False

	if not DRUM_TOKENS:
		return DEFAULT_TOKEN, True

	nearest = min(DRUM_TOKENS, key=lambda entry: abs(entry[0] - note))

	return nearest[1], True


def drum_token (note: int) -> str:

	"""Return the pattern token for a drum note."""

	return drum_token_lookup(note)[0]
