"""General MIDI program families.

The 128 GM programs fall into 16 families of 8. Each family maps to one
built-in synth sound and a base gain for imported tracks.
"""

import dataclasses
import typing


@dataclasses.dataclass(frozen=True)
class ProgramFamily:

	"""An inclusive range of GM program numbers and the sound that plays it."""

	first: int
	last: int
	instrument: str
	sound: str
	gain: float

	def contains (self, program: int) -> bool:
		return self.first <= program <= self.last


PROGRAM_FAMILIES: typing.List[ProgramFamily] = [
	ProgramFamily(0, 7, "Piano", "triangle", 0.5),
	ProgramFamily(8, 15, "Chromatic Percussion", "sine", 0.45),
	ProgramFamily(16, 23, "Organ", "square", 0.46),
	ProgramFamily(24, 31, "Guitar", "sawtooth", 0.5),
	ProgramFamily(32, 39, "Bass", "square", 0.54),
	ProgramFamily(40, 47, "Strings", "triangle", 0.44),
	ProgramFamily(48, 55, "Ensemble", "sine", 0.42),
	ProgramFamily(56, 63, "Brass", "sawtooth", 0.52),
	ProgramFamily(64, 71, "Reed", "square", 0.5),
	ProgramFamily(72, 79, "Pipe", "sine", 0.48),
	ProgramFamily(80, 87, "Synth Lead", "sawtooth", 0.46),
	ProgramFamily(88, 95, "Synth Pad", "triangle", 0.4),
	ProgramFamily(96, 103, "Synth FX", "square", 0.36),
	ProgramFamily(104, 111, "Ethnic", "triangle", 0.46),
	ProgramFamily(112, 119, "Percussive", "square", 0.45),
	ProgramFamily(120, 127, "SFX", "sawtooth", 0.35),
]

FALLBACK = ProgramFamily(-1, -1, "Fallback Synth", "sawtooth", 0.42)

# Drum tracks ignore their program and play through a drum-machine bank.
DRUMS = ProgramFamily(-1, -1, "Drums", "Linn9000", 0.3)
DRUM_BANK = DRUMS.sound


def family_for (program: typing.Optional[int]) -> typing.Optional[ProgramFamily]:

	"""Return the family containing ``program``, or None if it is unknown or out of range."""

	if program is None:
		return None

	for family in PROGRAM_FAMILIES:
		if family.contains(program):
			return family

	return None
