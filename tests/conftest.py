import pytest

import strudelest.rules

import midi_helpers


@pytest.fixture
def arpeggio_bytes () -> bytes:

	"""A single piano track: C4, E4, G4 on beats 1-3 at 120 BPM in 4/4."""

	track = midi_helpers.midi_track(
		name = "Lead",
		notes = [(60, 0, 1, 127), (64, 1, 1, 127), (67, 2, 1, 127)],
		program = 0,
		meta = [midi_helpers.tempo(120), midi_helpers.time_signature(4, 4)]
	)

	return midi_helpers.midi_bytes([track])


@pytest.fixture
def simple_rules () -> strudelest.rules.RuleSet:

	"""Two layers over two absolute phases, with a silent gap in between."""

	return strudelest.rules.RuleSet(
		scale_phases_to_bars = False,
		layers = [
			strudelest.rules.Layer("kick", "drums", base=strudelest.rules.LayerBase(gain=0.9), patterns=[
				strudelest.rules.PatternOption("bd*4", 1),
			]),
			strudelest.rules.Layer("hats", "drums", base=strudelest.rules.LayerBase(gain=0.3), patterns=[
				strudelest.rules.PatternOption("hh*8", 1),
			]),
		],
		phases = [
			strudelest.rules.Phase("intro", ["kick"], bars=(1, 4)),
			strudelest.rules.Phase("main", ["kick", "hats"], bars=(7, 8)),
		]
	)
