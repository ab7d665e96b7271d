import mido

import strudelest.constants.gm_drums as gm_drums
import strudelest.constants.gm_programs as gm_programs
import strudelest.constants.note_names as note_names
import strudelest.midi.codegen
import strudelest.midi.model as model
import strudelest.midi.normalize
import strudelest.midi.parse
import strudelest.midi.quantize

import midi_helpers


def _note (pitch: int, start: float, duration: float) -> model.NormalizedNote:

	return model.NormalizedNote(pitch=pitch, velocity=0.8, start_beat=start, duration_beats=duration, channel=0, program=0)


def _order (note: model.NormalizedNote) -> tuple:

	return (note.start_beat, note.pitch)


# ── Parse ────────────────────────────────────────────────────────────

def test_parse_pairs_notes_first_in_first_out () -> None:

	"""Repeated note-ons of one pitch are closed in the order they were opened."""

	track = midi_helpers.midi_track(name="Lead", notes=[(60, 0, 1, 127), (60, 0.5, 1, 64)], program=5)

	parsed = strudelest.midi.parse.parse_midi_bytes(midi_helpers.midi_bytes([track]))
	notes = parsed.tracks[0].notes

	assert parsed.format == 1
	assert parsed.ppq == midi_helpers.TICKS_PER_BEAT
	assert [(note.start_tick, note.duration_tick) for note in notes] == [(0, 480), (240, 480)]
	assert notes[0].velocity == 1.0
	assert notes[1].program == 5


def test_parse_closes_hanging_notes_at_track_end () -> None:

	"""A note-on without a note-off lasts until the end of its track."""

	midi_track = mido.MidiTrack([
		mido.MetaMessage('track_name', name="Lead", time=0),
		mido.Message('note_on', channel=0, note=60, velocity=100, time=0),
		mido.MetaMessage('end_of_track', time=960),
	])

	parsed = strudelest.midi.parse.parse_midi_bytes(midi_helpers.midi_bytes([midi_track]))

	assert parsed.tracks[0].notes[0].duration_tick == 960


def test_parse_names_unnamed_tracks () -> None:

	"""Tracks without a name are called after their position."""

	parsed = strudelest.midi.parse.parse_midi_bytes(midi_helpers.midi_bytes([
		midi_helpers.midi_track(notes=[(60, 0, 1, 100)]),
		midi_helpers.midi_track(notes=[(62, 0, 1, 100)]),
	]))

	assert [track.name for track in parsed.tracks] == ["Track 1", "Track 2"]


# ── Normalize ────────────────────────────────────────────────────────

def test_repair_overlaps_is_idempotent () -> None:

	"""Repairing twice changes nothing the second time."""

	notes = [_note(60, 0, 1), _note(60, 0.5, 1), _note(62, 0.5, 0)]

	repaired, repairs = strudelest.midi.normalize.repair_overlaps(notes, 0.25)
	again, second_repairs = strudelest.midi.normalize.repair_overlaps(repaired, 0.25)

	assert repairs == 2
	assert second_repairs == 0
	assert sorted(again, key=_order) == sorted(repaired, key=_order)
	assert [(note.pitch, note.start_beat, note.duration_beats) for note in repaired] == [(60, 0, 1), (60, 1, 1), (62, 0.5, 0.25)]


def test_dominant_value_prefers_first_on_ties () -> None:

	"""Ties go to the value seen first."""

	assert strudelest.midi.normalize.dominant_value([1, 2, 2, 1]) == 1
	assert strudelest.midi.normalize.dominant_value([3, 2, 2]) == 2
	assert strudelest.midi.normalize.dominant_value([]) is None


def test_bar_count () -> None:

	"""Bars round up and never drop below one."""

	assert strudelest.midi.normalize.bar_count(0, 4) == 1
	assert strudelest.midi.normalize.bar_count(4, 4) == 1
	assert strudelest.midi.normalize.bar_count(4.5, 4) == 2
	assert strudelest.midi.normalize.bar_count(7, 3) == 3


def test_warning_collector_aggregates_by_code () -> None:

	"""Counts add up per code and the first message is kept."""

	collector = strudelest.midi.normalize.WarningCollector()
	collector.add("a", "first", 2)
	collector.add("b", "other")
	collector.add("a", "second", 3)

	assert collector.warnings() == [
		model.MidiImportWarning("a", "first", 5),
		model.MidiImportWarning("b", "other", 1),
	]


# ── Quantize ─────────────────────────────────────────────────────────

def test_quantize_note_snaps_both_ends () -> None:

	"""Start and end snap independently to the grid."""

	note = strudelest.midi.quantize.quantize_note(_note(60, 0.1, 0.3), 0.25)

	assert (note.start_beat, note.duration_beats) == (0, 0.5)


def test_quantize_note_keeps_one_step () -> None:

	"""A note that collapses on the grid keeps one step of length."""

	note = strudelest.midi.quantize.quantize_note(_note(60, 0.3, 0.01), 0.25)

	assert (note.start_beat, note.duration_beats) == (0.25, 0.25)


def test_grid_step () -> None:

	"""The division counts grid steps per beat."""

	assert strudelest.midi.quantize.grid_step(4) == 0.25
	assert strudelest.midi.quantize.grid_step(0) == 1


# ── Codegen ──────────────────────────────────────────────────────────

def test_compress_tokens () -> None:

	"""Runs collapse to token!count; nothing at all is one rest."""

	assert strudelest.midi.codegen.compress_tokens(["~", "~", "a", "a", "a", "b"]) == ["~!2", "a!3", "b"]
	assert strudelest.midi.codegen.compress_tokens([]) == ["~"]


def test_labels () -> None:

	"""Track names collapse whitespace; file names lose their extension."""

	assert strudelest.midi.codegen.sanitize_label("  Lead \t Synth ") == "Lead Synth"
	assert strudelest.midi.codegen.sanitize_label("   ") == "Untitled Track"
	assert strudelest.midi.codegen.file_label("song.v2.mid") == "song.v2"


# ── Constants ────────────────────────────────────────────────────────

def test_note_names () -> None:

	"""Middle C is c4; accidentals follow the spelling preference."""

	assert note_names.note_name(60) == "c4"
	assert note_names.note_name(70) == "bb4"
	assert note_names.note_name(70, prefer_sharps=True) == "a#4"
	assert note_names.note_name(21) == "a0"


def test_drum_tokens () -> None:

	"""Known drums map exactly; others take the nearest entry."""

	assert gm_drums.drum_token_lookup(gm_drums.KICK_1) == ("bd", False)
	assert gm_drums.drum_token_lookup(gm_drums.HI_HAT_OPEN) == ("hh", False)
	assert gm_drums.drum_token_lookup(37) == ("bd", True)
	assert gm_drums.drum_token(80) == "cr"


def test_program_families () -> None:

	"""Programs map to their GM family; out-of-range programs map to nothing."""

	assert gm_programs.family_for(33).instrument == "Bass"
	assert gm_programs.family_for(127).instrument == "SFX"
	assert gm_programs.family_for(None) is None
	assert gm_programs.family_for(200) is None
