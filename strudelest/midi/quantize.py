"""Quantize stage: snap note starts and ends to a fixed beat grid."""

import dataclasses
import typing

import strudelest.formatting
import strudelest.midi.model as model
import strudelest.midi.normalize


def grid_step (division: int) -> float:

	"""Return the grid step in beats for a quantize division."""

	return 1 / max(1, division)


def snap (value: float, step: float) -> float:

	"""Round ``value`` to the nearest multiple of ``step`` (halves round up)."""

	return strudelest.formatting.round_half_up(value / step) * step


def quantize_note (note: model.NormalizedNote, step: float) -> model.NormalizedNote:

	"""
	Snap one note to the grid.

	Start and end are snapped independently; the note always keeps at least
	one grid step of length.
	"""

	start = snap(note.start_beat, step)
	end = snap(note.end_beat, step)

	return dataclasses.replace(note, start_beat=start, duration_beats=max(step, end - start))


def quantize_track (track: model.NormalizedTrack, step: float) -> model.NormalizedTrack:

	notes = sorted((quantize_note(note, step) for note in track.notes), key=lambda note: (note.start_beat, note.pitch))

	return dataclasses.replace(track, notes=notes)


def quantize_normalized_midi (midi: model.NormalizedMidi, options: model.MidiImportOptions) -> model.NormalizedMidi:

	"""Quantize every track and recompute the length from the snapped notes."""

	step = grid_step(options.quantize_division)
	tracks: typing.List[model.NormalizedTrack] = [quantize_track(track, step) for track in midi.tracks]
	total_beats = max((note.end_beat for track in tracks for note in track.notes), default=0.0)

	return dataclasses.replace(
		midi,
		tracks = tracks,
		total_beats = total_beats,
		bars = strudelest.midi.normalize.bar_count(total_beats, midi.beats_per_bar)
	)
