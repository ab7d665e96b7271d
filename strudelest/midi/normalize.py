"""Normalize stage: enforce limits, pick one tempo and meter, convert ticks to beats.

Also classifies each track as drum or melodic, repairs same-pitch overlaps
and drops tracks without notes. Recoverable problems are returned as
aggregated warnings; fatal ones raise :class:`~strudelest.midi.model.MidiImportError`.
"""

import collections
import dataclasses
import logging
import math
import typing

import strudelest.constants.gm_drums
import strudelest.formatting
import strudelest.midi.model as model


logger = logging.getLogger(__name__)

DEFAULT_BPM = 120.0
DEFAULT_NUMERATOR = 4
DEFAULT_DENOMINATOR = 4


class WarningCollector:

	"""Aggregate warnings by code, summing counts and keeping the first message."""

	def __init__ (self) -> None:

		self._entries: typing.Dict[str, model.MidiImportWarning] = {}

	def add (self, code: str, message: str, count: int = 1) -> None:

		existing = self._entries.get(code)

		if existing is None:
			self._entries[code] = model.MidiImportWarning(code, message, count)
		else:
			self._entries[code] = dataclasses.replace(existing, count=existing.count + count)

	def extend (self, warnings: typing.Iterable[model.MidiImportWarning]) -> None:

		for warning in warnings:
			self.add(warning.code, warning.message, warning.count)

	def warnings (self) -> typing.List[model.MidiImportWarning]:

		"""Return the warnings in first-seen order."""

		return list(self._entries.values())


@dataclasses.dataclass(frozen=True)
class NormalizeResult:

	midi: model.NormalizedMidi
	warnings: typing.Sequence[model.MidiImportWarning]
	track_reports: typing.Sequence[model.MidiTrackReport]


def dominant_value (values: typing.Iterable[typing.Optional[int]]) -> typing.Optional[int]:

	"""Return the most frequent value; ties go to the value seen first."""

	counts = collections.Counter(values)

	if not counts:
		return None

	return counts.most_common(1)[0][0]


def repair_overlaps (notes: typing.Iterable[model.NormalizedNote], min_duration: float) -> typing.Tuple[typing.List[model.NormalizedNote], int]:

	"""
	Remove overlaps between notes of the same pitch.

	Notes are taken in ``(start, pitch)`` order. A note starting before the
	previous note of its pitch has ended is pushed to that end; a note left
	with no length gets ``min_duration``. Returns the repaired notes and the
	number of corrections. Repairing already repaired notes changes nothing.
	"""

	ordered = sorted(notes, key=lambda note: (note.start_beat, note.pitch))
	ends: typing.Dict[int, float] = {}
	repaired: typing.List[model.NormalizedNote] = []
	repairs = 0

	for note in ordered:

		start = note.start_beat
		duration = note.duration_beats
		prior_end = ends.get(note.pitch, -math.inf)

		if start < prior_end:
			start = prior_end
			repairs += 1

		if duration <= 0:
			duration = min_duration
			repairs += 1

		ends[note.pitch] = start + duration

		if start != note.start_beat or duration != note.duration_beats:
			note = dataclasses.replace(note, start_beat=start, duration_beats=duration)

		repaired.append(note)

	return repaired, repairs


def _total_beats (tracks: typing.Iterable[model.NormalizedTrack]) -> float:

	return max((note.end_beat for track in tracks for note in track.notes), default=0.0)


def bar_count (total_beats: float, beats_per_bar: float) -> int:

	"""Bars needed to hold ``total_beats``, at least one."""

	return max(1, math.ceil(total_beats / beats_per_bar))


def _skipped_report (track: model.ParsedMidiTrack) -> model.MidiTrackReport:

	return model.MidiTrackReport(
		track_index = track.track_index,
		name = track.name,
		role = model.ROLE_MELODIC,
		note_count = 0,
		channel = None,
		program = None,
		instrument = "Skipped",
		skipped = True
	)


def normalize_parsed_midi (parsed: model.ParsedMidi, filename: str, options: model.MidiImportOptions) -> NormalizeResult:

	"""
	Turn parsed tick data into beat-timed tracks.

	Raises:
		MidiImportError: ``note_limit_exceeded`` when the kept tracks hold
			more than ``options.max_notes`` notes; ``invalid_midi`` when no
			track has any notes or the file has no usable time division.
	"""

	collector = WarningCollector()

	if parsed.ppq <= 0:
		raise model.MidiImportError(model.INVALID_MIDI, "MIDI file has an unsupported time division.")

	kept = list(parsed.tracks[:max(0, options.max_tracks)])
	dropped = len(parsed.tracks) - len(kept)

	if dropped > 0:
		collector.add(model.TRACKS_TRUNCATED, f"Only the first {len(kept)} tracks were imported.", dropped)

	note_total = sum(len(track.notes) for track in kept)

	if note_total > options.max_notes:
		raise model.MidiImportError(model.NOTE_LIMIT_EXCEEDED, f"MIDI note limit exceeded ({note_total} > {options.max_notes}).")

	if len(parsed.tempo_events) > 1:
		collector.add(model.TEMPO_CHANGES_IGNORED, "Additional tempo changes were ignored.", len(parsed.tempo_events) - 1)

	if len(parsed.time_signature_events) > 1:
		collector.add(model.TIME_SIGNATURE_CHANGES_IGNORED, "Additional time signature changes were ignored.", len(parsed.time_signature_events) - 1)

	if parsed.ignored_events > 0:
		collector.add(model.EVENTS_IGNORED, "Some non-note MIDI events were ignored.", parsed.ignored_events)

	bpm = parsed.tempo_events[0].bpm if parsed.tempo_events else DEFAULT_BPM

	if parsed.time_signature_events:
		numerator = parsed.time_signature_events[0].numerator
		denominator = parsed.time_signature_events[0].denominator
	else:
		numerator, denominator = DEFAULT_NUMERATOR, DEFAULT_DENOMINATOR

	beats_per_bar = max(1, numerator * 4 / denominator)
	min_duration = 1 / max(1, options.quantize_division)

	tracks: typing.List[model.NormalizedTrack] = []
	reports: typing.List[model.MidiTrackReport] = []

	for track in kept:

		if not track.notes:
			logger.debug(f"Skipping track {track.track_index + 1} ({track.name}): no notes")
			collector.add(model.TRACK_SKIPPED_NO_NOTES, "Some tracks were skipped because they contain no notes.")
			reports.append(_skipped_report(track))
			continue

		channel = dominant_value(note.channel for note in track.notes)
		program = dominant_value(note.program for note in track.notes)
		role = model.ROLE_DRUM if channel == strudelest.constants.gm_drums.DRUM_CHANNEL else model.ROLE_MELODIC

		beat_notes = [
			model.NormalizedNote(
				pitch = note.pitch,
				velocity = note.velocity,
				start_beat = note.start_tick / parsed.ppq,
				duration_beats = max(min_duration, note.duration_tick / parsed.ppq),
				channel = note.channel,
				program = note.program
			)
			for note in track.notes
		]

		notes, repairs = repair_overlaps(beat_notes, min_duration)

		if repairs > 0:
			collector.add(model.OVERLAP_REPAIRED, "Overlapping notes were repaired during normalization.", repairs)

		tracks.append(model.NormalizedTrack(track.track_index, track.name, role, channel, program, notes))

		reports.append(model.MidiTrackReport(
			track_index = track.track_index,
			name = track.name,
			role = role,
			note_count = len(notes),
			channel = channel,
			program = program,
			instrument = "Drums" if role == model.ROLE_DRUM else "Unmapped"
		))

	if not tracks:
		raise model.MidiImportError(model.INVALID_MIDI, "No playable notes found in MIDI file.")

	total_beats = _total_beats(tracks)

	midi = model.NormalizedMidi(
		filename = filename,
		ppq = parsed.ppq,
		bpm = strudelest.formatting.round_to(bpm, 3),
		numerator = numerator,
		denominator = denominator,
		beats_per_bar = beats_per_bar,
		bars = bar_count(total_beats, beats_per_bar),
		total_beats = total_beats,
		tracks = tracks
	)

	return NormalizeResult(midi, collector.warnings(), reports)
