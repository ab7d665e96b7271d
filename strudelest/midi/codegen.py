"""Codegen stage: mapped tracks to a pattern-language program.

Each track becomes one line inside a ``stack(...)``. The line's pattern has
one token per grid step across the whole piece, run-length compressed, and
is slowed down by the bar count so one cycle of the pattern spans the piece::

	// MIDI import: song
	// Tempo: 120 BPM | Time: 4/4 | Bars: 1
	// Track 1: Lead - Piano (3 notes)
	setcps(1.000);
	stack(
	  note("c4 ~!3 e4 ~!3 g4 ~!9").slow(1).s("triangle").gain(0.415)
	)
"""

import dataclasses
import json
import math
import re
import typing

import strudelest.constants.gm_drums as gm_drums
import strudelest.constants.gm_programs as gm_programs
import strudelest.constants.note_names as note_names
import strudelest.formatting
import strudelest.midi.model as model
import strudelest.midi.quantize


REST = "~"
MIN_GAIN = 0.1
MAX_GAIN = 1.0
GAIN_OFFSET = 0.1

_WHITESPACE = re.compile(r"\s+")
_EXTENSION = re.compile(r"\.[^.]+$")


@dataclasses.dataclass(frozen=True)
class CodegenResult:

	code: str
	section_summary: typing.Sequence[str]


def sanitize_label (value: str) -> str:

	"""Collapse whitespace; empty labels become ``"Untitled Track"``."""

	return _WHITESPACE.sub(" ", value).strip() or "Untitled Track"


def file_label (filename: str) -> str:

	"""Strip the extension from a file name."""

	return _EXTENSION.sub("", filename)


def compress_tokens (tokens: typing.Sequence[str]) -> typing.List[str]:

	"""
	Run-length compress repeated tokens as ``token!count``.

	An empty sequence compresses to a single rest.
	"""

	if not tokens:
		return [REST]

	output: typing.List[str] = []
	current = tokens[0]
	run = 1

	for token in tokens[1:]:

		if token == current:
			run += 1
			continue

		output.append(f"{current}!{run}" if run > 1 else current)
		current = token
		run = 1

	output.append(f"{current}!{run}" if run > 1 else current)

	return output


def _group (items: typing.Sequence[str]) -> str:

	return items[0] if len(items) == 1 else "[" + " ".join(items) + "]"


def track_tokens (track: model.MappedTrack, midi: model.NormalizedMidi, options: model.MidiImportOptions) -> typing.List[str]:

	"""Return the compressed step tokens for one track."""

	division = max(1, options.quantize_division)
	step = strudelest.midi.quantize.grid_step(division)
	total_steps = max(1, math.ceil(round(midi.bars * midi.beats_per_bar * division, 6)))

	onsets: typing.Dict[int, typing.List[int]] = {}

	for note in track.track.notes:
		index = min(total_steps - 1, max(0, strudelest.formatting.round_half_up(note.start_beat / step)))
		onsets.setdefault(index, []).append(note.pitch)

	tokens: typing.List[str] = []

	for index in range(total_steps):

		pitches = onsets.get(index)

		if not pitches:
			tokens.append(REST)

		elif track.track.role == model.ROLE_DRUM:
			tokens.append(_group(sorted({gm_drums.drum_token(pitch) for pitch in pitches})))

		else:
			tokens.append(_group([note_names.note_name(pitch, options.prefer_sharps) for pitch in sorted(set(pitches))]))

	return compress_tokens(tokens)


def track_gain (track: model.MappedTrack, include_velocity: bool) -> float:

	"""
	Return the rendered gain for a track.

	With velocity enabled the mapped base gain is scaled by the mean note
	velocity, otherwise by itself; either way an offset is added and the
	result kept within a sane range.
	"""

	notes = track.track.notes

	if include_velocity:
		level = strudelest.formatting.round_to(sum(note.velocity for note in notes) / max(1, len(notes)), 3)
	else:
		level = track.gain

	gain = strudelest.formatting.clamp(MIN_GAIN, MAX_GAIN, level * track.gain + GAIN_OFFSET)

	return strudelest.formatting.round_to(gain, 3)


def track_line (track: model.MappedTrack, midi: model.NormalizedMidi, options: model.MidiImportOptions) -> str:

	"""Render one ``stack`` member for a track."""

	pattern = json.dumps(" ".join(track_tokens(track, midi, options)))
	gain = strudelest.formatting.format_number(track_gain(track, options.include_velocity_as_gain))

	if track.track.role == model.ROLE_DRUM:
		return f"s({pattern}).slow({midi.bars}).bank({json.dumps(gm_programs.DRUM_BANK)}).gain({gain})"

	return f"note({pattern}).slow({midi.bars}).s({json.dumps(track.sound)}).gain({gain})"


def build_strudel_from_midi (mapped: model.MappedMidi, filename: str, options: model.MidiImportOptions) -> CodegenResult:

	"""Build the program text and the human-readable summary for an import."""

	midi = mapped.midi
	label = file_label(filename)
	bpm = strudelest.formatting.format_number(midi.bpm)
	meter = f"{midi.numerator}/{midi.denominator}"

	lines = [
		f"// MIDI import: {label}",
		f"// Tempo: {bpm} BPM | Time: {meter} | Bars: {midi.bars}",
	]

	for track in mapped.tracks:
		lines.append(f"// Track {track.track.track_index + 1}: {sanitize_label(track.track.name)} - {track.instrument} ({len(track.track.notes)} notes)")

	lines.append(f"setcps({strudelest.formatting.format_cps(midi.bpm)});")

	members = ",\n".join(f"  {track_line(track, midi, options)}" for track in mapped.tracks)
	code = "\n".join(lines) + f"\nstack(\n{members}\n)"

	summary = [
		f'Imported MIDI "{label}"',
		f"Tempo {bpm} BPM - {meter} - {midi.bars} bars",
	]

	for track in mapped.tracks:
		summary.append(f"Track {track.track.track_index + 1}: {sanitize_label(track.track.name)} - {track.instrument} - {len(track.track.notes)} notes")

	return CodegenResult(code, summary)
