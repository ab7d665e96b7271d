"""Parse stage: Standard MIDI File bytes to tick-timed notes.

Decoding is done by ``mido``. This module only checks the header itself
(so format 2 files are rejected before decoding) and then walks each track
pairing note-ons with note-offs.
"""

import collections
import io
import logging
import typing

import mido

import strudelest.midi.model as model


logger = logging.getLogger(__name__)

HEADER_MAGIC = b"MThd"
HEADER_SIZE = 14

IGNORED_MESSAGE_TYPES = ("control_change", "pitchwheel")


def read_format_type (data: bytes) -> int:

	"""
	Return the format number from a MIDI header.

	Raises:
		MidiImportError: ``invalid_midi`` if the data is too short or does
			not start with an ``MThd`` chunk.
	"""

	if len(data) < HEADER_SIZE:
		raise model.MidiImportError(model.INVALID_MIDI, "MIDI file is too small.")

	if data[0:4] != HEADER_MAGIC:
		raise model.MidiImportError(model.INVALID_MIDI, "Missing MIDI header chunk.")

	return int.from_bytes(data[8:10], "big")


def _read_track (index: int, track: mido.MidiTrack) -> typing.Tuple[model.ParsedMidiTrack, typing.List[model.TempoEvent], typing.List[model.TimeSignatureEvent]]:

	"""Pair note-ons with note-offs and collect meta events for one track."""

	tick = 0
	name = ""
	ignored = 0
	programs: typing.Dict[int, int] = {}
	open_notes: typing.Dict[typing.Tuple[int, int], typing.Deque[typing.Tuple[int, float, typing.Optional[int]]]] = collections.defaultdict(collections.deque)
	notes: typing.List[model.ParsedMidiNote] = []
	tempos: typing.List[model.TempoEvent] = []
	signatures: typing.List[model.TimeSignatureEvent] = []

	for message in track:

		tick += message.time

		if message.type == "track_name" and not name:
			name = message.name

		elif message.type == "set_tempo":
			tempos.append(model.TempoEvent(tick, mido.tempo2bpm(message.tempo)))

		elif message.type == "time_signature":
			signatures.append(model.TimeSignatureEvent(tick, message.numerator, message.denominator))

		elif message.type == "program_change":
			programs[message.channel] = message.program

		elif message.type == "note_on" and message.velocity > 0:
			key = (message.channel, message.note)
			open_notes[key].append((tick, message.velocity / 127, programs.get(message.channel)))

		elif message.type in ("note_on", "note_off"):
			key = (message.channel, message.note)
			if open_notes[key]:
				start, velocity, program = open_notes[key].popleft()
				notes.append(model.ParsedMidiNote(message.note, velocity, start, max(1, tick - start), message.channel, program))

		elif message.type in IGNORED_MESSAGE_TYPES:
			ignored += 1

	# Notes still sounding at the end of the track end with it.
	for (channel, pitch), pending in open_notes.items():
		for start, velocity, program in pending:
			notes.append(model.ParsedMidiNote(pitch, velocity, start, max(1, tick - start), channel, program))

	notes.sort(key=lambda note: (note.start_tick, note.pitch))

	parsed = model.ParsedMidiTrack(
		track_index = index,
		name = name.strip() or f"Track {index + 1}",
		notes = notes,
		ignored_events = ignored
	)

	return parsed, tempos, signatures


def parse_midi_bytes (data: bytes) -> model.ParsedMidi:

	"""
	Decode a Standard MIDI File.

	Raises:
		MidiImportError: ``invalid_midi`` for malformed data,
			``unsupported_midi_type`` for format 2 files.
	"""

	midi_format = read_format_type(data)

	if midi_format == 2:
		raise model.MidiImportError(model.UNSUPPORTED_MIDI_TYPE, "MIDI type 2 files are not supported.")

	try:
		midi_file = mido.MidiFile(file=io.BytesIO(data), clip=True)
	except (OSError, EOFError, ValueError, KeyError, IndexError) as exc:
		logger.debug(f"mido rejected the file: {exc}")
		raise model.MidiImportError(model.INVALID_MIDI, "MIDI parser rejected file content.") from exc

	tracks: typing.List[model.ParsedMidiTrack] = []
	tempos: typing.List[model.TempoEvent] = []
	signatures: typing.List[model.TimeSignatureEvent] = []

	for index, track in enumerate(midi_file.tracks):
		parsed, track_tempos, track_signatures = _read_track(index, track)
		tracks.append(parsed)
		tempos.extend(track_tempos)
		signatures.extend(track_signatures)

	tempos.sort(key=lambda event: event.tick)
	signatures.sort(key=lambda event: event.tick)

	logger.debug(f"Parsed format {midi_format} file: {len(tracks)} tracks, {midi_file.ticks_per_beat} ppq")

	return model.ParsedMidi(
		format = midi_format,
		ppq = midi_file.ticks_per_beat,
		tracks = tracks,
		tempo_events = tempos,
		time_signature_events = signatures,
		ignored_events = sum(track.ignored_events for track in tracks)
	)
