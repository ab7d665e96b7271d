"""Builders for small Standard MIDI Files used across the import tests."""

import typing

import mido

import strudelest.midi.importer


# Note tuples are (pitch, start_beat, length_beats, velocity).
NoteSpec = typing.Tuple[int, float, float, int]

TICKS_PER_BEAT = 480


def midi_track (
	name: typing.Optional[str] = None,
	notes: typing.Sequence[NoteSpec] = (),
	channel: int = 0,
	program: typing.Optional[int] = None,
	meta: typing.Sequence[mido.MetaMessage] = (),
	extra: typing.Sequence[mido.Message] = ()
) -> mido.MidiTrack:

	"""
	Build one track from note tuples.

	Messages are laid out on absolute ticks first and converted to delta
	times at the end, so notes may overlap freely.
	"""

	track = mido.MidiTrack()

	if name is not None:
		track.append(mido.MetaMessage('track_name', name=name, time=0))

	for message in meta:
		track.append(message.copy(time=0))

	if program is not None:
		track.append(mido.Message('program_change', channel=channel, program=program, time=0))

	for message in extra:
		track.append(message.copy(time=0))

	events: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for pitch, start, length, velocity in notes:
		on_tick = int(round(start * TICKS_PER_BEAT))
		off_tick = int(round((start + length) * TICKS_PER_BEAT))
		# Offs sort before ons on the same tick.
		events.append((off_tick, 0, mido.Message('note_off', channel=channel, note=pitch, velocity=0)))
		events.append((on_tick, 1, mido.Message('note_on', channel=channel, note=pitch, velocity=velocity)))

	events.sort(key=lambda event: (event[0], event[1]))

	tick = 0

	for absolute, _, message in events:
		track.append(message.copy(time=absolute - tick))
		tick = absolute

	return track


def midi_bytes (tracks: typing.Sequence[mido.MidiTrack], midi_type: int = 1) -> bytes:

	"""Serialize tracks as a Standard MIDI File."""

	midi_file = mido.MidiFile(type=midi_type, ticks_per_beat=TICKS_PER_BEAT)
	midi_file.tracks.extend(tracks)

	return strudelest.midi.importer.midi_file_to_bytes(midi_file)


def tempo (bpm: float) -> mido.MetaMessage:

	return mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(bpm))


def time_signature (numerator: int, denominator: int) -> mido.MetaMessage:

	return mido.MetaMessage('time_signature', numerator=numerator, denominator=denominator)
