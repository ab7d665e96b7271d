import logging
import sys

import mido

import strudelest.midi
import strudelest.midi.importer
import strudelest.tempo

logging.basicConfig(level=logging.INFO)


def demo_file () -> mido.MidiFile:

	"""Build a two-bar bass and drum loop in memory."""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=480)

	bass = mido.MidiTrack([
		mido.MetaMessage('track_name', name="Bass", time=0),
		mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(96), time=0),
		mido.Message('program_change', channel=1, program=33, time=0),
	])

	for pitch in (36, 36, 43, 41, 36, 36, 39, 41):
		bass.append(mido.Message('note_on', channel=1, note=pitch, velocity=100, time=0))
		bass.append(mido.Message('note_off', channel=1, note=pitch, velocity=0, time=480))

	drums = mido.MidiTrack([mido.MetaMessage('track_name', name="Kit", time=0)])

	for beat in range(8):
		pitch = 36 if beat % 2 == 0 else 38
		drums.append(mido.Message('note_on', channel=9, note=pitch, velocity=110, time=0))
		drums.append(mido.Message('note_off', channel=9, note=pitch, velocity=0, time=240))
		drums.append(mido.Message('note_on', channel=9, note=42, velocity=70, time=0))
		drums.append(mido.Message('note_off', channel=9, note=42, velocity=0, time=240))

	midi_file.tracks.extend([bass, drums])

	return midi_file


if len(sys.argv) > 1:
	result = strudelest.midi.import_midi_file(sys.argv[1], {"quantize_division": 4})
else:
	result = strudelest.midi.import_midi_bytes(strudelest.midi.importer.midi_file_to_bytes(demo_file()), "demo.mid")

for line in result.section_summary:
	print(f"// {line}")

# Play it back a little faster than it was recorded.
base_cps = strudelest.tempo.extract_base_cps(result.code)
print(strudelest.tempo.rewrite_code_tempo(result.code, strudelest.tempo.compute_effective_cps(base_cps, 1.25)))
