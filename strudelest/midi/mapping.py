"""Map stage: choose a sound and base gain for every track.

Melodic tracks are mapped through their dominant GM program family; drum
tracks always use the drum bank. Unknown programs fall back to a plain synth
and raise an ``unmapped_instrument_fallback`` warning.
"""

import dataclasses
import logging
import typing

import strudelest.constants.gm_programs as gm_programs
import strudelest.midi.model as model


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class MapResult:

	midi: model.MappedMidi
	warnings: typing.Sequence[model.MidiImportWarning]
	track_reports: typing.Sequence[model.MidiTrackReport]


def resolve_program (program: typing.Optional[int]) -> typing.Tuple[gm_programs.ProgramFamily, bool]:

	"""Return ``(family, fallback)`` for a GM program number."""

	family = gm_programs.family_for(program)

	if family is None:
		return gm_programs.FALLBACK, True

	return family, False


def map_track (track: model.NormalizedTrack) -> typing.Tuple[model.MappedTrack, bool]:

	"""Map one track, reporting whether the fallback synth was used."""

	if track.role == model.ROLE_DRUM:
		family, fallback = gm_programs.DRUMS, False
	else:
		family, fallback = resolve_program(track.program)

	if fallback:
		logger.debug(f"Track {track.track_index + 1} ({track.name}): program {track.program} is unmapped")

	return model.MappedTrack(track, family.instrument, family.sound, family.gain), fallback


def map_normalized_midi (midi: model.NormalizedMidi, base_reports: typing.Sequence[model.MidiTrackReport]) -> MapResult:

	"""
	Map every track and refresh the track reports.

	Reports for skipped tracks are kept as they are, in their original
	position.
	"""

	mapped: typing.List[model.MappedTrack] = []
	fallback_count = 0

	for track in midi.tracks:
		mapped_track, fallback = map_track(track)
		mapped.append(mapped_track)
		fallback_count += int(fallback)

	by_index = {item.track.track_index: item for item in mapped}
	reports: typing.List[model.MidiTrackReport] = []

	for report in base_reports:

		item = by_index.get(report.track_index)

		if report.skipped or item is None:
			reports.append(report)
			continue

		reports.append(dataclasses.replace(
			report,
			role = item.track.role,
			note_count = len(item.track.notes),
			channel = item.track.channel,
			program = item.track.program,
			instrument = item.instrument
		))

	warnings: typing.List[model.MidiImportWarning] = []

	if fallback_count > 0:
		warnings.append(model.MidiImportWarning(
			model.UNMAPPED_INSTRUMENT_FALLBACK,
			"Some tracks used fallback instruments due to unmapped/unknown MIDI programs.",
			fallback_count
		))

	return MapResult(model.MappedMidi(midi, mapped), warnings, reports)
