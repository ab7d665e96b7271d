"""Records passed between the MIDI import stages.

Every stage returns new frozen values; nothing produced by an earlier stage
is modified by a later one.
"""

import dataclasses
import typing


INVALID_MIDI = "invalid_midi"
UNSUPPORTED_MIDI_TYPE = "unsupported_midi_type"
NOTE_LIMIT_EXCEEDED = "note_limit_exceeded"

TEMPO_CHANGES_IGNORED = "tempo_changes_ignored"
TIME_SIGNATURE_CHANGES_IGNORED = "time_signature_changes_ignored"
EVENTS_IGNORED = "events_ignored"
TRACK_SKIPPED_NO_NOTES = "track_skipped_no_notes"
TRACKS_TRUNCATED = "tracks_truncated"
OVERLAP_REPAIRED = "overlap_repaired"
UNMAPPED_INSTRUMENT_FALLBACK = "unmapped_instrument_fallback"

ROLE_MELODIC = "melodic"
ROLE_DRUM = "drum"


class MidiImportError (Exception):

	"""
	A fatal import failure.

	Attributes:
		code: Stable machine-readable code (``invalid_midi``,
			``unsupported_midi_type`` or ``note_limit_exceeded``).
		message: Human-readable description.
	"""

	def __init__ (self, code: str, message: str) -> None:

		super().__init__(message)
		self.code = code
		self.message = message


@dataclasses.dataclass(frozen=True)
class MidiImportOptions:

	"""
	Import settings.

	Attributes:
		quantize_division: Grid steps per beat; the grid step is ``1 / quantize_division`` beats.
		max_tracks: Tracks beyond this many are dropped.
		max_notes: More notes than this (after dropping tracks) is fatal.
		prefer_sharps: Spell accidentals as sharps instead of flats.
		include_velocity_as_gain: Blend mean note velocity into track gain.
	"""

	quantize_division: int = 16
	max_tracks: int = 24
	max_notes: int = 100_000
	prefer_sharps: bool = False
	include_velocity_as_gain: bool = True


DEFAULT_MIDI_IMPORT_OPTIONS = MidiImportOptions()


@dataclasses.dataclass(frozen=True)
class MidiImportWarning:

	"""A recoverable condition, aggregated per code with an occurrence count."""

	code: str
	message: str
	count: int = 1

	def to_dict (self) -> typing.Dict[str, typing.Any]:
		return {"code": self.code, "message": self.message, "count": self.count}


@dataclasses.dataclass(frozen=True)
class MidiTrackReport:

	"""What happened to one source track."""

	track_index: int
	name: str
	role: str
	note_count: int
	channel: typing.Optional[int]
	program: typing.Optional[int]
	instrument: str
	skipped: bool = False

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		report: typing.Dict[str, typing.Any] = {
			"trackIndex": self.track_index,
			"name": self.name,
			"role": self.role,
			"noteCount": self.note_count,
			"channel": self.channel,
			"program": self.program,
			"instrument": self.instrument,
		}

		if self.skipped:
			report["skipped"] = True

		return report


@dataclasses.dataclass(frozen=True)
class MidiImportResult:

	"""
	A finished import.

	Attributes:
		code: Generated pattern-language program.
		bpm: Tempo taken from the first tempo event (120 if none).
		bars: Bar count after quantization.
		tracks_imported: Number of tracks in the program.
		warnings: Recoverable conditions, one entry per code.
		track_reports: One report per source track considered, skipped ones included.
		section_summary: Human-readable lines describing the import.
	"""

	code: str
	bpm: float
	bars: int
	tracks_imported: int
	warnings: typing.Sequence[MidiImportWarning]
	track_reports: typing.Sequence[MidiTrackReport]
	section_summary: typing.Sequence[str]

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		return {
			"code": self.code,
			"bpm": self.bpm,
			"bars": self.bars,
			"tracksImported": self.tracks_imported,
			"warnings": [warning.to_dict() for warning in self.warnings],
			"trackReports": [report.to_dict() for report in self.track_reports],
			"sectionSummary": list(self.section_summary),
		}


# ─── Parse stage ─────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True)
class ParsedMidiNote:

	pitch: int
	velocity: float
	start_tick: int
	duration_tick: int
	channel: int
	program: typing.Optional[int]


@dataclasses.dataclass(frozen=True)
class ParsedMidiTrack:

	track_index: int
	name: str
	notes: typing.Sequence[ParsedMidiNote]
	ignored_events: int = 0


@dataclasses.dataclass(frozen=True)
class TempoEvent:

	tick: int
	bpm: float


@dataclasses.dataclass(frozen=True)
class TimeSignatureEvent:

	tick: int
	numerator: int
	denominator: int


@dataclasses.dataclass(frozen=True)
class ParsedMidi:

	"""Raw file contents: tracks of tick-timed notes plus global meta events."""

	format: int
	ppq: int
	tracks: typing.Sequence[ParsedMidiTrack]
	tempo_events: typing.Sequence[TempoEvent]
	time_signature_events: typing.Sequence[TimeSignatureEvent]
	ignored_events: int = 0


# ─── Normalize / quantize stages ─────────────────────────────────────

@dataclasses.dataclass(frozen=True)
class NormalizedNote:

	"""A note timed in beats (quarter notes) from the start of the file."""

	pitch: int
	velocity: float
	start_beat: float
	duration_beats: float
	channel: int
	program: typing.Optional[int]

	@property
	def end_beat (self) -> float:
		return self.start_beat + self.duration_beats


@dataclasses.dataclass(frozen=True)
class NormalizedTrack:

	track_index: int
	name: str
	role: str
	channel: typing.Optional[int]
	program: typing.Optional[int]
	notes: typing.Sequence[NormalizedNote]


@dataclasses.dataclass(frozen=True)
class NormalizedMidi:

	filename: str
	ppq: int
	bpm: float
	numerator: int
	denominator: int
	beats_per_bar: float
	bars: int
	total_beats: float
	tracks: typing.Sequence[NormalizedTrack]


# ─── Map stage ───────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True)
class MappedTrack:

	"""A normalized track plus the sound it will be rendered with."""

	track: NormalizedTrack
	instrument: str
	sound: str
	gain: float


@dataclasses.dataclass(frozen=True)
class MappedMidi:

	midi: NormalizedMidi
	tracks: typing.Sequence[MappedTrack]
