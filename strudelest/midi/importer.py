"""MIDI import pipeline: Parse, Normalize, Quantize, Map, Codegen.

Stages run in a fixed order. Any stage may raise
:class:`~strudelest.midi.model.MidiImportError`, which aborts the import with
no partial result; every other problem is collected as a warning and
returned with the program.

Example:
	```python
	import strudelest.midi

	result = strudelest.midi.import_midi_file("song.mid", {"quantize_division": 8})
	print(result.code)
	for line in result.section_summary:
		print(line)
	```
"""

import dataclasses
import io
import logging
import os
import typing

import mido

import strudelest.midi.codegen
import strudelest.midi.mapping
import strudelest.midi.model as model
import strudelest.midi.normalize
import strudelest.midi.parse
import strudelest.midi.quantize


logger = logging.getLogger(__name__)

OptionsLike = typing.Union[None, model.MidiImportOptions, typing.Mapping[str, typing.Any]]


def resolve_options (options: OptionsLike = None) -> model.MidiImportOptions:

	"""
	Merge caller options over the defaults.

	Accepts a full :class:`MidiImportOptions`, a mapping of field names to
	override (``None`` values are ignored), or None.
	"""

	if options is None:
		return model.DEFAULT_MIDI_IMPORT_OPTIONS

	if isinstance(options, model.MidiImportOptions):
		return options

	known = {field.name for field in dataclasses.fields(model.MidiImportOptions)}
	unknown = set(options) - known

	if unknown:
		raise ValueError(f"Unknown MIDI import options: {', '.join(sorted(unknown))}")

	overrides = {key: value for key, value in options.items() if value is not None}

	return dataclasses.replace(model.DEFAULT_MIDI_IMPORT_OPTIONS, **overrides)


def summarize_warnings (warnings: typing.Iterable[model.MidiImportWarning]) -> typing.List[str]:

	"""Return one ``Warning: ...`` line per warning, with the count when above one."""

	lines = []

	for warning in warnings:
		suffix = f" ({warning.count})" if warning.count > 1 else ""
		lines.append(f"Warning: {warning.message}{suffix}")

	return lines


def import_midi_bytes (data: bytes, filename: str, options: OptionsLike = None) -> model.MidiImportResult:

	"""
	Import a Standard MIDI File held in memory.

	Parameters:
		data: Raw file bytes (format 0 or 1).
		filename: Name used in the program header and summary.
		options: Import options (see :func:`resolve_options`).

	Raises:
		MidiImportError: On any fatal condition.
	"""

	resolved = resolve_options(options)

	try:
		parsed = strudelest.midi.parse.parse_midi_bytes(data)
		normalized = strudelest.midi.normalize.normalize_parsed_midi(parsed, filename, resolved)
		quantized = strudelest.midi.quantize.quantize_normalized_midi(normalized.midi, resolved)
		mapped = strudelest.midi.mapping.map_normalized_midi(quantized, normalized.track_reports)
		generated = strudelest.midi.codegen.build_strudel_from_midi(mapped.midi, filename, resolved)

	except model.MidiImportError:
		raise

	except (ValueError, KeyError, IndexError, EOFError, OSError) as exc:
		raise model.MidiImportError(model.INVALID_MIDI, "MIDI import failed due to invalid or unsupported file content.") from exc

	collector = strudelest.midi.normalize.WarningCollector()
	collector.extend(normalized.warnings)
	collector.extend(mapped.warnings)
	warnings = collector.warnings()

	for warning in warnings:
		logger.warning(f"{filename}: {warning.message} ({warning.code}, {warning.count})")

	logger.info(f"Imported {filename}: {len(mapped.midi.tracks)} tracks, {quantized.bars} bars at {quantized.bpm} BPM")

	return model.MidiImportResult(
		code = generated.code,
		bpm = quantized.bpm,
		bars = quantized.bars,
		tracks_imported = len(mapped.midi.tracks),
		warnings = warnings,
		track_reports = mapped.track_reports,
		section_summary = list(generated.section_summary) + summarize_warnings(warnings)
	)


def import_midi_file (path: typing.Union[str, os.PathLike], options: OptionsLike = None) -> model.MidiImportResult:

	"""Read ``path`` and import it, labelling the result with the file's base name."""

	with open(path, "rb") as handle:
		data = handle.read()

	return import_midi_bytes(data, os.path.basename(os.fspath(path)), options)


def midi_file_to_bytes (midi_file: mido.MidiFile) -> bytes:

	"""Serialize a ``mido.MidiFile`` so it can be passed to :func:`import_midi_bytes`."""

	buffer = io.BytesIO()
	midi_file.save(file=buffer)

	return buffer.getvalue()
