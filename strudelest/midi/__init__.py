"""Standard MIDI File import.

Converts format 0 and 1 MIDI files into pattern-language programs. See
:mod:`strudelest.midi.importer` for the pipeline and
:mod:`strudelest.midi.model` for the records it produces.

Package-level exports: ``import_midi_bytes``, ``import_midi_file``,
``MidiImportError``, ``MidiImportOptions``, ``MidiImportResult``.
"""

import strudelest.midi.importer as importer
import strudelest.midi.model as model


import_midi_bytes = importer.import_midi_bytes
import_midi_file = importer.import_midi_file
MidiImportError = model.MidiImportError
MidiImportOptions = model.MidiImportOptions
MidiImportResult = model.MidiImportResult
