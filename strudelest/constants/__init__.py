"""Fixed MIDI lookup tables used by the importer.

- ``strudelest.constants.gm_drums`` - General MIDI drum notes and their pattern tokens
- ``strudelest.constants.gm_programs`` - General MIDI program families and their synth sounds
- ``strudelest.constants.note_names`` - pitch-class spellings for note names
"""
