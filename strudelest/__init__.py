"""
Strudelest - seeded, rule-based generation of live-coding music programs.

Strudelest writes programs in a compact pattern language (``s("bd*4")``,
``note("c4 eb4").s("sawtooth")``, ``stack(...)``, ``cat(...)``) that a live
coding runtime can play. It never makes sound itself: every operation is a
pure function from inputs to program text, and the same inputs always give
byte-identical output.

- **Templates.** Eleven declarative templates (techno, 80's rap, ambient,
  swing, ...) each describe layers of weighted pattern choices and phases
  that bring those layers in and out over a piece.
- **Generator.** ``generate_piece()`` resolves a template's parameters from
  a seed, renders it and wraps the program in a ``PieceSpec`` record.
- **Arranger.** ``generate_long_form_piece()`` stitches five energy-shaped
  sections of one template into a 32-128 bar piece.
- **MIDI import.** ``strudelest.midi.import_midi_file()`` turns a Standard
  MIDI File into one stacked program, with warnings for anything lossy.
- **Tempo helpers.** ``strudelest.tempo`` reads and rewrites the tempo
  statement of a finished program.

Minimal example:

    ```python
    import strudelest
    import strudelest.templates

    piece = strudelest.generate_piece(strudelest.templates.get_template("techno"), seed="abc123")
    print(piece.code)
    ```

Package-level exports: ``generate_piece``, ``generate_long_form_piece``,
``render_rules``, ``create_seed``, ``PieceSpec``.
"""

import strudelest.arranger
import strudelest.generator
import strudelest.render


generate_piece = strudelest.generator.generate_piece
generate_long_form_piece = strudelest.arranger.generate_long_form_piece
render_rules = strudelest.render.render_rules
create_seed = strudelest.generator.create_seed
PieceSpec = strudelest.generator.PieceSpec
