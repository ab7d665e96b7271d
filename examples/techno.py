import logging

import strudelest
import strudelest.templates

logging.basicConfig(level=logging.INFO)

techno = strudelest.templates.get_template("techno")

# Same seed, same program. Leave the seed out for a fresh one each run.
piece = strudelest.generate_piece(
	techno,
	seed = "warehouse-7",
	bpm = 130,
	bars = 32,
	params = {"drive": 0.9, "rotate": True}
)

print(f"// {piece.name} (seed {piece.seed})")
print(piece.code)
print()

# A five-section club arrangement of the same template, 64 bars long.
arrangement = strudelest.generate_long_form_piece(techno, seed="warehouse-7", bpm=130, style="club", length="medium")

for section in arrangement.sections:
	print(f"// {section.label}: {section.bars} bars, energy {section.energy:.2f}")

print(arrangement.code)
