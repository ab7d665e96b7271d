import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""More haze pulls the drums back and stretches the chords and hiss."""

	rotate = utils.to_boolean(params.get("rotate"), True)
	haze = utils.clamp(0.2, 1, utils.to_number(params.get("haze"), 0.75))
	haze_norm = (haze - 0.2) / 0.8

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"kick": utils.gain(0.62 - haze_norm * 0.2),
			"snare": utils.gain(0.5 - haze_norm * 0.15),
			"hats": utils.gain(0.3 - haze_norm * 0.1),
			"chords": rules.LayerBase(gain=utils.r3(0.14 + haze_norm * 0.12), slow=utils.r3(1.5 + haze_norm * 1.5)),
			"lead": utils.gain(0.06 + haze_norm * 0.08),
			"hiss": rules.LayerBase(gain=utils.r3(0.09 + haze_norm * 0.09), slow=utils.r3(2 + haze_norm * 4)),
		}
	)


CHILLWAVE_VIBES = strudelest.template.Template(
	id = "chillwave-vibes",
	label = "Chillwave Vibes",
	description = "Laid-back synths, soft drums, nostalgic haze.",
	default_bpm = 96,
	default_bars = 64,
	default_params = {"rotate": True, "haze": 0.75},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("haze", "number", min=0.2, max=1, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.55), patterns=[
				rules.PatternOption("bd ~ ~ ~ bd ~ ~ ~", 3),
				rules.PatternOption("bd ~ bd ~ ~ ~ bd ~", 1),
			]),
			rules.Layer("snare", "drums", base=rules.LayerBase(gain=0.4), patterns=[
				rules.PatternOption("~ sd ~ sd", 3),
				rules.PatternOption("~ sd [~ sd] sd", 1),
			]),
			rules.Layer("hats", "drums", base=rules.LayerBase(gain=0.22), patterns=[
				rules.PatternOption("hh*8", 2),
				rules.PatternOption("~ hh ~ hh ~ ~ hh ~", 1),
			]),
			rules.Layer("chords", "melodic", instrument="sawtooth", base=rules.LayerBase(gain=0.2, slow=2), patterns=[
				rules.PatternOption("c4 eb4 g4 bb4", 2),
				rules.PatternOption("ab3 c4 eb4 g4", 1),
			]),
			rules.Layer("lead", "melodic", instrument="triangle", base=rules.LayerBase(gain=0.1), patterns=[
				rules.PatternOption("~ g5 ~ ~ ~ eb5 ~ ~", 2),
				rules.PatternOption("~ ~ bb5 ~ ~ ~ g5 ~", 1),
			]),
			rules.Layer("hiss", "texture", base=rules.LayerBase(gain=0.14, slow=4), patterns=[
				rules.PatternOption("hiss:4*2", 2),
				rules.PatternOption("hiss:4", 1),
			]),
		],
		phases = [
			rules.Phase("bed", ["chords", "hiss"], pct=(0, 0.25)),
			rules.Phase("beat", ["kick", "snare", "hats", "chords", "hiss"], pct=(0.25, 0.6)),
			rules.Phase("lift", ["kick", "snare", "hats", "chords", "lead", "hiss"], pct=(0.6, 1)),
		]
	),
	derive_runtime = derive_runtime
)
