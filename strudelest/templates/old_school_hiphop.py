import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	grit = utils.clamp(0, 1, utils.to_number(params.get("grit"), 0.55))
	rotate = utils.to_boolean(params.get("rotate"), True)

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"kick": utils.gain(0.6 + grit * 0.32),
			"snare": utils.gain(0.42 + grit * 0.34),
			"hats": utils.gain(0.18 + grit * 0.24),
			"bass": utils.gain(0.2 + grit * 0.3),
			"texture": utils.gain(0.06 + grit * 0.18),
		},
		phase_layer_base = {
			"core": {"hats": utils.gain(0.12 + grit * 0.2)},
			"full": {"texture": utils.gain(0.1 + grit * 0.18)},
		}
	)


OLD_SCHOOL_HIPHOP = strudelest.template.Template(
	id = "old-school-hiphop",
	label = "Old School Hip Hop",
	description = "Classic boom bap with hats and light texture.",
	default_bpm = 88,
	default_bars = 64,
	default_params = {"grit": 0.55, "rotate": True},
	param_schema = [
		strudelest.template.ParamSpec("grit", "number", min=0, max=1, step=0.05),
		strudelest.template.ParamSpec("rotate", "boolean"),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("snare", "drums", base=rules.LayerBase(gain=0.7), patterns=[
				rules.PatternOption("~ sd ~ sd", 4),
				rules.PatternOption("[~ sd] sd ~ sd", 1),
			]),
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.85), patterns=[
				rules.PatternOption("bd ~ ~ ~ bd ~ ~ ~", 2),
				rules.PatternOption("bd ~ bd ~ ~ ~ bd ~", 2),
				rules.PatternOption("bd ~ ~ bd ~ ~ bd ~", 1),
			]),
			rules.Layer("hats", "drums", base=rules.LayerBase(gain=0.35), patterns=[
				rules.PatternOption("hh*8", 2),
				rules.PatternOption("hh*16", 1),
			]),
			rules.Layer("bass", "melodic", instrument="sine", base=rules.LayerBase(gain=0.35), patterns=[
				rules.PatternOption("c2 ~ c2 ~ eb2 ~ c2 ~", 2),
				rules.PatternOption("c2 ~ ~ c2 g1 ~ c2 ~", 1),
			]),
			rules.Layer("texture", "texture", base=rules.LayerBase(gain=0.16, slow=4), patterns=[
				rules.PatternOption("hiss:4*2", 2),
				rules.PatternOption("hiss:4", 1),
			]),
		],
		phases = [
			rules.Phase("core", ["kick", "snare", "hats"], pct=(0, 0.2)),
			rules.Phase("bass", ["kick", "snare", "hats", "bass"], pct=(0.2, 0.35)),
			rules.Phase("full", ["kick", "snare", "hats", "bass", "texture"], pct=(0.35, 1)),
		]
	),
	derive_runtime = derive_runtime
)
