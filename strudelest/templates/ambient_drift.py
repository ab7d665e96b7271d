import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""Airier settings slow everything down and push the hits further back."""

	rotate = utils.to_boolean(params.get("rotate"), True)
	airy = utils.clamp(0.2, 1, utils.to_number(params.get("airy"), 0.75))
	airy_norm = (airy - 0.2) / 0.8

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"pad": rules.LayerBase(gain=utils.r3(0.12 + airy_norm * 0.16), slow=utils.r3(3 + airy_norm * 3)),
			"sparkle": rules.LayerBase(gain=utils.r3(0.04 + airy_norm * 0.12), slow=utils.r3(1.5 + airy_norm * 2)),
			"soft-hits": utils.gain(0.1 - airy_norm * 0.06),
			"air": rules.LayerBase(gain=utils.r3(0.08 + airy_norm * 0.14), slow=utils.r3(3 + airy_norm * 3)),
		}
	)


AMBIENT_DRIFT = strudelest.template.Template(
	id = "ambient-drift",
	label = "Ambient Drift",
	description = "Ethereal soundscapes for meditation, slow movement, minimal rhythm.",
	default_bpm = 80,
	default_bars = 64,
	default_params = {"rotate": True, "airy": 0.75},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("airy", "number", min=0.2, max=1, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("pad", "melodic", instrument="sawtooth", base=rules.LayerBase(gain=0.22, slow=4), patterns=[
				rules.PatternOption("c4 eb4 g4 bb4", 2),
				rules.PatternOption("f4 g4 c5 eb5", 1),
			]),
			rules.Layer("sparkle", "melodic", instrument="triangle", base=rules.LayerBase(gain=0.1, slow=2), patterns=[
				rules.PatternOption("~ c6 ~ ~ ~ g5 ~ ~", 2),
				rules.PatternOption("~ ~ eb6 ~ ~ ~ bb5 ~", 1),
			]),
			rules.Layer("soft-hits", "drums", base=rules.LayerBase(gain=0.08), patterns=[
				rules.PatternOption("~ ~ ~ ~ cp ~ ~ ~", 2),
				rules.PatternOption("~ ~ ~ ~ ~ ~ cp ~", 1),
			]),
			rules.Layer("air", "texture", base=rules.LayerBase(gain=0.16, slow=4), patterns=[
				rules.PatternOption("hiss:4*2", 2),
				rules.PatternOption("hiss:4", 1),
			]),
		],
		phases = [
			rules.Phase("float", ["pad", "air"], pct=(0, 0.35)),
			rules.Phase("bloom", ["pad", "sparkle", "air"], pct=(0.35, 0.7)),
			rules.Phase("drift", ["pad", "sparkle", "soft-hits", "air"], pct=(0.7, 1)),
		]
	),
	derive_runtime = derive_runtime
)
