import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""More space scales every part down and lets the texture breathe."""

	rotate = utils.to_boolean(params.get("rotate"), True)
	space = utils.clamp(0.2, 1, utils.to_number(params.get("space"), 0.8))
	occupancy = 1 - (space - 0.2) / 0.8
	gain_scale = 0.45 + occupancy * 0.55

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"kick": utils.gain(0.65 * gain_scale),
			"click": utils.gain(0.28 * gain_scale),
			"hat": utils.gain(0.18 * gain_scale),
			"sub": utils.gain(0.22 * gain_scale),
			"texture": rules.LayerBase(gain=utils.r3(0.14 * (0.65 + space * 0.35)), slow=utils.r3(2 + space * 4)),
		}
	)


MINIMAL_GROOVE = strudelest.template.Template(
	id = "minimal-groove",
	label = "Minimal Groove",
	description = "Low-key, minimal pulse with lots of space.",
	default_bpm = 112,
	default_bars = 64,
	default_params = {"rotate": True, "space": 0.8},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("space", "number", min=0.2, max=1, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.65), patterns=[
				rules.PatternOption("bd ~ ~ ~ bd ~ ~ ~", 3),
				rules.PatternOption("bd ~ ~ bd ~ ~ ~ ~", 1),
			]),
			rules.Layer("click", "drums", base=rules.LayerBase(gain=0.28), patterns=[
				rules.PatternOption("~ ~ cp ~ ~ ~ cp ~", 2),
				rules.PatternOption("~ cp ~ ~ ~ ~ cp ~", 1),
			]),
			rules.Layer("hat", "drums", base=rules.LayerBase(gain=0.18), patterns=[
				rules.PatternOption("~ hh ~ ~ ~ hh ~ ~", 3),
				rules.PatternOption("~ ~ hh ~ ~ ~ hh ~", 1),
			]),
			rules.Layer("sub", "melodic", instrument="sine", base=rules.LayerBase(gain=0.22), patterns=[
				rules.PatternOption("c2 ~ ~ ~ c2 ~ ~ ~", 2),
				rules.PatternOption("c2 ~ g1 ~ c2 ~ ~ ~", 1),
			]),
			rules.Layer("texture", "texture", base=rules.LayerBase(gain=0.14, slow=4), patterns=[
				rules.PatternOption("hiss:4*2", 2),
				rules.PatternOption("hiss:4", 1),
			]),
		],
		phases = [
			rules.Phase("intro", ["kick", "texture"], pct=(0, 0.22)),
			rules.Phase("groove", ["kick", "click", "texture"], pct=(0.22, 0.55)),
			rules.Phase("full", ["kick", "click", "hat", "sub", "texture"], pct=(0.55, 1)),
		]
	),
	derive_runtime = derive_runtime
)
