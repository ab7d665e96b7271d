import typing

import strudelest.groove
import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""Map the 0.52-0.66 swing ratio onto ride swing and kit balance."""

	rotate = utils.to_boolean(params.get("rotate"), True)
	swing = utils.clamp(0.52, 0.66, utils.to_number(params.get("swing"), 0.6))
	swing_norm = (swing - 0.52) / 0.14

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		groove = strudelest.groove.Groove(swing=utils.r3(0.2 + swing_norm * 0.25), subdivision=4, layers=["ride"]),
		layer_base = {
			"ride": rules.LayerBase(gain=utils.r3(0.16 + swing_norm * 0.1), fast=utils.r3(0.98 + swing_norm * 0.04)),
			"snare": utils.gain(0.2 + swing_norm * 0.14),
			"kick": utils.gain(0.16 + swing_norm * 0.1),
			"bass": utils.gain(0.14 + swing_norm * 0.1),
		},
		phase_layer_base = {
			"full": {"bass": utils.gain(0.18 + swing_norm * 0.1)},
		}
	)


SWING_GROOVE = strudelest.template.Template(
	id = "swing-groove",
	label = "Swing Groove",
	description = "Jazz-inspired swing feel, light kit, walking-ish bass hints.",
	default_bpm = 120,
	default_bars = 64,
	default_params = {"rotate": True, "swing": 0.6},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("swing", "number", min=0.52, max=0.66, step=0.01),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("ride", "drums", base=rules.LayerBase(gain=0.22), patterns=[
				rules.PatternOption("hh ~ hh hh ~ hh ~ hh", 2),
				rules.PatternOption("hh*8", 1),
			]),
			rules.Layer("snare", "drums", base=rules.LayerBase(gain=0.28), patterns=[
				rules.PatternOption("~ ~ sd ~ ~ ~ sd ~", 2),
				rules.PatternOption("~ sd ~ ~ ~ ~ sd ~", 1),
			]),
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.2), patterns=[
				rules.PatternOption("bd ~ ~ ~ ~ ~ ~ ~", 2),
				rules.PatternOption("bd ~ ~ ~ bd ~ ~ ~", 1),
			]),
			rules.Layer("bass", "melodic", instrument="sine", base=rules.LayerBase(gain=0.18), patterns=[
				rules.PatternOption("c2 d2 eb2 e2", 2),
				rules.PatternOption("c2 ~ eb2 ~ g1 ~ bb1 ~", 1),
				rules.PatternOption("c2 ~ g1 ~ c2 ~ bb1 ~", 1),
			]),
		],
		phases = [
			rules.Phase("kit", ["ride", "kick"], pct=(0, 0.3)),
			rules.Phase("comp", ["ride", "kick", "snare"], pct=(0.3, 0.65)),
			rules.Phase("full", ["ride", "kick", "snare", "bass"], pct=(0.65, 1)),
		]
	),
	derive_runtime = derive_runtime
)
