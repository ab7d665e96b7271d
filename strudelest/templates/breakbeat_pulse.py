import typing

import strudelest.groove
import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""
	Edge raises the whole kit and adds a touch of swing to the hats.

	Rotation is off unless asked for, so each layer keeps the chop it was
	dealt for the whole piece.
	"""

	rotate = utils.to_boolean(params.get("rotate"), False)
	edge = utils.clamp(0.2, 1, utils.to_number(params.get("edge"), 0.7))
	edge_norm = (edge - 0.2) / 0.8

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		groove = strudelest.groove.Groove(swing=utils.r3(0.08 + edge_norm * 0.08), subdivision=4, layers=["hats"]),
		layer_base = {
			"kick": utils.gain(0.62 + edge_norm * 0.32),
			"snare": utils.gain(0.45 + edge_norm * 0.35),
			"ghost-snare": utils.gain(0.05 + edge_norm * 0.08),
			"hats": utils.gain(0.2 + edge_norm * 0.18),
			"perc": utils.gain(0.12 + edge_norm * 0.2),
		},
		phase_layer_base = {
			"intro": {"snare": utils.gain(0.42 + edge_norm * 0.22)},
			"drive": {"hats": utils.gain(0.16 + edge_norm * 0.15)},
			"full": {
				"ghost-snare": utils.gain(0.06 + edge_norm * 0.12),
				"perc": utils.gain(0.16 + edge_norm * 0.24),
			},
		}
	)


BREAKBEAT_PULSE = strudelest.template.Template(
	id = "breakbeat-pulse",
	label = "Breakbeat Pulse",
	description = "Energetic chopped rhythms with syncopation and fills.",
	default_bpm = 132,
	default_bars = 64,
	default_params = {"rotate": False, "edge": 0.7},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("edge", "number", min=0.2, max=1, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.9), patterns=[
				rules.PatternOption("bd*2 [~ bd] bd", 3),
				rules.PatternOption("bd [~ bd] ~ bd", 1),
				rules.PatternOption("bd ~ [~ bd] bd ~ ~ bd ~", 1),
			]),
			rules.Layer("snare", "drums", base=rules.LayerBase(gain=0.75), patterns=[
				rules.PatternOption("~ sd ~ sd", 3),
				rules.PatternOption("~ sd [~ sd] sd", 1),
				rules.PatternOption("~ sd ~ [~ sd] ~ sd ~ sd", 1),
			]),
			rules.Layer("ghost-snare", "drums", base=rules.LayerBase(gain=0.12), patterns=[
				rules.PatternOption("~ ~ sd ~ ~ ~ ~ ~", 3),
				rules.PatternOption("~ sd ~ ~ ~ ~ ~ ~", 1),
			]),
			rules.Layer("hats", "drums", base=rules.LayerBase(gain=0.35), patterns=[
				rules.PatternOption("hh*8", 3),
				rules.PatternOption("hh*16", 1),
				rules.PatternOption("hh*8 ~ hh*8 ~", 1),
				rules.PatternOption("hh*8 [~ oh] hh*8 ~", 1),
			]),
			rules.Layer("perc", "drums", base=rules.LayerBase(gain=0.3), patterns=[
				rules.PatternOption("~", 2),
				rules.PatternOption("~ perc ~ ~ perc ~ perc ~", 2),
				rules.PatternOption("perc ~ ~ perc ~ ~ perc ~", 1),
				rules.PatternOption("perc [~ perc] ~ perc ~ perc [~ perc] ~", 1),
			]),
		],
		phases = [
			rules.Phase("intro", ["kick", "snare"], bars=(1, 4)),
			rules.Phase("drive", ["kick", "snare", "hats"], bars=(5, 8)),
			rules.Phase("full", ["kick", "snare", "ghost-snare", "hats", "perc"], bars=(9, 16)),
		]
	),
	derive_runtime = derive_runtime
)
