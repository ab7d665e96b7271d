import typing

import strudelest.formatting
import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""Speed each layer so it plays ``cycle`` hits where the pattern has four."""

	cycle_a = utils.to_number(params.get("cycle_a"), 3)
	cycle_b = utils.to_number(params.get("cycle_b"), 5)

	return rules.RuntimeOverrides(
		rotate_patterns = utils.to_boolean(params.get("rotate")),
		layer_base = {
			"cycle-a": rules.LayerBase(fast=strudelest.formatting.round_to(cycle_a / 4, 3)),
			"cycle-b": rules.LayerBase(fast=strudelest.formatting.round_to(cycle_b / 4, 3)),
		}
	)


POLYRHYTHM_GRID = strudelest.template.Template(
	id = "polyrhythm-grid",
	label = "Polyrhythm Grid",
	description = "Interlocked cycles with metric contrast.",
	default_bpm = 120,
	default_bars = 8,
	default_params = {"cycle_a": "3", "cycle_b": "5", "rotate": False},
	param_schema = [
		strudelest.template.ParamSpec("cycle_a", "select", options=("3", "4", "5")),
		strudelest.template.ParamSpec("cycle_b", "select", options=("5", "7", "9")),
		strudelest.template.ParamSpec("rotate", "boolean"),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = False,
		rotate_patterns = False,
		layers = [
			rules.Layer("cycle-a", "drums", base=rules.LayerBase(gain=0.85), patterns=[
				rules.PatternOption("bd*4", 2),
				rules.PatternOption("bd bd ~ bd", 1),
			]),
			rules.Layer("cycle-b", "drums", base=rules.LayerBase(gain=0.55), patterns=[
				rules.PatternOption("cp*4", 2),
				rules.PatternOption("cp ~ cp ~", 1),
			]),
		],
		phases = [
			rules.Phase("grid", ["cycle-a", "cycle-b"], pct=(0, 1)),
		]
	),
	derive_runtime = derive_runtime
)
