import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	intensity = utils.clamp(0.2, 1, utils.to_number(params.get("intensity"), 0.85))
	hat_energy = utils.clamp(0.2, 1, utils.to_number(params.get("hat_energy"), 0.7))
	rotate = utils.to_boolean(params.get("rotate"), True)

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"kick": utils.gain(0.65 + intensity * 0.3),
			"hats": rules.LayerBase(gain=utils.r3(0.2 + hat_energy * 0.45), fast=utils.r3(0.8 + hat_energy * 0.5)),
			"clap": utils.gain(0.22 + intensity * 0.4),
			"perc": utils.gain(0.12 + intensity * 0.3),
			"stab": utils.gain(0.08 + intensity * 0.28),
		},
		phase_layer_base = {
			"foundation": {"kick": utils.gain(0.5 + intensity * 0.25)},
			"groove": {"hats": utils.gain(0.18 + hat_energy * 0.32)},
			"expand": {"stab": utils.gain(0.12 + intensity * 0.22)},
		}
	)


TECHNO_DRIVE = strudelest.template.Template(
	id = "techno-drive",
	label = "Techno Drive",
	description = "High-energy electronic beats with gradual layering.",
	default_bpm = 132,
	default_bars = 64,
	default_params = {"intensity": 0.85, "hat_energy": 0.7, "rotate": True},
	param_schema = [
		strudelest.template.ParamSpec("intensity", "number", min=0.2, max=1, step=0.05),
		strudelest.template.ParamSpec("hat_energy", "number", min=0.2, max=1, step=0.05),
		strudelest.template.ParamSpec("rotate", "boolean"),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.95), patterns=[
				rules.PatternOption("bd*4", 3),
				rules.PatternOption("bd bd bd bd", 1),
			]),
			rules.Layer("hats", "drums", base=rules.LayerBase(gain=0.45), patterns=[
				rules.PatternOption("~ hh ~ hh ~ hh ~ hh", 3),
				rules.PatternOption("hh*8", 1),
			]),
			rules.Layer("clap", "drums", base=rules.LayerBase(gain=0.55), patterns=[
				rules.PatternOption("~ cp ~ cp", 3),
				rules.PatternOption("~ cp [~ cp] cp", 1),
			]),
			rules.Layer("perc", "drums", base=rules.LayerBase(gain=0.32), patterns=[
				rules.PatternOption("~ ~ perc ~ ~ perc ~ ~", 2),
				rules.PatternOption("perc ~ ~ perc ~ perc ~ ~", 1),
			]),
			rules.Layer("stab", "melodic", instrument="sawtooth", base=rules.LayerBase(gain=0.28), patterns=[
				rules.PatternOption("c4 ~ ~ ~ eb4 ~ ~ ~", 2),
				rules.PatternOption("~ g4 ~ ~ ~ bb4 ~ ~", 1),
			]),
		],
		phases = [
			rules.Phase("foundation", ["kick"], pct=(0, 0.12)),
			rules.Phase("groove", ["kick", "hats", "clap"], pct=(0.12, 0.35)),
			rules.Phase("expand", ["kick", "hats", "clap", "perc", "stab"], pct=(0.35, 1)),
		]
	),
	derive_runtime = derive_runtime
)
