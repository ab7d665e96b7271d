import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


STAB_OPTIONS = ["stab", "stab-alt"]
PERC_OPTIONS = ["perc", "perc-alt"]
RUMBLE_CHANCE = 0.45

FULL_KIT = ["kick", "hat", "clap", "bass", "stab", "stab-alt", "perc", "perc-alt", "rumble"]


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""
	Drive and brightness set the balance; the seed picks which optional layers play.

	Exactly one stab and one perc variant sound once they enter, and the
	rumble layer is kept in a little under half of all seeds.
	"""

	rotate = utils.to_boolean(params.get("rotate"), True)
	drive = utils.clamp(0.2, 1, utils.to_number(params.get("drive"), 0.8))
	bright = utils.clamp(0, 1, utils.to_number(params.get("brightness"), 0.6))

	rng = utils.optional_stream(seed, "techno")
	chosen_stab = utils.pick_one(rng, STAB_OPTIONS)
	chosen_perc = utils.pick_one(rng, PERC_OPTIONS)
	use_rumble = rng.random() < RUMBLE_CHANCE

	stabs = utils.mute_unselected(STAB_OPTIONS, [chosen_stab])
	percs = utils.mute_unselected(PERC_OPTIONS, [chosen_perc])
	rumble = {} if use_rumble else {"rumble": rules.LayerBase(gain=0)}

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"kick": utils.gain(0.85 + drive * 0.11),
			"hat": utils.gain(0.17 + drive * 0.12 + bright * 0.09),
			"clap": utils.gain(0.32 + drive * 0.2),
			"bass": utils.gain(0.14 + drive * 0.14),
			"stab": utils.gain(0.07 + drive * 0.08 + bright * 0.09),
			"stab-alt": utils.gain(0.06 + drive * 0.07 + bright * 0.08),
			"perc": utils.gain(0.08 + drive * 0.14 + bright * 0.04),
			"perc-alt": utils.gain(0.07 + drive * 0.12 + bright * 0.03),
			"rumble": utils.gain(0.05 + drive * 0.08),
		},
		phase_layer_base = {
			"05-stab-hook": {**stabs, **rumble},
			"06-perc-accent": {**stabs, **percs, **rumble},
			"07-tension-drop": {**stabs, **percs, **rumble, "kick": utils.gain(0.9 + drive * 0.08)},
			"08-full-return": {**stabs, **percs, **rumble},
			"09-cycle-variation": {**stabs, **percs, **rumble},
			"10-outro-perc-out": {**stabs, **rumble},
			"11-outro-clap-out": {**stabs, **rumble},
			"12-outro-stab-out": dict(rumble),
		}
	)


TECHNO = strudelest.template.Template(
	id = "techno",
	label = "Techno",
	description = "Additive four-on-the-floor build with seed-varied optional layers, a brief tension drop, and a stripped outro.",
	default_bpm = 132,
	default_bars = 64,
	default_params = {"rotate": True, "drive": 0.8, "brightness": 0.6},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("drive", "number", min=0.2, max=1, step=0.05),
		strudelest.template.ParamSpec("brightness", "number", min=0, max=1, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.92), patterns=[
				rules.PatternOption("bd*4", 5),
				rules.PatternOption("bd bd bd bd", 1),
			]),
			rules.Layer("hat", "drums", base=rules.LayerBase(gain=0.3), patterns=[
				rules.PatternOption("~ hh ~ hh ~ hh ~ hh", 4),
				rules.PatternOption("~ hh ~ hh [~ hh] ~ hh", 2),
			]),
			rules.Layer("clap", "drums", base=rules.LayerBase(gain=0.52), patterns=[
				rules.PatternOption("~ cp ~ cp", 5),
				rules.PatternOption("~ cp ~ [~ cp]", 1),
			]),
			rules.Layer("bass", "melodic", instrument="square", base=rules.LayerBase(gain=0.24), patterns=[
				rules.PatternOption("c2 ~ c2 ~ c2 ~ c2 ~", 4),
				rules.PatternOption("c2 ~ ~ c2 c2 ~ ~ ~", 2),
			]),
			rules.Layer("perc", "drums", base=rules.LayerBase(gain=0.2), patterns=[
				rules.PatternOption("~ ~ perc ~ ~ ~ ~ ~", 3),
				rules.PatternOption("~ ~ ~ ~ perc ~ ~ ~", 2),
			]),
			rules.Layer("perc-alt", "drums", base=rules.LayerBase(gain=0.18), patterns=[
				rules.PatternOption("~ perc ~ ~ ~ ~ perc ~", 2),
				rules.PatternOption("~ ~ ~ perc ~ ~ ~ ~", 1),
			]),
			rules.Layer("stab", "melodic", instrument="sawtooth", base=rules.LayerBase(gain=0.18), patterns=[
				rules.PatternOption("~ c4 ~ ~ ~ ~ ~ ~", 3),
				rules.PatternOption("~ ~ ~ eb4 ~ ~ ~ ~", 2),
			]),
			rules.Layer("stab-alt", "melodic", instrument="square", base=rules.LayerBase(gain=0.16), patterns=[
				rules.PatternOption("~ ~ c4 ~ ~ ~ ~ ~", 2),
				rules.PatternOption("~ ~ ~ ~ eb4 ~ ~ ~", 1),
			]),
			rules.Layer("rumble", "melodic", instrument="sine", base=rules.LayerBase(gain=0.12), patterns=[
				rules.PatternOption("c1 ~ ~ ~ c1 ~ ~ ~", 2),
				rules.PatternOption("c1 ~ c1 ~ ~ ~ c1 ~", 1),
			]),
		],
		phases = [
			rules.Phase("01-kick-lock", ["kick"], bars=(1, 4)),
			rules.Phase("02-offbeat-hats", ["kick", "hat"], bars=(5, 8)),
			rules.Phase("03-clap-structure", ["kick", "hat", "clap"], bars=(9, 12)),
			rules.Phase("04-bass-pulse", ["kick", "hat", "clap", "bass"], bars=(13, 16)),
			rules.Phase("05-stab-hook", ["kick", "hat", "clap", "bass", "stab", "stab-alt", "rumble"], bars=(17, 24)),
			rules.Phase("06-perc-accent", FULL_KIT, bars=(25, 32)),
			rules.Phase("07-tension-drop", ["kick", "clap", "bass", "stab", "stab-alt", "perc", "perc-alt", "rumble"], bars=(33, 34)),
			rules.Phase("08-full-return", FULL_KIT, bars=(35, 40)),
			rules.Phase("09-cycle-variation", FULL_KIT, bars=(41, 56)),
			rules.Phase("10-outro-perc-out", ["kick", "hat", "clap", "bass", "stab", "stab-alt", "rumble"], bars=(57, 58)),
			rules.Phase("11-outro-clap-out", ["kick", "hat", "bass", "stab", "stab-alt", "rumble"], bars=(59, 60)),
			rules.Phase("12-outro-stab-out", ["kick", "hat", "bass", "rumble"], bars=(61, 62)),
			rules.Phase("13-outro-bass-out", ["kick", "hat"], bars=(63, 64)),
		]
	),
	derive_runtime = derive_runtime
)
