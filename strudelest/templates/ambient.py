import typing

import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils



def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""Pad-led balance: ``air`` lifts pad and texture, ``motion`` the bass and sparkle."""

	rotate = utils.to_boolean(params.get("rotate"), True)
	air = utils.clamp(0.2, 1, utils.to_number(params.get("air"), 0.7))
	motion = utils.clamp(0, 1, utils.to_number(params.get("motion"), 0.4))

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		layer_base = {
			"pad": utils.gain(0.18 + air * 0.12),
			"bass": utils.gain(0.04 + motion * 0.09),
			"texture": utils.gain(0.04 + air * 0.08),
			"sparkle": utils.gain(0.01 + air * 0.03 + motion * 0.03),
		},
		phase_layer_base = {
			"09-bass-soften": {"bass": utils.gain(0.02 + motion * 0.05)},
			"12-pad-only-outro": {"pad": utils.gain(0.14 + air * 0.07)},
		}
	)


AMBIENT = strudelest.template.Template(
	id = "ambient",
	label = "Ambient",
	description = "Pad-led drift, slow harmonic shifts, sparse sparkle, and a pad-only fade.",
	default_bpm = 74,
	default_bars = 64,
	default_params = {"rotate": True, "air": 0.7, "motion": 0.4},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("air", "number", min=0.2, max=1, step=0.05),
		strudelest.template.ParamSpec("motion", "number", min=0, max=1, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("pad", "melodic", instrument="sawtooth", base=rules.LayerBase(gain=0.24), patterns=[
				rules.PatternOption("c4 eb4 g4 bb4", 4),
				rules.PatternOption("ab3 c4 eb4 g4", 3),
				rules.PatternOption("f4 ab4 c5 eb5", 2),
				rules.PatternOption("bb3 d4 f4 a4", 1),
			]),
			rules.Layer("bass", "melodic", instrument="sine", base=rules.LayerBase(gain=0.12), patterns=[
				rules.PatternOption("c2 ~ ~ ~", 4),
				rules.PatternOption("c2 ~ g1 ~", 2),
				rules.PatternOption("f2 ~ ~ ~", 1),
			]),
			rules.Layer("texture", "texture", base=rules.LayerBase(gain=0.11, slow=4), patterns=[
				rules.PatternOption("hiss:4*2", 3),
				rules.PatternOption("hiss:4", 2),
				rules.PatternOption("hiss", 1),
			]),
			rules.Layer("sparkle", "melodic", instrument="triangle", base=rules.LayerBase(gain=0.06), patterns=[
				rules.PatternOption("~ c6 ~ ~ ~ g5 ~ ~", 2),
				rules.PatternOption("~ ~ eb6 ~ ~ ~ bb5 ~", 2),
				rules.PatternOption("~ ~ ~ g5 ~ ~ ~ eb6", 1),
			]),
		],
		phases = [
			rules.Phase("01-pad-hold", ["pad"], bars=(1, 8)),
			rules.Phase("02-pad-shift", ["pad"], bars=(9, 16)),
			rules.Phase("03-bass-under", ["pad", "bass"], bars=(17, 24)),
			rules.Phase("04-texture-in", ["pad", "bass", "texture"], bars=(25, 32)),
			rules.Phase("05-sparkle-in", ["pad", "bass", "texture", "sparkle"], bars=(33, 40)),
			rules.Phase("06-drift-hold", ["pad", "bass", "texture", "sparkle"], bars=(41, 46)),
			rules.Phase("07-sparkle-out", ["pad", "bass", "texture"], bars=(47, 50)),
			rules.Phase("08-sparkle-back", ["pad", "bass", "texture", "sparkle"], bars=(51, 54)),
			rules.Phase("09-bass-soften", ["pad", "bass", "texture", "sparkle"], bars=(55, 58)),
			rules.Phase("10-sparkle-outro-off", ["pad", "bass", "texture"], bars=(59, 60)),
			rules.Phase("11-texture-outro-off", ["pad", "bass"], bars=(61, 62)),
			rules.Phase("12-pad-only-outro", ["pad"], bars=(63, 64)),
		]
	),
	derive_runtime = derive_runtime
)
