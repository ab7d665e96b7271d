import typing

import strudelest.groove
import strudelest.rules as rules
import strudelest.template
import strudelest.templates.utils as utils


GHOST_OPTIONS = ["ghost-snare", "ghost-snare-alt"]
CLAP_OPTIONS = ["clap", "clap-soft"]
TEXTURE_OPTIONS = ["texture", "texture-alt"]
HAT_FEATURE_OPTIONS = ["hats-feature", "hats-feature-alt"]

DUAL_TEXTURE_CHANCE = 0.25
ADLIB_HAT_CHANCE = 0.45

SWUNG_LAYERS = ["hats", "hats-feature", "hats-feature-alt", "ghost-snare", "ghost-snare-alt", "adlib-hat"]


def derive_runtime (params: typing.Mapping[str, typing.Any], seed: str) -> rules.RuntimeOverrides:

	"""Grit lifts the whole kit; swing drives an eighth-note groove on the hats and ghost notes."""

	rotate = utils.to_boolean(params.get("rotate"), True)
	grit = utils.clamp(0, 1, utils.to_number(params.get("grit"), 0.6))
	swing = utils.clamp(0, 0.3, utils.to_number(params.get("swing"), 0.2))

	# Draw order matters: changing it changes every seed's arrangement.
	rng = utils.optional_stream(seed, "rap80s")
	chosen_ghost = utils.pick_one(rng, GHOST_OPTIONS)
	chosen_clap = utils.pick_one(rng, CLAP_OPTIONS)
	chosen_hat_feature = utils.pick_one(rng, HAT_FEATURE_OPTIONS)
	chosen_texture = utils.pick_one(rng, TEXTURE_OPTIONS)
	use_dual_texture = rng.random() < DUAL_TEXTURE_CHANCE
	keep_textures = TEXTURE_OPTIONS if use_dual_texture else [chosen_texture]
	use_adlib_hat = rng.random() < ADLIB_HAT_CHANCE

	ghosts = utils.mute_unselected(GHOST_OPTIONS, [chosen_ghost])
	adlib = {} if use_adlib_hat else {"adlib-hat": rules.LayerBase(gain=0)}

	return rules.RuntimeOverrides(
		rotate_patterns = rotate,
		groove = strudelest.groove.Groove(
			swing = utils.r3(0.14 + swing * 0.4),
			subdivision = 8,
			layers = SWUNG_LAYERS
		),
		layer_base = {
			"kick": utils.gain(0.68 + grit * 0.24),
			"snare": utils.gain(0.48 + grit * 0.26),
			"hats": utils.gain(0.18 + grit * 0.16),
			"hats-feature": utils.gain(0.16 + grit * 0.14),
			"hats-feature-alt": utils.gain(0.15 + grit * 0.13),
			"bass": utils.gain(0.12 + grit * 0.2),
			"ghost-snare": utils.gain(0.04 + grit * 0.04),
			"ghost-snare-alt": utils.gain(0.03 + grit * 0.05),
			"clap": utils.gain(0.1 + grit * 0.12),
			"clap-soft": utils.gain(0.07 + grit * 0.1),
			"adlib-hat": utils.gain(0.06 + grit * 0.08),
			"texture": utils.gain(0.02 + grit * 0.07),
			"texture-alt": utils.gain(0.02 + grit * 0.06),
		},
		phase_layer_base = {
			"04-bass-b": {"bass": utils.gain(0.14 + grit * 0.18)},
			"05-ghost-clap": {
				**ghosts,
				**utils.mute_unselected(CLAP_OPTIONS, [chosen_clap]),
				**adlib,
			},
			"06-texture-in": {
				**ghosts,
				**utils.mute_unselected(HAT_FEATURE_OPTIONS, [chosen_hat_feature]),
				**utils.mute_unselected(TEXTURE_OPTIONS, keep_textures),
				**adlib,
				"bass": utils.gain(0.1 + grit * 0.16),
			},
		}
	)


RAP_80S = strudelest.template.Template(
	id = "rap-80s",
	label = "80's Rap",
	description = "Kick and snare anchor, seed-varied optional layers, locked hat and ghost-note swing, and a stripped drum outro.",
	default_bpm = 92,
	default_bars = 64,
	default_params = {"rotate": True, "grit": 0.6, "swing": 0.2},
	param_schema = [
		strudelest.template.ParamSpec("rotate", "boolean"),
		strudelest.template.ParamSpec("grit", "number", min=0, max=1, step=0.05),
		strudelest.template.ParamSpec("swing", "number", min=0, max=0.3, step=0.05),
	],
	rules = rules.RuleSet(
		scale_phases_to_bars = True,
		rotate_patterns = True,
		layers = [
			rules.Layer("kick", "drums", base=rules.LayerBase(gain=0.86), patterns=[
				rules.PatternOption("bd ~ ~ ~ bd ~ ~ ~", 3),
				rules.PatternOption("bd ~ bd ~ ~ ~ bd ~", 3),
				rules.PatternOption("bd ~ ~ bd ~ ~ bd ~", 2),
			]),
			rules.Layer("snare", "drums", base=rules.LayerBase(gain=0.72), patterns=[
				rules.PatternOption("~ sd ~ sd", 5),
				rules.PatternOption("~ sd [~ sd] sd", 1),
			]),
			rules.Layer("hats", "drums", base=rules.LayerBase(gain=0.34), patterns=[
				rules.PatternOption("hh*8"),
			]),
			rules.Layer("hats-feature", "drums", base=rules.LayerBase(gain=0.3), patterns=[
				rules.PatternOption("~ hh ~ hh ~ hh ~ hh"),
			]),
			rules.Layer("hats-feature-alt", "drums", base=rules.LayerBase(gain=0.28), patterns=[
				rules.PatternOption("~ hh ~ [hh hh] ~ hh ~ hh"),
			]),
			rules.Layer("bass", "melodic", instrument="sine", base=rules.LayerBase(gain=0.3), patterns=[
				rules.PatternOption("c2 ~ c2 ~ eb2 ~ c2 ~", 3),
				rules.PatternOption("c2 ~ ~ c2 g1 ~ c2 ~", 2),
			]),
			rules.Layer("ghost-snare", "drums", base=rules.LayerBase(gain=0.08), patterns=[
				rules.PatternOption("~ ~ sd ~ ~ ~ ~ ~", 3),
				rules.PatternOption("~ sd ~ ~ ~ ~ ~ ~", 1),
			]),
			rules.Layer("ghost-snare-alt", "drums", base=rules.LayerBase(gain=0.08), patterns=[
				rules.PatternOption("~ ~ ~ sd ~ ~ ~ ~", 3),
				rules.PatternOption("~ ~ sd ~ ~ ~ ~ ~", 1),
			]),
			rules.Layer("clap", "drums", base=rules.LayerBase(gain=0.28), patterns=[
				rules.PatternOption("~ cp ~ cp"),
			]),
			rules.Layer("clap-soft", "drums", base=rules.LayerBase(gain=0.2), patterns=[
				rules.PatternOption("~ ~ cp ~ ~ ~ cp ~"),
			]),
			rules.Layer("adlib-hat", "drums", base=rules.LayerBase(gain=0.16), patterns=[
				rules.PatternOption("~ ~ hh ~ ~ ~ ~ hh"),
			]),
			rules.Layer("texture", "texture", base=rules.LayerBase(gain=0.08, slow=4), patterns=[
				rules.PatternOption("hiss:4", 2),
				rules.PatternOption("hiss", 1),
			]),
			rules.Layer("texture-alt", "texture", base=rules.LayerBase(gain=0.07, slow=4), patterns=[
				rules.PatternOption("hiss:4*2", 2),
				rules.PatternOption("hiss:8", 1),
			]),
		],
		phases = [
			rules.Phase("01-kick-snare-anchor", ["kick", "snare"], bars=(1, 8)),
			rules.Phase("02-hats-in", ["kick", "snare", "hats"], bars=(9, 16)),
			rules.Phase("03-bass-a", ["kick", "snare", "hats", "bass"], bars=(17, 24)),
			rules.Phase("04-bass-b", ["kick", "snare", "hats", "bass"], bars=(25, 32)),
			rules.Phase("05-ghost-clap", [
				"kick", "snare", "hats", "bass", "ghost-snare", "ghost-snare-alt", "clap", "clap-soft", "adlib-hat",
			], bars=(33, 40)),
			rules.Phase("06-texture-in", [
				"kick", "snare", "hats-feature", "hats-feature-alt", "bass",
				"ghost-snare", "ghost-snare-alt", "texture", "texture-alt", "adlib-hat",
			], bars=(41, 56)),
			rules.Phase("07-outro-drums", ["kick", "snare", "hats"], bars=(57, 64)),
		]
	),
	derive_runtime = derive_runtime
)
