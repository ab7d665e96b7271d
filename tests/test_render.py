import pytest

import strudelest.groove
import strudelest.render
import strudelest.rules
import strudelest.templates


def _phase_headers (code: str) -> list:

	return [line.strip() for line in code.splitlines() if line.strip().startswith("//")]


def _spans (phases: list) -> list:

	return [(phase.id, phase.start, phase.end) for phase in phases]


def test_render_full_program (simple_rules: strudelest.rules.RuleSet) -> None:

	"""Phases render in time order with a silent gap filling the uncovered bars."""

	code = strudelest.render.render_rules(simple_rules, 120, 8, "seed")

	assert code == (
		'setcps(1.000);\n'
		'cat(\n'
		'  // 1. PHASE intro 1-4\n'
		'  stack(\n'
		'    s("bd*4").gain(0.9)\n'
		'  ).slow(4),\n'
		'  // 2. GAP 5-6\n'
		'  silence.slow(2),\n'
		'  // 3. PHASE main 7-8\n'
		'  stack(\n'
		'    s("bd*4").gain(0.9),\n'
		'    s("hh*8").gain(0.3)\n'
		'  ).slow(2)\n'
		')'
	)


def test_render_is_deterministic () -> None:

	"""The same inputs always give byte-identical output."""

	techno = strudelest.templates.get_template("techno")

	first = strudelest.render.build_code(techno, 132, 64, techno.default_params, "repeat-me")
	second = strudelest.render.build_code(techno, 132, 64, techno.default_params, "repeat-me")

	assert first == second


def test_render_rejects_non_positive_bpm (simple_rules: strudelest.rules.RuleSet) -> None:

	"""A zero or negative tempo is an error."""

	with pytest.raises(ValueError):
		strudelest.render.render_rules(simple_rules, 0, 8, "seed")


def test_autoscale_stretches_absolute_phases () -> None:

	"""With scaling on, the longest declared end lands on the requested bar count."""

	rules = strudelest.rules.RuleSet(
		layers = [strudelest.rules.Layer("kick", "drums", [strudelest.rules.PatternOption("bd")])],
		phases = [
			strudelest.rules.Phase("a", ["kick"], bars=(1, 4)),
			strudelest.rules.Phase("b", ["kick"], bars=(5, 8)),
		]
	)

	phases = strudelest.render.normalize_phases(rules, 16)

	assert _spans(phases) == [("a", 1, 8), ("b", 9, 16)]


def test_without_autoscale_phases_are_clamped (simple_rules: strudelest.rules.RuleSet) -> None:

	"""Phase ranges are clamped to the bar count when scaling is off."""

	phases = strudelest.render.normalize_phases(simple_rules, 5)

	assert _spans(phases) == [("intro", 1, 4), ("main", 5, 5)]


def test_fractional_phases_tile_without_holes () -> None:

	"""Fractional phases cover every bar even when the fractions do not divide evenly."""

	rules = strudelest.rules.RuleSet(
		layers = [strudelest.rules.Layer("pad", "texture", [strudelest.rules.PatternOption("c3")], instrument="sine")],
		phases = [
			strudelest.rules.Phase("a", ["pad"], pct=(0, 0.33)),
			strudelest.rules.Phase("b", ["pad"], pct=(0.33, 0.66)),
			strudelest.rules.Phase("c", ["pad"], pct=(0.66, 1)),
		]
	)

	phases = strudelest.render.normalize_phases(rules, 10)

	assert _spans(phases) == [("a", 1, 3), ("b", 4, 6), ("c", 7, 10)]
	assert not any(phase.gap for phase in phases)


def test_fractional_phases_tile_a_long_piece () -> None:

	"""Three fractional phases over 64 bars meet end to end."""

	rules = strudelest.rules.RuleSet(
		layers = [strudelest.rules.Layer("pad", "texture", [strudelest.rules.PatternOption("c3")], instrument="sine")],
		phases = [
			strudelest.rules.Phase("a", ["pad"], pct=(0, 0.3)),
			strudelest.rules.Phase("b", ["pad"], pct=(0.3, 0.65)),
			strudelest.rules.Phase("c", ["pad"], pct=(0.65, 1)),
		]
	)

	phases = strudelest.render.normalize_phases(rules, 64)

	assert _spans(phases) == [("a", 1, 19), ("b", 20, 41), ("c", 42, 64)]
	assert [phase.span for phase in phases] == [19, 22, 23]


def test_overlapping_phases_are_trimmed () -> None:

	"""The earlier phase keeps shared bars; the later one starts at the first free bar."""

	rules = strudelest.rules.RuleSet(
		scale_phases_to_bars = False,
		layers = [strudelest.rules.Layer("kick", "drums", [strudelest.rules.PatternOption("bd")])],
		phases = [
			strudelest.rules.Phase("a", ["kick"], bars=(1, 6)),
			strudelest.rules.Phase("b", ["kick"], bars=(5, 8)),
		]
	)

	phases = strudelest.render.normalize_phases(rules, 8)

	assert _spans(phases) == [("a", 1, 6), ("b", 7, 8)]


def test_fully_covered_phase_is_dropped () -> None:

	"""A phase left with no bars after trimming disappears."""

	rules = strudelest.rules.RuleSet(
		scale_phases_to_bars = False,
		layers = [strudelest.rules.Layer("kick", "drums", [strudelest.rules.PatternOption("bd")])],
		phases = [
			strudelest.rules.Phase("a", ["kick"], bars=(1, 8)),
			strudelest.rules.Phase("b", ["kick"], bars=(3, 4)),
		]
	)

	phases = strudelest.render.normalize_phases(rules, 8)

	assert _spans(phases) == [("a", 1, 8)]


def test_phase_without_range_is_rejected () -> None:

	"""A phase with neither bars nor pct cannot be rendered."""

	rules = strudelest.rules.RuleSet(
		layers = [strudelest.rules.Layer("kick", "drums", [strudelest.rules.PatternOption("bd")])],
		phases = [strudelest.rules.Phase("broken", ["kick"])]
	)

	with pytest.raises(strudelest.rules.RuleSetError):
		strudelest.render.render_rules(rules, 120, 8, "seed")


@pytest.mark.parametrize("bars", [1, 3, 7, 16, 33, 64, 128])
def test_every_template_covers_every_bar (bars: int) -> None:

	"""Normalized phases of every template are contiguous and sum to the bar count."""

	for template in strudelest.templates.TEMPLATES:

		phases = strudelest.render.normalize_phases(template.rules, bars)

		assert sum(phase.span for phase in phases) == bars, template.id
		assert phases[0].start == 1
		assert phases[-1].end == bars

		for previous, current in zip(phases, phases[1:]):
			assert current.start == previous.end + 1, template.id


def test_safe_bars () -> None:

	"""Bar counts are rounded and floored at one."""

	assert strudelest.render.safe_bars(0) == 1
	assert strudelest.render.safe_bars(-4) == 1
	assert strudelest.render.safe_bars(7.5) == 8
	assert strudelest.render.safe_bars(float("nan")) == 1


def test_layer_parameter_precedence () -> None:

	"""Runtime phase overrides beat phase overrides, which beat runtime layer overrides."""

	layer = strudelest.rules.Layer("kick", "drums", [strudelest.rules.PatternOption("bd")], base=strudelest.rules.LayerBase(gain=0.9, slow=2))

	runtime = strudelest.rules.RuntimeOverrides(
		layer_base = {"kick": strudelest.rules.LayerBase(gain=0.5, fast=2)},
		phase_layer_base = {"drop": {"kick": strudelest.rules.LayerBase(gain=0.2)}}
	)

	phase_overrides = {"kick": strudelest.rules.LayerBase(gain=0.6, slow=4)}

	assert strudelest.rules.merge_layer_base(layer, "intro", {}, runtime) == strudelest.rules.LayerBase(gain=0.5, slow=2, fast=2)
	assert strudelest.rules.merge_layer_base(layer, "intro", phase_overrides, runtime) == strudelest.rules.LayerBase(gain=0.6, slow=4, fast=2)
	assert strudelest.rules.merge_layer_base(layer, "drop", phase_overrides, runtime) == strudelest.rules.LayerBase(gain=0.2, slow=4, fast=2)


def test_render_layer_parameters () -> None:

	"""Gain, slow and fast are quantized and emitted in a fixed order."""

	layer = strudelest.rules.Layer("lead", "melodic", [strudelest.rules.PatternOption("c4")], instrument="sawtooth")
	base = strudelest.rules.LayerBase(gain=0.33, slow=1.1, fast=1.333)

	expr = strudelest.render.render_layer(layer, "c4 e4", base, strudelest.rules.RuntimeOverrides())

	assert expr == 'note("c4 e4").s("sawtooth").gain(0.35).slow(1).fast(1.34)'


def test_render_layer_default_gain () -> None:

	"""A layer without a gain plays at 0.7."""

	layer = strudelest.rules.Layer("kick", "drums", [strudelest.rules.PatternOption("bd")])

	expr = strudelest.render.render_layer(layer, "bd", strudelest.rules.LayerBase(), strudelest.rules.RuntimeOverrides())

	assert expr == 's("bd").gain(0.7)'


def test_groove_applies_to_targeted_layers (simple_rules: strudelest.rules.RuleSet) -> None:

	"""Only the layers named by the groove get a swing call."""

	runtime = strudelest.rules.RuntimeOverrides(groove=strudelest.groove.Groove(swing=0.34, subdivision=4, layers=["hats"]))

	code = strudelest.render.render_rules(simple_rules, 120, 8, "seed", runtime)

	assert 's("hh*8").gain(0.3).swingBy(0.34, 4)' in code
	assert 's("bd*4").gain(0.9),' in code
	assert "bd*4\").gain(0.9).swingBy" not in code


def test_rotation_cycles_patterns_by_phase () -> None:

	"""With rotation on, phase n plays pattern n modulo the pattern count."""

	rules = strudelest.rules.RuleSet(
		scale_phases_to_bars = False,
		rotate_patterns = True,
		layers = [strudelest.rules.Layer("kick", "drums", [
			strudelest.rules.PatternOption("one"),
			strudelest.rules.PatternOption("two"),
		])],
		phases = [
			strudelest.rules.Phase("a", ["kick"], bars=(1, 1)),
			strudelest.rules.Phase("b", ["kick"], bars=(3, 3)),
			strudelest.rules.Phase("c", ["kick"], bars=(4, 4)),
		]
	)

	code = strudelest.render.render_rules(rules, 120, 4, "seed")
	patterns = [line.strip() for line in code.splitlines() if line.strip().startswith("s(")]

	assert patterns == ['s("one").gain(0.7)', 's("two").gain(0.7)', 's("one").gain(0.7)']


def test_runtime_can_disable_rotation () -> None:

	"""Runtime rotate_patterns overrides the rule set's setting."""

	rules = strudelest.rules.RuleSet(
		rotate_patterns = True,
		layers = [strudelest.rules.Layer("kick", "drums", [
			strudelest.rules.PatternOption("one", 1),
			strudelest.rules.PatternOption("two", 0),
		])],
		phases = [
			strudelest.rules.Phase("a", ["kick"], bars=(1, 1)),
			strudelest.rules.Phase("b", ["kick"], bars=(2, 2)),
		]
	)

	code = strudelest.render.render_rules(rules, 120, 2, "seed", strudelest.rules.RuntimeOverrides(rotate_patterns=False))

	assert code.count('s("one")') == 2
	assert 's("two")' not in code


def test_unknown_and_empty_layers () -> None:

	"""Unknown layer ids are skipped; layers with no patterns play a rest."""

	rules = strudelest.rules.RuleSet(
		layers = [strudelest.rules.Layer("empty", "drums", [])],
		phases = [
			strudelest.rules.Phase("a", ["missing"], bars=(1, 2)),
			strudelest.rules.Phase("b", ["empty"], bars=(3, 4)),
		]
	)

	code = strudelest.render.render_rules(rules, 120, 4, "seed")

	assert _phase_headers(code) == ["// 1. PHASE a 1-2", "// 2. PHASE b 3-4"]
	assert "silence.slow(2)" in code
	assert 's("~").gain(0.7)' in code


def test_invalid_rule_declarations () -> None:

	"""Bad layer kinds, negative weights and duplicate ids are rejected up front."""

	with pytest.raises(ValueError):
		strudelest.rules.Layer("x", "vocals", [])

	with pytest.raises(ValueError):
		strudelest.rules.PatternOption("bd", -1)

	layer = strudelest.rules.Layer("x", "drums", [])

	with pytest.raises(ValueError):
		strudelest.rules.RuleSet(layers=[layer, layer], phases=[])
