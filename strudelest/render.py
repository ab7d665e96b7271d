"""Pattern rule renderer.

Turns a :class:`~strudelest.rules.RuleSet` plus a build input (bpm, bars,
seed, runtime overrides) into a single pattern-language program::

	setcps(1.100);
	cat(
	  // 1. PHASE intro 1-8
	  stack(
	    s("bd*4").gain(0.9),
	    s("~ hh ~ hh").gain(0.3).swingBy(0.2, 4)
	  ).slow(8),
	  // 2. GAP 9-12
	  silence.slow(4)
	)

Rendering runs in four steps:

1. Materialize every phase to an absolute 1-indexed bar range.
2. Normalize the ranges into one contiguous cover of ``[1, bars]``:
   uncovered bars become silent gap phases, overlapping phases are trimmed
   (see :data:`OVERLAP_POLICY`) and empty phases are dropped.
3. Draw one "home" pattern per layer from the seeded stream, in layer
   declaration order.
4. Render each phase as a stack of its active layers, stretched over the
   phase's span, and concatenate the phases in time.

The output depends only on its inputs: the same rules, bpm, bars, seed and
overrides always produce byte-identical text.
"""

import dataclasses
import json
import logging
import math
import typing

import strudelest.formatting
import strudelest.rng
import strudelest.rules

if typing.TYPE_CHECKING:
	import strudelest.template


logger = logging.getLogger(__name__)


# When two phases claim the same bars, the phase that starts first keeps
# them and the later phase starts at the first free bar.
OVERLAP_POLICY = "last-declared-wins-remaining-bars"

DEFAULT_GAIN = 0.7
GAIN_STEP = 0.05
SLOW_STEP = 0.25
FAST_STEP = 0.02
EMPTY_PATTERN = "~"


@dataclasses.dataclass(frozen=True)
class NormalizedPhase:

	"""
	A phase resolved to a concrete, non-overlapping bar range.

	Attributes:
		id: Phase id, or ``gap-<start>-<end>`` for synthetic gaps.
		start: First bar (1-indexed, inclusive).
		end: Last bar (inclusive).
		active_layers: Layer ids sounding in this phase (empty for gaps).
		overrides: Static per-layer overrides declared on the phase.
		gap: True for synthetic silent phases.
		phase_index: Ordinal among non-gap phases; drives pattern rotation.
	"""

	id: str
	start: int
	end: int
	active_layers: typing.Sequence[str]
	overrides: typing.Mapping[str, strudelest.rules.LayerBase]
	gap: bool
	phase_index: int

	@property
	def span (self) -> int:

		"""Number of bars covered."""

		return max(1, self.end - self.start + 1)


@dataclasses.dataclass(frozen=True)
class _AbsolutePhase:

	id: str
	start: int
	end: int
	active_layers: typing.Sequence[str]
	overrides: typing.Mapping[str, strudelest.rules.LayerBase]


def safe_bars (bars: float) -> int:

	"""Coerce a requested bar count to a positive integer."""

	if not isinstance(bars, (int, float)) or not math.isfinite(bars):
		return 1

	return max(1, strudelest.formatting.round_half_up(bars))


def _clamp_bar (value: float, bars: int) -> int:

	if not math.isfinite(value):
		return 1

	return max(1, min(strudelest.formatting.round_half_up(value), bars))


def _to_bar_range (phase: strudelest.rules.Phase, bars: int, scale: float) -> typing.Tuple[int, int]:

	"""Convert one phase to an absolute range before clamping."""

	if phase.pct is not None:
		start = math.floor(phase.pct[0] * bars) + 1
		end = math.floor(phase.pct[1] * bars)
		return start, max(start, end)

	if phase.bars is None:
		raise strudelest.rules.RuleSetError(f"Phase {phase.id} is missing bars/pct")

	if scale == 1:
		return phase.bars[0], phase.bars[1]

	return (
		math.floor((phase.bars[0] - 1) * scale) + 1,
		math.floor(phase.bars[1] * scale)
	)


def _tile_fractional_phases (phases: typing.Sequence[strudelest.rules.Phase], bars: int) -> typing.List[_AbsolutePhase]:

	"""
	Tile fractional phases contiguously.

	Each phase ends on the bar before the next phase's computed start, so
	independent rounding can never leave a one-bar hole between them.
	"""

	ordered = sorted(phases, key=lambda phase: (phase.pct[0] if phase.pct else 0.0, phase.id))
	absolute: typing.List[_AbsolutePhase] = []
	cursor = 1

	for index, phase in enumerate(ordered):

		if index + 1 < len(ordered):
			next_pct = ordered[index + 1].pct
			next_start = math.floor((next_pct[0] if next_pct else 1.0) * bars) + 1
			end = max(cursor, min(bars, max(cursor, next_start) - 1))

		else:
			end = bars

		absolute.append(_AbsolutePhase(phase.id, cursor, end, phase.active_layers, phase.overrides))
		cursor = end + 1

	return absolute


def _to_absolute_phases (rules: strudelest.rules.RuleSet, bars: int) -> typing.List[_AbsolutePhase]:

	"""Materialize every phase of ``rules`` to an absolute bar range."""

	if rules.phases and all(phase.pct is not None for phase in rules.phases):
		return _tile_fractional_phases(rules.phases, bars)

	max_end = max((phase.bars[1] for phase in rules.phases if phase.bars is not None), default=0) or bars
	scale = bars / max_end if rules.scale_phases_to_bars else 1

	absolute: typing.List[_AbsolutePhase] = []

	for phase in rules.phases:
		start, end = _to_bar_range(phase, bars, scale)
		absolute.append(_AbsolutePhase(
			phase.id,
			_clamp_bar(start, bars),
			_clamp_bar(end, bars),
			phase.active_layers,
			phase.overrides
		))

	return absolute


def normalize_phases (rules: strudelest.rules.RuleSet, bars: int) -> typing.List[NormalizedPhase]:

	"""
	Resolve the phases of ``rules`` into a contiguous cover of ``[1, bars]``.

	The returned phases (real and gap) never overlap and their spans always
	sum to ``bars``.

	Raises:
		RuleSetError: If a phase declares neither ``bars`` nor ``pct``.
	"""

	absolute = sorted(_to_absolute_phases(rules, bars), key=lambda phase: (phase.start, phase.end, phase.id))

	normalized: typing.List[NormalizedPhase] = []
	cursor = 1
	phase_index = 0

	for phase in absolute:

		start = max(cursor, phase.start)
		end = phase.end

		if start > bars or end < start:
			logger.debug(f"Dropping phase {phase.id}: no bars left in {phase.start}-{phase.end}")
			continue

		if start > cursor:
			logger.debug(f"Filling bars {cursor}-{start - 1} with silence")
			normalized.append(NormalizedPhase(f"gap-{cursor}-{start - 1}", cursor, start - 1, (), {}, True, phase_index))

		normalized.append(NormalizedPhase(phase.id, start, end, phase.active_layers, phase.overrides, False, phase_index))
		phase_index += 1
		cursor = end + 1

	if cursor <= bars:
		logger.debug(f"Filling trailing bars {cursor}-{bars} with silence")
		normalized.append(NormalizedPhase(f"gap-{cursor}-{bars}", cursor, bars, (), {}, True, phase_index))

	return normalized


def pick_pattern (rng: strudelest.rng.SeededRandom, layer: strudelest.rules.Layer) -> str:

	"""Draw one weighted pattern for ``layer`` (``"~"`` if it has none)."""

	options = [(option.value, option.weight) for option in layer.patterns]

	return strudelest.rng.choose_weighted(options, rng, default=EMPTY_PATTERN) or EMPTY_PATTERN


def render_layer (layer: strudelest.rules.Layer, pattern: str, base: strudelest.rules.LayerBase, runtime: strudelest.rules.RuntimeOverrides) -> str:

	"""Render one layer expression with gain, speed and swing calls."""

	fmt = strudelest.formatting.format_number
	quantize = strudelest.formatting.quantize

	gain = base.gain if base.gain is not None and math.isfinite(base.gain) else DEFAULT_GAIN
	quoted = json.dumps(pattern, ensure_ascii=False)

	if layer.instrument is None:
		expr = f"s({quoted})"
	else:
		expr = f"note({quoted}).s({json.dumps(layer.instrument, ensure_ascii=False)})"

	expr += f".gain({fmt(quantize(gain, GAIN_STEP))})"

	if base.slow is not None:
		expr += f".slow({fmt(quantize(base.slow, SLOW_STEP))})"

	if base.fast is not None:
		expr += f".fast({fmt(quantize(base.fast, FAST_STEP))})"

	if runtime.groove is not None and runtime.groove.applies_to(layer):
		expr += runtime.groove.render()

	return expr


def render_rules (
	rules: strudelest.rules.RuleSet,
	bpm: float,
	bars: float,
	seed: str,
	runtime: typing.Optional[strudelest.rules.RuntimeOverrides] = None
) -> str:

	"""
	Render a rule set to a pattern-language program.

	Parameters:
		rules: Layers and phases to render.
		bpm: Tempo; the program starts with ``setcps(bpm / 120)``.
		bars: Total bar count (coerced to a positive integer).
		seed: Seed for the pattern choices.
		runtime: Per-build overrides (rotation, groove, layer parameters).

	Raises:
		ValueError: If ``bpm`` is not positive.
		RuleSetError: If a phase declares neither ``bars`` nor ``pct``.
	"""

	if not math.isfinite(bpm) or bpm <= 0:
		raise ValueError(f"bpm must be positive, got {bpm}")

	runtime = runtime if runtime is not None else strudelest.rules.RuntimeOverrides()
	total_bars = safe_bars(bars)
	rng = strudelest.rng.SeededRandom(seed)
	phases = normalize_phases(rules, total_bars)

	rotate = runtime.rotate_patterns if runtime.rotate_patterns is not None else rules.rotate_patterns

	# One draw per layer, in declaration order, before any phase renders.
	home_patterns = {layer.id: pick_pattern(rng, layer) for layer in rules.layers}

	blocks: typing.List[str] = []

	for number, phase in enumerate(phases, start=1):

		if phase.gap:
			blocks.append(f"// {number}. GAP {phase.start}-{phase.end}\n  silence.slow({phase.span})")
			continue

		lines: typing.List[str] = []

		for layer_id in phase.active_layers:

			layer = rules.layer(layer_id)

			if layer is None:
				logger.debug(f"Phase {phase.id} references unknown layer {layer_id}")
				continue

			pattern = home_patterns.get(layer.id, EMPTY_PATTERN)

			if rotate and layer.patterns:
				pattern = layer.patterns[phase.phase_index % len(layer.patterns)].value

			base = strudelest.rules.merge_layer_base(layer, phase.id, phase.overrides, runtime)
			lines.append(f"    {render_layer(layer, pattern, base, runtime)}")

		if lines:
			expr = "stack(\n" + ",\n".join(lines) + f"\n  ).slow({phase.span})"
		else:
			expr = f"silence.slow({phase.span})"

		blocks.append(f"// {number}. PHASE {phase.id} {phase.start}-{phase.end}\n  {expr}")

	body = ",\n  ".join(blocks)

	return f"setcps({strudelest.formatting.format_cps(bpm)});\ncat(\n  {body}\n)"


def build_code (
	template: "strudelest.template.Template",
	bpm: float,
	bars: float,
	params: typing.Mapping[str, typing.Any],
	seed: str,
	rules: typing.Optional[strudelest.rules.RuleSet] = None
) -> str:

	"""
	Render a template with resolved parameters.

	The template's ``derive_runtime`` function supplies the runtime
	overrides. ``rules`` replaces the template's own rule set (the arranger
	uses this to focus a section on one phase).
	"""

	runtime = template.runtime_for(params, seed)

	return render_rules(rules if rules is not None else template.rules, bpm, bars, seed, runtime)
