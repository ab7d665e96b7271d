"""Declarative rule sets consumed by the render engine.

A :class:`RuleSet` describes *what* may sound and *when*:

- :class:`Layer` - one named musical part with weighted pattern choices
  and base parameters (gain, slow, fast).
- :class:`Phase` - a bar range (absolute or fractional) during which a
  subset of layers is active, with optional per-layer overrides.
- :class:`RuntimeOverrides` - values computed per build from user
  parameters and the seed, layered on top of the static rules.

Layer parameters for a phase resolve in this order, later sources winning
key by key::

	layer.base
	runtime.layer_base[layer]
	phase.overrides[layer]
	runtime.phase_layer_base[phase][layer]
"""

import dataclasses
import typing

import strudelest.groove


LAYER_KINDS = ("drums", "melodic", "texture")


class RuleSetError (Exception):

	"""Raised when a rule set cannot be rendered."""

	pass


@dataclasses.dataclass(frozen=True)
class PatternOption:

	"""
	One candidate pattern for a layer.

	Attributes:
		value: Raw pattern-language snippet (e.g. ``"bd*4"``).
		weight: Relative likelihood of being chosen (``>= 0``).
	"""

	value: str
	weight: float = 1

	def __post_init__ (self) -> None:
		if self.weight < 0:
			raise ValueError(f"Pattern weight must not be negative: {self.value!r}")


@dataclasses.dataclass(frozen=True)
class LayerBase:

	"""
	Layer playback parameters. ``None`` means "not set".
	"""

	gain: typing.Optional[float] = None
	slow: typing.Optional[float] = None
	fast: typing.Optional[float] = None

	def merged (self, other: typing.Optional["LayerBase"]) -> "LayerBase":

		"""Return a copy with every value set on ``other`` taking precedence."""

		if other is None:
			return self

		changes = {
			field.name: getattr(other, field.name)
			for field in dataclasses.fields(other)
			if getattr(other, field.name) is not None
		}

		return dataclasses.replace(self, **changes)


@dataclasses.dataclass(frozen=True)
class Layer:

	"""
	A named musical part.

	Attributes:
		id: Unique layer id within the rule set.
		kind: ``"drums"``, ``"melodic"`` or ``"texture"``. Drums-kind layers
			receive swing by default.
		patterns: Weighted pattern choices.
		base: Base playback parameters.
		instrument: Render descriptor. ``None`` renders a sample pattern
			(``s("...")``); a synth name renders notes
			(``note("...").s("sawtooth")``).
	"""

	id: str
	kind: str
	patterns: typing.Sequence[PatternOption]
	base: LayerBase = LayerBase()
	instrument: typing.Optional[str] = None

	def __post_init__ (self) -> None:
		if self.kind not in LAYER_KINDS:
			raise ValueError(f"Unknown layer kind '{self.kind}' for layer '{self.id}'")


@dataclasses.dataclass(frozen=True)
class Phase:

	"""
	A span of bars with a set of active layers.

	Exactly one of ``bars`` (1-indexed inclusive ``(start, end)``) or
	``pct`` (fractions ``(start, end)`` of the total bar count) should be
	given. A phase with neither is rejected when the rule set is rendered.
	"""

	id: str
	active_layers: typing.Sequence[str]
	bars: typing.Optional[typing.Tuple[int, int]] = None
	pct: typing.Optional[typing.Tuple[float, float]] = None
	overrides: typing.Mapping[str, LayerBase] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class RuleSet:

	"""
	Layers plus the phases that arrange them over time.

	Attributes:
		layers: Layers in declaration order. Declaration order fixes the
			order of random pattern draws.
		phases: Phases in declaration order.
		scale_phases_to_bars: Rescale absolute phase ranges so the longest
			declared end lands on the requested bar count.
		rotate_patterns: Cycle through each layer's patterns phase by phase
			instead of repeating one chosen pattern.
	"""

	layers: typing.Sequence[Layer]
	phases: typing.Sequence[Phase]
	scale_phases_to_bars: bool = True
	rotate_patterns: bool = False

	def __post_init__ (self) -> None:

		seen: typing.Set[str] = set()

		for layer in self.layers:
			if layer.id in seen:
				raise ValueError(f"Duplicate layer id '{layer.id}'")
			seen.add(layer.id)

	def layer (self, layer_id: str) -> typing.Optional[Layer]:

		"""Return the layer with this id, or None."""

		for layer in self.layers:
			if layer.id == layer_id:
				return layer

		return None


@dataclasses.dataclass(frozen=True)
class RuntimeOverrides:

	"""
	Per-build adjustments derived from user parameters and the seed.

	Attributes:
		rotate_patterns: Overrides ``RuleSet.rotate_patterns`` when set.
		groove: Swing applied to targeted layers.
		layer_base: Per-layer overrides applied in every phase.
		phase_layer_base: Per-phase, per-layer overrides (phase id, then
			layer id).
	"""

	rotate_patterns: typing.Optional[bool] = None
	groove: typing.Optional[strudelest.groove.Groove] = None
	layer_base: typing.Mapping[str, LayerBase] = dataclasses.field(default_factory=dict)
	phase_layer_base: typing.Mapping[str, typing.Mapping[str, LayerBase]] = dataclasses.field(default_factory=dict)


def merge_layer_base (layer: Layer, phase_id: str, phase_overrides: typing.Mapping[str, LayerBase], runtime: RuntimeOverrides) -> LayerBase:

	"""Resolve the final parameters of ``layer`` inside one phase."""

	return (
		layer.base
		.merged(runtime.layer_base.get(layer.id))
		.merged(phase_overrides.get(layer.id))
		.merged(runtime.phase_layer_base.get(phase_id, {}).get(layer.id))
	)
