import dataclasses
import typing

import strudelest.rules


ParamValue = typing.Union[float, int, str, bool]
Params = typing.Dict[str, ParamValue]
DeriveRuntime = typing.Callable[[typing.Mapping[str, ParamValue], str], strudelest.rules.RuntimeOverrides]

PARAM_TYPES = ("number", "select", "boolean")


@dataclasses.dataclass(frozen=True)
class ParamSpec:

	"""
	One user-facing template parameter.

	Numbers need ``min``, ``max`` and a positive ``step``; selects need
	``options``; booleans need nothing else.
	"""

	key: str
	type: str
	min: float = 0.0
	max: float = 1.0
	step: float = 0.05
	options: typing.Sequence[str] = ()

	def __post_init__ (self) -> None:

		if self.type not in PARAM_TYPES:
			raise ValueError(f"Unknown parameter type '{self.type}' for '{self.key}'")

		if self.type == "number":
			if self.max < self.min:
				raise ValueError(f"Parameter '{self.key}' has max below min")
			if self.step <= 0:
				raise ValueError(f"Parameter '{self.key}' needs a positive step")

	def clamp (self, value: float) -> float:

		"""Clamp a numeric value into ``[min, max]``."""

		if value < self.min:
			return self.min

		if value > self.max:
			return self.max

		return value


def _no_runtime (params: typing.Mapping[str, ParamValue], seed: str) -> strudelest.rules.RuntimeOverrides:
	return strudelest.rules.RuntimeOverrides()


@dataclasses.dataclass(frozen=True)
class Template:

	"""
	A declarative piece template.

	Templates are data: a rule set, parameter schema and defaults, plus a
	pure ``derive_runtime(params, seed)`` function that turns resolved
	parameters into :class:`~strudelest.rules.RuntimeOverrides`.
	"""

	id: str
	label: str
	description: str
	default_bpm: float
	default_bars: int
	default_params: typing.Mapping[str, ParamValue]
	param_schema: typing.Sequence[ParamSpec]
	rules: strudelest.rules.RuleSet
	derive_runtime: DeriveRuntime = _no_runtime

	def runtime_for (self, params: typing.Mapping[str, ParamValue], seed: str) -> strudelest.rules.RuntimeOverrides:

		"""Compute the runtime overrides for one build."""

		return self.derive_runtime(params, seed)

	def param (self, key: str) -> typing.Optional[ParamSpec]:

		"""Return the schema entry for ``key``, or None."""

		for spec in self.param_schema:
			if spec.key == key:
				return spec

		return None
