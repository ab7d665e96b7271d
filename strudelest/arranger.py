"""Long-form arranger.

Stitches several independently generated sections of one template into a
single sequential program. A *style* fixes the section labels and the share
of the total each section receives; a *length* preset fixes the total bar
count.

Each section:

- gets its own seed (``"<seed>-<index>"``),
- has its numeric parameters scaled by an energy curve that rises to the
  middle section and falls again,
- optionally renders only one phase of the template, stretched over the
  whole section, so the arrangement walks through the template's arc
  instead of replaying it in miniature five times.

The tempo is stated once, at the top of the combined program.
"""

import dataclasses
import logging
import re
import typing
import uuid

import strudelest.formatting
import strudelest.generator
import strudelest.render
import strudelest.rules
import strudelest.template


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Blueprint:

	"""Ordered section labels plus the share of the total each one receives."""

	name: str
	labels: typing.Sequence[str]
	weights: typing.Sequence[float]


BLUEPRINTS: typing.Dict[str, Blueprint] = {
	"arc": Blueprint("Arc", ("Intro", "Lift", "Peak", "Break", "Outro"), (0.16, 0.2, 0.28, 0.2, 0.16)),
	"club": Blueprint("Club", ("Intro", "Groove", "Break", "Drop", "Outro"), (0.2, 0.26, 0.14, 0.26, 0.14)),
	"cinematic": Blueprint("Cinematic", ("Opening", "Theme", "Pulse", "Surge", "Dissolve"), (0.24, 0.2, 0.2, 0.2, 0.16)),
}

LENGTH_TO_BARS: typing.Dict[str, int] = {
	"short": 32,
	"medium": 64,
	"long": 96,
	"xl": 128,
}

SECTION_ENERGY = (0.55, 0.75, 1.0, 0.7, 0.5)
DEFAULT_ENERGY = 0.8
BOOLEAN_ENERGY_THRESHOLD = 0.85
MIN_SECTION_BARS = 4

_LEADING_SETCPS = re.compile(r"^\s*setcps\([^)]*\);?\s*", re.IGNORECASE)


@dataclasses.dataclass(frozen=True)
class ArrangedSection:

	"""
	One rendered section of a long-form piece.

	Attributes:
		label: Section label from the blueprint (e.g. ``"Peak"``).
		template_id: Template the section was rendered from.
		bars: Bars allocated to the section.
		code: Section program without its tempo statement.
		energy: Energy scalar applied to the section's parameters.
		focus_phase: Id of the phase the section was focused on, or None.
	"""

	label: str
	template_id: str
	bars: int
	code: str
	energy: float
	focus_phase: typing.Optional[str] = None

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		return {
			"label": self.label,
			"templateId": self.template_id,
			"bars": self.bars,
			"code": self.code,
			"energy": self.energy,
			"focusPhase": self.focus_phase,
		}


@dataclasses.dataclass(frozen=True)
class LongFormResult:

	"""The stitched program, its total length and the sections it was built from."""

	code: str
	total_bars: int
	sections: typing.Sequence[ArrangedSection]
	title_tag: str

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		return {
			"code": self.code,
			"totalBars": self.total_bars,
			"sections": [section.to_dict() for section in self.sections],
			"titleTag": self.title_tag,
		}


def section_energy (index: int) -> float:

	"""Return the energy scalar for the section at ``index``."""

	if 0 <= index < len(SECTION_ENERGY):
		return SECTION_ENERGY[index]

	return DEFAULT_ENERGY


def allocate_bars (total_bars: int, weights: typing.Sequence[float], minimum: int = MIN_SECTION_BARS) -> typing.List[int]:

	"""
	Split ``total_bars`` between sections in proportion to ``weights``.

	Each share is rounded to whole bars and floored at ``minimum``. While
	the shares add up to more than the total, the largest section above the
	minimum gives up a bar (the first one on ties); while they add up to
	less, the last section takes the extra bars. The result always sums to
	``total_bars``.

	Raises:
		ValueError: If ``total_bars`` cannot give every section ``minimum`` bars.
	"""

	if not weights:
		raise ValueError("At least one section weight is required")

	if total_bars < minimum * len(weights):
		raise ValueError(f"{total_bars} bars cannot hold {len(weights)} sections of at least {minimum} bars")

	plan = [max(minimum, strudelest.formatting.round_half_up(total_bars * weight)) for weight in weights]
	total = sum(plan)

	while total > total_bars:
		largest = max(range(len(plan)), key=lambda index: (plan[index], -index))
		plan[largest] -= 1
		total -= 1

	while total < total_bars:
		plan[-1] += 1
		total += 1

	return plan


def modulate_params (
	template: strudelest.template.Template,
	params: typing.Mapping[str, strudelest.template.ParamValue],
	energy: float
) -> strudelest.template.Params:

	"""
	Scale a section's parameters by ``energy``.

	Numbers move towards their schema minimum (``min + (value - min) *
	energy``), rounded to four decimals and kept inside the schema bounds.
	Booleans are forced on above the energy threshold and left alone below
	it. Selects are never changed.
	"""

	output: strudelest.template.Params = dict(params)

	for spec in template.param_schema:

		current = output.get(spec.key)

		if spec.type == "number" and isinstance(current, (int, float)) and not isinstance(current, bool):
			scaled = strudelest.formatting.round_to(spec.min + (current - spec.min) * energy, 4)
			output[spec.key] = spec.clamp(scaled)

		elif spec.type == "boolean":
			output[spec.key] = True if energy > BOOLEAN_ENERGY_THRESHOLD else bool(current)

	return output


def focus_phase_index (section_index: int, section_count: int, phase_count: int) -> int:

	"""Spread ``section_count`` sections evenly over ``phase_count`` phases."""

	if phase_count <= 1 or section_count <= 1:
		return 0

	return strudelest.formatting.round_half_up(section_index * (phase_count - 1) / (section_count - 1))


def focus_rules (rules: strudelest.rules.RuleSet, phase_index: int) -> strudelest.rules.RuleSet:

	"""
	Return a copy of ``rules`` holding only the phase at ``phase_index``.

	The phase keeps its id, active layers and overrides but is widened to
	cover the whole render, so a focused section never opens with silence.
	The focused phase is the only phase of the render, so layers that rotate
	through their patterns always play their first pattern in it.
	"""

	phase = rules.phases[phase_index]
	widened = dataclasses.replace(phase, bars=None, pct=(0.0, 1.0))

	return dataclasses.replace(rules, phases=[widened])


def strip_leading_setcps (code: str) -> str:

	"""Remove a leading ``setcps(...)`` statement and surrounding whitespace."""

	return _LEADING_SETCPS.sub("", code, count=1).strip()


def _indent (code: str, spaces: int) -> str:

	prefix = " " * spaces

	return "\n".join(f"{prefix}{line}" for line in code.split("\n"))


def generate_long_form_piece (
	template: strudelest.template.Template,
	seed: str,
	bpm: float,
	style: str = "arc",
	length: str = "medium",
	params: typing.Optional[typing.Mapping[str, strudelest.template.ParamValue]] = None,
	focus_phases: bool = True
) -> LongFormResult:

	"""
	Arrange ``template`` into a multi-section piece.

	Parameters:
		template: Template every section is rendered from.
		seed: Base seed; section ``i`` renders with ``"<seed>-<i>"``.
		bpm: Tempo for the whole piece.
		style: Blueprint name (``"arc"``, ``"club"`` or ``"cinematic"``).
		length: Length preset (``"short"``, ``"medium"``, ``"long"`` or ``"xl"``).
		params: Base parameters before energy scaling (template defaults if omitted).
		focus_phases: Render each section from a single phase of the template.

	Raises:
		ValueError: For an unknown style or length, or a non-positive bpm.

	Example:
		```python
		result = generate_long_form_piece(techno, "abc123", 132, style="club", length="long")
		print(result.title_tag)   # "Club 96b"
		```
	"""

	if style not in BLUEPRINTS:
		raise ValueError(f"Unknown arrangement style '{style}'. Available: {', '.join(BLUEPRINTS)}")

	if length not in LENGTH_TO_BARS:
		raise ValueError(f"Unknown length preset '{length}'. Available: {', '.join(LENGTH_TO_BARS)}")

	blueprint = BLUEPRINTS[style]
	total_bars = LENGTH_TO_BARS[length]
	plan = allocate_bars(total_bars, blueprint.weights)
	base_params = params if params is not None else template.default_params

	sections: typing.List[ArrangedSection] = []

	for index, bars in enumerate(plan):

		energy = section_energy(index)
		section_params = modulate_params(template, base_params, energy)
		rules = None
		focus_phase = None

		if focus_phases and template.rules.phases:
			phase_index = focus_phase_index(index, len(plan), len(template.rules.phases))
			rules = focus_rules(template.rules, phase_index)
			focus_phase = template.rules.phases[phase_index].id

		code = strudelest.render.build_code(template, bpm, bars, section_params, f"{seed}-{index}", rules=rules)
		label = blueprint.labels[index] if index < len(blueprint.labels) else f"Part {index + 1}"

		logger.debug(f"Section {index + 1} {label}: {bars} bars, energy {energy}, focus {focus_phase}")

		sections.append(ArrangedSection(
			label = label,
			template_id = template.id,
			bars = bars,
			code = strip_leading_setcps(code),
			energy = energy,
			focus_phase = focus_phase
		))

	expressions = [f"({section.code})" if section.code else "silence" for section in sections]
	body = _indent(",\n".join(expressions), 2)
	code = f"setcps({strudelest.formatting.format_cps(bpm)});\ncat(\n{body}\n)"

	logger.info(f"Arranged {template.id} as {blueprint.name}: {len(sections)} sections, {total_bars} bars")

	return LongFormResult(
		code = code,
		total_bars = total_bars,
		sections = sections,
		title_tag = f"{blueprint.name} {total_bars}b"
	)


def piece_from_arrangement (
	template: strudelest.template.Template,
	result: LongFormResult,
	seed: str,
	bpm: float,
	params: typing.Mapping[str, strudelest.template.ParamValue],
	style: str,
	length: str
) -> strudelest.generator.PieceSpec:

	"""Wrap a long-form result in a :class:`~strudelest.generator.PieceSpec`."""

	timestamp = strudelest.generator.now_iso()
	recorded: strudelest.template.Params = dict(params)
	recorded.update({"mode": "long-form", "style": style, "length": length})

	return strudelest.generator.PieceSpec(
		id = str(uuid.uuid4()),
		name = f"{template.label} {result.title_tag}",
		template_id = template.id,
		bpm = bpm,
		bars = result.total_bars,
		seed = seed,
		params = recorded,
		code = result.code,
		created_at = timestamp,
		updated_at = timestamp
	)
