import logging
import math
import random

import pytest

import strudelest.generator
import strudelest.template
import strudelest.templates


class FixedRandom (random.Random):

	"""Returns the same value from every random() call."""

	def __init__ (self, value: float) -> None:

		self.value = value
		super().__init__(0)

	def random (self) -> float:

		return self.value


@pytest.fixture
def techno () -> strudelest.template.Template:

	return strudelest.templates.get_template("techno")


def test_sample_number_lands_on_step_grid () -> None:

	"""Number samples are min + k * step, including the max itself."""

	spec = strudelest.template.ParamSpec("level", "number", min=0, max=1, step=0.25)

	assert strudelest.generator.sample_param(spec, FixedRandom(0.0)) == 0
	assert strudelest.generator.sample_param(spec, FixedRandom(0.5)) == 0.5
	assert strudelest.generator.sample_param(spec, FixedRandom(0.99)) == 1


def test_sample_select_and_boolean () -> None:

	"""Selects pick by index; booleans are true strictly above one half."""

	select = strudelest.template.ParamSpec("mode", "select", options=("a", "b", "c"))
	flag = strudelest.template.ParamSpec("flag", "boolean")

	assert strudelest.generator.sample_param(select, FixedRandom(0.5)) == "b"
	assert strudelest.generator.sample_param(flag, FixedRandom(0.6)) is True
	assert strudelest.generator.sample_param(flag, FixedRandom(0.5)) is False


def test_invalid_param_specs () -> None:

	"""Inverted ranges, zero steps and unknown types are rejected."""

	with pytest.raises(ValueError):
		strudelest.template.ParamSpec("x", "number", min=1, max=0)

	with pytest.raises(ValueError):
		strudelest.template.ParamSpec("x", "number", step=0)

	with pytest.raises(ValueError):
		strudelest.template.ParamSpec("x", "colour")


def test_resolve_params_is_deterministic (techno: strudelest.template.Template) -> None:

	"""The same seed resolves the same parameters."""

	assert strudelest.generator.resolve_template_params(techno, "s1") == strudelest.generator.resolve_template_params(techno, "s1")


def test_resolved_params_respect_schema () -> None:

	"""Every resolved value is valid for its schema entry, for every template."""

	for template in strudelest.templates.TEMPLATES:
		for seed in ["a", "b", "c", "d"]:

			params = strudelest.generator.resolve_template_params(template, seed)

			for spec in template.param_schema:

				value = params[spec.key]

				if spec.type == "number":
					assert spec.min <= value <= spec.max, (template.id, spec.key)
					steps = (value - spec.min) / spec.step
					assert value == spec.max or math.isclose(steps, round(steps), abs_tol=1e-6)
				elif spec.type == "select":
					assert value in spec.options
				else:
					assert isinstance(value, bool)


def test_numeric_override_is_clamped (techno: strudelest.template.Template) -> None:

	"""Out-of-range numeric overrides are clamped to the schema bounds."""

	assert strudelest.generator.resolve_template_params(techno, "s1", {"drive": 5})["drive"] == 1
	assert strudelest.generator.resolve_template_params(techno, "s1", {"drive": -5})["drive"] == 0.2


def test_non_numeric_override_falls_back_to_sample (techno: strudelest.template.Template) -> None:

	"""A non-numeric value for a number key keeps the seeded sample."""

	sampled = strudelest.generator.resolve_template_params(techno, "s1")
	overridden = strudelest.generator.resolve_template_params(techno, "s1", {"drive": "loud"})

	assert overridden["drive"] == sampled["drive"]


def test_override_does_not_shift_later_draws (techno: strudelest.template.Template) -> None:

	"""Overriding one key leaves the values drawn for the other keys unchanged."""

	sampled = strudelest.generator.resolve_template_params(techno, "s1")
	overridden = strudelest.generator.resolve_template_params(techno, "s1", {"drive": 0.3})

	assert overridden["drive"] == 0.3
	assert overridden["brightness"] == sampled["brightness"]
	assert overridden["rotate"] == sampled["rotate"]


def test_invalid_select_override_uses_first_option () -> None:

	"""A select override that is not an option resolves to the first option."""

	grid = strudelest.templates.get_template("polyrhythm-grid")

	assert strudelest.generator.resolve_template_params(grid, "s1", {"cycle_a": "11"})["cycle_a"] == "3"
	assert strudelest.generator.resolve_template_params(grid, "s1", {"cycle_a": "5"})["cycle_a"] == "5"


def test_generate_piece_defaults (techno: strudelest.template.Template) -> None:

	"""Missing bpm and bars come from the template; the name follows the label."""

	piece = strudelest.generator.generate_piece(techno, seed="abc123")

	assert piece.bpm == 132
	assert piece.bars == 64
	assert piece.seed == "abc123"
	assert piece.name == "Techno Sketch"
	assert piece.version == 2
	assert piece.code.startswith("setcps(1.100);\ncat(\n")
	assert piece.created_at == piece.updated_at
	assert piece.created_at.endswith("Z")


def test_generate_piece_is_reproducible (techno: strudelest.template.Template) -> None:

	"""Only the id and timestamps differ between two builds with the same inputs."""

	first = strudelest.generator.generate_piece(techno, seed="abc123", bpm=128, bars=32, params={"drive": 0.5})
	second = strudelest.generator.generate_piece(techno, seed="abc123", bpm=128, bars=32, params={"drive": 0.5})

	assert first.code == second.code
	assert first.params == second.params
	assert first.id != second.id


def test_generate_piece_without_seed_creates_one (techno: strudelest.template.Template) -> None:

	"""A fresh seed is drawn when none is given."""

	piece = strudelest.generator.generate_piece(techno)

	assert len(piece.seed) == 8


def test_piece_to_dict_uses_interchange_keys (techno: strudelest.template.Template) -> None:

	"""Serialized records use camelCase keys."""

	record = strudelest.generator.generate_piece(techno, seed="abc123").to_dict()

	assert set(record) == {"id", "name", "templateId", "bpm", "bars", "seed", "params", "code", "createdAt", "updatedAt", "version"}
	assert record["templateId"] == "techno"


def test_generate_piece_records_the_rendered_bar_count (techno: strudelest.template.Template) -> None:

	"""A bar count below one is recorded as the single bar that was rendered."""

	piece = strudelest.generator.generate_piece(techno, seed="abc123", bars=0)
	one_bar = strudelest.generator.generate_piece(techno, seed="abc123", bars=1)

	assert piece.bars == 1
	assert piece.code == one_bar.code


def test_unknown_override_keys_are_ignored (techno: strudelest.template.Template, caplog: pytest.LogCaptureFixture) -> None:

	"""Keys the schema does not declare are dropped with a warning."""

	with caplog.at_level(logging.WARNING):
		params = strudelest.generator.resolve_template_params(techno, "abc123", {"drvie": 0.5})

	assert "drvie" not in params
	assert params == strudelest.generator.resolve_template_params(techno, "abc123")
	assert "Ignoring unknown parameter 'drvie'" in caplog.text


def test_template_param_lookup (techno: strudelest.template.Template) -> None:

	"""Schema entries are found by key."""

	assert techno.param("drive").max == 1
	assert techno.param("missing") is None
