"""Piece generator.

Resolves a template's parameters from a seed, renders the template and wraps
the result in a :class:`PieceSpec` record.

Parameter resolution draws one value per schema key, in schema order, from
the build seed's stream. A draw is consumed even when the caller overrides
the key, so overriding one parameter never shifts the values drawn for the
keys after it.
"""

import dataclasses
import datetime
import logging
import math
import random
import typing
import uuid

import strudelest.formatting
import strudelest.render
import strudelest.rng
import strudelest.template


logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

create_seed = strudelest.rng.create_seed


@dataclasses.dataclass
class PieceSpec:

	"""
	A generated piece: the rendered program plus everything needed to rebuild it.

	Attributes:
		id: Random identifier for this piece.
		name: Display name, ``"<template label> Sketch"`` by default.
		template_id: Id of the template the piece was built from.
		bpm: Tempo the program was rendered at.
		bars: Requested bar count.
		seed: Seed the parameters and pattern choices were drawn from.
		params: Fully resolved template parameters.
		code: Rendered pattern-language program.
		created_at: ISO-8601 UTC timestamp.
		updated_at: ISO-8601 UTC timestamp.
		version: Record schema version.
	"""

	id: str
	name: str
	template_id: str
	bpm: float
	bars: int
	seed: str
	params: strudelest.template.Params
	code: str
	created_at: str
	updated_at: str
	version: int = SCHEMA_VERSION

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		"""Return a JSON-ready mapping with the interchange (camelCase) keys."""

		return {
			"id": self.id,
			"name": self.name,
			"templateId": self.template_id,
			"bpm": self.bpm,
			"bars": self.bars,
			"seed": self.seed,
			"params": dict(self.params),
			"code": self.code,
			"createdAt": self.created_at,
			"updatedAt": self.updated_at,
			"version": self.version,
		}


def now_iso () -> str:

	"""Return the current UTC time as an ISO-8601 string with millisecond precision."""

	now = datetime.datetime.now(datetime.timezone.utc)

	return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _is_number (value: typing.Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def sample_param (spec: strudelest.template.ParamSpec, rng: random.Random) -> strudelest.template.ParamValue:

	"""
	Draw one value for ``spec`` with exactly one call to ``rng.random()``.

	Numbers land on the ``step`` grid between ``min`` and ``max``; selects pick
	uniformly among the options; booleans are a fair coin.
	"""

	r = rng.random()

	if spec.type == "number":
		steps = max(1, strudelest.formatting.round_half_up((spec.max - spec.min) / spec.step))
		index = math.floor(r * (steps + 1))
		value = spec.min + index * spec.step
		return strudelest.formatting.round_to(spec.clamp(value), 4)

	if spec.type == "select":
		if not spec.options:
			return ""
		return spec.options[math.floor(r * len(spec.options))]

	return r > 0.5


def _apply_override (spec: strudelest.template.ParamSpec, override: typing.Any, sampled: strudelest.template.ParamValue) -> strudelest.template.ParamValue:

	if spec.type == "number":
		if _is_number(override):
			return spec.clamp(override)
		logger.debug(f"Ignoring non-numeric override {override!r} for '{spec.key}'")
		return sampled

	if spec.type == "select":
		candidate = str(override)
		if candidate in spec.options:
			return candidate
		return spec.options[0] if spec.options else ""

	return bool(override)


def resolve_template_params (
	template: strudelest.template.Template,
	seed: str,
	overrides: typing.Optional[typing.Mapping[str, typing.Any]] = None
) -> strudelest.template.Params:

	"""
	Resolve every schema parameter of ``template`` for one build.

	Starts from the template defaults, then for each schema key (in order)
	draws a sample and uses it unless ``overrides`` supplies a value.
	Numeric overrides are clamped to the schema bounds; non-numeric values
	for number keys fall back to the sample. Select overrides that are not
	one of the options resolve to the first option. Override keys with no
	schema entry are ignored with a warning.

	Example:
		```python
		params = resolve_template_params(techno, "abc123", {"drive": 5})
		assert params["drive"] == 1   # clamped to the schema max
		```
	"""

	overrides = overrides or {}

	for key in overrides:
		if template.param(key) is None:
			logger.warning(f"Ignoring unknown parameter '{key}' for template {template.id}")

	rng = strudelest.rng.SeededRandom(seed)
	resolved: strudelest.template.Params = dict(template.default_params)

	for spec in template.param_schema:

		sampled = sample_param(spec, rng)

		if overrides.get(spec.key) is not None:
			resolved[spec.key] = _apply_override(spec, overrides[spec.key], sampled)
		else:
			resolved[spec.key] = sampled

	return resolved


def generate_piece (
	template: strudelest.template.Template,
	seed: typing.Optional[str] = None,
	bpm: typing.Optional[float] = None,
	bars: typing.Optional[int] = None,
	params: typing.Optional[typing.Mapping[str, typing.Any]] = None
) -> PieceSpec:

	"""
	Generate a piece from ``template``.

	Missing ``seed``, ``bpm`` and ``bars`` fall back to a fresh random seed
	and the template defaults. The rendered ``code`` depends only on
	``(template, seed, bpm, bars, params)``; only ``id`` and the timestamps
	differ between two calls with the same inputs.
	"""

	seed = seed if seed is not None else create_seed()
	bpm = bpm if bpm is not None else template.default_bpm
	bars = strudelest.render.safe_bars(bars if bars is not None else template.default_bars)

	resolved = resolve_template_params(template, seed, params)
	code = strudelest.render.build_code(template, bpm, bars, resolved, seed)
	timestamp = now_iso()

	logger.info(f"Generated {template.id} piece: seed {seed}, {bpm} BPM, {bars} bars")

	return PieceSpec(
		id = str(uuid.uuid4()),
		name = f"{template.label} Sketch",
		template_id = template.id,
		bpm = bpm,
		bars = bars,
		seed = seed,
		params = resolved,
		code = code,
		created_at = timestamp,
		updated_at = timestamp
	)
