"""Command line entry point.

Usage::

	strudelest templates
	strudelest generate techno --seed abc123 --param drive=0.9
	strudelest arrange techno --style club --length long
	strudelest import-midi song.mid --division 8 --sharps

Defaults can be set in a YAML file passed with ``--config`` (see
:func:`load_config`); command line flags win over the file.
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
import typing

import yaml

import strudelest.arranger
import strudelest.generator
import strudelest.midi.importer
import strudelest.midi.model
import strudelest.rules
import strudelest.template
import strudelest.templates
import strudelest.tempo


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "strudelest.yaml"


@dataclasses.dataclass
class CommandOutput:

	"""What a subcommand produced: program text (if any), a JSON payload and summary lines."""

	text: str
	payload: typing.Dict[str, typing.Any]
	is_program: bool = True
	summary: typing.List[str] = dataclasses.field(default_factory=list)


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> dict:

	"""
	Load configuration from a YAML file.

	A missing file is not an error: a warning is logged and defaults apply.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def config_section (config: typing.Mapping[str, typing.Any], name: str) -> typing.Dict[str, typing.Any]:

	"""Return one top-level section of the config, or an empty dict."""

	section = config.get(name)

	return section if isinstance(section, dict) else {}


def parse_param_overrides (values: typing.Optional[typing.Sequence[str]]) -> typing.Dict[str, typing.Any]:

	"""
	Parse ``key=value`` pairs from the command line.

	Values are read as YAML scalars, so ``drive=0.9`` gives a float,
	``rotate=false`` a bool and ``cycle_a=4`` an int.
	"""

	overrides: typing.Dict[str, typing.Any] = {}

	for item in values or []:

		key, separator, raw = item.partition("=")

		if not separator or not key.strip():
			raise ValueError(f"Parameter override '{item}' is not in key=value form")

		overrides[key.strip()] = yaml.safe_load(raw) if raw.strip() else raw

	return overrides


def _template_from (args: argparse.Namespace, config: typing.Mapping[str, typing.Any]) -> strudelest.template.Template:

	template_id = args.template or config_section(config, "generator").get("template")

	if not template_id:
		raise ValueError("No template given (pass TEMPLATE or set generator.template in the config)")

	return strudelest.templates.get_template(template_id)


def command_templates (args: argparse.Namespace, config: typing.Mapping[str, typing.Any]) -> CommandOutput:

	lines = []
	payload = []

	for template in strudelest.templates.TEMPLATES:
		params = ", ".join(f"{key}={value}" for key, value in template.default_params.items())
		lines.append(f"{template.id:<20} {template.label} - {template.default_bpm} BPM, {template.default_bars} bars ({params})")
		payload.append({
			"id": template.id,
			"label": template.label,
			"description": template.description,
			"bpm": template.default_bpm,
			"bars": template.default_bars,
			"params": dict(template.default_params),
		})

	return CommandOutput("\n".join(lines), {"templates": payload}, is_program=False)


def command_generate (args: argparse.Namespace, config: typing.Mapping[str, typing.Any]) -> CommandOutput:

	template = _template_from(args, config)

	piece = strudelest.generator.generate_piece(
		template,
		seed = args.seed,
		bpm = args.bpm,
		bars = args.bars,
		params = parse_param_overrides(args.param)
	)

	return CommandOutput(piece.code, piece.to_dict(), summary=[f"{piece.name} - seed {piece.seed}"])


def command_arrange (args: argparse.Namespace, config: typing.Mapping[str, typing.Any]) -> CommandOutput:

	template = _template_from(args, config)
	settings = config_section(config, "arranger")

	seed = args.seed or strudelest.generator.create_seed()
	bpm = args.bpm if args.bpm is not None else template.default_bpm
	style = args.style or settings.get("style", "arc")
	length = args.length or settings.get("length", "medium")
	focus = False if args.no_focus else bool(settings.get("focus_phases", True))
	params = strudelest.generator.resolve_template_params(template, seed, parse_param_overrides(args.param))

	result = strudelest.arranger.generate_long_form_piece(template, seed, bpm, style=style, length=length, params=params, focus_phases=focus)
	piece = strudelest.arranger.piece_from_arrangement(template, result, seed, bpm, params, style, length)

	payload = piece.to_dict()
	payload["sections"] = [section.to_dict() for section in result.sections]

	summary = [f"{piece.name} - seed {seed}"]
	summary.extend(f"{section.label}: {section.bars} bars, energy {section.energy}" for section in result.sections)

	return CommandOutput(result.code, payload, summary=summary)


def command_import_midi (args: argparse.Namespace, config: typing.Mapping[str, typing.Any]) -> CommandOutput:

	settings = config_section(config, "midi_import")

	options = strudelest.midi.importer.resolve_options({
		"quantize_division": args.division if args.division is not None else settings.get("quantize_division"),
		"max_tracks": args.max_tracks if args.max_tracks is not None else settings.get("max_tracks"),
		"max_notes": args.max_notes if args.max_notes is not None else settings.get("max_notes"),
		"prefer_sharps": True if args.sharps else settings.get("prefer_sharps"),
		"include_velocity_as_gain": False if args.no_velocity_gain else settings.get("include_velocity_as_gain"),
	})

	result = strudelest.midi.importer.import_midi_file(args.file, options)

	return CommandOutput(result.code, result.to_dict(), summary=list(result.section_summary))


def apply_tempo (code: str, args: argparse.Namespace) -> str:

	"""Apply the global ``--strip-tempo``, ``--speed`` and ``--bpm-override`` options."""

	if args.strip_tempo:
		return strudelest.tempo.strip_tempo_directives(code)

	if args.speed == 1 and args.bpm_override is None:
		return code

	cps = strudelest.tempo.compute_effective_cps(
		strudelest.tempo.extract_base_cps(code),
		args.speed,
		args.bpm_override is not None,
		args.bpm_override if args.bpm_override is not None else 120
	)

	return strudelest.tempo.rewrite_code_tempo(code, cps)


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="strudelest", description="Seeded pattern-language program generator")
	parser.add_argument("--config", help=f"YAML config file (default: {DEFAULT_CONFIG_PATH})")
	parser.add_argument("--output", "-o", help="Write the result to this file instead of stdout")
	parser.add_argument("--json", action="store_true", help="Print the full record as JSON")
	parser.add_argument("--speed", type=float, default=1.0, help="Tempo multiplier applied to the program (default: 1)")
	parser.add_argument("--bpm-override", type=float, help="Replace the program tempo with this BPM (before --speed)")
	parser.add_argument("--strip-tempo", action="store_true", help="Remove all tempo statements")
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

	commands = parser.add_subparsers(dest="command", required=True)

	commands.add_parser("templates", help="List the available templates")

	for name, help_text in (("generate", "Generate a piece from a template"), ("arrange", "Arrange a long-form piece from a template")):
		command = commands.add_parser(name, help=help_text)
		command.add_argument("template", nargs="?", help="Template id (default: generator.template from the config)")
		command.add_argument("--seed", help="Seed string (default: random)")
		command.add_argument("--bpm", type=float, help="Tempo (default: the template's)")
		command.add_argument("--param", action="append", metavar="KEY=VALUE", help="Override a template parameter (repeatable)")

		if name == "generate":
			command.add_argument("--bars", type=int, help="Length in bars (default: the template's)")
		else:
			command.add_argument("--style", choices=sorted(strudelest.arranger.BLUEPRINTS), help="Arrangement style (default: arc)")
			command.add_argument("--length", choices=list(strudelest.arranger.LENGTH_TO_BARS), help="Length preset (default: medium)")
			command.add_argument("--no-focus", action="store_true", help="Render every section from the template's full phase list")

	midi = commands.add_parser("import-midi", help="Convert a Standard MIDI File")
	midi.add_argument("file", help="Path to a .mid file")
	midi.add_argument("--division", type=int, help="Quantize grid steps per beat (default: 16)")
	midi.add_argument("--max-tracks", type=int, help="Import at most this many tracks (default: 24)")
	midi.add_argument("--max-notes", type=int, help="Reject files with more notes than this (default: 100000)")
	midi.add_argument("--sharps", action="store_true", help="Spell accidentals with sharps")
	midi.add_argument("--no-velocity-gain", action="store_true", help="Ignore note velocity when setting track gain")

	return parser


COMMANDS: typing.Dict[str, typing.Callable[[argparse.Namespace, typing.Mapping[str, typing.Any]], CommandOutput]] = {
	"templates": command_templates,
	"generate": command_generate,
	"arrange": command_arrange,
	"import-midi": command_import_midi,
}


def _log_level (args: argparse.Namespace, config: typing.Mapping[str, typing.Any]) -> int:

	if args.verbose:
		return logging.DEBUG

	level = getattr(logging, str(config_section(config, "logging").get("level", "INFO")).upper(), None)

	return level if isinstance(level, int) else logging.INFO


def main (argv: typing.Optional[typing.Sequence[str]] = None) -> int:

	"""
	Main entry point for the strudelest command line.

	Returns the process exit status: 0 on success, 1 when the command fails.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

	config = load_config(args.config or DEFAULT_CONFIG_PATH) if args.config or os.path.exists(DEFAULT_CONFIG_PATH) else {}
	logging.getLogger().setLevel(_log_level(args, config))

	try:
		output = COMMANDS[args.command](args, config)

	except strudelest.midi.model.MidiImportError as exc:
		print(f"error: {exc.code}: {exc.message}", file=sys.stderr)
		return 1

	except strudelest.rules.RuleSetError as exc:
		print(f"error: invalid_rules: {exc}", file=sys.stderr)
		return 1

	except KeyError as exc:
		print(f"error: unknown_template: {exc.args[0] if exc.args else exc}", file=sys.stderr)
		return 1

	except (ValueError, OSError) as exc:
		print(f"error: invalid_argument: {exc}", file=sys.stderr)
		return 1

	text = output.text

	if output.is_program:
		text = apply_tempo(text, args)
		output.payload["code"] = text

	if args.json:
		text = json.dumps(output.payload, indent=2, ensure_ascii=False)

	for line in output.summary:
		logger.info(line)

	if args.output:
		with open(args.output, "w", encoding="utf-8") as f:
			f.write(text + "\n")
		logger.info(f"Wrote {args.output}")
	else:
		print(text)

	return 0


if __name__ == "__main__":
	sys.exit(main())
