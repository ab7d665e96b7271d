import json
import logging

import pytest

import strudelest.__main__

import midi_helpers


def _run_json (capsys: pytest.CaptureFixture, *argv: str) -> dict:

	assert strudelest.__main__.main(["--json", *argv]) == 0

	return json.loads(capsys.readouterr().out)


def test_templates_lists_catalog (capsys: pytest.CaptureFixture) -> None:

	"""The templates command prints one line per template."""

	assert strudelest.__main__.main(["templates"]) == 0

	lines = capsys.readouterr().out.strip().splitlines()

	assert len(lines) == 11
	assert lines[1].startswith("techno")


def test_generate_json (capsys: pytest.CaptureFixture) -> None:

	"""generate --json prints the full piece record."""

	record = _run_json(capsys, "generate", "techno", "--seed", "abc123", "--param", "drive=5")

	assert record["templateId"] == "techno"
	assert record["seed"] == "abc123"
	assert record["params"]["drive"] == 1
	assert record["code"].startswith("setcps(1.100);")


def test_generate_prints_program (capsys: pytest.CaptureFixture) -> None:

	"""Without --json only the program is printed."""

	assert strudelest.__main__.main(["generate", "ambient", "--seed", "x", "--bars", "8"]) == 0

	out = capsys.readouterr().out

	assert out.startswith("setcps(")
	assert out.rstrip().endswith(")")


def test_speed_and_override_rewrite_tempo (capsys: pytest.CaptureFixture) -> None:

	"""Global tempo options rewrite the program's tempo statement."""

	record = _run_json(capsys, "--speed", "2", "generate", "techno", "--seed", "s", "--bpm", "120")
	assert record["code"].startswith("setcps(2.000);")

	record = _run_json(capsys, "--bpm-override", "60", "generate", "techno", "--seed", "s")
	assert record["code"].startswith("setcps(0.250);")


def test_strip_tempo (capsys: pytest.CaptureFixture) -> None:

	"""--strip-tempo removes every tempo statement."""

	assert strudelest.__main__.main(["--strip-tempo", "generate", "techno", "--seed", "s"]) == 0

	assert "setcps" not in capsys.readouterr().out


def test_arrange_json (capsys: pytest.CaptureFixture) -> None:

	"""arrange --json includes the sections and the long-form params."""

	record = _run_json(capsys, "arrange", "techno", "--seed", "abc123", "--style", "club", "--length", "short")

	assert record["name"] == "Techno Club 32b"
	assert record["bars"] == 32
	assert record["params"]["mode"] == "long-form"
	assert [section["label"] for section in record["sections"]] == ["Intro", "Groove", "Break", "Drop", "Outro"]


def test_arrange_no_focus (capsys: pytest.CaptureFixture) -> None:

	"""--no-focus renders sections from the full phase list."""

	record = _run_json(capsys, "arrange", "techno", "--seed", "abc123", "--no-focus")

	assert all(section["focusPhase"] is None for section in record["sections"])


def test_import_midi (tmp_path, capsys: pytest.CaptureFixture) -> None:

	"""import-midi prints the generated program."""

	path = tmp_path / "tune.mid"
	path.write_bytes(midi_helpers.midi_bytes([midi_helpers.midi_track(name="Lead", notes=[(60, 0, 1, 100)], program=0)]))

	assert strudelest.__main__.main(["import-midi", str(path), "--division", "4"]) == 0

	out = capsys.readouterr().out

	assert out.startswith("// MIDI import: tune")
	assert 'note("c4 ~!15")' in out


def test_import_midi_error_exit_code (tmp_path, capsys: pytest.CaptureFixture) -> None:

	"""Import failures print their code and exit with status 1."""

	path = tmp_path / "bad.mid"
	path.write_bytes(b"not a midi file at all")

	assert strudelest.__main__.main(["import-midi", str(path)]) == 1
	assert "error: invalid_midi: Missing MIDI header chunk." in capsys.readouterr().err


def test_unknown_template (capsys: pytest.CaptureFixture) -> None:

	"""Unknown template ids are reported, not raised."""

	assert strudelest.__main__.main(["generate", "polka"]) == 1
	assert "error: unknown_template" in capsys.readouterr().err


def test_bad_param_override (capsys: pytest.CaptureFixture) -> None:

	"""Overrides must be key=value."""

	assert strudelest.__main__.main(["generate", "techno", "--param", "drive"]) == 1
	assert "error: invalid_argument" in capsys.readouterr().err


def test_parse_param_overrides_reads_yaml_scalars () -> None:

	"""Override values keep their natural types."""

	overrides = strudelest.__main__.parse_param_overrides(["drive=0.9", "rotate=false", "cycle_a=4", "mood=dark"])

	assert overrides == {"drive": 0.9, "rotate": False, "cycle_a": 4, "mood": "dark"}


def test_output_file (tmp_path, capsys: pytest.CaptureFixture) -> None:

	"""--output writes the result to a file instead of stdout."""

	target = tmp_path / "piece.strudel"

	assert strudelest.__main__.main(["--output", str(target), "generate", "techno", "--seed", "s"]) == 0
	assert capsys.readouterr().out == ""
	assert target.read_text().startswith("setcps(1.100);")


def test_config_supplies_defaults (tmp_path, capsys: pytest.CaptureFixture) -> None:

	"""Config values fill in the template and arranger settings."""

	config = tmp_path / "strudelest.yaml"
	config.write_text(
		"generator:\n"
		"  template: rap-80s\n"
		"arranger:\n"
		"  style: cinematic\n"
		"  length: short\n"
		"  focus_phases: false\n"
	)

	record = _run_json(capsys, "--config", str(config), "arrange", "--seed", "s")

	assert record["templateId"] == "rap-80s"
	assert record["name"] == "80's Rap Cinematic 32b"
	assert all(section["focusPhase"] is None for section in record["sections"])


def test_load_config_missing_file (tmp_path, caplog: pytest.LogCaptureFixture) -> None:

	"""A missing config file logs a warning and yields no settings."""

	with caplog.at_level(logging.WARNING):
		assert strudelest.__main__.load_config(str(tmp_path / "absent.yaml")) == {}

	assert "not found" in caplog.text
