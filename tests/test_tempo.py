import pytest

import strudelest.tempo


@pytest.mark.parametrize("code, expected", [
	('setcps(0.5);\ns("bd")', 0.5),
	('SETCPS( 0.7 )\ns("bd")', 0.7),
	('setbpm(120);\ns("bd")', 0.5),
	('setbpm(120);\nsetcps(0.25);', 0.25),
	('s("bd")', 1.0),
])
def test_extract_base_cps (code: str, expected: float) -> None:

	"""setcps wins over setbpm; programs with neither run at 1 cps."""

	assert strudelest.tempo.extract_base_cps(code) == pytest.approx(expected)


def test_compute_effective_cps () -> None:

	"""Speed multiplies either the program tempo or the override."""

	assert strudelest.tempo.compute_effective_cps(0.5, 2) == 1.0
	assert strudelest.tempo.compute_effective_cps(0.5, 1.5, True, 120) == pytest.approx(0.75)


def test_rewrite_replaces_first_statement () -> None:

	"""Only the first tempo statement is rewritten."""

	code = 'setcps(0.5);\ns("bd")\nsetcps(0.9);'

	assert strudelest.tempo.rewrite_code_tempo(code, 1) == 'setcps(1.000);\ns("bd")\nsetcps(0.9);'


def test_rewrite_converts_setbpm () -> None:

	"""A setbpm statement is replaced with setcps."""

	assert strudelest.tempo.rewrite_code_tempo('setbpm(90);\nnote("c3")', 0.375) == 'setcps(0.375);\nnote("c3")'


def test_rewrite_prepends_when_missing () -> None:

	"""Programs without a tempo get one on the first line."""

	assert strudelest.tempo.rewrite_code_tempo('s("bd")', 0.5) == 'setcps(0.500);\ns("bd")'
	assert strudelest.tempo.rewrite_code_tempo('   ', 0.5) == 'setcps(0.500);'


def test_strip_tempo_directives () -> None:

	"""Every setcps and setbpm statement is removed."""

	code = 'setcps(0.5);\nsetbpm(120);\ns("bd")'

	assert strudelest.tempo.strip_tempo_directives(code) == 's("bd")'
