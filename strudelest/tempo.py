"""Tempo directives in rendered programs.

Programs state their tempo with ``setcps(x)`` (cycles per second) or
``setbpm(x)``. One cycle is one bar of four beats, so ``cps = bpm / 240``.
These helpers read, rewrite and remove those statements in finished text.
"""

import re


_NUMBER = r"[0-9]*\.?[0-9]+"

SET_CPS = re.compile(rf"setcps\(\s*({_NUMBER})\s*\)[ \t]*;?", re.IGNORECASE)
SET_BPM = re.compile(rf"setbpm\(\s*({_NUMBER})\s*\)[ \t]*;?", re.IGNORECASE)

_SET_CPS_STATEMENT = re.compile(rf"setcps\(\s*{_NUMBER}\s*\)\s*;?\s*", re.IGNORECASE)
_SET_BPM_STATEMENT = re.compile(rf"setbpm\(\s*{_NUMBER}\s*\)\s*;?\s*", re.IGNORECASE)

DEFAULT_CPS = 1.0


def bpm_to_cps (bpm: float) -> float:

	"""Convert beats per minute to cycles per second (four beats per cycle)."""

	return bpm / 240


def extract_base_cps (code: str) -> float:

	"""
	Return the tempo a program sets, in cycles per second.

	The first ``setcps`` call wins; failing that the first ``setbpm`` call is
	converted. Programs with neither run at ``1`` cps.
	"""

	match = SET_CPS.search(code)

	if match:
		return float(match.group(1))

	match = SET_BPM.search(code)

	if match:
		return bpm_to_cps(float(match.group(1)))

	return DEFAULT_CPS


def compute_effective_cps (base_cps: float, speed: float, bpm_override_enabled: bool = False, bpm_override: float = 120) -> float:

	"""Apply a speed multiplier to either the program's own tempo or an override bpm."""

	if bpm_override_enabled:
		return bpm_to_cps(bpm_override) * speed

	return base_cps * speed


def rewrite_code_tempo (code: str, cps: float) -> str:

	"""
	Set the program's tempo to ``cps``.

	The first ``setcps`` (or, failing that, ``setbpm``) statement is replaced
	with ``setcps(<cps to 3 decimals>);``. A program without one gets the
	statement prepended on its own line.
	"""

	statement = f"setcps({cps:.3f});"

	for pattern in (SET_CPS, SET_BPM):
		if pattern.search(code):
			return pattern.sub(lambda match: statement, code, count=1)

	if not code.strip():
		return statement

	return f"{statement}\n{code}"


def strip_tempo_directives (code: str) -> str:

	"""Remove every tempo statement, for players that control tempo themselves."""

	return _SET_BPM_STATEMENT.sub("", _SET_CPS_STATEMENT.sub("", code)).strip()
