"""Template catalog.

Every template is a :class:`~strudelest.template.Template` record declared in
its own module. :data:`TEMPLATES` fixes the catalog order shown by the CLI.
"""

import typing

import strudelest.template
import strudelest.templates.ambient as ambient
import strudelest.templates.ambient_drift as ambient_drift
import strudelest.templates.breakbeat_pulse as breakbeat_pulse
import strudelest.templates.chillwave_vibes as chillwave_vibes
import strudelest.templates.minimal_groove as minimal_groove
import strudelest.templates.old_school_hiphop as old_school_hiphop
import strudelest.templates.polyrhythm_grid as polyrhythm_grid
import strudelest.templates.rap80s as rap80s
import strudelest.templates.swing_groove as swing_groove
import strudelest.templates.techno as techno
import strudelest.templates.techno_drive as techno_drive


TEMPLATES: typing.List[strudelest.template.Template] = [
	ambient.AMBIENT,
	techno.TECHNO,
	rap80s.RAP_80S,
	swing_groove.SWING_GROOVE,
	techno_drive.TECHNO_DRIVE,
	chillwave_vibes.CHILLWAVE_VIBES,
	old_school_hiphop.OLD_SCHOOL_HIPHOP,
	ambient_drift.AMBIENT_DRIFT,
	breakbeat_pulse.BREAKBEAT_PULSE,
	minimal_groove.MINIMAL_GROOVE,
	polyrhythm_grid.POLYRHYTHM_GRID,
]


def template_ids () -> typing.List[str]:

	"""Return the catalog ids in display order."""

	return [template.id for template in TEMPLATES]


def get_template (template_id: str) -> strudelest.template.Template:

	"""
	Look up a template by id.

	Raises:
		KeyError: If no template has this id.
	"""

	for template in TEMPLATES:
		if template.id == template_id:
			return template

	raise KeyError(f"Unknown template '{template_id}'. Available: {', '.join(template_ids())}")
