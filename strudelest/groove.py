from __future__ import annotations

import dataclasses
import math
import typing

import strudelest.formatting

if typing.TYPE_CHECKING:
	import strudelest.rules


SWING_STEP = 0.02


@dataclasses.dataclass(frozen=True)
class Groove:

	"""
	Swing feel applied to selected layers of a rendered program.

	A groove is emitted as a ``.swingBy(amount, subdivision)`` call on each
	layer it targets. Templates return one from their ``derive_runtime``
	function so the amount can follow user parameters.

	Parameters:
		swing: Swing amount. Zero, negative or non-finite amounts disable
			the groove entirely.
		subdivision: Number of swing slots per cycle (rounded, at least 1).
		layers: Layer ids that receive swing. When ``None`` every layer of
			kind ``"drums"`` swings.

	Example::

		# Swing only the hats, eighth-note feel
		Groove(swing=0.22, subdivision=8, layers=["hats"])
	"""

	swing: float
	subdivision: float = 4
	layers: typing.Optional[typing.Sequence[str]] = None

	@property
	def active (self) -> bool:

		"""Return True if the groove produces any swing."""

		return isinstance(self.swing, (int, float)) and math.isfinite(self.swing) and self.swing > 0

	@property
	def slots (self) -> int:

		"""Return the subdivision as a positive integer."""

		return max(1, strudelest.formatting.round_half_up(self.subdivision))

	def applies_to (self, layer: strudelest.rules.Layer) -> bool:

		"""Return True if ``layer`` should be swung by this groove."""

		if not self.active:
			return False

		if self.layers is not None:
			return layer.id in self.layers

		return layer.kind == "drums"

	def render (self) -> str:

		"""Return the ``.swingBy()`` call for this groove."""

		amount = strudelest.formatting.quantize(self.swing, SWING_STEP)

		return f".swingBy({strudelest.formatting.format_number(amount)}, {self.slots})"
