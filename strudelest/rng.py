"""Deterministic random streams derived from string seeds.

Every generated piece is reproducible from its seed. A seed string is hashed
with 32-bit FNV-1a and the hash drives a mulberry32 generator, so the same
seed yields the same float stream on every run and every platform.

:class:`SeededRandom` exposes that stream through the standard
:class:`random.Random` interface, so callers can use ``rng.random()``,
``rng.uniform()`` or ``rng.choice()`` as usual.
"""

import random
import typing


T = typing.TypeVar("T")

_UINT32 = 0xFFFFFFFF
_FNV_OFFSET_BASIS = 2166136261
_FNV_PRIME = 16777619
_MULBERRY_INCREMENT = 0x6D2B79F5
_SEED_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _imul (a: int, b: int) -> int:

	"""32-bit wrapping multiply."""

	return (a * b) & _UINT32


def hash_seed (seed: str) -> int:

	"""
	Hash a seed string to an unsigned 32-bit integer with FNV-1a.

	The hash runs over UTF-16 code units so seeds containing characters
	outside the basic multilingual plane hash the same way as in browsers.
	"""

	h = _FNV_OFFSET_BASIS
	data = seed.encode("utf-16-le")

	for i in range(0, len(data), 2):
		h ^= data[i] | (data[i + 1] << 8)
		h = _imul(h, _FNV_PRIME)

	return h & _UINT32


def _mulberry32_step (state: int) -> typing.Tuple[int, float]:

	"""Advance a mulberry32 state and return (new_state, value in [0, 1))."""

	state = (state + _MULBERRY_INCREMENT) & _UINT32
	x = state
	x = _imul(x ^ (x >> 15), x | 1)
	x ^= (x + _imul(x ^ (x >> 7), x | 61)) & _UINT32
	x = (x ^ (x >> 14)) & _UINT32

	return state, x / 4294967296


def mulberry32 (state: int) -> typing.Callable[[], float]:

	"""
	Return a mulberry32 generator function seeded with a 32-bit integer.

	Each call returns the next float in ``[0, 1)``.
	"""

	current = state & _UINT32

	def next_value () -> float:
		nonlocal current
		current, value = _mulberry32_step(current)
		return value

	return next_value


class SeededRandom (random.Random):

	"""
	A :class:`random.Random` whose underlying stream is mulberry32.

	String seeds are hashed with :func:`hash_seed`; integer seeds are used
	directly as the 32-bit state. Only ``random()`` is replaced, so every
	derived method (``uniform``, ``choice``, ``shuffle``...) draws from the
	same deterministic stream.

	Example:
		```python
		rng = SeededRandom("my-seed")
		rng.random()   # identical on every run
		```
	"""

	def __init__ (self, seed: typing.Union[str, int] = "") -> None:

		self._state = 0
		super().__init__(seed)

	def seed (self, a: typing.Any = None, version: int = 2) -> None:  # type: ignore[override]

		"""Reset the stream from a string or integer seed."""

		if a is None:
			a = create_seed()

		if isinstance(a, int):
			self._state = a & _UINT32
		else:
			self._state = hash_seed(str(a))

		self.gauss_next = None

	def random (self) -> float:

		"""Return the next float in [0, 1)."""

		self._state, value = _mulberry32_step(self._state)
		return value

	def getstate (self) -> typing.Tuple[int, typing.Optional[float]]:  # type: ignore[override]
		return (self._state, self.gauss_next)

	def setstate (self, state: typing.Tuple[int, typing.Optional[float]]) -> None:  # type: ignore[override]
		self._state, self.gauss_next = state


def seeded_random (seed: str) -> typing.Callable[[], float]:

	"""Return a float generator for a string seed."""

	return mulberry32(hash_seed(seed))


def choose_weighted (options: typing.Sequence[typing.Tuple[T, float]], rng: random.Random, default: typing.Optional[T] = None) -> typing.Optional[T]:

	"""
	Choose one value from ``(value, weight)`` pairs with a single draw.

	The roll is ``rng.random() * total`` and weights are subtracted in
	order; the first option that brings the roll to zero or below wins.
	Returns ``default`` when there are no options.
	"""

	if not options:
		return default

	total = sum(weight for _, weight in options)
	roll = rng.random() * total

	for value, weight in options:
		roll -= weight
		if roll <= 0:
			return value

	return options[-1][0]


def create_seed (length: int = 8) -> str:

	"""
	Create a fresh, non-deterministic seed string.

	Only used when the caller asks for a new seed; builds that already have
	a seed never call this.
	"""

	entropy = random.Random()

	return "".join(entropy.choice(_SEED_ALPHABET) for _ in range(length))
