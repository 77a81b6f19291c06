from collections.abc import Callable, Iterable, Iterator
from typing import Any

from typing_extensions import override

import numpy.random as npr


def make_rng(seed: int | None = None) -> npr.Generator:
    """
    Construct a random number generator.

    Args:
        seed: integer seed; None draws fresh entropy from the operating system.
    """
    return npr.Generator(npr.PCG64(seed))


def spawn_seeds(seed: int | None, n: int) -> list[int]:
    """
    Derive `n` independent integer seeds from a root seed, e.g. one per replication.
    """
    ss = npr.SeedSequence(seed)
    return [int(child.generate_state(1, dtype="uint32")[0]) for child in ss.spawn(n)]


class FixedRng(npr.Generator):
    """
    Random number generator that returns fixed values from `random()`.

    This is primarily useful for unit testing, to force the outcome of Bernoulli trials.
    """

    def __init__(self, v: Callable[[], float] | float | Iterable[float] | None = None, *, seed: int | None = 0):
        """
        Args:
            v: a constant, a function returning each value, or an iterable of values consumed in order.
               None falls back to the underlying PCG64 stream.
            seed: seed of the underlying PCG64 stream.
        """
        super().__init__(npr.PCG64(seed))
        if v is None or callable(v):
            self._v = v
        elif isinstance(v, (int, float)):
            self._v = lambda: v
        else:
            it: Iterator[float] = iter(v)
            self._v = lambda: next(it)

    @override
    def random(self, *args, **kwargs) -> Any:
        return self._v() if self._v else super().random(*args, **kwargs)
