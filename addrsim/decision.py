"""Injectable random draws for the simulated backend.

Every random choice the simulation makes (scenario, outage kind, latency,
generated suggestions) goes through a decision source so tests can seed it
or script it.

Usage:
    source = RandomDecisionSource(seed=42)
    engine = ValidationEngine(source)

    # Force the invalid-address branch:
    source = ScriptedDecisionSource([ValidationScenario.INVALID_ADDRESS])
"""

import random
from collections import deque
from typing import Iterable, Protocol, Sequence, TypeVar

T = TypeVar("T")


class DecisionSource(Protocol):
    """Seedable source of uniform random draws."""

    def choice(self, options: Sequence[T]) -> T: ...

    def uniform(self, low: float, high: float) -> float: ...

    def randint(self, low: int, high: int) -> int: ...


class RandomDecisionSource:
    """Decision source backed by its own ``random.Random`` instance."""

    __slots__ = ("seed", "_rng")

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise ValueError("cannot choose from an empty sequence")
        return self._rng.choice(options)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)


class ScriptedDecisionSource:
    """Replays queued ``choice`` outcomes, then falls back to seeded draws.

    Each scripted value must be one of the options offered at the point it
    is consumed; a mismatch means the script is out of step with the code
    under test and raises ``ValueError``. ``uniform`` and ``randint`` are
    never scripted.
    """

    def __init__(self, choices: Iterable = (), seed: int | None = 0):
        self._choices: deque = deque(choices)
        self._fallback = RandomDecisionSource(seed)

    @property
    def remaining(self) -> int:
        return len(self._choices)

    def push(self, *values) -> None:
        self._choices.extend(values)

    def choice(self, options: Sequence[T]) -> T:
        if not self._choices:
            return self._fallback.choice(options)
        value = self._choices.popleft()
        if value not in options:
            raise ValueError(f"Scripted choice {value!r} not among {list(options)!r}")
        return value

    def uniform(self, low: float, high: float) -> float:
        return self._fallback.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        return self._fallback.randint(low, high)
