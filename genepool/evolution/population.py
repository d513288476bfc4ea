"""
Population buffers for GenePool evolution cycles.

`Population` holds the candidate pool and the index-aligned score list. It
seeds itself through an environment, ranks itself with the partition sort
and exposes the elite prefix and its reverse-weight table to the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Tuple, TypeVar

from .environment import Environment
from .selection import partition_sort, reverse_weights

C = TypeVar("C")


@dataclass
class Population(Generic[C]):
    """Fixed-size candidate pool with a parallel score table."""

    size: int
    candidates: List[C] = field(default_factory=list)
    scores: List[float] = field(default_factory=list)

    def seed(self, environment: Environment[C]) -> None:
        """Fill the pool with fresh candidates reserved from the environment."""
        reserved = environment.reserve(self.size)
        if len(reserved) != self.size:
            count = len(reserved)
            environment.release(reserved)
            raise ValueError(f"Environment reserved {count} candidates, expected {self.size}.")
        self.candidates = list(reserved)
        self.scores = [0.0] * self.size

    def rank(self) -> float:
        """Sort candidates by ascending score in place and return the best score."""
        partition_sort(self.scores, self.candidates)
        return self.scores[0]

    def elite(self, count: int) -> Tuple[C, ...]:
        """Return an immutable snapshot of the best ``count`` candidates."""
        return tuple(self.candidates[:count])

    def weights(self, elite_count: int) -> Tuple[List[float], float]:
        """Reverse-weight table and total weight over the elite prefix."""
        return reverse_weights(self.scores, elite_count)

    def release(self, environment: Environment[C]) -> None:
        """Hand the pool back to the environment and forget it."""
        candidates, self.candidates = self.candidates, []
        self.scores = []
        environment.release(candidates)
