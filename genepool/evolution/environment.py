"""
Environment collaborators owning the candidate lifecycle.

The engine never looks inside a candidate. Everything it needs - creating the
first population, copying survivors, scoring and releasing them - goes
through an :class:`Environment`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

import numpy as np

from .fitness import character_distance
from .search_space import AlphabetSpace, GeneSpace

C = TypeVar("C")


class Environment(ABC, Generic[C]):
    """Creation and evaluation contract consumed by :class:`GeneticEngine`.

    ``evaluate`` may be called concurrently from worker threads and must not
    mutate the candidate.
    """

    @abstractmethod
    def reserve(self, count: int) -> List[C]:
        """Return ``count`` freshly randomised, independent candidates."""

    @abstractmethod
    def evaluate(self, candidate: C) -> float:
        """Return the error of ``candidate`` (lower is better)."""

    @abstractmethod
    def clone(self, candidate: C) -> C:
        """Return a deep copy with an independent lifetime."""

    def release(self, population: List[C]) -> None:
        """Drop every candidate of a population returned by :meth:`reserve`."""
        population.clear()

    def render(self, candidate: C) -> str:
        """Human readable form used by visitors and reports."""
        return repr(candidate)


class GenomeEnvironment(Environment[List[Any]]):
    """Environment for list genomes sampled from a :class:`GeneSpace`.

    Parameters
    ----------
    space : GeneSpace
        Domain used to sample the initial genomes.
    fitness : callable
        Maps a genome to its error.
    seed : int, optional
        Seed of the generator used by :meth:`reserve`.
    """

    def __init__(
        self,
        space: GeneSpace,
        fitness: Callable[[Sequence[Any]], float],
        seed: Optional[int] = None,
    ) -> None:
        self.space = space
        self.fitness = fitness
        self._rng = np.random.default_rng(seed)

    def reserve(self, count: int) -> List[List[Any]]:
        return [self.space.random_genome(self._rng) for _ in range(count)]

    def evaluate(self, candidate: List[Any]) -> float:
        return float(self.fitness(candidate))

    def clone(self, candidate: List[Any]) -> List[Any]:
        return list(candidate)


class StringMatchEnvironment(GenomeEnvironment):
    """Evolve mixed-case letter strings toward a fixed goal string."""

    def __init__(self, goal: str, seed: Optional[int] = None, scale: float = 7.0) -> None:
        if not goal:
            raise ValueError("Goal string must not be empty.")
        space = AlphabetSpace(length=len(goal))
        if any(char not in space for char in goal):
            raise ValueError(f"Goal '{goal}' must only contain ASCII letters.")
        self.goal = goal
        self.scale = scale
        super().__init__(space, self._distance, seed=seed)

    def _distance(self, candidate: Sequence[str]) -> float:
        return character_distance(self.goal, candidate, scale=self.scale)

    def render(self, candidate: List[Any]) -> str:
        return "".join(candidate)
