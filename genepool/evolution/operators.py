"""
Offspring operators and the dispatch rule that picks one per slot.

An operator turns the frozen elite slice into exactly one new candidate. The
engine asks :func:`select_operator` which operator fills each non-elite slot:
operators are tried in order, each against a fresh uniform draw, and the
first whose weight exceeds the draw wins. The last operator is the fallback.
Weights are therefore not normalised and list order matters; with the
default ``(0.3, 0.8)`` ordering the point mutation fires about 30% of the
time and crossover covers the rest.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from numpy.random import Generator

from .search_space import GeneSpace
from .selection import remap_mate, select_parent

C = TypeVar("C")


class Operator(ABC, Generic[C]):
    """Produces one offspring from the elite slice."""

    weight: float = 1.0

    @abstractmethod
    def mutate(
        self,
        elite: Sequence[C],
        reverse_weights: Sequence[float],
        total_weight: float,
        elite_count: int,
        offspring: C,
        rng: Generator,
    ) -> C:
        """Return the candidate that replaces ``offspring`` in its slot.

        ``offspring`` is the retired candidate of the slot and may be
        overwritten in place. ``elite`` must be treated as read-only.
        """


def validate_operators(operators: Sequence[Operator[Any]]) -> None:
    """Reject an empty operator list or weights that are negative or not finite."""

    if not operators:
        raise ValueError("At least one operator is required.")
    for position, operator in enumerate(operators):
        weight = float(operator.weight)
        if math.isnan(weight) or math.isinf(weight) or weight < 0.0:
            raise ValueError(f"Operator #{position} ({type(operator).__name__}) has invalid weight {weight!r}.")


def select_operator(operators: Sequence[Operator[C]], rng: Generator) -> Operator[C]:
    """Pick the first operator whose weight beats a fresh uniform draw."""

    for operator in operators[:-1]:
        if rng.random() < operator.weight:
            return operator
    return operators[-1]


def _recycle(offspring: Any, length: int) -> List[Any]:
    if isinstance(offspring, list) and len(offspring) == length:
        return offspring
    return [None] * length


class CrossoverOperator(Operator[List[Any]]):
    """Uniform crossover between two roulette-selected elite parents."""

    def __init__(self, weight: float = 0.8) -> None:
        self.weight = weight

    def mutate(
        self,
        elite: Sequence[List[Any]],
        reverse_weights: Sequence[float],
        total_weight: float,
        elite_count: int,
        offspring: List[Any],
        rng: Generator,
    ) -> List[Any]:
        index = select_parent(reverse_weights, total_weight, elite_count, rng)
        mate = select_parent(reverse_weights, total_weight, elite_count, rng)
        mate = remap_mate(index, mate, elite_count)
        father = elite[index]
        mother = elite[mate]
        length = min(len(father), len(mother))
        child = _recycle(offspring, length)
        # One fair coin per position.
        coins = rng.integers(0, 2, size=length)
        for position in range(length):
            child[position] = father[position] if coins[position] == 0 else mother[position]
        return child


class PointMutationOperator(Operator[List[Any]]):
    """Copy one roulette-selected parent and redraw a single gene."""

    def __init__(self, space: GeneSpace, weight: float = 0.3) -> None:
        self.space = space
        self.weight = weight

    def mutate(
        self,
        elite: Sequence[List[Any]],
        reverse_weights: Sequence[float],
        total_weight: float,
        elite_count: int,
        offspring: List[Any],
        rng: Generator,
    ) -> List[Any]:
        parent = elite[select_parent(reverse_weights, total_weight, elite_count, rng)]
        child = _recycle(offspring, len(parent))
        child[:] = parent
        if child:
            position = int(rng.integers(0, len(child)))
            child[position] = self.space.random_gene(rng)
        return child


OPERATORS = {
    "crossover": CrossoverOperator,
    "point_mutation": PointMutationOperator,
}


def build_operator(name: str, space: GeneSpace, weight: Optional[float] = None) -> Operator[List[Any]]:
    """Instantiate a reference operator by its configuration name."""

    key = name.strip().lower().replace("-", "_")
    if key not in OPERATORS:
        raise KeyError(f"Unknown operator '{name}'. Options: {sorted(OPERATORS)}")
    kwargs = {} if weight is None else {"weight": float(weight)}
    if key == "point_mutation":
        return PointMutationOperator(space, **kwargs)
    return CrossoverOperator(**kwargs)


__all__ = [
    "Operator",
    "CrossoverOperator",
    "PointMutationOperator",
    "OPERATORS",
    "build_operator",
    "select_operator",
    "validate_operators",
]
