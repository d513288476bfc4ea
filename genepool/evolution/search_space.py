"""
Gene spaces used to seed and mutate sequence genomes.

A gene space knows how to draw a single gene and a whole genome. The same
domain is used for the initial population and for point mutations, so
mutated genes never leave the space the population was sampled from.
"""

from __future__ import annotations

import string
from typing import Any, List

from numpy.random import Generator


class GeneSpace:
    """Base class describing a fixed-length genome over a gene domain."""

    def __init__(self, length: int) -> None:
        if length <= 0:
            raise ValueError("Genome length must be positive.")
        self.length = length

    def random_gene(self, rng: Generator) -> Any:
        raise NotImplementedError

    def random_genome(self, rng: Generator) -> List[Any]:
        """Sample a full genome of ``length`` independent genes."""
        return [self.random_gene(rng) for _ in range(self.length)]


class AlphabetSpace(GeneSpace):
    """Mixed-case ASCII letters.

    A fair coin picks the case first and a letter is then drawn uniformly from
    that case, so upper and lower case are equally likely regardless of the
    alphabet sizes.
    """

    def __init__(
        self,
        length: int,
        upper: str = string.ascii_uppercase,
        lower: str = string.ascii_lowercase,
    ) -> None:
        super().__init__(length)
        if not upper or not lower:
            raise ValueError("Both alphabets must be non-empty.")
        self.upper = upper
        self.lower = lower

    def random_gene(self, rng: Generator) -> str:
        pool = self.upper if rng.integers(0, 2) == 1 else self.lower
        return pool[int(rng.integers(0, len(pool)))]

    def __contains__(self, gene: object) -> bool:
        return isinstance(gene, str) and len(gene) == 1 and (gene in self.upper or gene in self.lower)


class IntegerSpace(GeneSpace):
    """Integers drawn uniformly from ``[low, high)``."""

    def __init__(self, low: int, high: int, length: int = 1) -> None:
        super().__init__(length)
        if high <= low:
            raise ValueError("IntegerSpace requires high > low.")
        self.low = low
        self.high = high

    def random_gene(self, rng: Generator) -> int:
        return int(rng.integers(self.low, self.high))

    def __contains__(self, gene: object) -> bool:
        return isinstance(gene, int) and self.low <= gene < self.high
