"""
Ranking and parent selection primitives used by the genetic engine.

The population is ranked with an in-place Hoare partition sort that swaps the
score list and the candidate list together, so ``pool[i]`` always remains the
candidate scored ``scores[i]``. Parents are then drawn from the elite prefix by
a cumulative roulette walk over the reverse-weight table.
"""

from __future__ import annotations

from typing import List, MutableSequence, Sequence, Tuple, TypeVar

from numpy.random import Generator

C = TypeVar("C")


def _partition(scores: MutableSequence[float], pool: MutableSequence[C], lo: int, hi: int) -> int:
    pivot = scores[lo]
    i = lo - 1
    j = hi + 1
    while True:
        i += 1
        while scores[i] < pivot:
            i += 1
        j -= 1
        while scores[j] > pivot:
            j -= 1
        if i >= j:
            return j
        scores[i], scores[j] = scores[j], scores[i]
        pool[i], pool[j] = pool[j], pool[i]


def partition_sort(scores: MutableSequence[float], pool: MutableSequence[C]) -> None:
    """Sort ``scores`` ascending in place and apply the same swaps to ``pool``.

    The smaller partition is always processed first while the larger one waits
    on an explicit stack, which keeps the stack logarithmic in the population
    size. The sort is not stable.
    """

    if len(scores) != len(pool):
        raise ValueError("scores and pool must have the same length")

    pending: List[Tuple[int, int]] = [(0, len(scores) - 1)]
    while pending:
        lo, hi = pending.pop()
        while lo < hi:
            split = _partition(scores, pool, lo, hi)
            if (split - lo) < (hi - (split + 1)):
                pending.append((split + 1, hi))
                hi = split
            else:
                pending.append((lo, split))
                lo = split + 1


def reverse_weights(scores: Sequence[float], elite_count: int) -> Tuple[List[float], float]:
    """Build the reverse-weight table over the elite prefix.

    ``table[elite_count - i] = scores[i]``, so the worst elite score, the
    largest, lands in slot 1 and the best score in the last slot. Slot 0 is
    never written and stays at zero. The returned total is the sum of the raw
    elite scores.
    """

    table = [0.0] * (elite_count + 1)
    total = 0.0
    for i in range(elite_count):
        table[elite_count - i] = scores[i]
        total += scores[i]
    return table, total


def roulette_walk(weights: Sequence[float], position: float) -> int:
    """Accumulate ``weights`` in order until the running total reaches ``position``.

    Returns the index reached by the walk, i.e. one past the last weight that
    was accumulated, so ``roulette_walk([5, 3, 2], 4.9) == 1``. A position of
    zero yields ``0``. The result never exceeds ``len(weights)``.
    """

    index = 0
    cumulator = 0.0
    while cumulator < position and index < len(weights):
        cumulator += weights[index]
        index += 1
    return index


def select_parent(table: Sequence[float], total: float, elite_count: int, rng: Generator) -> int:
    """Draw one elite rank from the reverse-weight table.

    Falls back to a uniform draw over the elite when the total weight is not
    positive.
    """

    if elite_count <= 0:
        raise ValueError("elite_count must be positive")
    if not total > 0.0:
        return int(rng.integers(0, elite_count))
    # Slot m holds the score of rank elite_count - m but is paid out to rank m - 1,
    # so the largest elite score backs the best rank.
    slot = roulette_walk(table, rng.random() * total) - 1
    return min(max(slot - 1, 0), elite_count - 1)


def remap_mate(index: int, mate: int, elite_count: int) -> int:
    """Resolve a crossover that drew the same parent twice.

    ``0`` maps to ``1``, the last elite rank maps to the one before it and any
    interior rank maps to its successor. Distinct draws are returned unchanged,
    as is any draw when the elite holds a single candidate.
    """

    if index != mate or elite_count < 2:
        return mate
    if mate == 0:
        return 1
    if mate == elite_count - 1:
        return elite_count - 2
    return index + 1


__all__ = [
    "partition_sort",
    "reverse_weights",
    "roulette_walk",
    "select_parent",
    "remap_mate",
]
