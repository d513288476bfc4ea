"""Tests for ranking and parent selection primitives."""

import numpy as np
import pytest

from genepool.evolution.selection import (
    partition_sort,
    remap_mate,
    reverse_weights,
    roulette_walk,
    select_parent,
)


class ScriptedRandom:
    """Stand-in generator replaying fixed uniform draws."""

    def __init__(self, draws, integers=0):
        self._draws = list(draws)
        self._integers = integers
        self.integer_calls = []

    def random(self):
        return self._draws.pop(0)

    def integers(self, low, high=None, size=None):
        self.integer_calls.append((low, high))
        return self._integers


def test_partition_sort_keeps_pool_aligned_with_scores() -> None:
    rng = np.random.default_rng(11)
    scores = [float(value) for value in rng.integers(0, 20, size=200)]
    pool = [f"candidate-{index}" for index in range(len(scores))]
    original = dict(zip(pool, scores))

    partition_sort(scores, pool)

    assert scores == sorted(scores)
    assert sorted(pool) == sorted(original)
    assert all(original[candidate] == score for candidate, score in zip(pool, scores))


@pytest.mark.parametrize(
    "scores",
    [
        [1.0],
        [2.0, 1.0],
        [3.0, 3.0, 3.0, 3.0],
        [float(value) for value in range(1500)],
        [float(value) for value in range(1500, 0, -1)],
    ],
)
def test_partition_sort_handles_degenerate_inputs(scores) -> None:
    pool = list(range(len(scores)))
    expected = sorted(zip(scores, pool))
    partition_sort(scores, pool)
    assert scores == [score for score, _ in expected]
    assert sorted(pool) == list(range(len(scores)))


def test_partition_sort_rejects_mismatched_lengths() -> None:
    with pytest.raises(ValueError):
        partition_sort([1.0, 2.0], ["a"])


def test_reverse_weights_places_best_score_last() -> None:
    table, total = reverse_weights([1.0, 2.0, 4.0, 8.0], 3)
    assert table == [0.0, 4.0, 2.0, 1.0]
    assert total == 7.0


def test_roulette_walk_reference_draw() -> None:
    """Cumulative sums 5, 8, 10: a draw of 4.9 is reached after the first weight."""
    assert roulette_walk([5.0, 3.0, 2.0], 4.9) == 1


def test_roulette_walk_bounds() -> None:
    assert roulette_walk([5.0, 3.0, 2.0], 0.0) == 0
    assert roulette_walk([5.0, 3.0, 2.0], 5.5) == 2
    assert roulette_walk([5.0, 3.0, 2.0], 50.0) == 3


def test_select_parent_prefers_lower_scores() -> None:
    table, total = reverse_weights([1.0, 2.0, 3.0], 3)
    # Buckets over the draw: rank 0 -> (0, 3], rank 1 -> (3, 5], rank 2 -> (5, 6].
    assert select_parent(table, total, 3, ScriptedRandom([0.4])) == 0
    assert select_parent(table, total, 3, ScriptedRandom([0.6])) == 1
    assert select_parent(table, total, 3, ScriptedRandom([0.95])) == 2
    assert select_parent(table, total, 3, ScriptedRandom([0.0])) == 0


def test_select_parent_distribution_favours_best_rank() -> None:
    table, total = reverse_weights([1.0, 2.0, 3.0, 4.0], 4)
    rng = np.random.default_rng(5)
    counts = np.bincount([select_parent(table, total, 4, rng) for _ in range(4000)], minlength=4)
    assert counts.argmax() == 0
    assert counts[0] > counts[1] > counts[2] > counts[3]


def test_select_parent_falls_back_to_uniform_on_zero_total() -> None:
    table, total = reverse_weights([0.0, 0.0, 0.0], 3)
    rng = ScriptedRandom([], integers=2)
    assert select_parent(table, total, 3, rng) == 2
    assert rng.integer_calls == [(0, 3)]


@pytest.mark.parametrize(
    "index, mate, expected",
    [
        (0, 0, 1),
        (4, 4, 3),
        (2, 2, 3),
        (1, 3, 3),
    ],
)
def test_remap_mate(index, mate, expected) -> None:
    assert remap_mate(index, mate, elite_count=5) == expected


def test_remap_mate_with_single_elite_keeps_draw() -> None:
    assert remap_mate(0, 0, elite_count=1) == 0
