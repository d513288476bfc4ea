"""Tests for the generational engine."""

from typing import List

import numpy as np
import pytest

from genepool.evolution.engine import EvolutionConfig, GeneticEngine, ParallelExecutor
from genepool.evolution.environment import Environment
from genepool.evolution.operators import Operator
from genepool.evolution.selection import select_parent
from genepool.evolution.visitors import HistoryVisitor, Visitor
from genepool.exceptions import GenePoolCollaboratorError, GenePoolConfigError

TARGET = 42


class IntegerEnvironment(Environment[int]):
    """Integers scored by their distance to ``TARGET``."""

    def __init__(self, seed=0, fail_on=None, score=None):
        self._rng = np.random.default_rng(seed)
        self.fail_on = fail_on
        self.score = score
        self.released: List[int] = []

    def reserve(self, count):
        return [int(value) for value in self._rng.integers(0, 100, size=count)]

    def evaluate(self, candidate):
        if self.fail_on is not None and candidate == self.fail_on:
            raise RuntimeError("boom")
        if self.score is not None:
            return self.score
        return abs(TARGET - candidate)

    def clone(self, candidate):
        return int(candidate)

    def release(self, population):
        self.released.append(len(population))
        super().release(population)


class StepOperator(Operator[int]):
    """Nudge a roulette-selected elite parent by -1, 0 or +1."""

    weight = 1.0

    def mutate(self, elite, reverse_weights, total_weight, elite_count, offspring, rng):
        parent = elite[select_parent(reverse_weights, total_weight, elite_count, rng)]
        return parent + int(rng.integers(-1, 2))


class CountingVisitor(Visitor):
    def __init__(self):
        self.calls = []

    def visit(self, elite, elite_count):
        assert isinstance(elite, tuple)
        self.calls.append((list(elite), elite_count))


def _train(engine, environment, **overrides):
    params = dict(
        visitor=None,
        max_generations=400,
        min_error=0.0,
        elite_fraction=0.25,
        store=[],
        capacity=10,
        operators=[StepOperator()],
    )
    params.update(overrides)
    return engine.train(environment, **params)


def test_engine_converges_on_target_integer() -> None:
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial", seed=7))
    store: List[int] = []
    result = _train(engine, IntegerEnvironment(seed=3), store=store, max_generations=200)

    assert result.best_score == 0.0
    assert result.generations < 200
    assert result.result_count == 2
    assert store[0] == TARGET
    assert len(store) == 2


def test_engine_history_tracks_non_increasing_best() -> None:
    engine = GeneticEngine(16, EvolutionConfig(parallel_backend="serial", seed=1))
    _train(engine, IntegerEnvironment(seed=2))
    bests = [row["best_score"] for row in engine.history]
    assert bests == sorted(bests, reverse=True)
    assert [row["generation"] for row in engine.history] == list(range(len(bests)))


def test_engine_stops_at_generation_budget() -> None:
    visitor = CountingVisitor()
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial", seed=0))
    result = _train(engine, IntegerEnvironment(), visitor=visitor, max_generations=5, min_error=-1.0)
    assert result.generations == 5
    assert len(visitor.calls) == 5
    assert all(count == 2 for _, count in visitor.calls)
    for elite, _ in visitor.calls:
        scores = [abs(TARGET - candidate) for candidate in elite]
        assert scores == sorted(scores)


def test_generation_meeting_target_is_not_visited() -> None:
    visitor = CountingVisitor()
    engine = GeneticEngine(4, EvolutionConfig(parallel_backend="serial"))
    result = _train(engine, IntegerEnvironment(score=0.0), visitor=visitor, max_generations=10)
    assert result.generations == 0
    assert visitor.calls == []
    assert result.result_count == 1


def test_result_count_is_bounded_by_capacity_and_elite() -> None:
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial", seed=4))
    store: List[int] = []
    result = _train(engine, IntegerEnvironment(seed=4), store=store, capacity=1, max_generations=3, min_error=-1.0)
    assert result.result_count == 1
    assert len(store) == 1
    assert abs(TARGET - store[0]) == result.best_score

    store = [None] * 10
    result = _train(engine, IntegerEnvironment(seed=4), store=store, capacity=10, max_generations=3, min_error=-1.0)
    assert result.result_count == 2
    assert abs(TARGET - store[0]) <= abs(TARGET - store[1])
    assert store[2:] == [None] * 8


def test_whole_pool_as_elite_never_regenerates() -> None:
    engine = GeneticEngine(6, EvolutionConfig(parallel_backend="serial", seed=0))
    environment = IntegerEnvironment(seed=8)
    first = sorted(IntegerEnvironment(seed=8).reserve(6), key=lambda value: abs(TARGET - value))
    store: List[int] = []
    result = _train(engine, environment, store=store, elite_fraction=1.0, max_generations=3, min_error=-1.0)
    assert result.result_count == 6
    assert [abs(TARGET - value) for value in store] == [abs(TARGET - value) for value in first]


def test_serial_and_threaded_runs_match() -> None:
    outcomes = []
    for backend in ("serial", "threads"):
        engine = GeneticEngine(16, EvolutionConfig(parallel_backend=backend, max_workers=4, seed=11))
        store: List[int] = []
        result = _train(engine, IntegerEnvironment(seed=5), store=store, max_generations=20, min_error=-1.0)
        outcomes.append((result, store, [row["best_score"] for row in engine.history]))
    assert outcomes[0] == outcomes[1]


def test_pool_size_must_be_positive() -> None:
    with pytest.raises(GenePoolConfigError):
        GeneticEngine(0)
    with pytest.raises(GenePoolConfigError):
        GeneticEngine(-3)


@pytest.mark.parametrize(
    "overrides",
    [
        {"operators": []},
        {"capacity": 0},
        {"elite_fraction": 0.0},
        {"elite_fraction": 1.5},
        {"elite_fraction": 0.05},
        {"max_generations": 0},
    ],
)
def test_invalid_train_arguments_raise_config_error(overrides) -> None:
    environment = IntegerEnvironment()
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial"))
    with pytest.raises(GenePoolConfigError):
        _train(engine, environment, **overrides)
    assert environment.released == []


def test_evaluate_failure_is_wrapped_and_population_released() -> None:
    environment = IntegerEnvironment(seed=0)
    target = IntegerEnvironment(seed=0).reserve(8)[3]
    environment.fail_on = target
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="threads", max_workers=2))

    with pytest.raises(GenePoolCollaboratorError) as excinfo:
        _train(engine, environment)

    assert excinfo.value.context["stage"] == "evaluate"
    assert excinfo.value.context["generation"] == 0
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert environment.released == [8]


@pytest.mark.parametrize("score", [float("nan"), "bad"])
def test_invalid_scores_are_rejected(score) -> None:
    environment = IntegerEnvironment(score=score)
    engine = GeneticEngine(4, EvolutionConfig(parallel_backend="serial"))
    with pytest.raises(GenePoolCollaboratorError):
        _train(engine, environment)
    assert environment.released == [4]


def test_operator_failure_reports_slot() -> None:
    class Broken(Operator[int]):
        weight = 1.0

        def mutate(self, elite, reverse_weights, total_weight, elite_count, offspring, rng):
            raise KeyError("missing")

    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial"))
    with pytest.raises(GenePoolCollaboratorError) as excinfo:
        _train(engine, IntegerEnvironment(), operators=[Broken()], min_error=-1.0)
    assert excinfo.value.context["stage"] == "mutate"
    assert excinfo.value.context["index"] == 2
    assert excinfo.value.context["operator"] == "Broken"


def test_history_visitor_records_best_per_generation() -> None:
    visitor = HistoryVisitor(render=str, top_k=2)
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial", seed=3))
    _train(engine, IntegerEnvironment(seed=3), visitor=visitor, max_generations=4, min_error=-1.0)
    assert len(visitor.history) == 4
    assert all(len(entry) == 2 for entry in visitor.history)
    assert len(visitor.best) == 4


def test_parallel_executor_keeps_index_order() -> None:
    with ParallelExecutor("threads", max_workers=3) as executor:
        assert executor.map(lambda index: index * index, range(6)) == [0, 1, 4, 9, 16, 25]
        stats = executor.last_stats()
    assert stats["backend"] == "threads"
    assert stats["tasks"] == 6
    assert ParallelExecutor("auto", max_workers=1).backend == "serial"
    assert ParallelExecutor("ray").backend == "threads"


def test_short_reservation_is_released() -> None:
    class ShortEnvironment(IntegerEnvironment):
        def reserve(self, count):
            return super().reserve(count - 2)

    environment = ShortEnvironment()
    engine = GeneticEngine(8, EvolutionConfig(parallel_backend="serial"))
    with pytest.raises(GenePoolCollaboratorError) as excinfo:
        _train(engine, environment)
    assert excinfo.value.context["stage"] == "reserve"
    assert environment.released == [6]


def test_clone_failure_releases_partial_clones() -> None:
    class FlakyCloneEnvironment(IntegerEnvironment):
        def __init__(self):
            super().__init__(seed=2)
            self.clones = 0

        def clone(self, candidate):
            self.clones += 1
            if self.clones == 3:
                raise MemoryError("out of slots")
            return super().clone(candidate)

    environment = FlakyCloneEnvironment()
    engine = GeneticEngine(16, EvolutionConfig(parallel_backend="serial", seed=2))
    store: List[int] = []
    with pytest.raises(GenePoolCollaboratorError) as excinfo:
        _train(engine, environment, store=store, max_generations=2, min_error=-1.0)
    assert excinfo.value.context["stage"] == "clone"
    assert excinfo.value.context["index"] == 2
    assert store == []
    # Two finished clones first, then the whole pool.
    assert environment.released == [2, 16]
