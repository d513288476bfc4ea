"""
Generational genetic-algorithm engine.

Each generation evaluates the whole pool in parallel, ranks it with an
in-place partition sort, keeps the best ``elite_count`` candidates untouched
and refills every other slot with one offspring produced by an operator. The
engine never looks inside a candidate: creation, copying, scoring and release
are delegated to the environment, offspring construction to the operators.
"""

from __future__ import annotations

import logging
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    MutableSequence,
    NamedTuple,
    Optional,
    Sequence,
    TypeVar,
)

import numpy as np

from genepool.exceptions import GenePoolCollaboratorError, GenePoolConfigError, GenePoolError
from genepool.utils.logger import ExperimentLogger

from .environment import Environment
from .operators import Operator, select_operator, validate_operators
from .population import Population
from .visitors import Visitor

C = TypeVar("C")
T = TypeVar("T")


@dataclass
class EvolutionConfig:
    """Execution settings that do not change the search itself."""

    parallel_backend: str = "auto"  # auto|threads|serial
    max_workers: Optional[int] = None
    seed: Optional[int] = None
    log_every: int = 1


class TrainResult(NamedTuple):
    generations: int
    best_score: float
    result_count: int


class ParallelExecutor:
    """Fan-out/join helper over a thread pool or a plain loop.

    Use it as a context manager so the worker pool lives for a whole training
    call instead of being rebuilt every generation.
    """

    def __init__(self, backend: str = "auto", max_workers: Optional[int] = None) -> None:
        self._logger = logging.getLogger(__name__)
        backend = backend.lower()
        if backend == "auto":
            backend = "serial" if max_workers == 1 else "threads"
        if backend not in {"threads", "serial"}:
            self._logger.info("Unknown backend '%s'. Using threaded execution.", backend)
            backend = "threads"
        self.backend = backend
        self.max_workers = max_workers
        self._pool: Optional[ThreadPoolExecutor] = None
        self._last_stats: Dict[str, object] = {}

    def __enter__(self) -> "ParallelExecutor":
        if self.backend == "threads":
            self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="genepool")
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def map(self, fn: Callable[[int], T], indices: Sequence[int]) -> List[T]:
        """Run ``fn`` over every index and return results in index order.

        All tasks are joined before the first failure, if any, is re-raised.
        """

        start_time = time.perf_counter()
        if self._pool is None:
            results = [fn(index) for index in indices]
        else:
            futures = [self._pool.submit(fn, index) for index in indices]
            wait(futures)
            results = [future.result() for future in futures]
        self.snapshot(len(indices), time.perf_counter() - start_time)
        return results

    def snapshot(self, tasks: int, duration: float) -> Dict[str, object]:
        stats: Dict[str, object] = {
            "backend": self.backend,
            "tasks": tasks,
            "duration": round(duration, 6),
            "max_workers": self.max_workers,
        }
        if self._pool is not None:
            stats["worker_count"] = self.max_workers or min(32, (os.cpu_count() or 1) + 4)
        self._last_stats = stats
        return stats

    def last_stats(self) -> Dict[str, object]:
        return dict(self._last_stats)


class GeneticEngine(Generic[C]):
    """Central coordinator of the evaluate, rank, elect, visit, regenerate cycle."""

    def __init__(
        self,
        pool_size: int,
        config: Optional[EvolutionConfig] = None,
        logger: Optional[ExperimentLogger] = None,
    ) -> None:
        """Create a new engine.

        Parameters
        ----------
        pool_size : int
            Number of candidates kept in every generation. Fixed for the
            lifetime of the engine.
        config : EvolutionConfig, optional
            Parallelism, seeding and logging cadence.
        logger : ExperimentLogger, optional
            Destination for progress messages and per-generation metrics.
        """
        if isinstance(pool_size, bool) or not isinstance(pool_size, int) or pool_size <= 0:
            raise GenePoolConfigError(
                f"Pool size must be a positive integer, got {pool_size!r}.",
                context={"pool_size": pool_size},
            )
        self.pool_size = pool_size
        self.config = config or EvolutionConfig()
        self.logger = logger or ExperimentLogger()
        self.executor = ParallelExecutor(self.config.parallel_backend, self.config.max_workers)
        self._seeds = np.random.SeedSequence(self.config.seed)
        self.history: List[Dict[str, Any]] = []

    def elite_count(self, elite_fraction: float) -> int:
        return int(math.floor(self.pool_size * elite_fraction))

    def _validate(
        self,
        max_generations: int,
        elite_fraction: float,
        capacity: int,
        operators: Sequence[Operator[C]],
    ) -> int:
        if isinstance(max_generations, bool) or not isinstance(max_generations, int) or max_generations < 1:
            raise GenePoolConfigError(
                f"max_generations must be an integer >= 1, got {max_generations!r}.",
                context={"max_generations": max_generations},
            )
        if not (0.0 < elite_fraction <= 1.0):
            raise GenePoolConfigError(
                f"elite_fraction must lie in (0, 1], got {elite_fraction!r}.",
                context={"elite_fraction": elite_fraction},
            )
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise GenePoolConfigError(
                f"Result capacity must be an integer >= 1, got {capacity!r}.",
                context={"capacity": capacity},
            )
        try:
            validate_operators(operators)
        except ValueError as exc:
            raise GenePoolConfigError(str(exc), context={"operators": len(operators)}) from exc
        elite_count = self.elite_count(elite_fraction)
        if elite_count < 1:
            raise GenePoolConfigError(
                f"elite_fraction {elite_fraction} leaves no elite in a pool of {self.pool_size}.",
                context={"elite_fraction": elite_fraction, "pool_size": self.pool_size},
            )
        return elite_count

    @staticmethod
    def _collaborator(stage: str, fn: Callable[..., T], *args: Any, **context: Any) -> T:
        try:
            return fn(*args)
        except GenePoolError:
            raise
        except Exception as exc:
            raise GenePoolCollaboratorError(
                f"{stage} failed: {exc}",
                context={"stage": stage, **context},
            ) from exc

    def _evaluate(self, environment: Environment[C], population: Population[C], generation: int) -> None:
        candidates = population.candidates

        def score(index: int) -> float:
            value = self._collaborator(
                "evaluate", environment.evaluate, candidates[index], index=index, generation=generation
            )
            try:
                value = float(value)
            except (TypeError, ValueError) as exc:
                raise GenePoolCollaboratorError(
                    f"evaluate returned a non-numeric score {value!r}.",
                    context={"stage": "evaluate", "index": index, "generation": generation},
                ) from exc
            if math.isnan(value):
                raise GenePoolCollaboratorError(
                    "evaluate returned NaN.",
                    context={"stage": "evaluate", "index": index, "generation": generation},
                )
            return value

        population.scores[:] = self.executor.map(score, range(population.size))

    def _regenerate(
        self,
        population: Population[C],
        operators: Sequence[Operator[C]],
        elite_count: int,
        generation: int,
    ) -> None:
        slots = range(elite_count, population.size)
        if not slots:
            return
        elite = population.elite(elite_count)
        table, total = population.weights(elite_count)
        candidates = population.candidates
        streams = dict(zip(slots, self._seeds.spawn(len(slots))))

        def refill(slot: int) -> None:
            rng = np.random.default_rng(streams[slot])
            operator = select_operator(operators, rng)
            candidates[slot] = self._collaborator(
                "mutate",
                operator.mutate,
                elite,
                table,
                total,
                elite_count,
                candidates[slot],
                rng,
                index=slot,
                generation=generation,
                operator=type(operator).__name__,
            )

        self.executor.map(refill, slots)

    def _clone_best(self, environment: Environment[C], population: Population[C], count: int) -> List[C]:
        clones: List[C] = []
        try:
            for rank in range(count):
                clones.append(self._collaborator("clone", environment.clone, population.candidates[rank], index=rank))
        except GenePoolError:
            if clones:
                self._collaborator("release", environment.release, clones)
            raise
        return clones

    def train(
        self,
        environment: Environment[C],
        visitor: Optional[Visitor],
        max_generations: int,
        min_error: float,
        elite_fraction: float,
        store: MutableSequence[C],
        capacity: int,
        operators: Sequence[Operator[C]],
    ) -> TrainResult:
        """Evolve a fresh population until the generation budget or error target is reached.

        Parameters
        ----------
        environment : Environment
            Creates, scores, copies and releases candidates.
        visitor : Visitor, optional
            Receives the elite slice once per generation before regeneration.
        max_generations : int
            Upper bound on completed generations (>= 1).
        min_error : float
            Training stops as soon as the best score is ``<=`` this value.
        elite_fraction : float
            Share of the pool kept as elite, in ``(0, 1]``.
        store : MutableSequence
            Caller-owned buffer receiving clones of the best candidates.
        capacity : int
            Maximum number of candidates written to ``store``.
        operators : Sequence[Operator]
            Ordered offspring operators; the last one is the fallback.

        Returns
        -------
        TrainResult
            ``(generations, best_score, result_count)``.
        """

        elite_count = self._validate(max_generations, elite_fraction, capacity, operators)
        population: Population[C] = Population(self.pool_size)
        self.history = []
        generation = 0
        best = math.inf
        log_every = max(1, int(self.config.log_every))

        self.logger.log_message(
            f"Training pool of {self.pool_size} (elite {elite_count}, {len(operators)} operators, "
            f"backend={self.executor.backend}) for up to {max_generations} generations."
        )
        start_time = time.perf_counter()
        with self.executor:
            try:
                self._collaborator("reserve", population.seed, environment)
                while generation < max_generations:
                    self._evaluate(environment, population, generation)
                    best = population.rank()
                    self.history.append(
                        {
                            "generation": generation,
                            "best_score": best,
                            "elite_mean": float(np.mean(population.scores[:elite_count])),
                        }
                    )
                    if generation % log_every == 0:
                        self.logger.log_metrics({"best_score": best}, step=generation)
                    if best <= min_error:
                        break
                    if visitor is not None:
                        self._collaborator(
                            "visit",
                            visitor.visit,
                            population.elite(elite_count),
                            elite_count,
                            generation=generation,
                        )
                    self._regenerate(population, operators, elite_count, generation)
                    generation += 1

                copied = min(elite_count, capacity)
                store[:copied] = self._clone_best(environment, population, copied)
            finally:
                if population.candidates:
                    self._collaborator("release", population.release, environment)

        self.logger.log_message(
            f"Training finished after {generation} generations in {time.perf_counter() - start_time:.3f}s "
            f"(best score {best:.6g})."
        )
        return TrainResult(generation, best, copied)
