"""
Per-generation inspection hooks.

A visitor sees the elite slice once per generation, after ranking and before
regeneration. The slice is a tuple snapshot; visitors must not keep
references to the candidates themselves because the engine recycles them.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from loguru import logger


class Visitor:
    """Read-only hook invoked with the elite slice of every generation."""

    def visit(self, elite: Sequence[Any], elite_count: int) -> None:
        raise NotImplementedError


class LoggingVisitor(Visitor):
    """Print the elite through loguru, best first."""

    def __init__(
        self,
        render: Callable[[Any], str] = repr,
        limit: Optional[int] = None,
        every: int = 1,
        level: str = "INFO",
    ) -> None:
        self.render = render
        self.limit = limit
        self.every = max(1, every)
        self.level = level
        self._calls = 0

    def visit(self, elite: Sequence[Any], elite_count: int) -> None:
        self._calls += 1
        if (self._calls - 1) % self.every:
            return
        shown = elite_count if self.limit is None else min(self.limit, elite_count)
        logger.log(self.level, "----------")
        for rank in range(shown):
            logger.log(self.level, "#{} {}", rank, self.render(elite[rank]))


class HistoryVisitor(Visitor):
    """Record the rendered best candidate of each generation."""

    def __init__(self, render: Callable[[Any], str] = repr, top_k: int = 1) -> None:
        self.render = render
        self.top_k = max(1, top_k)
        self.history: List[List[str]] = []

    def visit(self, elite: Sequence[Any], elite_count: int) -> None:
        self.history.append([self.render(candidate) for candidate in elite[: min(self.top_k, elite_count)]])

    @property
    def best(self) -> List[str]:
        return [entry[0] for entry in self.history if entry]


class CompositeVisitor(Visitor):
    """Fan a single visit out to several visitors in order."""

    def __init__(self, visitors: Sequence[Visitor]) -> None:
        self.visitors = list(visitors)

    def visit(self, elite: Sequence[Any], elite_count: int) -> None:
        for visitor in self.visitors:
            visitor.visit(elite, elite_count)
