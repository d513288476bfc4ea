"""
Error functions for the bundled environments.

Scores are errors: lower is better and zero means a perfect match.
"""

from __future__ import annotations

from typing import Sequence


def character_distance(goal: Sequence[str], candidate: Sequence[str], scale: float = 7.0) -> float:
    """
    Sum of absolute code point differences between two strings, divided by ``scale``.

    Positions past the shorter input are ignored.
    """

    distance = 0
    for expected, actual in zip(goal, candidate):
        distance += abs(ord(expected) - ord(actual))
    return distance / scale


def absolute_error(target: float, value: float) -> float:
    return float(abs(value - target))
