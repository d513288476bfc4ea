"""
Centralised exception hierarchy for GenePool.

The engine raises typed exceptions instead of generic ``ValueError`` or
``RuntimeError`` instances. Every error carries a ``context`` mapping so the
CLI and SDK layers can report which generation, slot, or configuration key
caused the failure.
"""

from __future__ import annotations

from typing import Any


class GenePoolError(Exception):
    """Base class for all GenePool specific exceptions."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class GenePoolConfigError(GenePoolError):
    """Raised for malformed engine configuration or unknown profile keys."""


class GenePoolCollaboratorError(GenePoolError):
    """Raised when an environment, operator, or visitor call fails during training."""


__all__ = [
    "GenePoolError",
    "GenePoolConfigError",
    "GenePoolCollaboratorError",
]
