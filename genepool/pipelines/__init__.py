"""Pipeline exports."""

from .runner import GenePool, GenePoolResult

__all__ = ["GenePool", "GenePoolResult"]
