"""Top-level package exposing GenePool SDK entrypoints."""

from .evolution import GeneticEngine, TrainResult
from .pipelines import GenePool, GenePoolResult

__version__ = "1.0.0"

__all__ = ["GeneticEngine", "TrainResult", "GenePool", "GenePoolResult", "__version__"]
