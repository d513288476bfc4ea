"""Evolution module exports."""

from .engine import EvolutionConfig, GeneticEngine, ParallelExecutor, TrainResult
from .environment import Environment, GenomeEnvironment, StringMatchEnvironment
from .fitness import absolute_error, character_distance
from .operators import CrossoverOperator, Operator, PointMutationOperator, build_operator, select_operator
from .population import Population
from .search_space import AlphabetSpace, GeneSpace, IntegerSpace
from .selection import partition_sort, remap_mate, reverse_weights, roulette_walk, select_parent
from .visitors import CompositeVisitor, HistoryVisitor, LoggingVisitor, Visitor

__all__ = [
    "EvolutionConfig",
    "GeneticEngine",
    "ParallelExecutor",
    "TrainResult",
    "Environment",
    "GenomeEnvironment",
    "StringMatchEnvironment",
    "absolute_error",
    "character_distance",
    "Operator",
    "CrossoverOperator",
    "PointMutationOperator",
    "build_operator",
    "select_operator",
    "Population",
    "GeneSpace",
    "AlphabetSpace",
    "IntegerSpace",
    "partition_sort",
    "remap_mate",
    "reverse_weights",
    "roulette_walk",
    "select_parent",
    "Visitor",
    "LoggingVisitor",
    "HistoryVisitor",
    "CompositeVisitor",
]
