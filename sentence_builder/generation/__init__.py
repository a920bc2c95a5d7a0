"""Sentence generators and their candidate selection rules."""

from sentence_builder.generation.factory import ALGORITHMS, build_generator
from sentence_builder.generation.generator import (
    GenerationResult,
    GenerationState,
    SentenceGenerator,
    TerminationReason,
)
from sentence_builder.generation.selectors import (
    GREEDY,
    WEIGHTED,
    CandidateSelector,
    GreedySelector,
    WeightedSelector,
)

__all__ = [
    "ALGORITHMS",
    "CandidateSelector",
    "GREEDY",
    "GenerationResult",
    "GenerationState",
    "GreedySelector",
    "SentenceGenerator",
    "TerminationReason",
    "WEIGHTED",
    "WeightedSelector",
    "build_generator",
]
