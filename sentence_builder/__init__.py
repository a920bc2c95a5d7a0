"""Statistical end-of-sentence modeling and constrained sentence generation."""

from sentence_builder.classifier import EosClassifier, TrainingConfig, TrainingExample
from sentence_builder.controller import SentenceBuilder
from sentence_builder.estimation import BackoffProbabilityEstimator
from sentence_builder.generation import SentenceGenerator, build_generator
from sentence_builder.prediction import EosPredictor, safe_logit
from sentence_builder.stats import (
    CorpusTables,
    FollowerTables,
    NGramStatisticsStore,
    Vocabulary,
    build_corpus_tables,
)

__version__ = "0.1.0"

__all__ = [
    "BackoffProbabilityEstimator",
    "CorpusTables",
    "EosClassifier",
    "EosPredictor",
    "FollowerTables",
    "NGramStatisticsStore",
    "SentenceBuilder",
    "SentenceGenerator",
    "TrainingConfig",
    "TrainingExample",
    "Vocabulary",
    "build_corpus_tables",
    "build_generator",
    "safe_logit",
]
