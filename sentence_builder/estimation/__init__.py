"""End-of-sentence probability estimation from n-gram statistics."""

from sentence_builder.estimation.backoff import BackoffProbabilityEstimator, laplace_rate

__all__ = ["BackoffProbabilityEstimator", "laplace_rate"]
