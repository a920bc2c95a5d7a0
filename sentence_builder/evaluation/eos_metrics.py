"""Held-out evaluation of the EOS classifier."""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Sequence

import numpy as np

from sentence_builder.classifier.logistic import (
    EosClassifier,
    TrainingExample,
    _mean_cross_entropy,
    _stack_examples,
)


@dataclass(frozen=True)
class EosEvaluationResult:
    """Summary of a classifier evaluation run."""

    num_examples: int
    num_positive: int
    log_loss: float
    accuracy: float
    precision: float
    recall: float
    elapsed_seconds: float


def _safe_ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else float("nan")


def evaluate_eos_classifier(
    classifier: EosClassifier,
    examples: Sequence[TrainingExample],
    *,
    threshold: float = 0.5,
) -> EosEvaluationResult:
    """Score `classifier` on labeled examples.

    An example is predicted positive when its probability is at least
    `threshold`, the same rule the generators use to stop. Precision and recall
    are NaN when undefined.
    """

    if not 0.0 <= threshold <= 1.0:
        raise ValueError("threshold must lie in [0, 1].")

    start = perf_counter()
    features, labels = _stack_examples(examples)
    probs = classifier.predict_many(features)
    predicted = probs >= threshold
    actual = labels == 1.0

    true_positive = int(np.sum(predicted & actual))
    false_positive = int(np.sum(predicted & ~actual))
    false_negative = int(np.sum(~predicted & actual))
    correct = int(np.sum(predicted == actual))

    return EosEvaluationResult(
        num_examples=int(labels.shape[0]),
        num_positive=int(np.sum(actual)),
        log_loss=_mean_cross_entropy(probs, labels),
        accuracy=correct / labels.shape[0],
        precision=_safe_ratio(true_positive, true_positive + false_positive),
        recall=_safe_ratio(true_positive, true_positive + false_negative),
        elapsed_seconds=perf_counter() - start,
    )
