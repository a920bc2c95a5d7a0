"""Fuse backoff, word and length estimates into one calibrated EOS probability."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from sentence_builder.classifier.logistic import EosClassifier
from sentence_builder.estimation.backoff import BackoffProbabilityEstimator

LOGIT_EPSILON = 1e-9

logger = logging.getLogger(__name__)


def safe_logit(p: float) -> float:
    """`ln(p / (1 - p))` with `p` clamped to `[1e-9, 1 - 1e-9]` first."""

    p = min(max(p, LOGIT_EPSILON), 1.0 - LOGIT_EPSILON)
    return math.log(p / (1.0 - p))


def eos_features(
    estimator: BackoffProbabilityEstimator, token_ids: Sequence[int]
) -> tuple[float, float, float]:
    """Return `(x1, x2, x3)` for a non-empty sequence.

    x1 is the backoff context logit, x2 the last-word logit and x3 the logit of
    the length hazard at `len(token_ids)`.
    """

    length = len(token_ids)
    if length == 0:
        raise ValueError("token_ids must not be empty.")
    w3 = int(token_ids[-1])
    w2 = int(token_ids[-2]) if length > 1 else None
    w1 = int(token_ids[-3]) if length > 2 else None

    p_context = estimator.p_eos_given_context(w1, w2, w3)
    p_word = estimator.p_eos_given_word(w3)
    p_length = estimator.p_eos_given_length(length)
    return safe_logit(p_context), safe_logit(p_word), safe_logit(p_length)


class EosPredictor:
    """Stateless glue between the estimator and the trained classifier."""

    def __init__(self, classifier: EosClassifier, estimator: BackoffProbabilityEstimator) -> None:
        self.classifier = classifier
        self.estimator = estimator

    def features(self, token_ids: Sequence[int]) -> tuple[float, float, float]:
        return eos_features(self.estimator, token_ids)

    def predict_eos_probability(self, token_ids: Sequence[int]) -> float:
        """Probability that the sequence is a complete sentence as it stands."""

        if len(token_ids) == 0:
            return 0.0
        x1, x2, x3 = eos_features(self.estimator, token_ids)
        probability = self.classifier.predict(x1, x2, x3)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "EOS prediction: len=%d tail=%s features=(%.4f, %.4f, %.4f) prob=%.6f",
                len(token_ids),
                list(token_ids[-3:]),
                x1,
                x2,
                x3,
                probability,
            )
        return probability
