"""Labeled training data for the EOS classifier.

Every prefix of every corpus sentence becomes one example. The features are
computed exactly as `EosPredictor` computes them during generation, so the
length feature uses the prefix length, and the label is 1 only for the full
sentence.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sentence_builder.classifier.logistic import TrainingExample
from sentence_builder.estimation.backoff import BackoffProbabilityEstimator
from sentence_builder.prediction.eos import eos_features

logger = logging.getLogger(__name__)


def sentence_examples(
    estimator: BackoffProbabilityEstimator, token_ids: Sequence[int]
) -> list[TrainingExample]:
    examples: list[TrainingExample] = []
    last_index = len(token_ids) - 1
    for index in range(len(token_ids)):
        x1, x2, x3 = eos_features(estimator, token_ids[: index + 1])
        examples.append(TrainingExample(x1, x2, x3, 1 if index == last_index else 0))
    return examples


def build_training_examples(
    id_sentences: Iterable[Sequence[int]],
    estimator: BackoffProbabilityEstimator,
) -> list[TrainingExample]:
    """Build `(x1, x2, x3, label)` rows for every token of every sentence."""

    examples: list[TrainingExample] = []
    num_sentences = 0
    for token_ids in id_sentences:
        if not token_ids:
            continue
        examples.extend(sentence_examples(estimator, token_ids))
        num_sentences += 1
    logger.info(
        "Built %d training examples from %d sentences.", len(examples), num_sentences
    )
    return examples
