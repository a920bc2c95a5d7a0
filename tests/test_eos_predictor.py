"""Tests for EOS feature extraction and probability prediction."""

from __future__ import annotations

import pytest

from sentence_builder.classifier.logistic import EosClassifier
from sentence_builder.classifier.params import ModelParameters
from sentence_builder.estimation.backoff import BackoffProbabilityEstimator
from sentence_builder.prediction.eos import EosPredictor, eos_features, safe_logit
from sentence_builder.prediction.features import build_training_examples, sentence_examples
from sentence_builder.stats.store import NGramStatisticsStore


class _ExplodingEstimator:
    def __getattr__(self, name: str):
        raise AssertionError(f"estimator.{name} must not be used")


@pytest.fixture()
def estimator() -> BackoffProbabilityEstimator:
    store = NGramStatisticsStore(
        unigrams={0: (10, 0), 1: (10, 2), 2: (10, 8)},
        bigrams={(0, 1): (5, 0), (1, 2): (6, 5)},
        trigrams={(0, 1): {2: (3, 3)}},
        length_hazard={1: 0.1, 2: 0.2, 3: 0.9},
    )
    return BackoffProbabilityEstimator(store)


def test_empty_sequence_predicts_zero_without_touching_features() -> None:
    predictor = EosPredictor(EosClassifier(), _ExplodingEstimator())  # type: ignore[arg-type]

    assert predictor.predict_eos_probability([]) == 0.0


def test_features_are_logits_of_the_three_estimates(
    estimator: BackoffProbabilityEstimator,
) -> None:
    x1, x2, x3 = eos_features(estimator, [0, 1, 2])

    assert x1 == pytest.approx(safe_logit(4 / 5))
    assert x2 == pytest.approx(safe_logit(9 / 12))
    assert x3 == pytest.approx(safe_logit(0.9))


def test_short_sequences_back_off_to_shorter_contexts(
    estimator: BackoffProbabilityEstimator,
) -> None:
    x1_pair, _, x3_pair = eos_features(estimator, [1, 2])
    x1_single, x2_single, _ = eos_features(estimator, [2])

    assert x1_pair == pytest.approx(safe_logit(6 / 8))
    assert x3_pair == pytest.approx(safe_logit(0.2))
    assert x1_single == pytest.approx(x2_single)

    with pytest.raises(ValueError):
        eos_features(estimator, [])


def test_prediction_applies_classifier_to_features(
    estimator: BackoffProbabilityEstimator,
) -> None:
    classifier = EosClassifier(parameters=ModelParameters(b=0.3, w1=0.5, w2=-0.2, w3=1.1))
    predictor = EosPredictor(classifier, estimator)

    features = predictor.features([0, 1, 2])

    assert predictor.predict_eos_probability([0, 1, 2]) == pytest.approx(
        classifier.predict(*features)
    )


def test_word_only_model_reproduces_word_probability(
    estimator: BackoffProbabilityEstimator,
) -> None:
    predictor = EosPredictor(EosClassifier(parameters=ModelParameters(w2=1.0)), estimator)

    assert predictor.predict_eos_probability([0, 2]) == pytest.approx(9 / 12, abs=1e-6)


def test_training_examples_label_only_the_full_sentence(
    estimator: BackoffProbabilityEstimator,
) -> None:
    examples = sentence_examples(estimator, [0, 1, 2])

    assert [ex.label for ex in examples] == [0, 0, 1]
    # Length feature follows the prefix length, not the sentence length.
    assert examples[0].x3 == pytest.approx(safe_logit(0.1))
    assert examples[1].x3 == pytest.approx(safe_logit(0.2))
    assert tuple(examples[2])[:3] == pytest.approx(eos_features(estimator, [0, 1, 2]))


def test_build_training_examples_skips_empty_sentences(
    estimator: BackoffProbabilityEstimator,
) -> None:
    examples = build_training_examples([[0, 1], [], [2]], estimator)

    assert len(examples) == 3
    assert sum(ex.label for ex in examples) == 2
