"""Tests for the Laplace-smoothed EOS backoff estimator."""

from __future__ import annotations

import pytest

from sentence_builder.estimation.backoff import BackoffProbabilityEstimator, laplace_rate
from sentence_builder.stats.store import NGramStatisticsStore, OccurrenceStat


@pytest.fixture()
def estimator() -> BackoffProbabilityEstimator:
    store = NGramStatisticsStore(
        unigrams={0: (10, 0), 1: (10, 0), 2: (20, 1)},
        bigrams={(1, 2): (10, 0)},
        trigrams={(0, 1): {2: (4, 4)}},
        length_hazard={3: 0.5},
    )
    return BackoffProbabilityEstimator(store)


def test_laplace_rate_is_strictly_inside_unit_interval() -> None:
    for total in range(0, 25):
        for end in range(0, total + 1):
            rate = laplace_rate(OccurrenceStat(total, end))
            assert 0.0 < rate < 1.0


def test_word_probability_uses_laplace_smoothing(estimator: BackoffProbabilityEstimator) -> None:
    assert estimator.p_eos_given_word(2) == pytest.approx(2 / 22)
    assert estimator.p_eos_given_word(0) == pytest.approx(1 / 12)


def test_unknown_word_falls_back_to_corpus_prior(estimator: BackoffProbabilityEstimator) -> None:
    assert estimator.global_eos_prior == pytest.approx(1 / 40)
    assert estimator.p_eos_given_word(99) == pytest.approx(1 / 40)
    assert estimator.p_eos_given_word(None) == pytest.approx(1 / 40)


def test_empty_corpus_prior_defaults_to_five_percent() -> None:
    empty = BackoffProbabilityEstimator(NGramStatisticsStore(unigrams={}))

    assert empty.global_eos_prior == pytest.approx(0.05)
    assert empty.p_eos_given_context(None, None, 3) == pytest.approx(0.05)


def test_trigram_match_wins_over_bigram_and_unigram(
    estimator: BackoffProbabilityEstimator,
) -> None:
    assert estimator.p_eos_given_context(0, 1, 2) == 5 / 6
    assert estimator._lookup_backoff_stats(0, 1, 2)[0] == 3


def test_backoff_order_trigram_bigram_unigram_prior(
    estimator: BackoffProbabilityEstimator,
) -> None:
    # Unseen trigram context -> bigram (1, 2).
    assert estimator.p_eos_given_context(7, 1, 2) == pytest.approx(1 / 12)
    # Missing w1 -> bigram as well.
    assert estimator.p_eos_given_context(None, 1, 2) == pytest.approx(1 / 12)
    # Unseen bigram -> unigram of w3.
    assert estimator.p_eos_given_context(None, 0, 2) == pytest.approx(2 / 22)
    assert estimator._lookup_backoff_stats(None, 0, 2)[0] == 1
    # Unknown w3 -> corpus prior.
    assert estimator.p_eos_given_context(0, 1, 99) == pytest.approx(1 / 40)
    assert estimator.p_eos_given_context(0, 1, None) == pytest.approx(1 / 40)


def test_length_probability_lookup_with_low_fallback(
    estimator: BackoffProbabilityEstimator,
) -> None:
    assert estimator.p_eos_given_length(3) == pytest.approx(0.5)
    assert estimator.p_eos_given_length(17) == pytest.approx(0.01)


def test_estimator_validates_fallbacks() -> None:
    store = NGramStatisticsStore(unigrams={})
    with pytest.raises(ValueError):
        BackoffProbabilityEstimator(store, unknown_length_probability=1.5)
    with pytest.raises(ValueError):
        BackoffProbabilityEstimator(store, empty_corpus_prior=0.0)
