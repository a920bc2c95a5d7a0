"""Laplace-smoothed end-of-sentence estimates with trigram -> bigram -> unigram backoff.

Backoff behavior for `p_eos_given_context(w1, w2, w3)`:
- Use the trigram statistic for `(w1, w2, w3)` when both context words are
  known and the triple has been observed.
- Otherwise use the bigram statistic for `(w2, w3)`.
- Otherwise use the unigram statistic for `w3`.
- If `w3` itself was never observed, return the corpus-wide EOS prior.

The order is fixed: each step is less specific but better supported by data.
Every rate is `(end_count + 1) / (total + 2)`, so it lies strictly in (0, 1).
"""

from __future__ import annotations

from sentence_builder.stats.store import NGramStatisticsStore, OccurrenceStat

EMPTY_CORPUS_EOS_PRIOR = 0.05
UNKNOWN_LENGTH_EOS_PROBABILITY = 0.01


def laplace_rate(stat: OccurrenceStat) -> float:
    """Add-one smoothed end rate of a binary outcome."""

    return (stat.end_count + 1.0) / (stat.total + 2.0)


class BackoffProbabilityEstimator:
    """Pure EOS probability functions over an `NGramStatisticsStore`."""

    def __init__(
        self,
        store: NGramStatisticsStore,
        *,
        unknown_length_probability: float = UNKNOWN_LENGTH_EOS_PROBABILITY,
        empty_corpus_prior: float = EMPTY_CORPUS_EOS_PRIOR,
    ) -> None:
        if not 0.0 <= unknown_length_probability <= 1.0:
            raise ValueError("unknown_length_probability must lie in [0, 1].")
        if not 0.0 < empty_corpus_prior < 1.0:
            raise ValueError("empty_corpus_prior must lie in (0, 1).")

        self.store = store
        self.unknown_length_probability = float(unknown_length_probability)
        if store.total_occurrences > 0:
            self._global_eos_prior = store.total_end_count / store.total_occurrences
        else:
            self._global_eos_prior = float(empty_corpus_prior)

    @property
    def global_eos_prior(self) -> float:
        """Empirical share of tokens that end a sentence."""
        return self._global_eos_prior

    def p_eos_given_word(self, w3: int | None) -> float:
        if w3 is None:
            return self._global_eos_prior
        stat = self.store.unigram(w3)
        if stat is None:
            return self._global_eos_prior
        return laplace_rate(stat)

    def p_eos_given_context(self, w1: int | None, w2: int | None, w3: int | None) -> float:
        _, stat = self._lookup_backoff_stats(w1, w2, w3)
        if stat is None:
            return self._global_eos_prior
        return laplace_rate(stat)

    def p_eos_given_length(self, length: int) -> float:
        hazard = self.store.hazard(length)
        if hazard is None:
            return self.unknown_length_probability
        return hazard

    def _lookup_backoff_stats(
        self, w1: int | None, w2: int | None, w3: int | None
    ) -> tuple[int, OccurrenceStat | None]:
        """Return `(order, stat)` for the most specific statistic available.

        Order is 3 for trigram, 2 for bigram, 1 for unigram, 0 for the prior.
        """

        if w3 is None:
            return 0, None
        if w1 is not None and w2 is not None:
            stat = self.store.trigram(w1, w2, w3)
            if stat is not None:
                return 3, stat
        if w2 is not None:
            stat = self.store.bigram(w2, w3)
            if stat is not None:
                return 2, stat
        stat = self.store.unigram(w3)
        if stat is not None:
            return 1, stat
        return 0, None
