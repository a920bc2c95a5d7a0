"""Read-only n-gram end-of-sentence statistics.

The store holds four tables populated by an external import step:

- unigram: `word_id -> OccurrenceStat`
- bigram: `(w1, w2) -> OccurrenceStat` where the end count refers to `w2`
- trigram: `(w1, w2) -> {w3: OccurrenceStat}` nested under the two-word context
- length hazard: `sentence_length -> P(sentence ends here | reached length)`

All tables are copied into read-only snapshots at construction time. Nothing in
this package mutates them afterwards, so one store may be shared between
threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple, Union


@dataclass(frozen=True, slots=True)
class OccurrenceStat:
    """Total occurrences of an n-gram and how many of them ended a sentence."""

    total: int
    end_count: int

    def __post_init__(self) -> None:
        if self.total < 0 or self.end_count < 0:
            raise ValueError("Occurrence counts must be non-negative.")
        if self.end_count > self.total:
            raise ValueError(
                f"end_count ({self.end_count}) cannot exceed total ({self.total})."
            )


StatLike = Union[OccurrenceStat, Tuple[int, int]]


def _coerce_stat(value: StatLike) -> OccurrenceStat:
    if isinstance(value, OccurrenceStat):
        return value
    total, end_count = value
    return OccurrenceStat(total=int(total), end_count=int(end_count))


def length_hazard_from_histogram(histogram: Mapping[int, int]) -> dict[int, float]:
    """Turn a sentence-length histogram into a discrete hazard table.

    hazard(L) = frequency(L) / sum(frequency(l) for l >= L)

    The result is not monotonic in general.
    """

    for length, frequency in histogram.items():
        if length <= 0:
            raise ValueError(f"Sentence lengths must be positive, got {length}.")
        if frequency < 0:
            raise ValueError(f"Length frequencies must be non-negative, got {frequency}.")

    hazard: dict[int, float] = {}
    tail_count = 0
    for length in sorted(histogram, reverse=True):
        frequency = int(histogram[length])
        tail_count += frequency
        if tail_count > 0:
            hazard[length] = frequency / tail_count
    return dict(sorted(hazard.items()))


class NGramStatisticsStore:
    """Immutable snapshot of unigram/bigram/trigram EOS counts and length hazards."""

    def __init__(
        self,
        *,
        unigrams: Mapping[int, StatLike],
        bigrams: Mapping[tuple[int, int], StatLike] | None = None,
        trigrams: Mapping[tuple[int, int], Mapping[int, StatLike]] | None = None,
        length_hazard: Mapping[int, float] | None = None,
    ) -> None:
        self._unigrams = MappingProxyType(
            {int(word_id): _coerce_stat(stat) for word_id, stat in unigrams.items()}
        )
        self._bigrams = MappingProxyType(
            {
                (int(w1), int(w2)): _coerce_stat(stat)
                for (w1, w2), stat in (bigrams or {}).items()
            }
        )
        self._trigrams = MappingProxyType(
            {
                (int(w1), int(w2)): MappingProxyType(
                    {int(w3): _coerce_stat(stat) for w3, stat in inner.items()}
                )
                for (w1, w2), inner in (trigrams or {}).items()
            }
        )

        hazard: dict[int, float] = {}
        for length, probability in (length_hazard or {}).items():
            length = int(length)
            probability = float(probability)
            if length <= 0:
                raise ValueError(f"Sentence lengths must be positive, got {length}.")
            if not 0.0 <= probability <= 1.0:
                raise ValueError(
                    f"Hazard for length {length} must lie in [0, 1], got {probability}."
                )
            hazard[length] = probability
        self._length_hazard = MappingProxyType(hazard)

        self._total_occurrences = sum(stat.total for stat in self._unigrams.values())
        self._total_end_count = sum(stat.end_count for stat in self._unigrams.values())

    def unigram(self, word_id: int) -> OccurrenceStat | None:
        return self._unigrams.get(word_id)

    def bigram(self, w1: int, w2: int) -> OccurrenceStat | None:
        return self._bigrams.get((w1, w2))

    def trigram_context(self, w1: int, w2: int) -> Mapping[int, OccurrenceStat] | None:
        """Return every `w3` statistic observed after the context `(w1, w2)`."""

        return self._trigrams.get((w1, w2))

    def trigram(self, w1: int, w2: int, w3: int) -> OccurrenceStat | None:
        inner = self._trigrams.get((w1, w2))
        if inner is None:
            return None
        return inner.get(w3)

    def hazard(self, length: int) -> float | None:
        return self._length_hazard.get(length)

    @property
    def total_occurrences(self) -> int:
        return self._total_occurrences

    @property
    def total_end_count(self) -> int:
        return self._total_end_count

    @property
    def num_unigrams(self) -> int:
        return len(self._unigrams)

    @property
    def num_bigrams(self) -> int:
        return len(self._bigrams)

    @property
    def num_trigram_contexts(self) -> int:
        return len(self._trigrams)

    @property
    def length_hazard(self) -> Mapping[int, float]:
        return self._length_hazard

    def __repr__(self) -> str:
        return (
            f"NGramStatisticsStore(unigrams={self.num_unigrams}, bigrams={self.num_bigrams}, "
            f"trigram_contexts={self.num_trigram_contexts}, lengths={len(self._length_hazard)})"
        )
