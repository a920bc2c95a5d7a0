"""Ranked follower lists consumed by the sentence generators.

A follower list is the set of `(next_id, count)` pairs observed after one
context, ranked by count. The same structure holds the sentence-start
candidates `(word_id, start_count)`. Greedy strategies read the head of the
list; weighted strategies sample with the precomputed cumulative counts.
"""

from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray


class CandidateList(Sequence[tuple[int, int]]):
    """Immutable `(word_id, count)` sequence sorted by count, highest first.

    Entries with a non-positive count are dropped since they can never be
    sampled. Ties keep their input order.
    """

    __slots__ = ("_entries", "_cumulative", "_total")

    def __init__(self, entries: Iterable[tuple[int, int]] = ()) -> None:
        cleaned = [(int(word_id), int(count)) for word_id, count in entries if int(count) > 0]
        cleaned.sort(key=lambda entry: -entry[1])
        self._entries: tuple[tuple[int, int], ...] = tuple(cleaned)
        counts = np.fromiter((count for _, count in self._entries), dtype=np.int64)
        self._cumulative: NDArray[np.int64] = np.cumsum(counts)
        self._total = int(self._cumulative[-1]) if self._entries else 0

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index):  # type: ignore[override]
        return self._entries[index]

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CandidateList):
            return self._entries == other._entries
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"CandidateList({list(self._entries)!r})"

    @property
    def total(self) -> int:
        """Sum of all counts."""
        return self._total

    def ids(self) -> tuple[int, ...]:
        return tuple(word_id for word_id, _ in self._entries)

    def head(self) -> int | None:
        return self._entries[0][0] if self._entries else None

    def sample(self, rng: np.random.Generator) -> int | None:
        """Frequency-weighted draw.

        Draws a uniform integer in `[0, total)` and walks the cumulative counts
        to the bucket containing it.
        """

        if not self._entries:
            return None
        roll = int(rng.integers(0, self._total))
        index = int(np.searchsorted(self._cumulative, roll, side="right"))
        return self._entries[index][0]


EMPTY_CANDIDATES = CandidateList()


def _as_candidate_list(value: CandidateList | Iterable[tuple[int, int]]) -> CandidateList:
    if isinstance(value, CandidateList):
        return value
    return CandidateList(value)


class FollowerTables:
    """Read-only bigram and trigram follower lists plus sentence-start candidates.

    Args:
        bigram: `word_id -> [(next_id, count), ...]`
        trigram: `(w1, w2) -> [(w3, count), ...]`
        start_candidates: `[(word_id, start_count), ...]`
    """

    def __init__(
        self,
        *,
        bigram: Mapping[int, Iterable[tuple[int, int]]] | None = None,
        trigram: Mapping[tuple[int, int], Iterable[tuple[int, int]]] | None = None,
        start_candidates: Iterable[tuple[int, int]] = (),
    ) -> None:
        self._bigram = MappingProxyType(
            {int(word_id): _as_candidate_list(cands) for word_id, cands in (bigram or {}).items()}
        )
        self._trigram = MappingProxyType(
            {
                (int(w1), int(w2)): _as_candidate_list(cands)
                for (w1, w2), cands in (trigram or {}).items()
            }
        )
        self._start_candidates = _as_candidate_list(start_candidates)

        # Index of trigram contexts by their first word, weighted by the total
        # number of continuations seen after each (first, second) context.
        second_totals: dict[int, list[tuple[int, int]]] = defaultdict(list)
        for (w1, w2), cands in self._trigram.items():
            second_totals[w1].append((w2, cands.total))
        self._second_words = MappingProxyType(
            {w1: CandidateList(entries) for w1, entries in second_totals.items()}
        )

    def followers(self, context: Sequence[int]) -> CandidateList:
        """Return the follower list for a one-word or two-word context."""

        if len(context) == 1:
            return self._bigram.get(int(context[0]), EMPTY_CANDIDATES)
        if len(context) == 2:
            return self._trigram.get((int(context[0]), int(context[1])), EMPTY_CANDIDATES)
        raise ValueError(f"Context must hold 1 or 2 word ids, got {len(context)}.")

    def has_context(self, context: Sequence[int]) -> bool:
        return len(self.followers(context)) > 0

    def second_words(self, first_id: int) -> CandidateList:
        """Words that open a known trigram context after `first_id`."""

        return self._second_words.get(first_id, EMPTY_CANDIDATES)

    @property
    def start_candidates(self) -> CandidateList:
        return self._start_candidates

    @property
    def num_bigram_contexts(self) -> int:
        return len(self._bigram)

    @property
    def num_trigram_contexts(self) -> int:
        return len(self._trigram)

    def __repr__(self) -> str:
        return (
            f"FollowerTables(bigram_contexts={self.num_bigram_contexts}, "
            f"trigram_contexts={self.num_trigram_contexts}, "
            f"start_candidates={len(self._start_candidates)})"
        )
