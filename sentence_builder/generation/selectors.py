"""Candidate selection rules shared by every generator arity.

A selector answers two questions for a `CandidateList`:
- `pick`: which single entry to use (seeding)
- `proposals`: in which order to offer entries to the loop-avoidance checks
  (extending), at most `max_attempts` of them
"""

from __future__ import annotations

from typing import Iterator, Protocol

import numpy as np

from sentence_builder.stats.followers import CandidateList


class CandidateSelector(Protocol):
    name: str

    def pick(self, candidates: CandidateList, rng: np.random.Generator) -> int | None:
        ...

    def proposals(
        self, candidates: CandidateList, rng: np.random.Generator, max_attempts: int
    ) -> Iterator[int]:
        ...


class GreedySelector:
    """Most frequent first; deterministic, never touches the random source."""

    name = "greedy"

    def pick(self, candidates: CandidateList, rng: np.random.Generator) -> int | None:
        del rng
        return candidates.head()

    def proposals(
        self, candidates: CandidateList, rng: np.random.Generator, max_attempts: int
    ) -> Iterator[int]:
        del rng
        for rank, (word_id, _) in enumerate(candidates):
            if rank >= max_attempts:
                return
            yield word_id


class WeightedSelector:
    """Frequency-proportional draws with replacement."""

    name = "weighted"

    def pick(self, candidates: CandidateList, rng: np.random.Generator) -> int | None:
        return candidates.sample(rng)

    def proposals(
        self, candidates: CandidateList, rng: np.random.Generator, max_attempts: int
    ) -> Iterator[int]:
        if not candidates:
            return
        for _ in range(max_attempts):
            yield candidates.sample(rng)  # type: ignore[misc]


GREEDY = GreedySelector()
WEIGHTED = WeightedSelector()
