"""Sentence generation over bigram or trigram follower lists.

One routine serves all four strategies. It is parametrized by:
- `arity`: 1 (bigram context, last word) or 2 (trigram context, last two words)
- `selector`: greedy (head of the ranked list) or weighted (cumulative sampling)

Each call walks three phases:

1. Seeding: use the caller's seed words (case-insensitive, unknown words
   ignored), then complete the context from the start candidates, the trigram
   second-word index, the bigram followers, or finally any known id.
2. Extending: repeatedly look up the followers of the current context and take
   the first proposal that passes loop avoidance:
   - not equal to the most recent id
   - for trigrams, not equal to the second most recent id either
   - the `(context, candidate)` signature was not used earlier in this call
   After appending, stop on the stop word, then on the EOS predictor, then on
   the token limit.
3. Terminated: render ids as lowercase tokens joined by single spaces.

Running out of data (no seed, no followers, every proposal rejected) is a
normal termination and yields an empty or short sentence.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterable, Sequence

import numpy as np

from sentence_builder.generation.selectors import CandidateSelector
from sentence_builder.prediction.eos import EosPredictor
from sentence_builder.stats.followers import CandidateList, FollowerTables
from sentence_builder.stats.vocabulary import Vocabulary

DEFAULT_MAX_TOKENS = 20
DEFAULT_MAX_ATTEMPTS = 10
EOS_THRESHOLD = 0.5

logger = logging.getLogger(__name__)


class TerminationReason(str, Enum):
    NO_SEED = "no_seed"
    DEAD_END = "dead_end"
    EXHAUSTED = "exhausted"
    STOP_WORD = "stop_word"
    END_OF_SENTENCE = "end_of_sentence"
    MAX_TOKENS = "max_tokens"


@dataclass(frozen=True)
class GenerationResult:
    token_ids: tuple[int, ...]
    text: str
    reason: TerminationReason

    def __len__(self) -> int:
        return len(self.token_ids)


class GenerationState:
    """Mutable state of a single generation call."""

    __slots__ = ("arity", "tokens", "context", "used_signatures")

    def __init__(self, arity: int, seed_ids: Sequence[int]) -> None:
        self.arity = arity
        self.tokens: list[int] = []
        self.context: deque[int] = deque(maxlen=arity)
        self.used_signatures: set[tuple[int, ...]] = set()
        for word_id in seed_ids:
            self.tokens.append(word_id)
            self.context.append(word_id)

    def signature(self, candidate: int) -> tuple[int, ...]:
        return (*self.context, candidate)

    def admits(self, candidate: int) -> bool:
        if candidate == self.tokens[-1]:
            return False
        if self.arity == 2 and len(self.tokens) >= 2 and candidate == self.tokens[-2]:
            return False
        return self.signature(candidate) not in self.used_signatures

    def append(self, candidate: int) -> None:
        self.used_signatures.add(self.signature(candidate))
        self.tokens.append(candidate)
        self.context.append(candidate)


class SentenceGenerator:
    """Greedy or weighted sentence generator with a one- or two-word context.

    Notes:
    - The follower tables and vocabulary are shared read-only.
    - Each generator owns its random source; seed it for reproducible weighted
      output. Use one generator per thread.
    - When `eos_predictor` is given, generation also stops as soon as the
      predicted EOS probability reaches `eos_threshold`.
    """

    def __init__(
        self,
        followers: FollowerTables,
        vocabulary: Vocabulary,
        *,
        arity: int,
        selector: CandidateSelector,
        eos_predictor: EosPredictor | None = None,
        eos_threshold: float = EOS_THRESHOLD,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
        seed: int | None = None,
        name: str | None = None,
    ) -> None:
        if arity not in (1, 2):
            raise ValueError("arity must be 1 (bigram) or 2 (trigram).")
        if not 0.0 <= eos_threshold <= 1.0:
            raise ValueError("eos_threshold must lie in [0, 1].")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if default_max_tokens < 1:
            raise ValueError("default_max_tokens must be at least 1.")

        self.followers = followers
        self.vocabulary = vocabulary
        self.arity = int(arity)
        self.selector = selector
        self.eos_predictor = eos_predictor
        self.eos_threshold = float(eos_threshold)
        self.max_attempts = int(max_attempts)
        self.default_max_tokens = int(default_max_tokens)
        prefix = "bigram" if self.arity == 1 else "trigram"
        self.name = name or f"{prefix}_{selector.name}"
        self._rng = np.random.default_rng(seed)

    def reseed(self, seed: int | None) -> None:
        self._rng = np.random.default_rng(seed)

    def generate_sentence(
        self,
        seed_words: Iterable[str | None] | None = None,
        max_tokens: int | None = None,
        stop_word: str | None = None,
    ) -> str:
        return self.generate(seed_words, max_tokens=max_tokens, stop_word=stop_word).text

    def generate(
        self,
        seed_words: Iterable[str | None] | None = None,
        *,
        max_tokens: int | None = None,
        stop_word: str | None = None,
    ) -> GenerationResult:
        """Generate one sentence, optionally starting from `seed_words`."""

        known_ids: list[int] = []
        for word in seed_words or ():
            word_id = self.vocabulary.id_for(word)
            if word_id is not None:
                known_ids.append(word_id)
        return self._run(known_ids, max_tokens=max_tokens, stop_word=stop_word)

    def generate_from_ids(
        self,
        start_ids: Iterable[int] | None = None,
        *,
        max_tokens: int | None = None,
        stop_word: str | None = None,
    ) -> GenerationResult:
        """Same as `generate`, but seeded with word ids instead of words."""

        known_ids = [int(word_id) for word_id in start_ids or () if int(word_id) in self.vocabulary]
        return self._run(known_ids, max_tokens=max_tokens, stop_word=stop_word)

    def _run(
        self,
        known_ids: list[int],
        *,
        max_tokens: int | None,
        stop_word: str | None,
    ) -> GenerationResult:
        limit = self.default_max_tokens if max_tokens is None else int(max_tokens)
        if limit < 1:
            raise ValueError("max_tokens must be at least 1.")
        stop = stop_word.strip().lower() if stop_word else ""

        seed_ids = self._complete_seed(known_ids)
        if not seed_ids:
            return GenerationResult(token_ids=(), text="", reason=TerminationReason.NO_SEED)
        if len(seed_ids) < self.arity:
            # Only one distinct word is available, so no trigram context exists.
            tokens = tuple(seed_ids)
            return GenerationResult(
                token_ids=tokens,
                text=self.vocabulary.render(tokens),
                reason=TerminationReason.DEAD_END,
            )

        state = GenerationState(self.arity, seed_ids)
        reason = TerminationReason.MAX_TOKENS

        while len(state.tokens) < max(self.arity, limit):
            candidates = self.followers.followers(state.context)
            if not candidates:
                reason = TerminationReason.DEAD_END
                break

            chosen: int | None = None
            for candidate in self.selector.proposals(candidates, self._rng, self.max_attempts):
                if state.admits(candidate):
                    chosen = candidate
                    break
            if chosen is None:
                reason = TerminationReason.EXHAUSTED
                break

            state.append(chosen)

            if stop and self.vocabulary.word_for(chosen) == stop:
                reason = TerminationReason.STOP_WORD
                break
            if self.eos_predictor is not None:
                probability = self.eos_predictor.predict_eos_probability(state.tokens)
                if probability >= self.eos_threshold:
                    logger.debug(
                        "Stopping early. Length: %d | Prob: %.6f", len(state.tokens), probability
                    )
                    reason = TerminationReason.END_OF_SENTENCE
                    break
            if len(state.tokens) >= limit:
                reason = TerminationReason.MAX_TOKENS
                break

        tokens = tuple(state.tokens)
        return GenerationResult(
            token_ids=tokens,
            text=self.vocabulary.render(tokens),
            reason=reason,
        )

    def _complete_seed(self, known_ids: list[int]) -> list[int]:
        seed_ids = known_ids[: self.arity]
        # A two-word seed is only usable as-is when it is a known trigram context.
        if len(seed_ids) == 2 and not self.followers.has_context(seed_ids):
            seed_ids = seed_ids[:1]

        if not seed_ids:
            first = self.selector.pick(self.followers.start_candidates, self._rng)
            if first is None:
                first = self._any_id()
            if first is None:
                return []
            seed_ids = [first]

        while len(seed_ids) < self.arity:
            padded = self._pad_after(seed_ids[-1])
            if padded is None:
                break
            seed_ids.append(padded)
        return seed_ids

    def _pad_after(self, word_id: int) -> int | None:
        """Pick a context word to follow `word_id`, never `word_id` itself."""

        sources = (
            self.followers.second_words(word_id),
            self.followers.followers((word_id,)),
            self.followers.start_candidates,
        )
        for candidates in sources:
            distinct = CandidateList(entry for entry in candidates if entry[0] != word_id)
            picked = self.selector.pick(distinct, self._rng)
            if picked is not None:
                return picked
        return self._any_id(exclude=word_id)

    def _any_id(self, exclude: int | None = None) -> int | None:
        return min((i for i in self.vocabulary.ids() if i != exclude), default=None)

    def __repr__(self) -> str:
        return f"SentenceGenerator(name={self.name!r}, eos={self.eos_predictor is not None})"
