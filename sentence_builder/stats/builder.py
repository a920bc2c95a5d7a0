"""Build the statistics store and follower tables from tokenized sentences.

This is an in-memory stand-in for the corpus import pipeline. Each sentence is
a sequence of tokens; its last token is the sentence-final one. Counting
follows the usual n-gram convention:

- unigram `w`: every occurrence, end count when `w` closes the sentence
- bigram `(w1, w2)`: every adjacent pair, end count when `w2` closes it
- trigram `(w1, w2, w3)`: every adjacent triple, end count when `w3` closes it
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
import logging
from typing import Iterable, Sequence

from sentence_builder.stats.followers import FollowerTables
from sentence_builder.stats.store import (
    NGramStatisticsStore,
    OccurrenceStat,
    length_hazard_from_histogram,
)
from sentence_builder.stats.vocabulary import Vocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusTables:
    """Everything the estimator and the generators need, loaded once."""

    store: NGramStatisticsStore
    followers: FollowerTables
    vocabulary: Vocabulary


@dataclass(slots=True)
class _Counts:
    total: int = 0
    end_count: int = 0

    def add(self, is_end: bool) -> None:
        self.total += 1
        if is_end:
            self.end_count += 1

    def freeze(self) -> OccurrenceStat:
        return OccurrenceStat(total=self.total, end_count=self.end_count)


def encode_sentences(
    sentences: Iterable[Sequence[str]], vocabulary: Vocabulary
) -> list[list[int]]:
    """Map tokenized sentences to id sequences, dropping unknown tokens."""

    encoded: list[list[int]] = []
    for sentence in sentences:
        ids = [vocabulary.id_for(token) for token in sentence]
        known = [word_id for word_id in ids if word_id is not None]
        if known:
            encoded.append(known)
    return encoded


def build_corpus_tables(sentences: Iterable[Sequence[str]]) -> CorpusTables:
    """Count n-gram statistics and follower lists for a tokenized corpus."""

    normalized = [[token.lower() for token in sentence if token] for sentence in sentences]
    normalized = [sentence for sentence in normalized if sentence]

    vocabulary = Vocabulary.from_tokens(token for sentence in normalized for token in sentence)
    id_sentences = encode_sentences(normalized, vocabulary)

    unigrams: dict[int, _Counts] = defaultdict(_Counts)
    bigrams: dict[tuple[int, int], _Counts] = defaultdict(_Counts)
    trigrams: dict[tuple[int, int], dict[int, _Counts]] = defaultdict(lambda: defaultdict(_Counts))
    starts: Counter[int] = Counter()
    length_histogram: Counter[int] = Counter()

    for ids in id_sentences:
        last_index = len(ids) - 1
        starts[ids[0]] += 1
        length_histogram[len(ids)] += 1
        for index, word_id in enumerate(ids):
            is_end = index == last_index
            unigrams[word_id].add(is_end)
            if index >= 1:
                bigrams[(ids[index - 1], word_id)].add(is_end)
            if index >= 2:
                trigrams[(ids[index - 2], ids[index - 1])][word_id].add(is_end)

    store = NGramStatisticsStore(
        unigrams={word_id: counts.freeze() for word_id, counts in unigrams.items()},
        bigrams={pair: counts.freeze() for pair, counts in bigrams.items()},
        trigrams={
            context: {w3: counts.freeze() for w3, counts in inner.items()}
            for context, inner in trigrams.items()
        },
        length_hazard=length_hazard_from_histogram(length_histogram),
    )

    bigram_followers: dict[int, list[tuple[int, int]]] = defaultdict(list)
    for (w1, w2), counts in bigrams.items():
        bigram_followers[w1].append((w2, counts.total))
    trigram_followers = {
        context: [(w3, counts.total) for w3, counts in inner.items()]
        for context, inner in trigrams.items()
    }
    followers = FollowerTables(
        bigram=bigram_followers,
        trigram=trigram_followers,
        start_candidates=starts.items(),
    )

    logger.info(
        "Loaded %d sentences: %d unigrams, %d bigrams, %d trigram contexts.",
        len(id_sentences),
        store.num_unigrams,
        store.num_bigrams,
        store.num_trigram_contexts,
    )
    return CorpusTables(store=store, followers=followers, vocabulary=vocabulary)
