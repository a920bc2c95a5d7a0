"""Tests for the read-only statistics store, follower tables and table builder."""

from __future__ import annotations

import numpy as np
import pytest

from sentence_builder.data.text import split_sentences, tokenize_text
from sentence_builder.stats.builder import build_corpus_tables, encode_sentences
from sentence_builder.stats.followers import CandidateList, FollowerTables
from sentence_builder.stats.store import (
    NGramStatisticsStore,
    OccurrenceStat,
    length_hazard_from_histogram,
)
from sentence_builder.stats.vocabulary import Vocabulary


@pytest.fixture()
def small_corpus() -> list[list[str]]:
    return [["The", "cat", "sat"], ["the", "dog", "sat"], ["a", "cat"]]


def test_occurrence_stat_rejects_end_count_above_total() -> None:
    with pytest.raises(ValueError):
        OccurrenceStat(total=2, end_count=3)
    with pytest.raises(ValueError):
        OccurrenceStat(total=-1, end_count=0)


def test_store_accepts_pairs_and_exposes_read_only_tables() -> None:
    store = NGramStatisticsStore(
        unigrams={0: (10, 2), 1: OccurrenceStat(5, 1)},
        bigrams={(0, 1): (3, 1)},
        trigrams={(0, 1): {0: (1, 0)}},
        length_hazard={2: 0.25},
    )

    assert store.unigram(0) == OccurrenceStat(10, 2)
    assert store.bigram(0, 1) == OccurrenceStat(3, 1)
    assert store.trigram(0, 1, 0) == OccurrenceStat(1, 0)
    assert store.trigram(1, 0, 0) is None
    assert store.hazard(2) == 0.25
    assert store.hazard(9) is None
    assert store.total_occurrences == 15
    assert store.total_end_count == 3

    with pytest.raises(TypeError):
        store.length_hazard[3] = 0.5  # type: ignore[index]


def test_store_rejects_invalid_hazard_values() -> None:
    with pytest.raises(ValueError):
        NGramStatisticsStore(unigrams={}, length_hazard={3: 1.5})
    with pytest.raises(ValueError):
        NGramStatisticsStore(unigrams={}, length_hazard={0: 0.5})


def test_length_hazard_from_histogram_uses_tail_counts() -> None:
    hazard = length_hazard_from_histogram({1: 2, 2: 1, 3: 1})

    assert hazard[3] == pytest.approx(1.0)
    assert hazard[2] == pytest.approx(1 / 2)
    assert hazard[1] == pytest.approx(2 / 4)


def test_candidate_list_sorts_by_count_and_keeps_tie_order() -> None:
    cands = CandidateList([(7, 1), (3, 5), (4, 1), (9, 0), (2, 5)])

    assert list(cands) == [(3, 5), (2, 5), (7, 1), (4, 1)]
    assert cands.head() == 3
    assert cands.total == 12
    assert CandidateList().head() is None
    assert CandidateList().sample(np.random.default_rng(0)) is None


@pytest.mark.slow
def test_candidate_list_weighted_sampling_matches_counts() -> None:
    cands = CandidateList([(0, 3), (1, 1)])
    rng = np.random.default_rng(1234)

    draws = [cands.sample(rng) for _ in range(10_000)]
    count_a = draws.count(0)
    count_b = draws.count(1)

    assert count_a + count_b == 10_000
    assert count_a / count_b == pytest.approx(3.0, rel=0.1)


def test_follower_tables_dispatch_on_context_arity() -> None:
    tables = FollowerTables(
        bigram={0: [(1, 2)]},
        trigram={(0, 1): [(2, 4)], (0, 3): [(2, 1)]},
        start_candidates=[(0, 3)],
    )

    assert tables.followers((0,)).ids() == (1,)
    assert tables.followers((0, 1)).ids() == (2,)
    assert len(tables.followers((5,))) == 0
    assert tables.has_context((0, 3))
    assert not tables.has_context((3, 0))
    assert list(tables.second_words(0)) == [(1, 4), (3, 1)]
    with pytest.raises(ValueError):
        tables.followers((0, 1, 2))


def test_vocabulary_lookup_is_case_insensitive_and_renders_placeholder() -> None:
    vocab = Vocabulary({0: "The", 1: "cat"})

    assert vocab.id_for("THE") == 0
    assert vocab.id_for("  cat ") == 1
    assert vocab.id_for("dog") is None
    assert vocab.id_for("") is None
    assert vocab.render([0, 1, 42]) == "the cat ?"


def test_build_corpus_tables_counts_ngrams(small_corpus: list[list[str]]) -> None:
    tables = build_corpus_tables(small_corpus)
    vocab = tables.vocabulary
    store = tables.store
    the, cat, sat, dog, a = (vocab.id_for(w) for w in ("the", "cat", "sat", "dog", "a"))

    assert (the, cat, sat, dog, a) == (0, 1, 2, 3, 4)
    assert store.unigram(the) == OccurrenceStat(2, 0)
    assert store.unigram(cat) == OccurrenceStat(2, 1)
    assert store.unigram(sat) == OccurrenceStat(2, 2)
    assert store.bigram(a, cat) == OccurrenceStat(1, 1)
    assert store.bigram(the, cat) == OccurrenceStat(1, 0)
    assert store.trigram(the, dog, sat) == OccurrenceStat(1, 1)
    assert store.hazard(3) == pytest.approx(1.0)
    assert store.hazard(2) == pytest.approx(1 / 3)

    followers = tables.followers
    assert list(followers.followers((the,))) == [(cat, 1), (dog, 1)]
    assert list(followers.followers((the, cat))) == [(sat, 1)]
    assert list(followers.start_candidates) == [(the, 2), (a, 1)]


def test_encode_sentences_drops_unknown_tokens(small_corpus: list[list[str]]) -> None:
    tables = build_corpus_tables(small_corpus)

    encoded = encode_sentences([["the", "zebra", "sat"], ["zebra"]], tables.vocabulary)

    assert encoded == [[0, 2]]


def test_tokenize_text_splits_sentences_and_strips_punctuation() -> None:
    text = "Hello, world! It's a test. Done"

    assert split_sentences(text) == ["Hello, world!", "It's a test.", "Done"]
    assert tokenize_text(text) == [["hello", "world"], ["it's", "a", "test"], ["done"]]
