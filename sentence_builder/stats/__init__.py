"""Read-only corpus statistics consumed by estimation and generation."""

from sentence_builder.stats.builder import CorpusTables, build_corpus_tables, encode_sentences
from sentence_builder.stats.followers import CandidateList, FollowerTables
from sentence_builder.stats.store import (
    NGramStatisticsStore,
    OccurrenceStat,
    length_hazard_from_histogram,
)
from sentence_builder.stats.vocabulary import UNKNOWN_TOKEN, Vocabulary

__all__ = [
    "CandidateList",
    "CorpusTables",
    "FollowerTables",
    "NGramStatisticsStore",
    "OccurrenceStat",
    "UNKNOWN_TOKEN",
    "Vocabulary",
    "build_corpus_tables",
    "encode_sentences",
    "length_hazard_from_histogram",
]
