"""Build a configured `SentenceGenerator` from an algorithm name."""

from __future__ import annotations

from sentence_builder.generation.generator import (
    DEFAULT_MAX_TOKENS,
    EOS_THRESHOLD,
    SentenceGenerator,
)
from sentence_builder.generation.selectors import GREEDY, WEIGHTED, CandidateSelector
from sentence_builder.prediction.eos import EosPredictor
from sentence_builder.stats.builder import CorpusTables

ALGORITHMS: dict[str, tuple[int, CandidateSelector]] = {
    "bi_greedy": (1, GREEDY),
    "bi_weighted": (1, WEIGHTED),
    "tri_greedy": (2, GREEDY),
    "tri_weighted": (2, WEIGHTED),
}


def normalize_algorithm(algorithm: str) -> str:
    return algorithm.strip().lower().replace("-", "_")


def build_generator(
    algorithm: str,
    tables: CorpusTables,
    *,
    eos_predictor: EosPredictor | None = None,
    eos_threshold: float = EOS_THRESHOLD,
    default_max_tokens: int = DEFAULT_MAX_TOKENS,
    seed: int | None = None,
) -> SentenceGenerator:
    """Return the generator for `bi_greedy`, `bi_weighted`, `tri_greedy` or `tri_weighted`."""

    key = normalize_algorithm(algorithm)
    if key not in ALGORITHMS:
        raise ValueError(
            f"Unknown algorithm: {algorithm}. Expected one of {', '.join(ALGORITHMS)}."
        )
    arity, selector = ALGORITHMS[key]
    return SentenceGenerator(
        tables.followers,
        tables.vocabulary,
        arity=arity,
        selector=selector,
        eos_predictor=eos_predictor,
        eos_threshold=eos_threshold,
        default_max_tokens=default_max_tokens,
        seed=seed,
        name=key,
    )
