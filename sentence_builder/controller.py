"""One-stop facade: loaded tables, EOS model and generators behind a single object."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from sentence_builder.classifier.logistic import EosClassifier
from sentence_builder.estimation.backoff import BackoffProbabilityEstimator
from sentence_builder.generation.factory import build_generator, normalize_algorithm
from sentence_builder.generation.generator import GenerationResult, SentenceGenerator
from sentence_builder.prediction.eos import EosPredictor
from sentence_builder.stats.builder import CorpusTables

CONTROLLER_MAX_TOKENS = 1000


class SentenceBuilder:
    """Generate sentences and EOS probabilities from one frozen table set.

    Without a classifier, generators stop only on stop words, dead ends and the
    token limit.
    """

    def __init__(
        self,
        tables: CorpusTables,
        classifier: EosClassifier | None = None,
        *,
        seed: int | None = None,
    ) -> None:
        self.tables = tables
        self.estimator = BackoffProbabilityEstimator(tables.store)
        self.classifier = classifier
        self.predictor = (
            EosPredictor(classifier, self.estimator) if classifier is not None else None
        )
        self._seed = seed
        self._generators: dict[str, SentenceGenerator] = {}

    @classmethod
    def with_model_file(
        cls, tables: CorpusTables, model_path: str | Path, *, seed: int | None = None
    ) -> "SentenceBuilder":
        return cls(tables, EosClassifier.load_model(model_path), seed=seed)

    def generator(self, algorithm: str) -> SentenceGenerator:
        key = normalize_algorithm(algorithm)
        generator = self._generators.get(key)
        if generator is None:
            generator = build_generator(
                key,
                self.tables,
                eos_predictor=self.predictor,
                default_max_tokens=CONTROLLER_MAX_TOKENS,
                seed=self._seed,
            )
            self._generators[key] = generator
        return generator

    def generate(
        self,
        algorithm: str,
        seed_words: Iterable[str | None] | None = None,
        *,
        max_tokens: int = CONTROLLER_MAX_TOKENS,
        stop_word: str | None = None,
    ) -> GenerationResult:
        return self.generator(algorithm).generate(
            seed_words, max_tokens=max_tokens, stop_word=stop_word
        )

    def predict_eos(self, words: Sequence[str]) -> float:
        """EOS probability of a word sequence; unknown words are skipped."""

        if self.predictor is None:
            raise RuntimeError("No EOS classifier was supplied to this SentenceBuilder.")
        vocabulary = self.tables.vocabulary
        ids = [word_id for word_id in map(vocabulary.id_for, words) if word_id is not None]
        return self.predictor.predict_eos_probability(ids)
