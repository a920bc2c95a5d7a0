"""Train the end-of-sentence classifier on a plain-text corpus.

Usage (from repo root):
    python -m sentence_builder.cli.train_eos --corpus data/clean --model-out data/model/model.json
    python -m sentence_builder.cli.train_eos --corpus book.txt --learning-rate 0.1 --max-epochs 2000
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

import numpy as np

from sentence_builder.classifier.logistic import EosClassifier, FitResult
from sentence_builder.classifier.params import EarlyStopping, TrainingConfig
from sentence_builder.data.text import iter_corpus_sentences, list_text_files
from sentence_builder.estimation.backoff import BackoffProbabilityEstimator
from sentence_builder.evaluation.eos_metrics import EosEvaluationResult, evaluate_eos_classifier
from sentence_builder.prediction.features import build_training_examples
from sentence_builder.stats.builder import build_corpus_tables, encode_sentences


def _split_holdout(
    sentences: Sequence[list[int]], *, holdout_fraction: float, seed: int
) -> tuple[list[list[int]], list[list[int]]]:
    if not 0.0 <= holdout_fraction < 1.0:
        raise ValueError("holdout_fraction must lie in [0, 1).")
    order = np.random.default_rng(seed).permutation(len(sentences))
    num_holdout = int(round(len(sentences) * holdout_fraction))
    holdout = [sentences[int(i)] for i in order[:num_holdout]]
    train = [sentences[int(i)] for i in order[num_holdout:]]
    return train, holdout


def _print_summary(
    *,
    num_sentences: int,
    num_examples: int,
    classifier: EosClassifier,
    fit: FitResult,
    evaluation: EosEvaluationResult | None,
    model_out: str,
) -> None:
    params = classifier.parameters
    print("EOS Training Summary")
    print(f"  sentences: {num_sentences}")
    print(f"  training_examples: {num_examples}")
    print(f"  state: {fit.state.value}")
    print(f"  epochs_run: {fit.epochs_run}")
    print(f"  final_loss: {fit.final_loss:.6f}")
    print(f"  parameters: b={params.b:.6f} w1={params.w1:.6f} w2={params.w2:.6f} w3={params.w3:.6f}")
    if evaluation is not None:
        print(f"  holdout_examples: {evaluation.num_examples}")
        print(f"  holdout_log_loss: {evaluation.log_loss:.6f}")
        print(f"  holdout_accuracy: {evaluation.accuracy:.4f}")
        print(f"  holdout_precision: {evaluation.precision:.4f}")
        print(f"  holdout_recall: {evaluation.recall:.4f}")
    print(f"  saved to: {model_out}")


def main(argv: Sequence[str] | None = None) -> None:
    defaults = TrainingConfig()
    parser = argparse.ArgumentParser(description="Train the EOS logistic-regression classifier.")
    parser.add_argument("--corpus", type=str, required=True, help="A .txt file or a folder of them.")
    parser.add_argument("--model-out", type=str, default="data/model/model.json")
    parser.add_argument("--learning-rate", type=float, default=defaults.learning_rate)
    parser.add_argument("--max-epochs", type=int, default=defaults.max_epochs)
    parser.add_argument("--l2-lambda", type=float, default=defaults.l2_lambda)
    parser.add_argument("--patience", type=int, default=defaults.early_stopping.patience)
    parser.add_argument("--min-delta", type=float, default=defaults.early_stopping.min_delta)
    parser.add_argument("--no-early-stopping", action="store_true")
    parser.add_argument("--holdout-fraction", type=float, default=0.1)
    parser.add_argument("--split-seed", type=int, default=0)
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = TrainingConfig(
        learning_rate=args.learning_rate,
        max_epochs=args.max_epochs,
        l2_lambda=args.l2_lambda,
        early_stopping=EarlyStopping(
            enabled=not args.no_early_stopping,
            patience=args.patience,
            min_delta=args.min_delta,
        ),
    )
    config.validate()

    tokenized = list(iter_corpus_sentences(list_text_files(args.corpus)))
    if not tokenized:
        raise ValueError(f"No sentences found under {args.corpus}.")
    tables = build_corpus_tables(tokenized)
    estimator = BackoffProbabilityEstimator(tables.store)

    id_sentences = encode_sentences(tokenized, tables.vocabulary)
    train_sentences, holdout_sentences = _split_holdout(
        id_sentences, holdout_fraction=args.holdout_fraction, seed=args.split_seed
    )
    train_examples = build_training_examples(train_sentences, estimator)

    classifier = EosClassifier(config=config)
    fit = classifier.fit(train_examples)

    evaluation = None
    if holdout_sentences:
        evaluation = evaluate_eos_classifier(
            classifier, build_training_examples(holdout_sentences, estimator)
        )

    classifier.save_model(args.model_out)
    _print_summary(
        num_sentences=len(id_sentences),
        num_examples=len(train_examples),
        classifier=classifier,
        fit=fit,
        evaluation=evaluation,
        model_out=args.model_out,
    )


if __name__ == "__main__":
    main()
