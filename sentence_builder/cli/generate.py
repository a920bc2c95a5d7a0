"""Generate sentences from a plain-text corpus.

Usage (from repo root):
    python -m sentence_builder.cli.generate --corpus data/clean --algo tri_greedy
    python -m sentence_builder.cli.generate --corpus data/clean --algo bi_weighted \
        --seed-word the --max-tokens 30 --stop-word oz --random-seed 7
    python -m sentence_builder.cli.generate --corpus data/clean --model-path data/model/model.json
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from sentence_builder.controller import CONTROLLER_MAX_TOKENS, SentenceBuilder
from sentence_builder.data.text import iter_corpus_sentences, list_text_files
from sentence_builder.generation.factory import ALGORITHMS
from sentence_builder.stats.builder import build_corpus_tables


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate sentences from corpus statistics.")
    parser.add_argument("--corpus", type=str, required=True, help="A .txt file or a folder of them.")
    parser.add_argument("--model-path", type=str, default=None, help="Trained EOS model (JSON).")
    parser.add_argument("--algo", choices=tuple(ALGORITHMS), default="tri_greedy")
    parser.add_argument(
        "--seed-word",
        action="append",
        default=[],
        help="Starting word; repeat for a two-word trigram seed.",
    )
    parser.add_argument("--max-tokens", type=int, default=CONTROLLER_MAX_TOKENS)
    parser.add_argument("--stop-word", type=str, default=None)
    parser.add_argument("--random-seed", type=int, default=None)
    parser.add_argument("--count", type=int, default=1)
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args(argv)

    if args.max_tokens < 1:
        raise ValueError("--max-tokens must be at least 1.")
    if args.count < 1:
        raise ValueError("--count must be at least 1.")

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    tables = build_corpus_tables(iter_corpus_sentences(list_text_files(args.corpus)))
    if args.model_path:
        builder = SentenceBuilder.with_model_file(tables, args.model_path, seed=args.random_seed)
    else:
        builder = SentenceBuilder(tables, seed=args.random_seed)

    print(f"Using algorithm: {args.algo}")
    for _ in range(args.count):
        result = builder.generate(
            args.algo,
            args.seed_word,
            max_tokens=args.max_tokens,
            stop_word=args.stop_word,
        )
        print()
        print("--- Generated ---")
        print(result.text)
        details = f"len={len(result)}, max={args.max_tokens}, reason={result.reason.value}"
        if args.stop_word:
            details += f", stop={args.stop_word}"
        print(f"({details}, algo={args.algo})")


if __name__ == "__main__":
    main()
