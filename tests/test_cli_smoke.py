"""Smoke test for the train-then-generate command-line flow."""

from __future__ import annotations

import json
from pathlib import Path
import subprocess
import sys

CORPUS = (
    "The cat sat on the mat. The dog sat on the rug. "
    "A cat ran to the dog! The dog ran away. "
    "The cat sat down. A dog sat on the mat."
)


def test_train_then_generate_smoke(tmp_path: Path) -> None:
    corpus_dir = tmp_path / "corpus"
    corpus_dir.mkdir()
    (corpus_dir / "book.txt").write_text(CORPUS, encoding="utf-8")
    model_path = tmp_path / "model" / "model.json"

    repo_root = Path(__file__).resolve().parents[1]
    train = subprocess.run(
        [
            sys.executable,
            "-m",
            "sentence_builder.cli.train_eos",
            "--corpus",
            str(corpus_dir),
            "--model-out",
            str(model_path),
            "--max-epochs",
            "200",
            "--holdout-fraction",
            "0.2",
            "--log-level",
            "WARNING",
        ],
        cwd=repo_root,
        capture_output=True,
        text=True,
        check=True,
    )

    assert "EOS Training Summary" in train.stdout
    assert "holdout_accuracy" in train.stdout
    record = json.loads(model_path.read_text(encoding="utf-8"))
    assert {"b", "w1", "w2", "w3"} <= set(record)

    generate = subprocess.run(
        [
            sys.executable,
            "-m",
            "sentence_builder.cli.generate",
            "--corpus",
            str(corpus_dir / "book.txt"),
            "--model-path",
            str(model_path),
            "--algo",
            "tri_weighted",
            "--seed-word",
            "the",
            "--max-tokens",
            "12",
            "--random-seed",
            "7",
            "--count",
            "2",
        ],
        cwd=repo_root,
        capture_output=True,
        text=True,
        check=True,
    )

    assert "Using algorithm: tri_weighted" in generate.stdout
    assert generate.stdout.count("--- Generated ---") == 2
    assert "algo=tri_weighted" in generate.stdout
