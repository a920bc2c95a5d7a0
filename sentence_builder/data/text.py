"""Minimal sentence splitting and tokenization for plain-text corpora.

Tokens are whitespace-separated words with leading and trailing punctuation
removed (letters, digits and apostrophes are kept) and lowercased.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Iterable, Iterator

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])[\"')\]]*\s+")
EDGE_PUNCT = re.compile(r"^[^\w']+|[^\w']+$")


def split_sentences(text: str) -> list[str]:
    return [part.strip() for part in SENTENCE_BOUNDARY.split(text) if part.strip()]


def tokenize_sentence(sentence: str) -> list[str]:
    tokens: list[str] = []
    for raw in sentence.split():
        cleaned = EDGE_PUNCT.sub("", raw)
        if cleaned:
            tokens.append(cleaned.lower())
    return tokens


def tokenize_text(text: str) -> list[list[str]]:
    """Split text into sentences and each sentence into tokens."""

    sentences = (tokenize_sentence(sentence) for sentence in split_sentences(text))
    return [tokens for tokens in sentences if tokens]


def list_text_files(root: str | Path) -> list[Path]:
    path = Path(root)
    if not path.exists():
        raise FileNotFoundError(f"Corpus path not found: {path}")
    if path.is_file():
        return [path]
    return sorted(p for p in path.rglob("*.txt") if p.is_file())


def iter_corpus_sentences(paths: Iterable[Path]) -> Iterator[list[str]]:
    for path in paths:
        yield from tokenize_text(path.read_text(encoding="utf-8"))
