"""Bidirectional WordId <-> token mapping."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

UNKNOWN_TOKEN = "?"


class Vocabulary:
    """Read-only mapping between dense word ids and normalized tokens.

    Lookups by text are case-insensitive. Ids missing from the mapping render
    as `UNKNOWN_TOKEN`.
    """

    def __init__(self, id_to_word: Mapping[int, str]) -> None:
        self._id_to_word = MappingProxyType(
            {int(word_id): str(word).lower() for word_id, word in id_to_word.items()}
        )
        word_to_id: dict[str, int] = {}
        for word_id, word in self._id_to_word.items():
            if word in word_to_id:
                raise ValueError(
                    f"Token {word!r} is mapped to both id {word_to_id[word]} and id {word_id}."
                )
            word_to_id[word] = word_id
        self._word_to_id = MappingProxyType(word_to_id)

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> "Vocabulary":
        """Assign ids in first-seen order."""

        id_to_word: dict[int, str] = {}
        seen: set[str] = set()
        for token in tokens:
            word = token.lower()
            if word in seen:
                continue
            seen.add(word)
            id_to_word[len(id_to_word)] = word
        return cls(id_to_word)

    def id_for(self, word: str | None) -> int | None:
        if word is None:
            return None
        word = word.strip().lower()
        if not word:
            return None
        return self._word_to_id.get(word)

    def word_for(self, word_id: int) -> str:
        return self._id_to_word.get(word_id, UNKNOWN_TOKEN)

    def render(self, word_ids: Iterable[int]) -> str:
        return " ".join(self.word_for(word_id) for word_id in word_ids)

    def ids(self) -> Iterator[int]:
        return iter(self._id_to_word)

    def __contains__(self, word_id: object) -> bool:
        return word_id in self._id_to_word

    def __len__(self) -> int:
        return len(self._id_to_word)

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self)})"
