"""
WordService: the operations behind every transport.

The service only sees the store through two narrow capabilities. Reads go
through a WordQuerier, writes through a WordModifier, so a component that only
needs to look at words can be handed something that cannot change them.
"""

from __future__ import annotations

import secrets
from typing import List, Optional, Protocol, Sequence, TypeVar

from ..models import Word
from .errors import ServiceError, StoreError

T = TypeVar("T")


class WordQuerier(Protocol):
    def list_words(self) -> List[Word]: ...


class WordModifier(Protocol):
    def insert_word(self, word: str, custom_definition: str = "") -> Word: ...

    def delete_word(self, word_id: int) -> Word: ...


def choose_uniformly(items: Sequence[T]) -> T:
    """Pick one item with equal probability, using the OS CSPRNG."""
    if not items:
        raise ValueError("cannot choose from an empty sequence")
    return items[secrets.randbelow(len(items))]


class WordService:
    def __init__(self, querier: WordQuerier, modifier: WordModifier):
        self._querier = querier
        self._modifier = modifier

    @classmethod
    def from_store(cls, store) -> "WordService":
        return cls(querier=store, modifier=store)

    def heartbeat(self) -> None:
        return None

    def add_word(self, word: str, custom_definition: str = "") -> Word:
        try:
            return self._modifier.insert_word(word, custom_definition)
        except StoreError as exc:
            raise ServiceError("unable to add word", exc) from exc

    def list_words(self) -> List[Word]:
        try:
            return list(self._querier.list_words())
        except StoreError as exc:
            raise ServiceError("unable to list words", exc) from exc

    def delete_word(self, word_id: int) -> Word:
        try:
            return self._modifier.delete_word(word_id)
        except StoreError as exc:
            raise ServiceError("unable to delete word", exc) from exc

    def random_word(self) -> Optional[Word]:
        """
        Return a uniformly random stored word, or None when there are no
        words. An empty store is not an error.
        """
        try:
            words = self._querier.list_words()
        except StoreError as exc:
            raise ServiceError("unable to get words", exc) from exc

        if not words:
            return None

        return choose_uniformly(words)
