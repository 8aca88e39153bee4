from __future__ import annotations

from typing import Callable, TypeVar

from word_capture.config import STORAGE_KEY_SELECTIONS
from word_capture.storage.entries import VocabularyEntry
from word_capture.storage.store import KeyValueStore

T = TypeVar("T")


class CollectionRepository:
    """Whole-value persistence of the entry collection under one storage key.

    There is no locking: concurrent writers each read, mutate and write the
    full collection, and the last write wins.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY_SELECTIONS) -> None:
        self.store = store
        self.key = key

    def load(self) -> list[VocabularyEntry]:
        raw = self.store.get(self.key, [])
        if not isinstance(raw, list):
            return []
        return [VocabularyEntry.from_dict(item) for item in raw if isinstance(item, dict)]

    def save(self, collection: list[VocabularyEntry], *, origin: str | None = None) -> int:
        return self.store.set(self.key, _serialize(collection), origin=origin)

    def mutate(
        self,
        fn: Callable[[list[VocabularyEntry]], T],
        *,
        origin: str | None = None,
    ) -> tuple[T, int | None]:
        """Read, apply `fn`, and write back only if the collection changed.

        Returns the callback's result and the new revision, or None as the
        revision when nothing was written.
        """
        collection = self.load()
        before = _serialize(collection)
        result = fn(collection)
        if _serialize(collection) == before:
            return result, None
        revision = self.save(collection, origin=origin)
        return result, revision


def _serialize(collection: list[VocabularyEntry]) -> list[dict]:
    return [entry.to_dict() for entry in collection]
