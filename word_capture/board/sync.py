from __future__ import annotations

import itertools
import threading
import uuid
from typing import Callable, TypeVar

from loguru import logger

from word_capture.config import STORAGE_KEY_SELECTIONS
from word_capture.storage.collection import CollectionRepository
from word_capture.storage.entries import VocabularyEntry
from word_capture.storage.store import StorageChange

T = TypeVar("T")


class LocalWriteTracker:
    """Tells a view which change notifications it authored itself.

    Every write made through the tracker carries a fresh write token as its
    origin. The token is registered before the write, so a notification
    delivered synchronously from inside the write is still recognised. A
    notification carrying a pending token is consumed once and reported as
    not worth re-processing.
    """

    def __init__(self, key: str = STORAGE_KEY_SELECTIONS, view_id: str | None = None) -> None:
        self.key = key
        self.view_id = view_id or uuid.uuid4().hex[:12]
        self._sequence = itertools.count(1)
        self._pending: set[str] = set()
        self._lock = threading.Lock()

    def next_token(self) -> str:
        token = f"{self.view_id}:{next(self._sequence)}"
        with self._lock:
            self._pending.add(token)
        return token

    def mutate(
        self,
        repository: CollectionRepository,
        fn: Callable[[list[VocabularyEntry]], T],
    ) -> tuple[T, int | None]:
        token = self.next_token()
        try:
            result, revision = repository.mutate(fn, origin=token)
        except Exception:
            self._forget(token)
            raise
        if revision is None:
            self._forget(token)
        return result, revision

    def _forget(self, token: str) -> None:
        with self._lock:
            self._pending.discard(token)

    def pending(self) -> set[str]:
        with self._lock:
            return set(self._pending)

    def should_process(self, change: StorageChange) -> bool:
        if change.key != self.key:
            return False
        with self._lock:
            if change.origin is not None and change.origin in self._pending:
                self._pending.discard(change.origin)
                logger.debug("Skipping self-authored change", origin=change.origin, revision=change.revision)
                return False
        return True
