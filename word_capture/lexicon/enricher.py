from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from loguru import logger

from word_capture.config import EnrichmentSettings, load_enrichment_settings
from word_capture.lexicon.morphology import (
    extract_root_from_word,
    generate_related_word_forms,
    plural_to_singular,
)
from word_capture.services.dictionary import DictionaryService, LookupResult
from word_capture.storage.collection import CollectionRepository
from word_capture.storage.entries import VocabularyEntry, find_by_id, word_key

Sleep = Callable[[float], Awaitable[None]]


class WordEnricher:
    """Best-effort enrichment of a stored entry, run after it was created.

    Every step tolerates lookup failures: missing data simply leaves the
    entry's enrichment fields empty. Nothing here raises into the caller.
    """

    def __init__(
        self,
        repository: CollectionRepository,
        dictionary: DictionaryService | None = None,
        *,
        settings: EnrichmentSettings | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.repository = repository
        self.settings = settings or load_enrichment_settings()
        self.dictionary = dictionary or DictionaryService(self.settings)
        self.sleep = sleep
        self._calls = 0

    async def enrich(self, entry_id: str, *, force: bool = False) -> VocabularyEntry | None:
        if not self.settings.enabled:
            return None

        entry = find_by_id(self.repository.load(), entry_id)
        if entry is None:
            logger.warning("Enrichment skipped, entry is gone", entry_id=entry_id)
            return None
        if not force and not needs_enrichment(entry):
            return entry

        normalized = plural_to_singular(entry.word)
        if normalized and normalized != entry.word:
            self._rename(entry_id, normalized)

        lookup = await self._lookup(normalized or entry.word)
        root = extract_root_from_word(normalized)
        related = await self._verify_related(root, exclude=normalized)

        def apply(collection: list[VocabularyEntry]) -> VocabularyEntry | None:
            target = find_by_id(collection, entry_id)
            if target is None:
                return None
            if lookup is not None:
                target.phonetic = lookup.phonetic or target.phonetic
                if lookup.meanings:
                    target.meanings = lookup.meanings
            target.root = root or target.root
            if related:
                target.related_words = related
            return target

        updated, _ = self.repository.mutate(apply, origin="enrichment")
        if updated is None:
            logger.warning("Enrichment result dropped, entry was deleted", entry_id=entry_id)
            return None
        logger.info(
            "Enriched vocabulary entry",
            word=updated.word,
            phonetic=bool(updated.phonetic),
            meanings=len(updated.meanings),
            related=len(updated.related_words),
        )
        return updated

    def _rename(self, entry_id: str, normalized: str) -> None:
        def apply(collection: list[VocabularyEntry]) -> bool:
            target = find_by_id(collection, entry_id)
            if target is None or target.word == normalized:
                return False
            clash = next(
                (e for e in collection if e.id != entry_id and word_key(e.word) == normalized),
                None,
            )
            if clash is not None:
                logger.warning("Keeping captured spelling, normalized word already stored", word=target.word)
                return False
            target.original_word = target.original_word or target.word
            target.word = normalized
            return True

        renamed, _ = self.repository.mutate(apply, origin="enrichment")
        if renamed:
            logger.info("Normalized vocabulary word", entry_id=entry_id, word=normalized)

    async def _lookup(self, word: str) -> LookupResult | None:
        await self._throttle()
        try:
            return await self.dictionary.lookup_word(word)
        except Exception as exc:
            logger.warning("Definition lookup unavailable", word=word, error=str(exc))
            return None

    async def _verify_related(self, root: str, *, exclude: str) -> list[str]:
        verified: list[str] = []
        for candidate in generate_related_word_forms(root):
            if candidate == exclude:
                continue
            await self._throttle()
            try:
                exists = await asyncio.wait_for(
                    self.dictionary.word_exists(candidate),
                    timeout=self.settings.verify_timeout_sec,
                )
            except asyncio.TimeoutError:
                logger.warning("Related word check timed out", candidate=candidate)
                continue
            except Exception as exc:
                logger.warning("Related word check failed", candidate=candidate, error=str(exc))
                continue
            if exists:
                verified.append(candidate)
        return sorted(verified)[: self.settings.max_related_words]

    async def _throttle(self) -> None:
        if self._calls and self.settings.lookup_delay_ms:
            await self.sleep(self.settings.lookup_delay_ms / 1000)
        self._calls += 1


def needs_enrichment(entry: VocabularyEntry) -> bool:
    if not entry.phonetic and not entry.meanings:
        return True
    if not entry.root:
        return True
    return plural_to_singular(entry.word) != entry.word
