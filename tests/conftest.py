from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import word_capture.app as app_module
from word_capture.board.sync import LocalWriteTracker
from word_capture.capture.service import CaptureService
from word_capture.config import EnrichmentSettings
from word_capture.lexicon.enricher import WordEnricher
from word_capture.services.dictionary import LookupResult
from word_capture.storage.collection import CollectionRepository
from word_capture.storage.entries import Meaning
from word_capture.storage.store import KeyValueStore


class FakeDictionary:
    def __init__(self) -> None:
        self.entries: dict[str, LookupResult] = {}
        self.known: set[str] = set()
        self.slow: set[str] = set()
        self.fail = False
        self.lookups: list[str] = []
        self.checks: list[str] = []

    def add(self, word: str, phonetic: str | None = None, **meanings: list[str]) -> None:
        self.entries[word] = LookupResult(
            word=word,
            phonetic=phonetic,
            meanings=[Meaning(part_of_speech=pos, definitions=defs) for pos, defs in meanings.items()],
        )

    async def lookup_word(self, word: str) -> LookupResult | None:
        self.lookups.append(word)
        if self.fail:
            raise RuntimeError("dictionary offline")
        return self.entries.get(word)

    async def word_exists(self, word: str) -> bool:
        self.checks.append(word)
        if self.fail:
            raise RuntimeError("dictionary offline")
        if word in self.slow:
            await asyncio.sleep(1)
        return word in self.known or word in self.entries


@pytest.fixture()
def temp_store(tmp_path):
    store = KeyValueStore(tmp_path / "word_capture_test.db")
    store.initialize()
    return store


@pytest.fixture()
def repository(temp_store):
    return CollectionRepository(temp_store)


@pytest.fixture()
def fake_dictionary():
    return FakeDictionary()


@pytest.fixture()
def enricher(repository, fake_dictionary):
    return WordEnricher(repository, fake_dictionary, settings=EnrichmentSettings(lookup_delay_ms=0))


@pytest.fixture()
def client(temp_store, repository, enricher, tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "store", temp_store)
    monkeypatch.setattr(app_module, "repository", repository)
    monkeypatch.setattr(app_module, "capture_service", CaptureService(repository))
    monkeypatch.setattr(app_module, "enricher", enricher)
    monkeypatch.setattr(app_module, "board_tracker", LocalWriteTracker())
    monkeypatch.setattr(app_module, "EXPORTS_DIR", tmp_path / "exports")
    with TestClient(app_module.app) as c:
        yield c
