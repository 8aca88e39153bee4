from __future__ import annotations

import asyncio

from word_capture.config import EnrichmentSettings
from word_capture.lexicon.enricher import WordEnricher, needs_enrichment
from word_capture.lexicon.morphology import generate_related_word_forms
from word_capture.storage.entries import find_by_id, new_entry


def _store_entry(repository, word: str, created_at: int = 1_000):
    entry = new_entry(word=word, created_at=created_at)
    repository.mutate(lambda collection: collection.insert(0, entry))
    return entry


def test_enrich_normalizes_plural_and_fills_fields(repository, enricher, fake_dictionary):
    fake_dictionary.add("teacher", "/ˈtiːtʃə/", noun=["One who teaches."])
    fake_dictionary.known |= {"teach", "teachable"}
    entry = _store_entry(repository, "Teachers")

    updated = asyncio.run(enricher.enrich(entry.id))

    assert updated.word == "teacher"
    assert updated.original_word == "Teachers"
    assert updated.phonetic == "/ˈtiːtʃə/"
    assert updated.meanings[0].definitions == ["One who teaches."]
    assert updated.root == "teach"
    assert updated.related_words == ["teach", "teachable"]
    assert fake_dictionary.lookups == ["teacher"]
    assert "teacher" not in fake_dictionary.checks

    stored = find_by_id(repository.load(), entry.id)
    assert stored == updated
    assert needs_enrichment(stored) is False


def test_enrich_skips_rename_when_singular_already_stored(repository, enricher, fake_dictionary):
    fake_dictionary.add("city", "/ˈsɪti/", noun=["A large town."])
    _store_entry(repository, "city")
    plural = _store_entry(repository, "cities")

    updated = asyncio.run(enricher.enrich(plural.id))

    assert updated.word == "cities"
    assert updated.original_word is None
    assert updated.phonetic == "/ˈsɪti/"
    assert [e.word for e in repository.load()] == ["cities", "city"]


def test_lookup_failure_leaves_fields_empty(repository, enricher, fake_dictionary):
    fake_dictionary.fail = True
    entry = _store_entry(repository, "walked")

    updated = asyncio.run(enricher.enrich(entry.id))

    assert updated.phonetic is None
    assert updated.meanings == []
    assert updated.related_words == []
    assert updated.root == "walk"


def test_related_words_are_sorted_and_capped(repository, enricher, fake_dictionary):
    generated = [form for form in generate_related_word_forms("walk") if form != "walk"]
    fake_dictionary.known |= set(generated)
    entry = _store_entry(repository, "walk")

    updated = asyncio.run(enricher.enrich(entry.id))

    assert len(generated) > 12
    assert updated.related_words == sorted(generated)[:12]
    assert updated.related_words[0] == "walkable"
    assert generated[0] == "walkize"
    assert "walkize" not in updated.related_words


def test_slow_related_check_is_dropped(repository, fake_dictionary):
    fake_dictionary.add("walk", "/wɔːk/", verb=["Move on foot."])
    fake_dictionary.known |= {"walker", "walkable"}
    fake_dictionary.slow.add("walkable")
    settings = EnrichmentSettings(lookup_delay_ms=0, verify_timeout_sec=0.05)
    enricher = WordEnricher(repository, fake_dictionary, settings=settings)
    entry = _store_entry(repository, "walk")

    updated = asyncio.run(enricher.enrich(entry.id))

    assert updated.related_words == ["walker"]


def test_calls_are_throttled_after_the_first(repository, fake_dictionary):
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    enricher = WordEnricher(
        repository,
        fake_dictionary,
        settings=EnrichmentSettings(lookup_delay_ms=150),
        sleep=fake_sleep,
    )
    entry = _store_entry(repository, "teacher")

    asyncio.run(enricher.enrich(entry.id))

    # one lookup, then 25 related-form checks ("teacher" itself is skipped)
    assert len(fake_dictionary.checks) == 25
    assert delays == [0.15] * 25


def test_enriched_entry_is_left_alone_unless_forced(repository, enricher, fake_dictionary):
    fake_dictionary.add("walk", "/wɔːk/", verb=["Move on foot."])
    entry = _store_entry(repository, "walk")
    asyncio.run(enricher.enrich(entry.id))
    fake_dictionary.lookups.clear()

    asyncio.run(enricher.enrich(entry.id))
    assert fake_dictionary.lookups == []

    asyncio.run(enricher.enrich(entry.id, force=True))
    assert fake_dictionary.lookups == ["walk"]


def test_missing_entry_and_disabled_enrichment(repository, fake_dictionary):
    enricher = WordEnricher(repository, fake_dictionary, settings=EnrichmentSettings(lookup_delay_ms=0))
    assert asyncio.run(enricher.enrich("nope")) is None

    entry = _store_entry(repository, "walk")
    disabled = WordEnricher(repository, fake_dictionary, settings=EnrichmentSettings(enabled=False))
    assert asyncio.run(disabled.enrich(entry.id)) is None
    assert fake_dictionary.lookups == []
