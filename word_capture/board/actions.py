from __future__ import annotations

from dataclasses import dataclass

from word_capture.capture.classifier import normalize_text
from word_capture.config import CaptureLimits
from word_capture.pipeline.merger import (
    ALREADY_EXISTS,
    CREATED_WORD,
    attach_sentence,
)
from word_capture.scheduler.review import last_review_at, next_due_checkpoint
from word_capture.storage.entries import (
    VocabularyEntry,
    find_by_id,
    find_by_word,
    new_entry,
    now_ms,
    sentence_key,
    word_key,
)

SORT_MODES = {"time_desc", "time_asc", "alpha_asc", "alpha_desc"}


@dataclass
class EntryStats:
    review_count: int
    last_review_at: int | None
    next_due: int | None


def add_word(
    collection: list[VocabularyEntry],
    word: str,
    *,
    now: int | None = None,
    limits: CaptureLimits = CaptureLimits(),
) -> tuple[str | None, VocabularyEntry | None]:
    """Explicit "add word" action. Mutates the collection in place."""
    value = normalize_text(word)
    if not value:
        return None, None
    existing = find_by_word(collection, value)
    if existing is not None:
        return ALREADY_EXISTS, existing
    entry = new_entry(word=value[: limits.max_word_length], created_at=now if now is not None else now_ms())
    collection.insert(0, entry)
    return CREATED_WORD, entry


def require_entry(collection: list[VocabularyEntry], entry_id: str) -> VocabularyEntry:
    entry = find_by_id(collection, entry_id)
    if entry is None:
        raise ValueError(f"entry not found: {entry_id}")
    return entry


def add_sentence(entry: VocabularyEntry, sentence: str, *, limits: CaptureLimits = CaptureLimits()) -> bool:
    """Manual "add sentence": same placement and dedup rules as a captured one."""
    return attach_sentence(entry, sentence, limits=limits)


def remove_sentence(entry: VocabularyEntry, index: int) -> str:
    if index < 0 or index >= len(entry.sentences):
        raise ValueError(f"sentence index out of range: {index}")
    removed = entry.sentences.pop(index)
    entry.notes.pop(sentence_key(removed), None)
    return removed


def resolve_sentence_key(entry: VocabularyEntry, *, key: str | None = None, index: int | None = None) -> str:
    if key:
        return sentence_key(key)
    if index is None or index < 0 or index >= len(entry.sentences):
        raise ValueError("sentence key or valid index is required")
    return sentence_key(entry.sentences[index])


def set_note(entry: VocabularyEntry, markdown: str | None, *, key: str | None = None, index: int | None = None) -> bool:
    """Store markdown for a sentence; empty markdown removes the note."""
    note_key = resolve_sentence_key(entry, key=key, index=index)
    if note_key not in {sentence_key(s) for s in entry.sentences}:
        raise ValueError("note must belong to a stored sentence")
    text = (markdown or "").strip()
    if not text:
        return entry.notes.pop(note_key, None) is not None
    if entry.notes.get(note_key) == text:
        return False
    entry.notes[note_key] = text
    return True


def delete_note(entry: VocabularyEntry, *, key: str | None = None, index: int | None = None) -> bool:
    note_key = resolve_sentence_key(entry, key=key, index=index)
    return entry.notes.pop(note_key, None) is not None


def delete_entry(collection: list[VocabularyEntry], entry_id: str) -> VocabularyEntry:
    entry = require_entry(collection, entry_id)
    collection.remove(entry)
    return entry


def clear_all(collection: list[VocabularyEntry]) -> int:
    removed = len(collection)
    collection.clear()
    return removed


def search_entries(
    collection: list[VocabularyEntry],
    query: str | None = None,
    sort: str | None = "time_desc",
) -> list[VocabularyEntry]:
    q = (query or "").strip().lower()
    filtered = [entry for entry in collection if q in word_key(entry.word)] if q else list(collection)

    mode = sort if sort in SORT_MODES else "time_desc"
    if mode == "time_asc":
        return sorted(filtered, key=lambda e: e.created_at)
    if mode == "time_desc":
        return sorted(filtered, key=lambda e: e.created_at, reverse=True)
    if mode == "alpha_asc":
        return sorted(filtered, key=lambda e: word_key(e.word))
    return sorted(filtered, key=lambda e: word_key(e.word), reverse=True)


def entry_stats(entry: VocabularyEntry) -> EntryStats:
    return EntryStats(
        review_count=len(entry.review_times),
        last_review_at=last_review_at(entry),
        next_due=next_due_checkpoint(entry),
    )

