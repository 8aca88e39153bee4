from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from word_capture.capture.classifier import (
    WORD,
    classify,
    looks_like_sentence,
    normalize_text,
    tokenize_words,
)
from word_capture.config import CaptureLimits
from word_capture.storage.entries import (
    VocabularyEntry,
    find_by_word,
    new_entry,
    now_ms,
    sentence_key,
)

CREATED_WORD = "CREATED_WORD"
ALREADY_EXISTS = "ALREADY_EXISTS"
SENTENCE_ATTACHED = "SENTENCE_ATTACHED"
SENTENCE_ATTACHED_AFTER_PROMPT = "SENTENCE_ATTACHED_AFTER_PROMPT"
NO_MATCH_CANCELLED = "NO_MATCH_CANCELLED"

PickOne = Callable[[list[str]], Optional[str]]


@dataclass
class SourceMeta:
    url: str = ""
    title: str = ""


@dataclass
class MergeResult:
    collection: list[VocabularyEntry]
    outcome: str
    entry: VocabularyEntry | None = None
    created: bool = False
    changed: bool = False
    candidates: list[str] | None = None

    @property
    def word(self) -> str | None:
        return self.entry.word if self.entry else None


def merge(
    collection: list[VocabularyEntry],
    captured_text: str | None,
    source: SourceMeta | None = None,
    *,
    pick_one: PickOne | None = None,
    now: int | None = None,
    limits: CaptureLimits = CaptureLimits(),
) -> MergeResult | None:
    """Find or create the entry a capture belongs to.

    The input collection is never mutated; the result carries an updated copy.
    Returns None for empty captures, which are a silent no-op.
    """
    text = normalize_text(captured_text)
    kind = classify(text)
    if kind is None:
        logger.debug("Ignoring empty capture")
        return None

    source = source or SourceMeta()
    created_at = now if now is not None else now_ms()
    updated = copy.deepcopy(collection)

    if kind == WORD:
        return _merge_word(updated, text, source, created_at, limits)
    return _merge_sentence(updated, text, source, created_at, limits, pick_one)


def _merge_word(
    collection: list[VocabularyEntry],
    text: str,
    source: SourceMeta,
    created_at: int,
    limits: CaptureLimits,
) -> MergeResult:
    existing = find_by_word(collection, text)
    if existing is not None:
        return MergeResult(collection=collection, outcome=ALREADY_EXISTS, entry=existing)

    entry = new_entry(
        word=text[: limits.max_word_length],
        created_at=created_at,
        url=source.url,
        title=source.title,
    )
    collection.insert(0, entry)
    logger.info("Created vocabulary entry", word=entry.word, entry_id=entry.id)
    return MergeResult(collection=collection, outcome=CREATED_WORD, entry=entry, created=True, changed=True)


def _merge_sentence(
    collection: list[VocabularyEntry],
    text: str,
    source: SourceMeta,
    created_at: int,
    limits: CaptureLimits,
    pick_one: PickOne | None,
) -> MergeResult:
    sentence = text[: limits.max_sentence_length]
    tokens = tokenize_words(text)
    by_word: dict[str, VocabularyEntry] = {}
    for entry in collection:
        key = entry.word.lower()
        if key:
            by_word[key] = entry

    # Tokens are matched verbatim: "photographs" does not find "photograph".
    matched = next((token for token in tokens if token in by_word), None)
    if matched is not None:
        entry = by_word[matched]
        changed = attach_sentence(entry, sentence, limits=limits)
        logger.info("Attached sentence", word=entry.word, changed=changed)
        return MergeResult(collection=collection, outcome=SENTENCE_ATTACHED, entry=entry, changed=changed)

    candidates = tokens[: limits.max_pick_candidates]
    picked = pick_one(candidates) if (pick_one is not None and candidates) else None
    picked = normalize_text(picked).lower()
    # A pick outside the offered candidates counts as declined.
    if picked not in candidates:
        logger.debug("No entry matched capture", loose=not looks_like_sentence(text), candidates=len(tokens))
        return MergeResult(collection=collection, outcome=NO_MATCH_CANCELLED, candidates=candidates)

    existing = find_by_word(collection, picked)
    if existing is not None:
        changed = attach_sentence(existing, sentence, limits=limits)
        logger.info("Attached sentence after prompt", word=existing.word, changed=changed)
        return MergeResult(
            collection=collection,
            outcome=SENTENCE_ATTACHED_AFTER_PROMPT,
            entry=existing,
            changed=changed,
        )

    entry = new_entry(
        word=picked[: limits.max_word_length],
        created_at=created_at,
        url=source.url,
        title=source.title,
        sentences=[sentence],
    )
    collection.insert(0, entry)
    logger.info("Created vocabulary entry from sentence", word=entry.word, entry_id=entry.id)
    return MergeResult(
        collection=collection,
        outcome=SENTENCE_ATTACHED_AFTER_PROMPT,
        entry=entry,
        created=True,
        changed=True,
    )


def attach_sentence(entry: VocabularyEntry, sentence: str, *, limits: CaptureLimits = CaptureLimits()) -> bool:
    """Put a sentence first in the entry's list. Returns False when it was already present."""
    value = normalize_text(sentence)[: limits.max_sentence_length]
    if not value:
        return False
    key = sentence_key(value)
    if any(sentence_key(existing) == key for existing in entry.sentences):
        return False
    entry.sentences = normalize_sentences([value, *entry.sentences])[: limits.max_sentences]
    prune_notes(entry)
    return True


def normalize_sentences(sentences: list[str]) -> list[str]:
    cleaned: list[str] = []
    seen: set[str] = set()
    for raw in sentences:
        value = normalize_text(raw)
        if not value:
            continue
        key = sentence_key(value)
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(value)
    return cleaned


def prune_notes(entry: VocabularyEntry) -> None:
    if not entry.notes:
        return
    keys = {sentence_key(s) for s in entry.sentences}
    entry.notes = {k: v for k, v in entry.notes.items() if k in keys}


def describe_outcome(result: MergeResult | None) -> str | None:
    """Short informational notice for the capture surface."""
    if result is None:
        return None
    if result.outcome == CREATED_WORD:
        return "Saved to vocabulary"
    if result.outcome == ALREADY_EXISTS:
        return "Word already exists"
    if result.outcome == SENTENCE_ATTACHED:
        return f"Sentence added to {result.word}"
    if result.outcome == SENTENCE_ATTACHED_AFTER_PROMPT:
        if result.created:
            return f"Saved to vocabulary and linked the sentence to {result.word}"
        return f"Sentence added to {result.word}"
    if result.outcome == NO_MATCH_CANCELLED:
        return "Cancelled"
    return None
