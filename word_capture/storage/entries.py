from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Meaning:
    part_of_speech: str
    definitions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"partOfSpeech": self.part_of_speech, "definitions": list(self.definitions)}

    @classmethod
    def from_dict(cls, payload: dict) -> "Meaning":
        return cls(
            part_of_speech=str(payload.get("partOfSpeech") or ""),
            definitions=[str(d) for d in (payload.get("definitions") or []) if str(d).strip()],
        )


@dataclass
class VocabularyEntry:
    id: str
    word: str
    created_at: int
    url: str = ""
    title: str = ""
    original_word: str | None = None
    sentences: list[str] = field(default_factory=list)
    review_times: list[int] = field(default_factory=list)
    phonetic: str | None = None
    meanings: list[Meaning] = field(default_factory=list)
    root: str | None = None
    related_words: list[str] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "id": self.id,
            "word": self.word,
            "sentences": list(self.sentences),
            "reviewTimes": list(self.review_times),
            "url": self.url,
            "title": self.title,
            "createdAt": self.created_at,
            "meanings": [m.to_dict() for m in self.meanings],
            "relatedWords": list(self.related_words),
            "notes": dict(self.notes),
        }
        if self.original_word:
            payload["originalWord"] = self.original_word
        if self.phonetic:
            payload["phonetic"] = self.phonetic
        if self.root:
            payload["root"] = self.root
        return payload

    @classmethod
    def from_dict(cls, payload: dict) -> "VocabularyEntry":
        # Early builds stored the captured text under "text".
        word = str(payload.get("word") or payload.get("text") or "")
        return cls(
            id=str(payload.get("id") or ""),
            word=word,
            created_at=int(payload.get("createdAt") or 0),
            url=str(payload.get("url") or ""),
            title=str(payload.get("title") or ""),
            original_word=payload.get("originalWord") or None,
            sentences=[str(s) for s in (payload.get("sentences") or [])],
            review_times=[int(t) for t in (payload.get("reviewTimes") or [])],
            phonetic=payload.get("phonetic") or None,
            meanings=[Meaning.from_dict(m) for m in (payload.get("meanings") or []) if isinstance(m, dict)],
            root=payload.get("root") or None,
            related_words=[str(w) for w in (payload.get("relatedWords") or [])],
            notes={str(k): str(v) for k, v in (payload.get("notes") or {}).items()},
        )


def now_ms() -> int:
    return int(time.time() * 1000)


def new_entry_id(created_at: int) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{created_at}-{suffix}"


def new_entry(*, word: str, created_at: int, url: str = "", title: str = "", sentences: list[str] | None = None) -> VocabularyEntry:
    return VocabularyEntry(
        id=new_entry_id(created_at),
        word=word,
        created_at=created_at,
        url=url or "",
        title=title or "",
        sentences=list(sentences or []),
    )


def word_key(word: str | None) -> str:
    return (word or "").strip().lower()


def sentence_key(sentence: str | None) -> str:
    return (sentence or "").strip().lower()


def find_by_word(collection: list[VocabularyEntry], word: str) -> VocabularyEntry | None:
    key = word_key(word)
    if not key:
        return None
    return next((entry for entry in collection if word_key(entry.word) == key), None)


def find_by_id(collection: list[VocabularyEntry], entry_id: str) -> VocabularyEntry | None:
    return next((entry for entry in collection if entry.id == entry_id), None)
