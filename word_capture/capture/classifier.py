from __future__ import annotations

import re

WORD = "WORD"
SENTENCE = "SENTENCE"

WORD_RE = re.compile(r"[A-Za-z][A-Za-z'-]{0,49}")
TOKEN_RE = re.compile(r"[A-Za-z][A-Za-z'-]*")
WHITESPACE_RE = re.compile(r"\s")
TERMINAL_PUNCTUATION = set(".!?。！？")
SENTENCE_MIN_TOKENS = 6


def normalize_text(text: str | None) -> str:
    return (text or "").strip()


def classify(text: str | None) -> str | None:
    """Return WORD or SENTENCE for captured text, None when there is nothing to classify."""
    cleaned = normalize_text(text)
    if not cleaned:
        return None
    if is_word(cleaned):
        return WORD
    # Binary classifier: anything that is not a single lexical item is a sentence.
    return SENTENCE


def is_word(text: str | None) -> bool:
    cleaned = normalize_text(text)
    if not cleaned or WHITESPACE_RE.search(cleaned):
        return False
    return WORD_RE.fullmatch(cleaned) is not None


def looks_like_sentence(text: str | None) -> bool:
    cleaned = normalize_text(text)
    if any(ch in TERMINAL_PUNCTUATION for ch in cleaned):
        return True
    return len(tokenize_words(cleaned)) >= SENTENCE_MIN_TOKENS


def tokenize_words(text: str | None) -> list[str]:
    tokens: list[str] = []
    seen: set[str] = set()
    for raw in TOKEN_RE.findall(text or ""):
        token = raw.lower()
        if token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens
