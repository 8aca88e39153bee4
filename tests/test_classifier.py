from __future__ import annotations

from word_capture.capture.classifier import (
    SENTENCE,
    WORD,
    classify,
    is_word,
    looks_like_sentence,
    tokenize_words,
)


def test_single_words_classify_as_word():
    assert classify("hello") == WORD
    assert classify("  Serendipity \n") == WORD
    assert classify("well-known") == WORD
    assert classify("don't") == WORD


def test_everything_else_is_a_sentence():
    assert classify("hello world") == SENTENCE
    assert classify("The quick brown fox jumps over the lazy dog.") == SENTENCE
    assert classify("abc123") == SENTENCE
    assert classify("-dash") == SENTENCE


def test_word_length_limit():
    assert is_word("a" * 50) is True
    assert is_word("a" * 51) is False
    assert classify("a" * 51) == SENTENCE


def test_empty_input_is_not_classified():
    assert classify("") is None
    assert classify("   ") is None
    assert classify(None) is None


def test_tokenize_lowercases_and_dedups_in_order():
    tokens = tokenize_words("The cat saw THE other cat, twice!")
    assert tokens == ["the", "cat", "saw", "other", "twice"]


def test_tokenize_keeps_apostrophes_and_hyphens():
    assert tokenize_words("It's a well-known fact") == ["it's", "a", "well-known", "fact"]


def test_sentence_heuristic():
    assert looks_like_sentence("Short one.") is True
    assert looks_like_sentence("one two three four five six") is True
    assert looks_like_sentence("hello world") is False
