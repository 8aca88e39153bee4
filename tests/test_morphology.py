from __future__ import annotations

import pytest

from word_capture.lexicon.morphology import (
    extract_root_from_word,
    generate_related_word_forms,
    is_likely_plural,
    plural_to_singular,
)


@pytest.mark.parametrize(
    ("plural", "singular"),
    [
        ("cities", "city"),
        ("boxes", "box"),
        ("leaves", "leaf"),
        ("knives", "knife"),
        ("houses", "house"),
        ("cats", "cat"),
        ("class", "class"),
        ("status", "status"),
        ("wolves", "wolf"),
        ("churches", "church"),
        ("glasses", "glass"),
        ("prizes", "prize"),
        ("shoes", "shoe"),
        ("beliefs", "belief"),
        ("analysis", "analysis"),
        ("bus", "bus"),
        ("go", "go"),
    ],
)
def test_plural_to_singular_cascade(plural, singular):
    assert plural_to_singular(plural) == singular


def test_plural_to_singular_lowercases():
    assert plural_to_singular("Cities") == "city"
    assert plural_to_singular("Photograph") == "photograph"


def test_is_likely_plural():
    assert is_likely_plural("cities") is True
    assert is_likely_plural("boxes") is True
    assert is_likely_plural("cats") is True
    assert is_likely_plural("class") is False
    assert is_likely_plural("famous") is False
    assert is_likely_plural("atlas") is False
    assert is_likely_plural("us") is False
    assert is_likely_plural("dog") is False


@pytest.mark.parametrize(
    ("word", "root"),
    [
        ("quickly", "quick"),
        ("development", "develop"),
        ("teachers", "teach"),
        ("walked", "walk"),
        ("comfortable", "comfort"),
        ("beautifully", "beauti"),
        ("hopeful", "hopeful"),
        ("city", "city"),
    ],
)
def test_extract_root_from_word(word, root):
    assert extract_root_from_word(word) == root


def test_related_forms_start_with_root_and_keep_suffix_order():
    forms = generate_related_word_forms("walk")
    assert forms[0] == "walk"
    assert forms[1:4] == ["walkize", "walkise", "walkify"]
    assert forms[-1] == "walkly"
    assert len(forms) == 26
    assert len(set(forms)) == len(forms)


def test_related_forms_respect_length_bounds():
    assert "go" not in generate_related_word_forms("go")
    assert generate_related_word_forms("go")[0] == "goize"

    long_root = "a" * 18
    forms = generate_related_word_forms(long_root)
    assert long_root in forms
    assert long_root + "en" in forms
    assert long_root + "ize" not in forms
    assert all(4 <= len(form) <= 20 for form in forms)


def test_related_forms_of_empty_root():
    assert generate_related_word_forms("  ") == []
