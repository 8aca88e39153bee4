from __future__ import annotations

VOWELS = set("aeiou")
SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")
NON_PLURAL_S_ENDINGS = ("ous", "us", "is", "as")
# -f words whose plural is -ves but whose singular does not take a final -e.
KNOWN_F_WORDS = {
    "beef",
    "belief",
    "brief",
    "chief",
    "grief",
    "leaf",
    "reef",
    "sheaf",
    "thief",
}

ADVERB_SUFFIXES = ("ly",)
INFLECTION_SUFFIXES = ("ing", "ed", "er", "est")
NOUN_SUFFIXES = (
    "ation",
    "ition",
    "ution",
    "ance",
    "ancy",
    "ence",
    "ency",
    "ment",
    "tion",
    "sion",
    "ism",
    "ist",
)
ADJECTIVE_SUFFIXES = (
    "able",
    "ible",
    "ous",
    "ive",
    "ory",
    "atory",
    "ative",
    "ent",
    "ant",
    "al",
    "ic",
    "ful",
    "less",
)
VERB_SUFFIXES = ("ize", "ise", "ify")
ROOT_SUFFIX_GROUPS = (
    ADVERB_SUFFIXES,
    INFLECTION_SUFFIXES,
    NOUN_SUFFIXES,
    ADJECTIVE_SUFFIXES,
    VERB_SUFFIXES,
)

DERIVATION_SUFFIXES = (
    # verb formers
    "ize",
    "ise",
    "ify",
    "ate",
    "en",
    # noun formers
    "ation",
    "tion",
    "ment",
    "ness",
    "ity",
    "er",
    "or",
    "ist",
    "ism",
    "ance",
    "ence",
    # adjective formers
    "able",
    "ible",
    "al",
    "ful",
    "less",
    "ous",
    "ive",
    "ic",
    # adverb former
    "ly",
)
RELATED_FORM_MIN_LENGTH = 4
RELATED_FORM_MAX_LENGTH = 20


def is_likely_plural(word: str) -> bool:
    w = word.strip().lower()
    if len(w) <= 2:
        return False
    if w.endswith("ies") and len(w) > 4:
        return True
    if w.endswith("ves") and len(w) > 4:
        return True
    if w.endswith("es") and w[:-2].endswith(SIBILANT_ENDINGS):
        return True
    if not w.endswith("s") or w.endswith("ss"):
        return False
    if w.endswith(NON_PLURAL_S_ENDINGS):
        return False

    stem = w[:-1]
    if len(stem) >= 3:
        tail = stem[-2:]
        if any(ch in VOWELS for ch in tail) and any(ch not in VOWELS for ch in tail):
            return True
    return len(stem) >= 4


def plural_to_singular(word: str) -> str:
    w = word.strip().lower()
    if len(w) <= 2 or not is_likely_plural(w):
        return w

    if w.endswith("ies"):
        return w[:-3] + "y"
    if w.endswith("ves"):
        return _singular_from_ves(w[:-3])
    if w.endswith("es"):
        return _singular_from_es(w)
    if w.endswith("s") and not w.endswith("ss"):
        return w[:-1]
    return w


def _singular_from_ves(stem: str) -> str:
    f_form = stem + "f"
    if f_form.endswith("if"):
        return stem + "fe"
    if f_form.endswith("ef") and f_form not in KNOWN_F_WORDS:
        return stem + "fe"
    return f_form


def _singular_from_es(word: str) -> str:
    e_stem = word[:-1]
    bare = word[:-2]

    # Silent-e stems such as house, horse, prize: the -e belongs to the word.
    if (
        len(e_stem) >= 5
        and bare.endswith(("s", "z"))
        and not bare.endswith(("ss", "zz"))
        and (bare.endswith("ous") or not bare.endswith(("us", "is")))
    ):
        return e_stem
    if bare.endswith(SIBILANT_ENDINGS):
        return bare
    if len(e_stem) >= 4 and not bare.endswith(("ou", "u", "i")):
        return e_stem
    return bare


def extract_root_from_word(word: str) -> str:
    root = plural_to_singular(word)
    stripped = True
    while len(root) > 3 and stripped:
        stripped = False
        for group in ROOT_SUFFIX_GROUPS:
            for suffix in group:
                if root.endswith(suffix) and len(root) - len(suffix) >= len(suffix) + 2:
                    root = root[: -len(suffix)]
                    stripped = True
                    break
            if stripped:
                break
    return root


def generate_related_word_forms(root: str) -> list[str]:
    base = root.strip().lower()
    if not base:
        return []

    forms: list[str] = []
    seen: set[str] = set()
    for candidate in [base] + [base + suffix for suffix in DERIVATION_SUFFIXES]:
        if not RELATED_FORM_MIN_LENGTH <= len(candidate) <= RELATED_FORM_MAX_LENGTH:
            continue
        if candidate in seen:
            continue
        seen.add(candidate)
        forms.append(candidate)
    return forms
