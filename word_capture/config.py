from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"
EXPORTS_DIR = ARTIFACTS_DIR / "exports"
DB_PATH = Path(os.getenv("WORD_CAPTURE_DB_PATH") or PROJECT_ROOT / "word_capture.db")

STORAGE_KEY_SELECTIONS = "savedSelections"

DAY_MS = 24 * 60 * 60 * 1000
HOUR_MS = 60 * 60 * 1000
REVIEW_OFFSETS_DAYS = (1, 3, 7, 15, 30)
# Review marks are stored at local noon so they never straddle a day boundary.
REVIEW_MARK_HOUR = 12

DEFAULT_DICTIONARY_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"


@dataclass(frozen=True)
class CaptureLimits:
    max_word_length: int = 200
    max_sentence_length: int = 500
    max_sentences: int = 20
    max_pick_candidates: int = 20


@dataclass(frozen=True)
class EnrichmentSettings:
    enabled: bool = True
    dictionary_url: str = DEFAULT_DICTIONARY_URL
    lookup_timeout_sec: float = 8.0
    verify_timeout_sec: float = 5.0
    lookup_delay_ms: int = 150
    max_definitions_per_pos: int = 3
    max_related_words: int = 12


def load_enrichment_settings() -> EnrichmentSettings:
    return EnrichmentSettings(
        enabled=os.getenv("WORD_CAPTURE_ENRICH_ENABLED", "1").strip() not in {"0", "false", "False"},
        dictionary_url=(os.getenv("WORD_CAPTURE_DICTIONARY_URL") or DEFAULT_DICTIONARY_URL).rstrip("/"),
        lookup_timeout_sec=max(1.0, float(os.getenv("WORD_CAPTURE_LOOKUP_TIMEOUT_SEC", "8"))),
        verify_timeout_sec=max(1.0, float(os.getenv("WORD_CAPTURE_VERIFY_TIMEOUT_SEC", "5"))),
        lookup_delay_ms=max(0, int(os.getenv("WORD_CAPTURE_LOOKUP_DELAY_MS", "150"))),
    )


def ensure_dirs() -> None:
    for path in [ARTIFACTS_DIR, EXPORTS_DIR]:
        path.mkdir(parents=True, exist_ok=True)
