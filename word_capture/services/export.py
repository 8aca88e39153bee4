from __future__ import annotations

import json
from pathlib import Path

from word_capture.config import EXPORTS_DIR
from word_capture.storage.entries import VocabularyEntry, now_ms


def export_payload(collection: list[VocabularyEntry]) -> list[dict]:
    return [entry.to_dict() for entry in collection]


def create_export_file(collection: list[VocabularyEntry], *, exports_dir: Path | None = None) -> Path:
    target_dir = exports_dir or EXPORTS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    export_path = target_dir / f"vocabulary_{now_ms()}.json"
    export_path.write_text(
        json.dumps(export_payload(collection), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return export_path
