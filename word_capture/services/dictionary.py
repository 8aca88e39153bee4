from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote

import httpx
from loguru import logger

from word_capture.config import EnrichmentSettings, load_enrichment_settings
from word_capture.storage.entries import Meaning


@dataclass
class LookupResult:
    word: str
    phonetic: str | None = None
    meanings: list[Meaning] = field(default_factory=list)


class DictionaryService:
    """Free dictionary API client. Failures degrade to "no result", never raise."""

    def __init__(
        self,
        settings: EnrichmentSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or load_enrichment_settings()
        self.base_url = self.settings.dictionary_url.rstrip("/")
        self.transport = transport

    async def lookup_word(self, word: str) -> LookupResult | None:
        token = word.strip().lower()
        if not token:
            return None
        payload = await self._fetch(token, timeout=self.settings.lookup_timeout_sec)
        if not payload:
            return None
        result = parse_lookup_payload(
            token,
            payload,
            max_definitions=self.settings.max_definitions_per_pos,
        )
        if not result.phonetic and not result.meanings:
            return None
        return result

    async def word_exists(self, word: str) -> bool:
        token = word.strip().lower()
        if not token:
            return False
        payload = await self._fetch(token, timeout=self.settings.verify_timeout_sec)
        return bool(payload)

    async def _fetch(self, word: str, *, timeout: float) -> list | None:
        url = f"{self.base_url}/{quote(word)}"
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                resp = await client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Dictionary lookup failed", word=word, error=str(exc))
            return None

        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            logger.warning("Dictionary lookup rejected", word=word, status=resp.status_code)
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.warning("Dictionary returned malformed JSON", word=word)
            return None
        if not isinstance(data, list):
            return None
        return [item for item in data if isinstance(item, dict)] or None


def parse_lookup_payload(word: str, payload: list[dict], *, max_definitions: int = 3) -> LookupResult:
    phonetic = _pick_phonetic(payload)

    grouped: dict[str, list[str]] = {}
    for item in payload:
        for meaning in item.get("meanings") or []:
            if not isinstance(meaning, dict):
                continue
            pos = str(meaning.get("partOfSpeech") or "").strip()
            if not pos:
                continue
            bucket = grouped.setdefault(pos, [])
            for definition in meaning.get("definitions") or []:
                if len(bucket) >= max_definitions:
                    break
                text = definition.get("definition") if isinstance(definition, dict) else definition
                text = " ".join(str(text or "").split())
                if text and text not in bucket:
                    bucket.append(text)

    meanings = [Meaning(part_of_speech=pos, definitions=defs) for pos, defs in grouped.items() if defs]
    return LookupResult(word=word, phonetic=phonetic, meanings=meanings)


def _pick_phonetic(payload: list[dict]) -> str | None:
    for item in payload:
        direct = str(item.get("phonetic") or "").strip()
        if direct:
            return direct
    for item in payload:
        for entry in item.get("phonetics") or []:
            if not isinstance(entry, dict):
                continue
            text = str(entry.get("text") or "").strip()
            if text:
                return text
    return None
