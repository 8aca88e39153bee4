from __future__ import annotations

import asyncio

import httpx

from word_capture.config import EnrichmentSettings
from word_capture.services.dictionary import DictionaryService, parse_lookup_payload

SETTINGS = EnrichmentSettings(dictionary_url="https://dict.test/api/v2/entries/en")

HELLO_PAYLOAD = [
    {
        "word": "hello",
        "phonetics": [{"text": ""}, {"text": "/həˈləʊ/", "audio": ""}],
        "meanings": [
            {
                "partOfSpeech": "noun",
                "definitions": [
                    {"definition": "An utterance of hello."},
                    {"definition": "A greeting."},
                    {"definition": "A  salutation\n used in passing."},
                    {"definition": "A fourth sense that is dropped."},
                ],
            },
            {"partOfSpeech": "exclamation", "definitions": [{"definition": "Used as a greeting."}]},
        ],
    }
]


def _service(handler) -> DictionaryService:
    return DictionaryService(SETTINGS, transport=httpx.MockTransport(handler))


def test_lookup_word_parses_phonetic_and_meanings():
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return httpx.Response(200, json=HELLO_PAYLOAD)

    result = asyncio.run(_service(handler).lookup_word("  Hello "))

    assert requested == ["/api/v2/entries/en/hello"]
    assert result.phonetic == "/həˈləʊ/"
    assert [m.part_of_speech for m in result.meanings] == ["noun", "exclamation"]
    assert result.meanings[0].definitions == [
        "An utterance of hello.",
        "A greeting.",
        "A salutation used in passing.",
    ]


def test_direct_phonetic_wins():
    payload = [{"phonetic": "/kæt/", "phonetics": [{"text": "/other/"}], "meanings": []}]
    assert parse_lookup_payload("cat", payload).phonetic == "/kæt/"


def test_not_found_degrades_to_none():
    service = _service(lambda request: httpx.Response(404, json={"title": "No Definitions Found"}))

    assert asyncio.run(service.lookup_word("qwzx")) is None
    assert asyncio.run(service.word_exists("qwzx")) is False


def test_server_error_and_bad_json_degrade_to_none():
    assert asyncio.run(_service(lambda request: httpx.Response(500)).lookup_word("cat")) is None
    assert asyncio.run(_service(lambda request: httpx.Response(200, text="<html>")).lookup_word("cat")) is None


def test_network_failure_degrades_to_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(handler)
    assert asyncio.run(service.lookup_word("cat")) is None
    assert asyncio.run(service.word_exists("cat")) is False


def test_word_exists_for_known_word():
    service = _service(lambda request: httpx.Response(200, json=HELLO_PAYLOAD))
    assert asyncio.run(service.word_exists("hello")) is True
    assert asyncio.run(service.word_exists("   ")) is False
