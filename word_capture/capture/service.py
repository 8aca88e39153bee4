from __future__ import annotations

from loguru import logger

from word_capture.config import CaptureLimits
from word_capture.pipeline.merger import MergeResult, PickOne, SourceMeta, merge
from word_capture.storage.collection import CollectionRepository


class CaptureService:
    """Entry point for a selection captured on a page.

    Reads the stored collection, merges the capture into it and writes the
    whole collection back only when something changed.
    """

    def __init__(self, repository: CollectionRepository, *, limits: CaptureLimits | None = None) -> None:
        self.repository = repository
        self.limits = limits or CaptureLimits()

    def capture(
        self,
        text: str | None,
        *,
        url: str = "",
        title: str = "",
        pick_one: PickOne | None = None,
        picked_word: str | None = None,
        origin: str | None = None,
    ) -> MergeResult | None:
        if pick_one is None and picked_word:
            pick_one = _fixed_pick(picked_word)

        collection = self.repository.load()
        result = merge(
            collection,
            text,
            SourceMeta(url=url or "", title=title or ""),
            pick_one=pick_one,
            limits=self.limits,
        )
        if result is None:
            return None
        if result.changed:
            self.repository.save(result.collection, origin=origin)
        logger.info("Capture handled", outcome=result.outcome, word=result.word, changed=result.changed)
        return result


def _fixed_pick(word: str) -> PickOne:
    def pick(_candidates: list[str]) -> str | None:
        return word

    return pick
