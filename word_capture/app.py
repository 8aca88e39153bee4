from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from word_capture.api.schemas import (
    CaptureRequest,
    CheckpointReviewRequest,
    NoteUpdateRequest,
    ReviewTodayRequest,
    SentenceAddRequest,
    WordAddRequest,
)
from word_capture.board.actions import (
    add_sentence,
    add_word,
    clear_all,
    delete_entry,
    delete_note,
    entry_stats,
    remove_sentence,
    require_entry,
    search_entries,
    set_note,
)
from word_capture.board.sync import LocalWriteTracker
from word_capture.capture.service import CaptureService
from word_capture.config import ARTIFACTS_DIR, EXPORTS_DIR, ensure_dirs
from word_capture.lexicon.enricher import WordEnricher
from word_capture.pipeline.merger import CREATED_WORD, NO_MATCH_CANCELLED, describe_outcome
from word_capture.scheduler.review import (
    checkpoints,
    due_today,
    due_today_summary,
    local_now,
    mark_checkpoint_reviewed,
    mark_reviewed_today,
    overdue,
    unmark_reviewed_today,
)
from word_capture.services.export import create_export_file, export_payload
from word_capture.storage.collection import CollectionRepository
from word_capture.storage.entries import VocabularyEntry
from word_capture.storage.store import KeyValueStore, StorageChange

store = KeyValueStore()
repository = CollectionRepository(store)
capture_service = CaptureService(repository)
enricher = WordEnricher(repository)
board_tracker = LocalWriteTracker()


def _on_store_change(change: StorageChange) -> None:
    if board_tracker.should_process(change):
        logger.info("Vocabulary changed by another writer", revision=change.revision, origin=change.origin)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ensure_dirs()
    store.initialize()
    unsubscribe = store.subscribe(_on_store_change)
    yield
    unsubscribe()


app = FastAPI(title="Word Capture", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/api/capture")
def capture(payload: CaptureRequest, background_tasks: BackgroundTasks) -> dict:
    result = capture_service.capture(
        payload.text,
        url=payload.url,
        title=payload.title,
        picked_word=payload.picked_word,
    )
    if result is None:
        return {"ok": True, "outcome": None, "notice": None, "entry": None}

    if result.created and result.entry is not None:
        background_tasks.add_task(enricher.enrich, result.entry.id)

    response = {
        "ok": True,
        "outcome": result.outcome,
        "notice": describe_outcome(result),
        "created": result.created,
        "entry": result.entry.to_dict() if result.entry else None,
    }
    if result.outcome == NO_MATCH_CANCELLED:
        response["candidates"] = result.candidates or []
    return response


@app.get("/api/words")
def words(
    q: str | None = Query(default=None),
    sort: str = Query(default="time_desc"),
) -> dict:
    collection = repository.load()
    items = search_entries(collection, q, sort)
    return {
        "ok": True,
        "items": [_entry_payload(entry) for entry in items],
        "count": len(items),
        "total": len(collection),
        "revision": store.revision(repository.key),
    }


@app.post("/api/words")
def create_word(payload: WordAddRequest, background_tasks: BackgroundTasks) -> dict:
    if not payload.word.strip():
        raise HTTPException(status_code=400, detail="word is empty")

    (outcome, entry), _ = board_tracker.mutate(repository, lambda collection: add_word(collection, payload.word))
    if outcome == CREATED_WORD:
        background_tasks.add_task(enricher.enrich, entry.id)
    return {"ok": True, "outcome": outcome, "entry": _entry_payload(entry)}


@app.delete("/api/words/{entry_id}")
def remove_word(entry_id: str) -> dict:
    try:
        removed, _ = board_tracker.mutate(repository, lambda collection: delete_entry(collection, entry_id))
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True, "deleted": removed.id}


@app.delete("/api/words")
def remove_all_words() -> dict:
    removed, _ = board_tracker.mutate(repository, clear_all)
    logger.info("Cleared vocabulary", removed=removed)
    return {"ok": True, "deleted": removed}


@app.post("/api/words/{entry_id}/sentences")
def create_sentence(entry_id: str, payload: SentenceAddRequest) -> dict:
    if not payload.sentence.strip():
        raise HTTPException(status_code=400, detail="sentence is empty")

    def apply(collection: list[VocabularyEntry]) -> tuple[VocabularyEntry, bool]:
        entry = require_entry(collection, entry_id)
        return entry, add_sentence(entry, payload.sentence)

    try:
        (entry, changed), _ = board_tracker.mutate(repository, apply)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True, "changed": changed, "entry": _entry_payload(entry)}


@app.delete("/api/words/{entry_id}/sentences/{index}")
def delete_sentence(entry_id: str, index: int) -> dict:
    collection = repository.load()
    try:
        require_entry(collection, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    def apply(items: list[VocabularyEntry]) -> tuple[VocabularyEntry, str]:
        entry = require_entry(items, entry_id)
        return entry, remove_sentence(entry, index)

    try:
        (entry, removed), _ = board_tracker.mutate(repository, apply)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "removed": removed, "entry": _entry_payload(entry)}


@app.put("/api/words/{entry_id}/notes")
def update_note(entry_id: str, payload: NoteUpdateRequest) -> dict:
    collection = repository.load()
    try:
        require_entry(collection, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    def apply(items: list[VocabularyEntry]) -> tuple[VocabularyEntry, bool]:
        entry = require_entry(items, entry_id)
        return entry, set_note(entry, payload.markdown, key=payload.sentence, index=payload.index)

    try:
        (entry, changed), _ = board_tracker.mutate(repository, apply)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "changed": changed, "notes": entry.notes}


@app.delete("/api/words/{entry_id}/notes")
def remove_note(
    entry_id: str,
    sentence: str | None = Query(default=None),
    index: int | None = Query(default=None, ge=0),
) -> dict:
    collection = repository.load()
    try:
        require_entry(collection, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    def apply(items: list[VocabularyEntry]) -> tuple[VocabularyEntry, bool]:
        entry = require_entry(items, entry_id)
        return entry, delete_note(entry, key=sentence, index=index)

    try:
        (entry, changed), _ = board_tracker.mutate(repository, apply)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "changed": changed, "notes": entry.notes}


@app.post("/api/words/{entry_id}/enrich")
async def enrich_word(entry_id: str) -> dict:
    try:
        require_entry(repository.load(), entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    enriched = await enricher.enrich(entry_id, force=True)
    entry = enriched or require_entry(repository.load(), entry_id)
    return {"ok": True, "enriched": enriched is not None, "entry": _entry_payload(entry)}


@app.get("/api/review/today")
def review_today() -> dict:
    items = due_today(repository.load(), local_now())
    completed, total = due_today_summary(items)
    return {
        "ok": True,
        "completed": completed,
        "total": total,
        "items": [
            {
                "entry": item.entry.to_dict(),
                "reviewed_today": item.reviewed_today,
                "next_due": item.next_due,
                "review_count": item.review_count,
            }
            for item in items
        ],
    }


@app.get("/api/review/overdue")
def review_overdue() -> dict:
    items = overdue(repository.load(), local_now())
    return {
        "ok": True,
        "count": len(items),
        "items": [
            {
                "entry_id": item.entry_id,
                "word": item.word,
                "checkpoint": item.checkpoint,
                "days_overdue": item.days_overdue,
                "review_count": item.review_count,
            }
            for item in items
        ],
    }


@app.post("/api/review/{entry_id}/today")
def review_mark_today(entry_id: str, payload: ReviewTodayRequest) -> dict:
    now = local_now()

    def apply(collection: list[VocabularyEntry]) -> tuple[VocabularyEntry, bool]:
        entry = require_entry(collection, entry_id)
        if payload.done:
            return entry, mark_reviewed_today(entry, now)
        return entry, unmark_reviewed_today(entry, now)

    try:
        (entry, changed), _ = board_tracker.mutate(repository, apply)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True, "changed": changed, "entry": _entry_payload(entry)}


@app.post("/api/review/{entry_id}/checkpoint")
def review_mark_checkpoint(entry_id: str, payload: CheckpointReviewRequest) -> dict:
    collection = repository.load()
    try:
        target = require_entry(collection, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if payload.checkpoint not in checkpoints(target):
        raise HTTPException(status_code=400, detail="checkpoint does not belong to this entry")

    tz = local_now().tzinfo

    def apply(items: list[VocabularyEntry]) -> tuple[VocabularyEntry, bool]:
        entry = require_entry(items, entry_id)
        return entry, mark_checkpoint_reviewed(entry, payload.checkpoint, tz)

    try:
        (entry, changed), _ = board_tracker.mutate(repository, apply)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True, "changed": changed, "entry": _entry_payload(entry)}


@app.get("/api/export")
def export_words() -> dict:
    collection = repository.load()
    out = create_export_file(collection, exports_dir=EXPORTS_DIR)
    logger.info("Exported vocabulary", path=str(out), count=len(collection))
    try:
        url = "/artifacts/" + str(out.relative_to(ARTIFACTS_DIR)).replace("\\", "/")
    except ValueError:
        url = None
    return {
        "ok": True,
        "file": out.name,
        "url": url,
        "count": len(collection),
        "entries": export_payload(collection),
    }


def _entry_payload(entry: VocabularyEntry) -> dict:
    stats = entry_stats(entry)
    return {
        **entry.to_dict(),
        "stats": {
            "review_count": stats.review_count,
            "last_review_at": stats.last_review_at,
            "next_due": stats.next_due,
        },
    }
