from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo

from word_capture.config import DAY_MS, HOUR_MS, REVIEW_MARK_HOUR, REVIEW_OFFSETS_DAYS
from word_capture.storage.entries import VocabularyEntry, word_key

SCHEDULE_OFFSETS_MS = tuple(days * DAY_MS for days in REVIEW_OFFSETS_DAYS)


@dataclass
class DueItem:
    entry: VocabularyEntry
    reviewed_today: bool
    next_due: int | None
    review_count: int


@dataclass
class OverdueItem:
    entry_id: str
    word: str
    checkpoint: int
    days_overdue: int
    review_count: int


def local_now() -> datetime:
    return datetime.now().astimezone()


def start_of_day_ms(ts_ms: int, tz: tzinfo | None) -> int:
    moment = datetime.fromtimestamp(ts_ms / 1000, tz)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp() * 1000)


def day_window(now: datetime | None = None) -> tuple[int, int]:
    """[start, end) of the calendar day containing `now`, in epoch ms."""
    now = now or local_now()
    start = start_of_day_ms(int(now.timestamp() * 1000), now.tzinfo)
    return start, start + DAY_MS


def checkpoints(entry: VocabularyEntry) -> list[int]:
    if not entry.created_at:
        return []
    return [entry.created_at + offset for offset in SCHEDULE_OFFSETS_MS]


def is_due_today(entry: VocabularyEntry, now: datetime | None = None) -> bool:
    start, end = day_window(now)
    return any(start <= cp < end for cp in checkpoints(entry))


def is_reviewed_today(entry: VocabularyEntry, now: datetime | None = None) -> bool:
    start, end = day_window(now)
    return _reviewed_between(entry.review_times, start, end)


def next_due_checkpoint(entry: VocabularyEntry) -> int | None:
    """First checkpoint not covered by any review at or after it."""
    reviews = sorted(entry.review_times)
    for cp in checkpoints(entry):
        if not any(t >= cp for t in reviews):
            return cp
    return None


def overdue_checkpoints(entry: VocabularyEntry, now: datetime | None = None) -> list[int]:
    now = now or local_now()
    start, _ = day_window(now)
    missed: list[int] = []
    for cp in checkpoints(entry):
        if cp < start and not is_reviewed_on_day_of(entry, cp, now.tzinfo):
            missed.append(cp)
    return missed


def is_reviewed_on_day_of(entry: VocabularyEntry, checkpoint: int, tz: tzinfo | None) -> bool:
    day_start = start_of_day_ms(checkpoint, tz)
    return _reviewed_between(entry.review_times, day_start, day_start + DAY_MS)


def due_today(collection: list[VocabularyEntry], now: datetime | None = None) -> list[DueItem]:
    now = now or local_now()
    representatives: dict[str, VocabularyEntry] = {}
    for entry in collection:
        if not entry.created_at or not is_due_today(entry, now):
            continue
        key = word_key(entry.word)
        current = representatives.get(key)
        if current is None or entry.created_at < current.created_at:
            representatives[key] = entry

    return [
        DueItem(
            entry=entry,
            reviewed_today=is_reviewed_today(entry, now),
            next_due=next_due_checkpoint(entry),
            review_count=len(entry.review_times),
        )
        for entry in representatives.values()
    ]


def due_today_summary(items: list[DueItem]) -> tuple[int, int]:
    completed = sum(1 for item in items if item.reviewed_today)
    return completed, len(items)


def overdue(collection: list[VocabularyEntry], now: datetime | None = None) -> list[OverdueItem]:
    now = now or local_now()
    start, _ = day_window(now)
    earliest: dict[str, OverdueItem] = {}
    for entry in collection:
        for cp in overdue_checkpoints(entry, now):
            key = word_key(entry.word)
            current = earliest.get(key)
            if current is not None and current.checkpoint <= cp:
                continue
            earliest[key] = OverdueItem(
                entry_id=entry.id,
                word=entry.word,
                checkpoint=cp,
                days_overdue=(start - cp) // DAY_MS,
                review_count=len(entry.review_times),
            )
    return sorted(earliest.values(), key=lambda item: item.checkpoint)


def mark_reviewed_today(entry: VocabularyEntry, now: datetime | None = None) -> bool:
    start, end = day_window(now)
    if _reviewed_between(entry.review_times, start, end):
        return False
    entry.review_times.append(start + REVIEW_MARK_HOUR * HOUR_MS)
    return True


def unmark_reviewed_today(entry: VocabularyEntry, now: datetime | None = None) -> bool:
    start, end = day_window(now)
    kept = [t for t in entry.review_times if not start <= t < end]
    changed = len(kept) != len(entry.review_times)
    entry.review_times = kept
    return changed


def mark_checkpoint_reviewed(entry: VocabularyEntry, checkpoint: int, tz: tzinfo | None = None) -> bool:
    if tz is None:
        tz = local_now().tzinfo
    day_start = start_of_day_ms(checkpoint, tz)
    if _reviewed_between(entry.review_times, day_start, day_start + DAY_MS):
        return False
    entry.review_times.append(day_start + REVIEW_MARK_HOUR * HOUR_MS)
    return True


def last_review_at(entry: VocabularyEntry) -> int | None:
    return max(entry.review_times) if entry.review_times else None


def _reviewed_between(review_times: list[int], start: int, end: int) -> bool:
    return any(start <= t < end for t in review_times)
