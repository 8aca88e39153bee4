from __future__ import annotations

from pydantic import BaseModel, Field


class CaptureRequest(BaseModel):
    text: str
    url: str = Field(default="")
    title: str = Field(default="")
    picked_word: str | None = None


class WordAddRequest(BaseModel):
    word: str


class SentenceAddRequest(BaseModel):
    sentence: str


class NoteUpdateRequest(BaseModel):
    markdown: str = Field(default="")
    sentence: str | None = None
    index: int | None = Field(default=None, ge=0)


class ReviewTodayRequest(BaseModel):
    done: bool = Field(default=True)


class CheckpointReviewRequest(BaseModel):
    checkpoint: int
