"""Pydantic schemas for deck endpoints."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DeckSummary(BaseModel):
    """Catalogue entry for a deck."""

    id: int
    slug: str
    title: str
    language: str = Field(max_length=10)
    entry_count: int = 0
    dialogue_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class DeckListResponse(BaseModel):
    total: int
    items: list[DeckSummary]


class TranslationRead(BaseModel):
    locale: str
    text: str


class DeckItemRead(BaseModel):
    id: str
    answer: str
    translations: List[TranslationRead] = Field(default_factory=list)
    translation_label: str = ""


class DialogueLineRead(BaseModel):
    speaker: str
    text: str


class DialogueRead(BaseModel):
    id: str
    lines: List[DialogueLineRead] = Field(default_factory=list)
    answers: List[str] = Field(default_factory=list)
    options: List[str] = Field(default_factory=list)


class DeckDetail(BaseModel):
    """A deck with the content a drill walks through."""

    id: int
    slug: str
    title: str
    language: str
    items: List[DeckItemRead]
    dialogues: List[DialogueRead]
