"""Loading vocabulary decks into drill engine objects."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vocab_drill.core.drill import DialogueExercise, VocabularyItem
from vocab_drill.db.models.vocabulary import (
    DialogueExercise as DialogueExerciseModel,
    VocabularyDeck,
    VocabularyEntry,
)
from vocab_drill.utils.cache import SupportsCache, build_cache_key, cache_backend
from vocab_drill.utils.exceptions import DeckNotFoundError

CACHE_NAMESPACE = "decks"


@dataclass(slots=True)
class DeckContent:
    """Everything a drill session needs from one deck."""

    id: int
    slug: str
    title: str
    language: str
    items: list[VocabularyItem]
    dialogues: list[DialogueExercise]


def _serialize_deck(deck: VocabularyDeck) -> dict[str, Any]:
    return {
        "id": deck.id,
        "slug": deck.slug,
        "title": deck.title,
        "language": deck.language,
        "items": [
            {
                "id": str(entry.id),
                "answer": entry.word,
                "translations": list(entry.translations or []),
            }
            for entry in deck.entries
        ],
        "dialogues": [
            {
                "id": str(dialogue.id),
                "lines": list(dialogue.lines or []),
                "answers": list(dialogue.answers or []),
                "options": list(dialogue.options or []),
            }
            for dialogue in deck.dialogues
        ],
    }


def _dialogue_from_payload(payload: dict[str, Any]) -> DialogueExercise:
    lines = []
    for line in payload.get("lines") or []:
        if isinstance(line, dict):
            lines.append((str(line.get("speaker", "")), str(line.get("text", ""))))
    return DialogueExercise.create(
        payload["id"],
        lines=lines,
        answers=payload.get("answers") or [],
        options=payload.get("options") or [],
    )


def deck_content_from_payload(payload: dict[str, Any]) -> DeckContent:
    return DeckContent(
        id=payload["id"],
        slug=payload["slug"],
        title=payload["title"],
        language=payload["language"],
        items=[VocabularyItem.from_record(item) for item in payload["items"]],
        dialogues=[_dialogue_from_payload(dialogue) for dialogue in payload["dialogues"]],
    )


class DeckService:
    """Provide querying utilities for vocabulary decks."""

    def __init__(self, db: Session, *, cache: SupportsCache | None = None) -> None:
        self.db = db
        self.cache = cache if cache is not None else cache_backend

    def list_decks(self, *, language: str | None = None) -> list[dict[str, Any]]:
        """Return deck summaries ordered by title."""

        entry_counts = (
            select(VocabularyEntry.deck_id, func.count(VocabularyEntry.id).label("entry_count"))
            .group_by(VocabularyEntry.deck_id)
            .subquery()
        )
        dialogue_counts = (
            select(
                DialogueExerciseModel.deck_id,
                func.count(DialogueExerciseModel.id).label("dialogue_count"),
            )
            .group_by(DialogueExerciseModel.deck_id)
            .subquery()
        )
        stmt = (
            select(VocabularyDeck, entry_counts.c.entry_count, dialogue_counts.c.dialogue_count)
            .outerjoin(entry_counts, entry_counts.c.deck_id == VocabularyDeck.id)
            .outerjoin(dialogue_counts, dialogue_counts.c.deck_id == VocabularyDeck.id)
            .order_by(VocabularyDeck.title)
        )
        if language:
            stmt = stmt.where(VocabularyDeck.language == language)

        return [
            {
                "id": deck.id,
                "slug": deck.slug,
                "title": deck.title,
                "language": deck.language,
                "entry_count": int(entry_count or 0),
                "dialogue_count": int(dialogue_count or 0),
            }
            for deck, entry_count, dialogue_count in self.db.execute(stmt)
        ]

    def get_deck(self, slug: str) -> VocabularyDeck:
        """Retrieve a deck row by slug."""

        deck = self.db.scalars(select(VocabularyDeck).where(VocabularyDeck.slug == slug)).first()
        if deck is None:
            raise DeckNotFoundError(f"Deck '{slug}' not found", {"slug": slug})
        return deck

    def load_deck(self, slug: str) -> DeckContent:
        """Return engine items and dialogues for a deck, cached per slug."""

        cache_key = build_cache_key(slug=slug)
        payload = self.cache.get(CACHE_NAMESPACE, cache_key)
        if payload is None:
            payload = _serialize_deck(self.get_deck(slug))
            self.cache.set(CACHE_NAMESPACE, cache_key, payload)
            logger.debug("Deck loaded from database", slug=slug, items=len(payload["items"]))
        return deck_content_from_payload(payload)

    def invalidate(self, slug: str) -> None:
        self.cache.invalidate(CACHE_NAMESPACE, key=build_cache_key(slug=slug))
