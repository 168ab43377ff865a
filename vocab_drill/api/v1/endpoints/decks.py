"""Deck catalogue endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocab_drill.api import deps
from vocab_drill.core.drill import format_translations
from vocab_drill.schemas import DeckDetail, DeckListResponse
from vocab_drill.services.deck import DeckService
from vocab_drill.utils.cache import CacheBackend, build_cache_key
from vocab_drill.utils.exceptions import DeckNotFoundError, handle_database_error, handle_deck_not_found

router = APIRouter(prefix="/decks", tags=["decks"])


@router.get("/", response_model=DeckListResponse)
def list_decks(
    language: str | None = Query(default=None, max_length=10, description="Language code to filter by"),
    db: Session = Depends(deps.get_db),
    cache: CacheBackend = Depends(deps.get_cache),
) -> DeckListResponse:
    """Return all decks with their entry and dialogue counts."""

    cache_key = build_cache_key(language=language)
    cached = cache.get("decks:list", cache_key)
    if cached is not None:
        return cached

    try:
        items = DeckService(db, cache=cache).list_decks(language=language)
    except SQLAlchemyError as exc:
        raise handle_database_error(exc) from exc
    payload = DeckListResponse(total=len(items), items=items).model_dump(mode="json")
    cache.set("decks:list", cache_key, payload, ttl_seconds=60)
    return payload


@router.get("/{slug}", response_model=DeckDetail)
def get_deck(
    slug: str,
    db: Session = Depends(deps.get_db),
    cache: CacheBackend = Depends(deps.get_cache),
) -> DeckDetail:
    """Return the words and dialogues of a deck."""

    try:
        deck = DeckService(db, cache=cache).load_deck(slug)
    except DeckNotFoundError as exc:
        raise handle_deck_not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise handle_database_error(exc) from exc

    return DeckDetail(
        id=deck.id,
        slug=deck.slug,
        title=deck.title,
        language=deck.language,
        items=[
            {
                "id": item.id,
                "answer": item.answer,
                "translations": [
                    {"locale": translation.locale, "text": translation.text}
                    for translation in item.translations
                ],
                "translation_label": format_translations(item),
            }
            for item in deck.items
        ],
        dialogues=[
            {
                "id": dialogue.id,
                "lines": [{"speaker": line.speaker, "text": line.text} for line in dialogue.lines],
                "answers": list(dialogue.answers),
                "options": list(dialogue.options),
            }
            for dialogue in deck.dialogues
        ],
    )
