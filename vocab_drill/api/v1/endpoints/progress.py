"""Learner progress endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocab_drill.api import deps
from vocab_drill.schemas import DeckProgressRead
from vocab_drill.services.deck import DeckService
from vocab_drill.services.progress import ProgressService
from vocab_drill.utils.exceptions import DeckNotFoundError, handle_database_error, handle_deck_not_found

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/{learner_id}/{deck_slug}", response_model=DeckProgressRead)
def get_deck_progress(
    learner_id: str,
    deck_slug: str,
    db: Session = Depends(deps.get_db),
) -> DeckProgressRead:
    """Return attempt counters and completion for a learner on a deck."""

    try:
        deck = DeckService(db).get_deck(deck_slug)
        summary = ProgressService(db).deck_progress(learner_id=learner_id, deck=deck)
    except DeckNotFoundError as exc:
        raise handle_deck_not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise handle_database_error(exc) from exc
    return DeckProgressRead(**summary)
