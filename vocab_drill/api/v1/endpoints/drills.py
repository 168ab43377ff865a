"""Drill session endpoints.

Every action answers with the session state after the action and the events
that were handed to persistence. ``persisted`` is ``False`` when writing those
events failed; the session keeps its new state either way.
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Callable

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocab_drill.api import deps
from vocab_drill.core.drill import ActionResult, DrillEvent, DrillSession
from vocab_drill.schemas import (
    DialogueClearRequest,
    DialogueOptionRequest,
    DialogueSubmitRequest,
    DrillActionResponse,
    DrillStartRequest,
    GuessRequest,
    MatchSelectRequest,
)
from vocab_drill.services.drill_service import DrillOutcome, DrillService
from vocab_drill.utils.cache import CacheBackend
from vocab_drill.utils.exceptions import (
    DeckNotFoundError,
    DrillSessionNotFoundError,
    handle_database_error,
    handle_deck_not_found,
    handle_session_not_found,
)

router = APIRouter(prefix="/drills", tags=["drills"])


def serialize_event(event: DrillEvent) -> dict:
    payload = asdict(event)
    payload["type"] = type(event).__name__
    return payload


def build_response(outcome: DrillOutcome) -> DrillActionResponse:
    result = outcome.result
    correction = None
    if result.correction is not None:
        correction = {
            "before": result.correction.before,
            "highlight": result.correction.highlight,
            "after": result.correction.after,
            "text": result.correction.text,
        }
    classification = None
    if result.classification is not None:
        classification = {
            "verdict": result.classification.verdict,
            "reason": result.classification.reason,
        }
    return DrillActionResponse(
        drill_id=outcome.handle.id,
        kind=outcome.handle.kind,
        learner_id=outcome.handle.learner_id,
        deck_slug=outcome.handle.deck_slug,
        accepted=result.accepted,
        classification=classification,
        correction=correction,
        hint=result.hint,
        events=[serialize_event(event) for event in result.events],
        persisted=outcome.persisted,
        state=result.snapshot,
    )


def run_action(
    service: DrillService,
    db: Session,
    drill_id: str,
    action: Callable[[DrillSession], ActionResult],
    *,
    kind: str = "drill",
) -> DrillActionResponse:
    try:
        outcome = service.act(db, drill_id, action, kind=kind)
    except DrillSessionNotFoundError as exc:
        raise handle_session_not_found(exc) from exc
    return build_response(outcome)


@router.post("/", response_model=DrillActionResponse, status_code=status.HTTP_201_CREATED)
def start_drill(
    payload: DrillStartRequest,
    db: Session = Depends(deps.get_db),
    cache: CacheBackend = Depends(deps.get_cache),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    """Open a drill over a deck, resuming completed decks at their last phase."""

    try:
        outcome = service.start(db, learner_id=payload.learner_id, deck_slug=payload.deck_slug, cache=cache)
    except DeckNotFoundError as exc:
        raise handle_deck_not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise handle_database_error(exc) from exc
    return build_response(outcome)


@router.get("/{drill_id}", response_model=DrillActionResponse)
def get_drill(
    drill_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    """Return the current state, firing any pause that has run out."""

    return run_action(service, db, drill_id, lambda session: session.tick())


@router.delete("/{drill_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_drill(
    drill_id: str,
    service: DrillService = Depends(deps.get_drill_service),
) -> Response:
    try:
        service.discard(drill_id)
    except DrillSessionNotFoundError as exc:
        raise handle_session_not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{drill_id}/next", response_model=DrillActionResponse)
def next_item(
    drill_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, drill_id, lambda session: session.next_item())


@router.post("/{drill_id}/guess", response_model=DrillActionResponse)
def submit_guess(
    drill_id: str,
    payload: GuessRequest,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    """Submit a typed answer during recall."""

    return run_action(
        service, db, drill_id, lambda session: session.submit_guess(payload.item_id, payload.guess)
    )


@router.post("/{drill_id}/hint", response_model=DrillActionResponse)
def reveal_hint(
    drill_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, drill_id, lambda session: session.reveal_hint())


@router.post("/{drill_id}/match", response_model=DrillActionResponse)
def select_match_card(
    drill_id: str,
    payload: MatchSelectRequest,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(
        service, db, drill_id, lambda session: session.select_match_card(payload.side, payload.item_id)
    )


@router.post("/{drill_id}/dialogue/option", response_model=DrillActionResponse)
def select_dialogue_option(
    drill_id: str,
    payload: DialogueOptionRequest,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, drill_id, lambda session: session.select_dialogue_option(payload.option))


@router.post("/{drill_id}/dialogue/clear", response_model=DrillActionResponse)
def clear_dialogue_slot(
    drill_id: str,
    payload: DialogueClearRequest,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, drill_id, lambda session: session.clear_dialogue_slot(payload.index))


@router.post("/{drill_id}/dialogue/reset", response_model=DrillActionResponse)
def reset_dialogue(
    drill_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, drill_id, lambda session: session.reset_dialogue())


@router.post("/{drill_id}/dialogue/submit", response_model=DrillActionResponse)
def submit_dialogue(
    drill_id: str,
    payload: DialogueSubmitRequest,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    """Check the filled dialogue; incomplete submissions are not counted."""

    return run_action(
        service,
        db,
        drill_id,
        lambda session: session.submit_dialogue_selections(payload.dialogue_id, payload.slot_values),
    )


@router.post("/{drill_id}/advance", response_model=DrillActionResponse)
def advance_phase(
    drill_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, drill_id, lambda session: session.advance_phase_if_complete())
