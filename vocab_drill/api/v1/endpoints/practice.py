"""Free practice endpoints: random words from a deck, no phases."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocab_drill.api import deps
from vocab_drill.api.v1.endpoints.drills import build_response, run_action
from vocab_drill.schemas import DrillActionResponse, DrillStartRequest, PracticeGuessRequest
from vocab_drill.services.drill_service import DrillService
from vocab_drill.utils.cache import CacheBackend
from vocab_drill.utils.exceptions import DeckNotFoundError, handle_database_error, handle_deck_not_found

router = APIRouter(prefix="/practice", tags=["practice"])


@router.post("/", response_model=DrillActionResponse, status_code=status.HTTP_201_CREATED)
def start_practice(
    payload: DrillStartRequest,
    db: Session = Depends(deps.get_db),
    cache: CacheBackend = Depends(deps.get_cache),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    try:
        outcome = service.start_practice(
            db, learner_id=payload.learner_id, deck_slug=payload.deck_slug, cache=cache
        )
    except DeckNotFoundError as exc:
        raise handle_deck_not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise handle_database_error(exc) from exc
    return build_response(outcome)


@router.get("/{practice_id}", response_model=DrillActionResponse)
def get_practice(
    practice_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, practice_id, lambda round_: round_.tick(), kind="practice")


@router.post("/{practice_id}/guess", response_model=DrillActionResponse)
def submit_practice_guess(
    practice_id: str,
    payload: PracticeGuessRequest,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, practice_id, lambda round_: round_.submit(payload.guess), kind="practice")


@router.post("/{practice_id}/hint", response_model=DrillActionResponse)
def reveal_practice_hint(
    practice_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, practice_id, lambda round_: round_.reveal_hint(), kind="practice")


@router.post("/{practice_id}/skip", response_model=DrillActionResponse)
def skip_practice_word(
    practice_id: str,
    db: Session = Depends(deps.get_db),
    service: DrillService = Depends(deps.get_drill_service),
) -> DrillActionResponse:
    return run_action(service, db, practice_id, lambda round_: round_.skip(), kind="practice")
