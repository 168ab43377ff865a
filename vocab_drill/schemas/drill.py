"""Pydantic schemas for drill and practice sessions."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from vocab_drill.core.drill import MatchSide, NearMissReason, Verdict
from vocab_drill.schemas.answers import CorrectionRead


class DrillStartRequest(BaseModel):
    """Payload used to open a drill or practice round."""

    learner_id: str = Field(min_length=1, max_length=64)
    deck_slug: str = Field(min_length=1, max_length=120)


class GuessRequest(BaseModel):
    item_id: str
    guess: Any = None


class PracticeGuessRequest(BaseModel):
    guess: Any = None


class MatchSelectRequest(BaseModel):
    side: MatchSide
    item_id: str


class DialogueOptionRequest(BaseModel):
    option: str


class DialogueClearRequest(BaseModel):
    index: int = Field(ge=0)


class DialogueSubmitRequest(BaseModel):
    dialogue_id: str
    slot_values: Optional[List[Optional[str]]] = None


class ClassificationRead(BaseModel):
    verdict: Verdict
    reason: Optional[NearMissReason] = None


class DrillEventRead(BaseModel):
    """An engine event as it was handed to persistence."""

    type: str
    item_id: Optional[str] = None
    dialogue_id: Optional[str] = None
    deck_id: Optional[str] = None
    correct: Optional[bool] = None
    at: Optional[datetime] = None


class DrillActionResponse(BaseModel):
    """State of a session after an action."""

    drill_id: str
    kind: str
    learner_id: str
    deck_slug: str
    accepted: Optional[bool] = None
    classification: Optional[ClassificationRead] = None
    correction: Optional[CorrectionRead] = None
    hint: Optional[str] = None
    events: List[DrillEventRead] = Field(default_factory=list)
    persisted: bool = True
    state: Dict[str, Any]
