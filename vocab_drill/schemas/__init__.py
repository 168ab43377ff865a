"""Pydantic schemas package."""

from vocab_drill.schemas.answers import (
    ClassifyRequest,
    ClassifyResponse,
    CorrectionRead,
    HintRequest,
    HintResponse,
)
from vocab_drill.schemas.deck import DeckDetail, DeckListResponse, DeckSummary
from vocab_drill.schemas.drill import (
    DialogueClearRequest,
    DialogueOptionRequest,
    DialogueSubmitRequest,
    DrillActionResponse,
    DrillStartRequest,
    GuessRequest,
    MatchSelectRequest,
    PracticeGuessRequest,
)
from vocab_drill.schemas.progress import DeckProgressRead, EntryProgressRead

__all__ = [
    "ClassifyRequest",
    "ClassifyResponse",
    "CorrectionRead",
    "DeckDetail",
    "DeckListResponse",
    "DeckProgressRead",
    "DeckSummary",
    "DialogueClearRequest",
    "DialogueOptionRequest",
    "DialogueSubmitRequest",
    "DrillActionResponse",
    "DrillStartRequest",
    "EntryProgressRead",
    "GuessRequest",
    "HintRequest",
    "HintResponse",
    "MatchSelectRequest",
    "PracticeGuessRequest",
]
