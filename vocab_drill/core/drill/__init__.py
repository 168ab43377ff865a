"""Adaptive vocabulary drill engine: answer classification and phase state machine."""

from .answers import (
    ArticleRule,
    NearMissRule,
    SingleEditRule,
    SpacingRule,
    VariantSpellingRule,
    build_default_rules,
    classify,
    hint,
    hint_available,
    render_correction,
)
from .dialogue import DialogueBoard, SubmissionOutcome
from .matching import MatchBoard, SelectionOutcome, format_translations
from .models import (
    ActionResult,
    AttemptRecorded,
    AttemptStat,
    Classification,
    Correction,
    DialogueCompleted,
    DialogueExercise,
    DrillEvent,
    FeedbackTone,
    ItemMastered,
    MatchSide,
    NearMissReason,
    Phase,
    SessionCompleted,
    Translation,
    Verdict,
    VocabularyItem,
)
from .practice import PracticeRound
from .session import DrillSession, SessionTiming
from .timers import SessionTimer, TimerKind

__all__ = [
    "ActionResult",
    "ArticleRule",
    "AttemptRecorded",
    "AttemptStat",
    "Classification",
    "Correction",
    "DialogueBoard",
    "DialogueCompleted",
    "DialogueExercise",
    "DrillEvent",
    "DrillSession",
    "FeedbackTone",
    "ItemMastered",
    "MatchBoard",
    "MatchSide",
    "NearMissReason",
    "NearMissRule",
    "Phase",
    "PracticeRound",
    "SelectionOutcome",
    "SessionCompleted",
    "SessionTimer",
    "SessionTiming",
    "SingleEditRule",
    "SpacingRule",
    "SubmissionOutcome",
    "TimerKind",
    "Translation",
    "VariantSpellingRule",
    "Verdict",
    "VocabularyItem",
    "build_default_rules",
    "classify",
    "format_translations",
    "hint",
    "hint_available",
    "render_correction",
]
