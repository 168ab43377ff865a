"""Plain data types shared by the drill engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


class Verdict(str, Enum):
    """Outcome of comparing a learner guess with the expected answer."""

    CORRECT = "correct"
    ALMOST = "almost"
    INCORRECT = "incorrect"


class NearMissReason(str, Enum):
    """Why a guess was judged almost correct."""

    ARTICLE = "article"
    MINOR = "minor"


class Phase(str, Enum):
    """Stages of a drill session, in the order they are visited."""

    INTRODUCE = "introduce"
    RECALL = "recall"
    MATCH = "match"
    DIALOGUE = "dialogue"
    COMPLETE = "complete"


class MatchSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class FeedbackTone(str, Enum):
    NEUTRAL = "neutral"
    CORRECT = "correct"
    ALMOST = "almost"
    INCORRECT = "incorrect"


@dataclass(frozen=True, slots=True)
class Translation:
    locale: str
    text: str


@dataclass(frozen=True, slots=True)
class VocabularyItem:
    """A single word or phrase being drilled."""

    id: str
    answer: str
    translations: Tuple[Translation, ...] = ()

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "VocabularyItem":
        """Build an item from a loosely shaped mapping.

        Accepts ``translations`` either as ``[{"locale", "value"|"text"}]`` or as a
        ``{locale: text}`` mapping. Entries without a string locale/text are dropped.
        """

        raw = record.get("translations") or []
        if isinstance(raw, dict):
            raw = [{"locale": locale, "text": text} for locale, text in raw.items()]
        translations = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            locale = entry.get("locale")
            text = entry.get("text", entry.get("value"))
            if isinstance(locale, str) and isinstance(text, str) and text.strip():
                translations.append(Translation(locale=locale, text=text.strip()))
        answer = record.get("answer", record.get("word"))
        answer = answer if isinstance(answer, str) else ""
        identifier = record.get("id") or record.get("_id") or answer
        return cls(
            id=str(identifier),
            answer=answer,
            translations=tuple(translations),
        )

    @property
    def has_translation(self) -> bool:
        return bool(self.translations)

    def translation_for(self, locale: str) -> Optional[str]:
        for translation in self.translations:
            if translation.locale.lower() == locale.lower():
                return translation.text
        return None


@dataclass(slots=True)
class AttemptStat:
    """Per learner/item attempt counters owned by the persistence layer."""

    attempts: int = 0
    successes: int = 0
    last_attempt_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class DialogueLine:
    speaker: str
    text: str


@dataclass(frozen=True, slots=True)
class DialogueExercise:
    """Fill-in-the-gap dialogue tied to a deck."""

    id: str
    lines: Tuple[DialogueLine, ...]
    answers: Tuple[str, ...]
    options: Tuple[str, ...]

    @classmethod
    def create(
        cls,
        id: str,
        *,
        lines: Sequence[Tuple[str, str]] = (),
        answers: Sequence[str] = (),
        options: Sequence[str] = (),
    ) -> "DialogueExercise":
        return cls(
            id=id,
            lines=tuple(DialogueLine(speaker=speaker, text=text) for speaker, text in lines),
            answers=tuple(answer for answer in answers if isinstance(answer, str)),
            options=tuple(option for option in options if isinstance(option, str)),
        )


@dataclass(frozen=True, slots=True)
class Correction:
    """Expected answer split around the character (or article) to emphasise."""

    before: str
    highlight: str
    after: str

    @property
    def text(self) -> str:
        return f"{self.before}{self.highlight}{self.after}"


@dataclass(frozen=True, slots=True)
class Classification:
    """Result of :func:`vocab_drill.core.drill.answers.classify`."""

    verdict: Verdict
    reason: Optional[NearMissReason] = None

    @property
    def is_correct(self) -> bool:
        return self.verdict is Verdict.CORRECT


# ----------------------------------------------------------------------
# Events emitted towards the persistence collaborator
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AttemptRecorded:
    item_id: str
    correct: bool
    at: datetime

    @property
    def outcome(self) -> str:
        return "correct" if self.correct else "incorrect"


@dataclass(frozen=True, slots=True)
class ItemMastered:
    item_id: str


@dataclass(frozen=True, slots=True)
class DialogueCompleted:
    dialogue_id: str


@dataclass(frozen=True, slots=True)
class SessionCompleted:
    deck_id: str


DrillEvent = AttemptRecorded | ItemMastered | DialogueCompleted | SessionCompleted


@dataclass(slots=True)
class ActionResult:
    """What a session action produced: a snapshot plus the events to persist."""

    snapshot: Dict[str, Any]
    events: List[DrillEvent] = field(default_factory=list)
    classification: Optional[Classification] = None
    correction: Optional[Correction] = None
    accepted: Optional[bool] = None
    hint: Optional[str] = None
