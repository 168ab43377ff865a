"""Open-ended practice over a deck: random words, no phases, no completion."""
from __future__ import annotations

import random
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from . import answers
from .matching import format_translations
from .models import (
    ActionResult,
    AttemptRecorded,
    DrillEvent,
    FeedbackTone,
    Verdict,
    VocabularyItem,
)
from .timers import SessionTimer, TimerKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PracticeRound:
    """Endless drill that picks a random word after every correct answer.

    A wrong answer reveals the whole word. Typing it in afterwards moves on
    but is not counted as a success, since the learner only copied it.
    """

    def __init__(
        self,
        items: Sequence[VocabularyItem],
        *,
        advance_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.items: List[VocabularyItem] = [
            item for item in items if item.answer.strip() and item.has_translation
        ]
        self.advance_ms = advance_ms
        self.timer = SessionTimer(clock)
        self._now = now
        self._rng = rng or random.Random()
        self._events: List[DrillEvent] = []
        self.current: Optional[VocabularyItem] = None
        self.hint_level = 0
        self.feedback = FeedbackTone.NEUTRAL
        self.revealed = False
        self._pick(None)

    def _pick(self, previous_id: Optional[str]) -> None:
        self.timer.cancel()
        self.hint_level = 0
        self.feedback = FeedbackTone.NEUTRAL
        self.revealed = False
        if not self.items:
            self.current = None
            return
        pool = [item for item in self.items if item.id != previous_id] or self.items
        self.current = self._rng.choice(pool)

    def _result(self, **kwargs: Any) -> ActionResult:
        events, self._events = self._events, []
        return ActionResult(snapshot=self.snapshot(), events=events, **kwargs)

    def _record(self, item: VocabularyItem, correct: bool) -> None:
        self._events.append(AttemptRecorded(item_id=item.id, correct=correct, at=self._now()))

    def submit(self, guess: Any) -> ActionResult:
        self.timer.flush()
        item = self.current
        if item is None:
            return self._result(accepted=False)

        classification = answers.classify(guess, item.answer)
        if classification.verdict is Verdict.ALMOST:
            self.feedback = FeedbackTone.ALMOST
            correction = answers.render_correction(guess, item.answer, classification.reason)
            return self._result(classification=classification, correction=correction, accepted=False)

        if classification.verdict is Verdict.CORRECT:
            self.feedback = FeedbackTone.CORRECT
            if self.revealed:
                logger.debug("Skipping success after revealed answer", item_id=item.id)
                self.revealed = False
            else:
                self._record(item, correct=True)
            self.timer.schedule(TimerKind.PRACTICE_ADVANCE, self.advance_ms, lambda: self._pick(item.id))
            return self._result(classification=classification, accepted=True)

        self.feedback = FeedbackTone.INCORRECT
        self._record(item, correct=False)
        self.revealed = True
        self.hint_level = len(answers.strip_number_prefix(item.answer))
        return self._result(
            classification=classification,
            accepted=True,
            hint=answers.hint(item.answer, self.hint_level),
        )

    def reveal_hint(self) -> ActionResult:
        self.timer.flush()
        item = self.current
        if item is None or not answers.hint_available(item.answer, self.hint_level):
            return self._result(accepted=False)
        self.hint_level += 1
        return self._result(accepted=True, hint=answers.hint(item.answer, self.hint_level))

    def skip(self) -> ActionResult:
        previous = self.current.id if self.current else None
        self._pick(previous)
        return self._result(accepted=True)

    def tick(self) -> ActionResult:
        self.timer.fire_if_due()
        return self._result()

    def snapshot(self) -> Dict[str, Any]:
        item = self.current
        return {
            "current_item": (
                {
                    "id": item.id,
                    "translation_label": format_translations(item),
                    "answer_length": len(answers.strip_number_prefix(item.answer)),
                }
                if item
                else None
            ),
            "hint": answers.hint(item.answer, self.hint_level) if item and self.hint_level else "",
            "hint_level": self.hint_level,
            "feedback": self.feedback.value,
            "revealed": self.revealed,
            "pending_timer": self.timer.pending_kind.value if self.timer.pending_kind else None,
        }
