"""Drill session state machine.

A session walks a learner through a deck in fixed order::

    introduce -> recall -> match -> dialogue -> complete

Phases without content are skipped. Every public action returns an
:class:`~vocab_drill.core.drill.models.ActionResult` carrying a plain-data
snapshot and the events the caller should persist. The engine decides its
own state before those events leave, so a failed write never rewinds the
session.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from loguru import logger

from . import answers
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
    Phase,
    SessionCompleted,
    Verdict,
    VocabularyItem,
)
from .timers import SessionTimer, TimerKind

PHASE_ORDER = (Phase.INTRODUCE, Phase.RECALL, Phase.MATCH, Phase.DIALOGUE)


@dataclass(frozen=True, slots=True)
class SessionTiming:
    """Pause lengths in milliseconds."""

    mismatch_cooldown_ms: int = 800
    page_advance_ms: int = 600
    dialogue_advance_ms: int = 800

    @classmethod
    def from_settings(cls, settings: Any) -> "SessionTiming":
        return cls(
            mismatch_cooldown_ms=settings.DRILL_MISMATCH_COOLDOWN_MS,
            page_advance_ms=settings.DRILL_PAGE_ADVANCE_MS,
            dialogue_advance_ms=settings.DRILL_DIALOGUE_ADVANCE_MS,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _usable_items(items: Sequence[VocabularyItem]) -> List[VocabularyItem]:
    seen: set[str] = set()
    usable: List[VocabularyItem] = []
    for item in items:
        if not isinstance(item.answer, str) or not item.answer.strip():
            logger.warning("Dropping vocabulary item without answer", item_id=item.id)
            continue
        if item.id in seen:
            logger.warning("Dropping duplicate vocabulary item", item_id=item.id)
            continue
        seen.add(item.id)
        usable.append(item)
    return usable


class DrillSession:
    """In-memory run over one deck for one learner."""

    def __init__(
        self,
        deck_id: str,
        items: Sequence[VocabularyItem],
        *,
        stats: Optional[Mapping[str, AttemptStat]] = None,
        dialogues: Sequence[DialogueExercise] = (),
        already_complete: bool = False,
        timing: Optional[SessionTiming] = None,
        page_size: int = 5,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.deck_id = deck_id
        self.items = _usable_items(items)
        self._by_id: Dict[str, VocabularyItem] = {item.id: item for item in self.items}
        stats = stats or {}
        self.stats: Dict[str, AttemptStat] = {}
        for item in self.items:
            existing = stats.get(item.id)
            self.stats[item.id] = (
                AttemptStat(existing.attempts, existing.successes, existing.last_attempt_at)
                if existing
                else AttemptStat()
            )
        self.mastered: set[str] = set()
        self.timing = timing or SessionTiming()
        self.timer = SessionTimer(clock)
        self._now = now
        self.match = MatchBoard(self.items, page_size=page_size, rng=rng)
        self.dialogue = DialogueBoard(dialogues)

        self.cursor = 0
        self.hint_level = 0
        self.feedback = FeedbackTone.NEUTRAL
        self.correction: Optional[Correction] = None
        self._introduced = False
        self._completion_reported = already_complete
        self._events: List[DrillEvent] = []

        self.phase = Phase.INTRODUCE
        if already_complete:
            self._enter(self._resume_phase())
        elif self.items:
            self._enter(Phase.INTRODUCE)
        else:
            self._enter(self._next_phase_after(Phase.RECALL))
        logger.debug(
            "Drill session created",
            deck_id=deck_id,
            items=len(self.items),
            dialogues=len(self.dialogue.dialogues),
            phase=self.phase.value,
        )

    # ------------------------------------------------------------------
    # Phase bookkeeping
    # ------------------------------------------------------------------
    def _has_content(self, phase: Phase) -> bool:
        if phase in (Phase.INTRODUCE, Phase.RECALL):
            return bool(self.items)
        if phase is Phase.MATCH:
            return self.match.has_content
        if phase is Phase.DIALOGUE:
            return self.dialogue.has_content
        return False

    def _next_phase_after(self, phase: Phase) -> Phase:
        if phase is Phase.COMPLETE:
            return Phase.COMPLETE
        for candidate in PHASE_ORDER[PHASE_ORDER.index(phase) + 1:]:
            if self._has_content(candidate):
                return candidate
        return Phase.COMPLETE

    def _resume_phase(self) -> Phase:
        for candidate in reversed(PHASE_ORDER):
            if candidate is not Phase.INTRODUCE and self._has_content(candidate):
                return candidate
        return Phase.INTRODUCE if self.items else Phase.COMPLETE

    def _phase_satisfied(self, phase: Phase) -> bool:
        if phase is Phase.INTRODUCE:
            return self._introduced or not self.items
        if phase is Phase.RECALL:
            return all(item.id in self.mastered for item in self.items)
        if phase is Phase.MATCH:
            return self.match.all_matched
        if phase is Phase.DIALOGUE:
            return self.dialogue.all_completed
        return True

    def _enter(self, phase: Phase) -> None:
        previous = self.phase
        self.timer.cancel()
        self.phase = phase
        self.hint_level = 0
        self.correction = None
        if phase is Phase.RECALL:
            self.cursor = self._first_unlearned_index()
        elif phase is Phase.INTRODUCE:
            self.cursor = 0
        elif phase is Phase.MATCH:
            self.match.clear_selection()
        if phase is Phase.COMPLETE:
            self.feedback = FeedbackTone.CORRECT
            self._report_completion()
        else:
            self.feedback = FeedbackTone.NEUTRAL
        if previous is not phase:
            logger.info("Drill phase changed", deck_id=self.deck_id, previous=previous.value, phase=phase.value)

    def _first_unlearned_index(self) -> int:
        for index, item in enumerate(self.items):
            if self.stats[item.id].successes == 0:
                return index
        return 0

    def _advance_if_complete(self) -> None:
        while self.phase is not Phase.COMPLETE and self._phase_satisfied(self.phase):
            self._enter(self._next_phase_after(self.phase))

    def _report_completion(self) -> None:
        if self._completion_reported:
            return
        self._completion_reported = True
        self._events.append(SessionCompleted(deck_id=self.deck_id))

    def _settle(self) -> None:
        """Let a new learner action supersede any pending pause.

        A mismatch cooldown is dropped so the click applies to the pair still
        on the board; page and dialogue advances run early.
        """

        if self.timer.pending_kind is TimerKind.MISMATCH_COOLDOWN:
            self.timer.cancel()
            self.match.mismatch = False
            logger.debug("Pending timer canceled", kind=TimerKind.MISMATCH_COOLDOWN.value)
            return
        kind = self.timer.flush()
        if kind is not None:
            logger.debug("Pending timer superseded", kind=kind.value)

    def _result(self, **kwargs: Any) -> ActionResult:
        events, self._events = self._events, []
        return ActionResult(snapshot=self.snapshot(), events=events, **kwargs)

    def drain_events(self) -> List[DrillEvent]:
        events, self._events = self._events, []
        return events

    # ------------------------------------------------------------------
    # Introduce / recall
    # ------------------------------------------------------------------
    @property
    def current_item(self) -> Optional[VocabularyItem]:
        if self.phase not in (Phase.INTRODUCE, Phase.RECALL) or not self.items:
            return None
        return self.items[min(self.cursor, len(self.items) - 1)]

    @property
    def is_complete(self) -> bool:
        return self.phase is Phase.COMPLETE

    def next_item(self) -> ActionResult:
        """Step through the introduction; the last step opens recall."""

        self._settle()
        if self.phase is not Phase.INTRODUCE:
            return self._result(accepted=False)
        if self.cursor + 1 < len(self.items):
            self.cursor += 1
        else:
            self._introduced = True
            self._advance_if_complete()
        return self._result(accepted=True)

    def _record_attempt(self, item: VocabularyItem, correct: bool) -> None:
        stat = self.stats[item.id]
        stat.attempts += 1
        if correct:
            stat.successes += 1
        stat.last_attempt_at = self._now()
        self._events.append(AttemptRecorded(item_id=item.id, correct=correct, at=stat.last_attempt_at))

    def _next_unmastered_index(self) -> Optional[int]:
        count = len(self.items)
        for step in range(1, count + 1):
            index = (self.cursor + step) % count
            if self.items[index].id not in self.mastered:
                return index
        return None

    def submit_guess(self, item_id: str, guess: Any) -> ActionResult:
        """Adjudicate a typed answer for the current recall item."""

        self._settle()
        if self.phase is not Phase.RECALL:
            return self._result(accepted=False)

        item = self._by_id.get(item_id)
        if item is None:
            return self._result(classification=Classification(Verdict.INCORRECT), accepted=False)

        classification = answers.classify(guess, item.answer)
        current = self.current_item
        if current is None or item.id != current.id or item.id in self.mastered:
            # Judged for display only; bookkeeping belongs to the current item.
            return self._result(classification=classification, accepted=False)

        if classification.verdict is Verdict.ALMOST:
            self.feedback = FeedbackTone.ALMOST
            self.correction = answers.render_correction(guess, item.answer, classification.reason)
            return self._result(classification=classification, correction=self.correction, accepted=False)

        self.hint_level = 0
        self.correction = None
        if classification.verdict is Verdict.CORRECT:
            self._record_attempt(item, correct=True)
            self.mastered.add(item.id)
            self._events.append(ItemMastered(item_id=item.id))
            self.feedback = FeedbackTone.CORRECT
            next_index = self._next_unmastered_index()
            if next_index is not None:
                self.cursor = next_index
            self._advance_if_complete()
        else:
            self._record_attempt(item, correct=False)
            self.feedback = FeedbackTone.INCORRECT
        return self._result(classification=classification, accepted=True)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def _schedule_page_advance(self) -> None:
        def advance() -> None:
            if self.match.advance_page():
                self.feedback = FeedbackTone.NEUTRAL

        self.timer.schedule(TimerKind.PAGE_ADVANCE, self.timing.page_advance_ms, advance)

    def _after_pair_matched(self) -> None:
        page = self.match.current_page
        if page is None or not page.is_complete:
            return
        if self.match.all_matched:
            self._advance_if_complete()
        elif self.match.has_next_page:
            self._schedule_page_advance()

    def select_match_card(self, side: MatchSide | str, item_id: str) -> ActionResult:
        self._settle()
        if self.phase is not Phase.MATCH:
            return self._result(accepted=False)
        try:
            side = MatchSide(side)
        except ValueError:
            return self._result(accepted=False)

        outcome = self.match.select(side, item_id)
        if outcome is SelectionOutcome.IGNORED:
            return self._result(accepted=False)
        if outcome is SelectionOutcome.MATCHED:
            self.feedback = FeedbackTone.CORRECT
            self._after_pair_matched()
        elif outcome is SelectionOutcome.MISMATCHED:
            self.feedback = FeedbackTone.INCORRECT

            def cooldown() -> None:
                self.match.clear_selection()
                self.feedback = FeedbackTone.NEUTRAL

            self.timer.schedule(TimerKind.MISMATCH_COOLDOWN, self.timing.mismatch_cooldown_ms, cooldown)
        else:
            self.feedback = FeedbackTone.NEUTRAL
        return self._result(accepted=True)

    # ------------------------------------------------------------------
    # Dialogue
    # ------------------------------------------------------------------
    def _dialogue_action(self, action: Callable[[], bool]) -> ActionResult:
        self._settle()
        if self.phase is not Phase.DIALOGUE:
            return self._result(accepted=False)
        changed = action()
        if changed:
            self.feedback = FeedbackTone.NEUTRAL
        return self._result(accepted=changed)

    def select_dialogue_option(self, option: str) -> ActionResult:
        return self._dialogue_action(lambda: self.dialogue.select_option(option))

    def clear_dialogue_slot(self, index: int) -> ActionResult:
        return self._dialogue_action(lambda: self.dialogue.clear_slot(index))

    def reset_dialogue(self) -> ActionResult:
        return self._dialogue_action(self.dialogue.reset)

    def submit_dialogue_selections(
        self,
        dialogue_id: str,
        slot_values: Optional[Sequence[Optional[str]]] = None,
    ) -> ActionResult:
        """Check a dialogue; ``slot_values`` replaces the current slots when given."""

        self._settle()
        if self.phase is not Phase.DIALOGUE:
            return self._result(accepted=False)

        outcome = self.dialogue.submit(dialogue_id, slot_values)
        if outcome is SubmissionOutcome.INVALID:
            return self._result(accepted=False)
        if outcome is not SubmissionOutcome.CORRECT:
            self.feedback = FeedbackTone.INCORRECT
            return self._result(accepted=False)

        self.feedback = FeedbackTone.CORRECT
        self._events.append(DialogueCompleted(dialogue_id=dialogue_id))
        if self.dialogue.has_next:

            def advance() -> None:
                if self.dialogue.advance():
                    self.feedback = FeedbackTone.NEUTRAL

            self.timer.schedule(TimerKind.DIALOGUE_ADVANCE, self.timing.dialogue_advance_ms, advance)
        self._advance_if_complete()
        return self._result(accepted=True)

    # ------------------------------------------------------------------
    # Hints, timers and phase checks
    # ------------------------------------------------------------------
    def hint_available(self) -> bool:
        if self.phase is Phase.RECALL:
            item = self.current_item
            return item is not None and answers.hint_available(
                item.answer, self.hint_level, solved=item.id in self.mastered
            )
        if self.phase is Phase.MATCH:
            page = self.match.current_page
            return page is not None and not page.is_complete
        if self.phase is Phase.DIALOGUE:
            return self.dialogue.hint_available()
        return False

    def reveal_hint(self) -> ActionResult:
        """Recall: reveal one more letter. Match: pair one card. Dialogue: fill one slot."""

        self._settle()
        if not self.hint_available():
            return self._result(accepted=False)

        if self.phase is Phase.RECALL:
            item = self.current_item
            self.hint_level += 1
            self.feedback = FeedbackTone.NEUTRAL
            self.correction = None
            return self._result(accepted=True, hint=answers.hint(item.answer, self.hint_level))

        if self.phase is Phase.MATCH:
            self.match.force_match()
            self.feedback = FeedbackTone.CORRECT
            self._after_pair_matched()
            return self._result(accepted=True)

        self.dialogue.hint()
        self.feedback = FeedbackTone.NEUTRAL
        return self._result(accepted=True)

    def tick(self) -> ActionResult:
        """Fire the pending pause if its time has come."""

        self.timer.fire_if_due()
        return self._result()

    def advance_phase_if_complete(self) -> ActionResult:
        self.timer.fire_if_due()
        self._advance_if_complete()
        return self._result()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def progress(self) -> float:
        total = len(self.items)
        if self.phase is Phase.INTRODUCE:
            return min((self.cursor + 1) / total, 1.0) if total else 0.0
        if self.phase is Phase.RECALL:
            return len(self.mastered) / total if total else 0.0
        if self.phase is Phase.MATCH:
            return self.match.progress()
        if self.phase is Phase.DIALOGUE:
            return self.dialogue.progress()
        return 1.0

    def snapshot(self) -> Dict[str, Any]:
        item = self.current_item
        current: Optional[Dict[str, Any]] = None
        if item is not None:
            current = {
                "id": item.id,
                "translations": [
                    {"locale": translation.locale, "text": translation.text} for translation in item.translations
                ],
                "translation_label": format_translations(item),
                "answer_length": len(answers.strip_number_prefix(item.answer)),
            }
            if self.phase is Phase.INTRODUCE:
                current["answer"] = item.answer
            elif self.hint_level:
                current["hint"] = answers.hint(item.answer, self.hint_level)

        pending = self.timer.pending_kind
        return {
            "deck_id": self.deck_id,
            "phase": self.phase.value,
            "cursor": self.cursor,
            "item_count": len(self.items),
            "current_item": current,
            "hint_level": self.hint_level,
            "hint_available": self.hint_available(),
            "feedback": self.feedback.value,
            "correction": (
                {
                    "before": self.correction.before,
                    "highlight": self.correction.highlight,
                    "after": self.correction.after,
                }
                if self.correction
                else None
            ),
            "progress": round(self.progress(), 4),
            "mastered": [entry.id for entry in self.items if entry.id in self.mastered],
            "stats": {
                item_id: {"attempts": stat.attempts, "successes": stat.successes}
                for item_id, stat in self.stats.items()
            },
            "match": self.match.snapshot() if self.phase is Phase.MATCH else None,
            "dialogue": self.dialogue.snapshot() if self.phase is Phase.DIALOGUE else None,
            "pending_timer": (
                {"kind": pending.value, "remaining_ms": self.timer.remaining_ms()} if pending else None
            ),
            "complete": self.is_complete,
        }
