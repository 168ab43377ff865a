"""In-process registry of running drill sessions."""
from __future__ import annotations

import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Union

from loguru import logger
from sqlalchemy.orm import Session

from vocab_drill.config import Settings, settings as default_settings
from vocab_drill.core.drill import ActionResult, DrillEvent, DrillSession, PracticeRound, SessionTiming
from vocab_drill.services.deck import DeckService
from vocab_drill.services.progress import ProgressService
from vocab_drill.utils.cache import SupportsCache
from vocab_drill.utils.exceptions import DrillSessionNotFoundError, ProgressError

Runner = Union[DrillSession, PracticeRound]


@dataclass(slots=True)
class DrillHandle:
    """A running session together with who it belongs to."""

    id: str
    kind: str
    learner_id: str
    deck_id: int
    deck_slug: str
    runner: Runner
    touched_at: float
    lock: threading.Lock = field(default_factory=threading.Lock)
    pending_events: List[DrillEvent] = field(default_factory=list)


@dataclass(slots=True)
class DrillOutcome:
    handle: DrillHandle
    result: ActionResult
    persisted: bool


class DrillService:
    """Create, look up and drive drill sessions, persisting what they emit.

    Engine state is decided before anything is written. When persistence
    fails the session keeps its new state. The unwritten events stay on the
    handle and are retried ahead of the next batch.
    """

    def __init__(
        self,
        *,
        config: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng_factory: Callable[[], random.Random] = random.Random,
    ) -> None:
        self.config = config or default_settings
        self._clock = clock
        self._rng_factory = rng_factory
        self._lock = threading.Lock()
        self._handles: dict[str, DrillHandle] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def _purge_expired(self) -> None:
        cutoff = self._clock() - self.config.DRILL_SESSION_TTL_SECONDS
        expired = [drill_id for drill_id, handle in self._handles.items() if handle.touched_at < cutoff]
        for drill_id in expired:
            self._handles.pop(drill_id, None)
        if expired:
            logger.info("Expired idle drill sessions", count=len(expired))

    def _register(self, kind: str, learner_id: str, deck_id: int, deck_slug: str, runner: Runner) -> DrillHandle:
        handle = DrillHandle(
            id=uuid.uuid4().hex,
            kind=kind,
            learner_id=learner_id,
            deck_id=deck_id,
            deck_slug=deck_slug,
            runner=runner,
            touched_at=self._clock(),
        )
        with self._lock:
            self._purge_expired()
            self._handles[handle.id] = handle
        logger.info("Drill session started", drill_id=handle.id, kind=kind, learner_id=learner_id, deck=deck_slug)
        return handle

    def get(self, drill_id: str, *, kind: str | None = None) -> DrillHandle:
        with self._lock:
            self._purge_expired()
            handle = self._handles.get(drill_id)
            if handle is None or (kind is not None and handle.kind != kind):
                raise DrillSessionNotFoundError(f"Drill session '{drill_id}' not found", {"drill_id": drill_id})
            handle.touched_at = self._clock()
            return handle

    def discard(self, drill_id: str) -> None:
        with self._lock:
            handle = self._handles.pop(drill_id, None)
        if handle is None:
            raise DrillSessionNotFoundError(f"Drill session '{drill_id}' not found", {"drill_id": drill_id})
        logger.info("Drill session discarded", drill_id=drill_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(
        self,
        db: Session,
        *,
        learner_id: str,
        deck_slug: str,
        cache: SupportsCache | None = None,
    ) -> DrillOutcome:
        """Open a phased drill over a deck for a learner."""

        deck = DeckService(db, cache=cache).load_deck(deck_slug)
        progress = ProgressService(db)
        stats = progress.get_stats(
            learner_id=learner_id,
            entry_ids=[int(item.id) for item in deck.items if item.id.isdigit()],
        )
        session = DrillSession(
            str(deck.id),
            deck.items,
            stats=stats,
            dialogues=deck.dialogues,
            already_complete=progress.is_complete(learner_id=learner_id, deck_id=deck.id),
            timing=SessionTiming.from_settings(self.config),
            page_size=self.config.DRILL_MATCH_PAGE_SIZE,
            clock=self._clock,
            rng=self._rng_factory(),
        )
        handle = self._register("drill", learner_id, deck.id, deck.slug, session)
        # An empty deck completes on creation.
        result = session.advance_phase_if_complete()
        return DrillOutcome(handle, result, self._persist(db, handle, result))

    def start_practice(
        self,
        db: Session,
        *,
        learner_id: str,
        deck_slug: str,
        cache: SupportsCache | None = None,
    ) -> DrillOutcome:
        """Open an endless practice round over a deck."""

        deck = DeckService(db, cache=cache).load_deck(deck_slug)
        practice = PracticeRound(
            deck.items,
            advance_ms=self.config.DRILL_PRACTICE_ADVANCE_MS,
            clock=self._clock,
            rng=self._rng_factory(),
        )
        handle = self._register("practice", learner_id, deck.id, deck.slug, practice)
        return DrillOutcome(handle, practice.tick(), True)

    def act(
        self,
        db: Session,
        drill_id: str,
        action: Callable[[Runner], ActionResult],
        *,
        kind: str = "drill",
    ) -> DrillOutcome:
        """Run ``action`` against a session, then persist its events."""

        handle = self.get(drill_id, kind=kind)
        with handle.lock:
            result = action(handle.runner)
            persisted = self._persist(db, handle, result)
        return DrillOutcome(handle, result, persisted)

    def _persist(self, db: Session, handle: DrillHandle, result: ActionResult) -> bool:
        events = [*handle.pending_events, *result.events]
        if not events:
            return True
        try:
            ProgressService(db).apply_events(learner_id=handle.learner_id, deck_id=handle.deck_id, events=events)
        except ProgressError as exc:
            handle.pending_events = events
            logger.error(
                "Drill events not persisted",
                drill_id=handle.id,
                learner_id=handle.learner_id,
                pending=len(events),
                error=exc.message,
                details=exc.details,
            )
            return False
        if handle.pending_events:
            logger.info("Retried drill events persisted", drill_id=handle.id, retried=len(handle.pending_events))
        handle.pending_events = []
        return True


drill_service = DrillService()
