"""Persistence of drill attempts and deck completion."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from loguru import logger
from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocab_drill.core.drill import (
    AttemptRecorded,
    AttemptStat,
    DialogueCompleted,
    DrillEvent,
    ItemMastered,
    SessionCompleted,
)
from vocab_drill.db.models.progress import DeckCompletion, UserVocabularyStat
from vocab_drill.db.models.vocabulary import VocabularyDeck, VocabularyEntry
from vocab_drill.utils.exceptions import ProgressError


def _entry_id(item_id: str) -> int | None:
    try:
        return int(item_id)
    except (TypeError, ValueError):
        return None


class ProgressService:
    """High level helper for learner attempt statistics."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def _stat_query(self, learner_id: str, entry_id: int):
        return select(UserVocabularyStat).where(
            and_(
                UserVocabularyStat.learner_id == learner_id,
                UserVocabularyStat.entry_id == entry_id,
            )
        )

    def get_stats(self, *, learner_id: str, entry_ids: Iterable[int]) -> dict[str, AttemptStat]:
        """Return attempt counters keyed by engine item id."""

        ids = list(entry_ids)
        if not ids:
            return {}
        stmt = select(UserVocabularyStat).where(
            UserVocabularyStat.learner_id == learner_id,
            UserVocabularyStat.entry_id.in_(ids),
        )
        return {
            str(row.entry_id): AttemptStat(
                attempts=row.attempts or 0,
                successes=row.successes or 0,
                last_attempt_at=row.last_attempt_at,
            )
            for row in self.db.scalars(stmt)
        }

    def is_complete(self, *, learner_id: str, deck_id: int) -> bool:
        stmt = select(DeckCompletion.id).where(
            DeckCompletion.learner_id == learner_id, DeckCompletion.deck_id == deck_id
        )
        return self.db.scalars(stmt).first() is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _upsert_attempt(self, learner_id: str, entry_id: int, correct: bool, at: datetime) -> UserVocabularyStat:
        stat = self.db.scalars(self._stat_query(learner_id, entry_id)).first()
        if stat is None:
            stat = UserVocabularyStat(learner_id=learner_id, entry_id=entry_id, attempts=0, successes=0)
            self.db.add(stat)
        stat.record(correct, at)
        return stat

    def _upsert_completion(self, learner_id: str, deck_id: int) -> DeckCompletion:
        stmt = select(DeckCompletion).where(
            DeckCompletion.learner_id == learner_id, DeckCompletion.deck_id == deck_id
        )
        completion = self.db.scalars(stmt).first()
        if completion is None:
            completion = DeckCompletion(learner_id=learner_id, deck_id=deck_id)
            self.db.add(completion)
        return completion

    def record_attempt(
        self,
        *,
        learner_id: str,
        entry_id: int,
        correct: bool,
        at: datetime | None = None,
    ) -> UserVocabularyStat:
        """Count one attempt, creating the counter row on first use."""

        try:
            stat = self._upsert_attempt(learner_id, entry_id, correct, at or datetime.now(timezone.utc))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ProgressError(
                "Failed to record attempt", {"learner_id": learner_id, "entry_id": entry_id}
            ) from exc
        return stat

    def mark_complete(self, *, learner_id: str, deck_id: int) -> DeckCompletion:
        """Mark a deck finished; repeated calls keep the first completion."""

        try:
            completion = self._upsert_completion(learner_id, deck_id)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ProgressError(
                "Failed to mark deck complete", {"learner_id": learner_id, "deck_id": deck_id}
            ) from exc
        return completion

    def apply_events(self, *, learner_id: str, deck_id: int, events: Sequence[DrillEvent]) -> int:
        """Persist engine events in one transaction and return how many were written."""

        if not events:
            return 0
        written = 0
        try:
            for event in events:
                if isinstance(event, AttemptRecorded):
                    entry_id = _entry_id(event.item_id)
                    if entry_id is None:
                        logger.warning("Skipping attempt for unknown entry", item_id=event.item_id)
                        continue
                    self._upsert_attempt(learner_id, entry_id, event.correct, event.at)
                    written += 1
                elif isinstance(event, SessionCompleted):
                    self._upsert_completion(learner_id, deck_id)
                    written += 1
                elif isinstance(event, (ItemMastered, DialogueCompleted)):
                    logger.debug("Drill milestone", learner_id=learner_id, event=type(event).__name__)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ProgressError(
                "Failed to persist drill events",
                {"learner_id": learner_id, "deck_id": deck_id, "events": len(events)},
            ) from exc
        return written

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------
    def deck_progress(self, *, learner_id: str, deck: VocabularyDeck) -> dict[str, Any]:
        """Return per-entry counters and completion state for a deck."""

        entries = list(
            self.db.scalars(
                select(VocabularyEntry)
                .where(VocabularyEntry.deck_id == deck.id)
                .order_by(VocabularyEntry.position, VocabularyEntry.id)
            )
        )
        stats = self.get_stats(learner_id=learner_id, entry_ids=[entry.id for entry in entries])
        completion = self.db.scalars(
            select(DeckCompletion).where(
                DeckCompletion.learner_id == learner_id, DeckCompletion.deck_id == deck.id
            )
        ).first()

        rows = []
        for entry in entries:
            stat = stats.get(str(entry.id), AttemptStat())
            rows.append(
                {
                    "entry_id": entry.id,
                    "word": entry.word,
                    "attempts": stat.attempts,
                    "successes": stat.successes,
                    "last_attempt_at": stat.last_attempt_at,
                }
            )
        learned = sum(1 for row in rows if row["successes"] > 0)
        return {
            "learner_id": learner_id,
            "deck_slug": deck.slug,
            "entry_count": len(entries),
            "learned_count": learned,
            "ratio": round(learned / len(entries), 4) if entries else 0.0,
            "completed": completion is not None,
            "completed_at": completion.completed_at if completion else None,
            "entries": rows,
        }
