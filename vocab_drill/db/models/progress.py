"""Learner progress models."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vocab_drill.db.base import Base


class UserVocabularyStat(Base):
    """Attempt counters for one learner and one vocabulary entry."""

    __tablename__ = "user_vocabulary_stats"
    __table_args__ = (
        UniqueConstraint("learner_id", "entry_id", name="uq_user_vocabulary_stats_learner_entry"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    learner_id = Column(String(64), nullable=False, index=True)
    entry_id = Column(
        Integer, ForeignKey("vocabulary_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )

    attempts = Column(Integer, nullable=False, default=0)
    successes = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    entry = relationship("VocabularyEntry")

    def record(self, correct: bool, at) -> None:
        """Count one attempt."""

        self.attempts = (self.attempts or 0) + 1
        if correct:
            self.successes = (self.successes or 0) + 1
        self.last_attempt_at = at


class DeckCompletion(Base):
    """Marks a deck as finished by a learner."""

    __tablename__ = "deck_completions"
    __table_args__ = (UniqueConstraint("learner_id", "deck_id", name="uq_deck_completions_learner_deck"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    learner_id = Column(String(64), nullable=False, index=True)
    deck_id = Column(
        Integer, ForeignKey("vocabulary_decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    deck = relationship("VocabularyDeck")
