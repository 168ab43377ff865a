"""Vocabulary deck database models."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from vocab_drill.db.base import Base
from vocab_drill.db.types import StringList


class VocabularyDeck(Base):
    """A named, ordered set of words learned together."""

    __tablename__ = "vocabulary_decks"

    id = Column(Integer, primary_key=True)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    language = Column(String(10), nullable=False, default="de")
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entries = relationship(
        "VocabularyEntry",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="VocabularyEntry.position",
    )
    dialogues = relationship(
        "DialogueExercise",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="DialogueExercise.order",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<VocabularyDeck slug={self.slug!r}>"


class VocabularyEntry(Base):
    """A word of a deck together with its translations."""

    __tablename__ = "vocabulary_entries"
    __table_args__ = (UniqueConstraint("deck_id", "word", name="uq_vocabulary_entries_deck_word"),)

    id = Column(Integer, primary_key=True)
    deck_id = Column(
        Integer, ForeignKey("vocabulary_decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    word = Column(String(255), nullable=False)

    # [{"locale": "en", "text": "..."}]
    translations = Column(JSONB().with_variant(JSON(), "sqlite"), default=list)
    audio_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    deck = relationship("VocabularyDeck", back_populates="entries")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<VocabularyEntry word={self.word!r} deck_id={self.deck_id!r}>"


class DialogueExercise(Base):
    """Short dialogue whose gaps are filled with words from the deck."""

    __tablename__ = "dialogue_exercises"

    id = Column(Integer, primary_key=True)
    deck_id = Column(
        Integer, ForeignKey("vocabulary_decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order = Column(Integer, nullable=False, default=0)

    # [{"speaker": "A", "text": "Guten ___!"}]
    lines = Column(JSONB().with_variant(JSON(), "sqlite"), default=list)
    answers = Column(StringList, nullable=False, default=list)
    options = Column(StringList, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    deck = relationship("VocabularyDeck", back_populates="dialogues")
