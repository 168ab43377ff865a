"""Pydantic schemas for learner progress."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class EntryProgressRead(BaseModel):
    entry_id: int
    word: str
    attempts: int
    successes: int
    last_attempt_at: Optional[datetime] = None


class DeckProgressRead(BaseModel):
    """Attempt counters and completion state of one learner on one deck."""

    learner_id: str
    deck_slug: str
    entry_count: int
    learned_count: int
    ratio: float
    completed: bool
    completed_at: Optional[datetime] = None
    entries: List[EntryProgressRead]
