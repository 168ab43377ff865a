"""Pydantic schemas for the stateless answer endpoints."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from vocab_drill.core.drill import NearMissReason, Verdict


class CorrectionRead(BaseModel):
    """Expected answer split around the part to emphasise."""

    before: str
    highlight: str
    after: str
    text: str


class ClassifyRequest(BaseModel):
    guess: Any = None
    expected: str = Field(min_length=1)


class ClassifyResponse(BaseModel):
    verdict: Verdict
    reason: Optional[NearMissReason] = None
    correction: Optional[CorrectionRead] = None


class HintRequest(BaseModel):
    expected: str = Field(min_length=1)
    level: int = Field(0, ge=0)
    solved: bool = False


class HintResponse(BaseModel):
    hint: str
    next_available: bool
