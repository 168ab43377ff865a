"""Stateless answer checking endpoints."""
from __future__ import annotations

from fastapi import APIRouter

from vocab_drill.core.drill import Verdict, classify, hint, hint_available, render_correction
from vocab_drill.schemas import ClassifyRequest, ClassifyResponse, HintRequest, HintResponse

router = APIRouter(prefix="/answers", tags=["answers"])


@router.post("/classify", response_model=ClassifyResponse)
def classify_answer(payload: ClassifyRequest) -> ClassifyResponse:
    """Judge a guess against an expected answer."""

    result = classify(payload.guess, payload.expected)
    correction = None
    if result.verdict is Verdict.ALMOST:
        rendered = render_correction(payload.guess, payload.expected, result.reason)
        correction = {
            "before": rendered.before,
            "highlight": rendered.highlight,
            "after": rendered.after,
            "text": rendered.text,
        }
    return ClassifyResponse(verdict=result.verdict, reason=result.reason, correction=correction)


@router.post("/hint", response_model=HintResponse)
def reveal_hint(payload: HintRequest) -> HintResponse:
    """Return the first ``level`` letters of the expected answer."""

    return HintResponse(
        hint=hint(payload.expected, payload.level),
        next_available=hint_available(payload.expected, payload.level, solved=payload.solved),
    )
