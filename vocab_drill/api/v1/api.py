"""API router for version 1."""
from fastapi import APIRouter

from vocab_drill.api.v1.endpoints import answers, decks, drills, practice, progress


api_router = APIRouter()
api_router.include_router(answers.router)
api_router.include_router(decks.router)
api_router.include_router(drills.router)
api_router.include_router(practice.router)
api_router.include_router(progress.router)
