"""FastAPI application factory."""
from __future__ import annotations

from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vocab_drill.api.v1 import api_router
from vocab_drill.config import settings
from vocab_drill.logging_config import setup_logging


tags_metadata: List[dict[str, str]] = [
    {"name": "answers", "description": "Check a single guess or reveal a hint."},
    {"name": "decks", "description": "Browse vocabulary decks and their dialogues."},
    {"name": "drills", "description": "Run the phased drill over a deck."},
    {"name": "practice", "description": "Free practice with random words from a deck."},
    {"name": "progress", "description": "Read learner attempt statistics."},
]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""

    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Adaptive vocabulary drills for language learners.",
        version="0.1.0",
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors(), "message": "Validation failed"},
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
