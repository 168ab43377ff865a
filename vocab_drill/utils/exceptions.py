"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from loguru import logger


class VocabDrillException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DatabaseError(VocabDrillException):
    """Database operation errors."""
    pass


class DeckNotFoundError(VocabDrillException):
    """Raised when a vocabulary deck cannot be located."""
    pass


class DrillSessionNotFoundError(VocabDrillException):
    """Raised when a drill session id is unknown or has expired."""
    pass


class ProgressError(VocabDrillException):
    """Attempt or completion bookkeeping could not be persisted."""
    pass


def handle_database_error(error: Exception) -> HTTPException:
    """Handle database errors and return appropriate HTTP response."""
    logger.error(f"Database error: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database operation failed. Please try again later."
    )


def handle_deck_not_found(error: DeckNotFoundError) -> HTTPException:
    """Handle lookups of unknown decks."""
    logger.warning(f"Deck not found: {error.message}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message
    )


def handle_session_not_found(error: DrillSessionNotFoundError) -> HTTPException:
    """Handle lookups of unknown or expired drill sessions."""
    logger.warning(f"Drill session not found: {error.message}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message
    )


def handle_progress_error(error: ProgressError) -> HTTPException:
    """Handle progress tracking errors."""
    logger.error(f"Progress error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "message": error.message,
            "details": error.details
        }
    )
