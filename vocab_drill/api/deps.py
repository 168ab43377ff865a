"""Shared API dependencies."""
from __future__ import annotations

from sqlalchemy.orm import Session

from vocab_drill.db.session import SessionLocal
from vocab_drill.services.drill_service import DrillService, drill_service
from vocab_drill.utils.cache import CacheBackend, cache_backend


def get_db() -> Session:
    """Yield a database session for request lifetime."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache() -> CacheBackend:
    """Return the shared deck cache."""

    return cache_backend


def get_drill_service() -> DrillService:
    """Return the process-wide drill session registry."""

    return drill_service
