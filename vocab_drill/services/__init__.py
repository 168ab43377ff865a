"""Service layer package."""

from vocab_drill.services.deck import DeckContent, DeckService
from vocab_drill.services.drill_service import DrillHandle, DrillOutcome, DrillService, drill_service
from vocab_drill.services.progress import ProgressService

__all__ = [
    "DeckContent",
    "DeckService",
    "DrillHandle",
    "DrillOutcome",
    "DrillService",
    "ProgressService",
    "drill_service",
]
