"""API endpoint modules for v1."""

from vocab_drill.api.v1.endpoints import answers, decks, drills, practice, progress

__all__ = ["answers", "decks", "drills", "practice", "progress"]
