"""Database models package."""
from vocab_drill.db.models.vocabulary import DialogueExercise, VocabularyDeck, VocabularyEntry
from vocab_drill.db.models.progress import DeckCompletion, UserVocabularyStat

__all__ = [
    "VocabularyDeck",
    "VocabularyEntry",
    "DialogueExercise",
    "UserVocabularyStat",
    "DeckCompletion",
]
