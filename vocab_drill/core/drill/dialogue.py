"""Dialogue gap-filling exercises shown after the vocabulary has been learned."""
from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .answers import comparison_key
from .models import DialogueExercise


class SubmissionOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


class DialogueBoard:
    """Slot state for the dialogues of one deck, visited in their given order."""

    def __init__(self, dialogues: Sequence[DialogueExercise]) -> None:
        self.dialogues: List[DialogueExercise] = [dialogue for dialogue in dialogues if dialogue.answers]
        skipped = len(dialogues) - len(self.dialogues)
        if skipped:
            logger.info("Skipping dialogues without answers", skipped=skipped)
        self.index = 0
        self.completed: List[str] = []
        self.submissions: Dict[str, int] = {}
        self.selections: List[Optional[str]] = self._empty_slots()

    def _empty_slots(self) -> List[Optional[str]]:
        dialogue = self.current
        return [None] * len(dialogue.answers) if dialogue else []

    @property
    def has_content(self) -> bool:
        return bool(self.dialogues)

    @property
    def current(self) -> Optional[DialogueExercise]:
        if 0 <= self.index < len(self.dialogues):
            return self.dialogues[self.index]
        return None

    @property
    def current_completed(self) -> bool:
        dialogue = self.current
        return dialogue is not None and dialogue.id in self.completed

    @property
    def all_completed(self) -> bool:
        return all(dialogue.id in self.completed for dialogue in self.dialogues)

    @property
    def has_next(self) -> bool:
        return self.index < len(self.dialogues) - 1

    def progress(self) -> float:
        return len(self.completed) / len(self.dialogues) if self.dialogues else 0.0

    def _editable(self) -> Optional[DialogueExercise]:
        dialogue = self.current
        if dialogue is None or dialogue.id in self.completed:
            return None
        return dialogue

    @staticmethod
    def _allowed(dialogue: DialogueExercise, option: str) -> int:
        """How often ``option`` may be placed; unknown-to-answers options once."""

        required = sum(1 for answer in dialogue.answers if answer == option)
        return required or 1

    def select_option(self, option: str) -> bool:
        dialogue = self._editable()
        if dialogue is None or option not in dialogue.options:
            return False
        used = sum(1 for value in self.selections if value == option)
        if used >= self._allowed(dialogue, option):
            return False
        try:
            slot = self.selections.index(None)
        except ValueError:
            return False
        self.selections[slot] = option
        return True

    def clear_slot(self, index: int) -> bool:
        if self._editable() is None or not 0 <= index < len(self.selections):
            return False
        if self.selections[index] is None:
            return False
        self.selections[index] = None
        return True

    def reset(self) -> bool:
        if self._editable() is None:
            return False
        self.selections = self._empty_slots()
        return True

    def _load(self, slot_values: Sequence[Optional[str]], dialogue: DialogueExercise) -> bool:
        if len(slot_values) != len(dialogue.answers):
            return False
        values: List[Optional[str]] = []
        for value in slot_values:
            if value is not None and not isinstance(value, str):
                return False
            values.append(value if value and value.strip() else None)
        counts = Counter(value for value in values if value is not None)
        if any(count > self._allowed(dialogue, value) for value, count in counts.items()):
            return False
        self.selections = values
        return True

    def submit(
        self,
        dialogue_id: str,
        slot_values: Optional[Sequence[Optional[str]]] = None,
    ) -> SubmissionOutcome:
        """Check the filled slots; only complete submissions are counted."""

        dialogue = self._editable()
        if dialogue is None or dialogue.id != dialogue_id:
            return SubmissionOutcome.INVALID
        if slot_values is not None and not self._load(slot_values, dialogue):
            return SubmissionOutcome.INVALID
        if any(value is None for value in self.selections):
            return SubmissionOutcome.INCOMPLETE

        self.submissions[dialogue.id] = self.submissions.get(dialogue.id, 0) + 1
        correct = all(
            comparison_key(value or "") == comparison_key(expected)
            for value, expected in zip(self.selections, dialogue.answers)
        )
        if not correct:
            return SubmissionOutcome.INCORRECT
        self.completed.append(dialogue.id)
        return SubmissionOutcome.CORRECT

    def hint(self) -> bool:
        """Fill the first slot that is empty or holds a wrong value."""

        dialogue = self._editable()
        if dialogue is None:
            return False
        for index, expected in enumerate(dialogue.answers):
            value = self.selections[index]
            if value is None or comparison_key(value) != comparison_key(expected):
                self.selections[index] = expected
                return True
        return False

    def hint_available(self) -> bool:
        dialogue = self._editable()
        if dialogue is None:
            return False
        return any(
            value is None or comparison_key(value) != comparison_key(expected)
            for value, expected in zip(self.selections, dialogue.answers)
        )

    def advance(self) -> bool:
        if not self.current_completed or not self.has_next:
            return False
        self.index += 1
        self.selections = self._empty_slots()
        return True

    def snapshot(self) -> Dict[str, Any]:
        dialogue = self.current
        return {
            "index": self.index,
            "count": len(self.dialogues),
            "id": dialogue.id if dialogue else None,
            "lines": [{"speaker": line.speaker, "text": line.text} for line in dialogue.lines] if dialogue else [],
            "options": list(dialogue.options) if dialogue else [],
            "selections": list(self.selections),
            "completed": list(self.completed),
            "submissions": self.submissions.get(dialogue.id, 0) if dialogue else 0,
        }
