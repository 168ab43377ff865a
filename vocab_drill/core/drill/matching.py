"""Pair-matching board: translations on the left, answers on the right."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from .models import MatchSide, VocabularyItem

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    if size <= 0:
        return [list(items)]
    return [list(items[index:index + size]) for index in range(0, len(items), size)]


def format_translations(item: VocabularyItem) -> str:
    """Render ``EN: dog · TR: köpek``, falling back to every locale available."""

    pieces: List[str] = []
    english = item.translation_for("en")
    turkish = item.translation_for("tr")
    if english:
        pieces.append(f"EN: {english}")
    if turkish:
        pieces.append(f"TR: {turkish}")
    if not pieces and item.translations:
        pieces.append(
            " / ".join(f"{translation.locale.upper()}: {translation.text}" for translation in item.translations)
        )
    return " · ".join(pieces)


class SelectionOutcome(str, Enum):
    IGNORED = "ignored"
    SELECTED = "selected"
    MATCHED = "matched"
    MISMATCHED = "mismatched"


@dataclass
class MatchPage:
    """One page of pairs with its own shuffled columns."""

    pairs: List[VocabularyItem]
    left_order: List[str]
    right_order: List[str]
    matched: List[str] = field(default_factory=list)

    @property
    def pair_ids(self) -> List[str]:
        return [pair.id for pair in self.pairs]

    @property
    def is_complete(self) -> bool:
        return len(self.matched) == len(self.pairs)

    def contains(self, item_id: str) -> bool:
        return any(pair.id == item_id for pair in self.pairs)

    def mark_matched(self, item_id: str) -> bool:
        if item_id in self.matched or not self.contains(item_id):
            return False
        self.matched.append(item_id)
        return True


class MatchBoard:
    """Pages of translation/answer pairs visited strictly in order."""

    def __init__(
        self,
        items: Sequence[VocabularyItem],
        *,
        page_size: int = 5,
        rng: Optional[random.Random] = None,
    ) -> None:
        rng = rng or random.Random()
        eligible = [item for item in items if item.has_translation]
        self.pages: List[MatchPage] = []
        for group in chunk(eligible, page_size):
            ids = [item.id for item in group]
            left, right = list(ids), list(ids)
            rng.shuffle(left)
            rng.shuffle(right)
            self.pages.append(MatchPage(pairs=group, left_order=left, right_order=right))
        self.page_index = 0
        self.selected_left: Optional[str] = None
        self.selected_right: Optional[str] = None
        self.mismatch: bool = False

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    @property
    def total_pairs(self) -> int:
        return sum(len(page.pairs) for page in self.pages)

    @property
    def matched_pairs(self) -> int:
        return sum(len(page.matched) for page in self.pages)

    @property
    def has_content(self) -> bool:
        """A single pair is not a matching exercise."""

        return self.total_pairs >= 2

    @property
    def current_page(self) -> Optional[MatchPage]:
        if 0 <= self.page_index < len(self.pages):
            return self.pages[self.page_index]
        return None

    @property
    def all_matched(self) -> bool:
        return all(page.is_complete for page in self.pages)

    @property
    def has_next_page(self) -> bool:
        return self.page_index < len(self.pages) - 1

    def progress(self) -> float:
        total = self.total_pairs
        return self.matched_pairs / total if total else 0.0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def clear_selection(self) -> None:
        self.selected_left = None
        self.selected_right = None
        self.mismatch = False

    def select(self, side: MatchSide, item_id: str) -> SelectionOutcome:
        """Toggle a card; a pair of selections either matches or mismatches."""

        page = self.current_page
        if page is None or not page.contains(item_id) or item_id in page.matched:
            return SelectionOutcome.IGNORED

        self.mismatch = False
        if side is MatchSide.LEFT:
            self.selected_left = None if self.selected_left == item_id else item_id
        else:
            self.selected_right = None if self.selected_right == item_id else item_id

        if self.selected_left is None or self.selected_right is None:
            return SelectionOutcome.SELECTED

        if self.selected_left == self.selected_right:
            page.mark_matched(item_id)
            self.clear_selection()
            return SelectionOutcome.MATCHED

        self.mismatch = True
        return SelectionOutcome.MISMATCHED

    def force_match(self) -> Optional[str]:
        """Match the first unmatched pair of the current page."""

        page = self.current_page
        if page is None:
            return None
        for pair in page.pairs:
            if pair.id not in page.matched:
                page.mark_matched(pair.id)
                self.clear_selection()
                return pair.id
        return None

    def advance_page(self) -> bool:
        page = self.current_page
        if page is None or not page.is_complete or not self.has_next_page:
            return False
        self.page_index += 1
        self.clear_selection()
        return True

    def snapshot(self) -> Dict[str, Any]:
        page = self.current_page
        by_id = {pair.id: pair for pair in page.pairs} if page else {}
        return {
            "page_index": self.page_index,
            "page_count": len(self.pages),
            "left": [
                {"id": item_id, "text": format_translations(by_id[item_id])}
                for item_id in (page.left_order if page else [])
            ],
            "right": [
                {"id": item_id, "text": by_id[item_id].answer}
                for item_id in (page.right_order if page else [])
            ],
            "matched": list(page.matched) if page else [],
            "selected_left": self.selected_left,
            "selected_right": self.selected_right,
            "mismatch": self.mismatch,
            "matched_pairs": self.matched_pairs,
            "total_pairs": self.total_pairs,
        }
