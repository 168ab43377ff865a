import random

import pytest

from vocab_drill.core.drill import (
    DrillSession,
    MatchBoard,
    MatchSide,
    Phase,
    SelectionOutcome,
    SessionCompleted,
    SessionTiming,
    VocabularyItem,
    format_translations,
)


@pytest.fixture()
def match_session(translated_items, clock, rng):
    session = DrillSession(
        "deck",
        translated_items,
        timing=SessionTiming(mismatch_cooldown_ms=800, page_advance_ms=600, dialogue_advance_ms=800),
        clock=clock,
        rng=rng,
    )
    for _ in range(len(translated_items)):
        session.next_item()
    while session.phase is Phase.RECALL:
        item = session.current_item
        session.submit_guess(item.id, item.answer)
    assert session.phase is Phase.MATCH
    return session


def test_board_pages_hold_five_pairs_in_deck_order(translated_items):
    board = MatchBoard(translated_items, page_size=5, rng=random.Random(1))

    assert [page.pair_ids for page in board.pages] == [["w1", "w2", "w3", "w4", "w5"], ["w6"]]
    assert board.total_pairs == 6
    assert sorted(board.pages[0].left_order) == board.pages[0].pair_ids
    assert sorted(board.pages[0].right_order) == board.pages[0].pair_ids


def test_board_needs_two_translated_items():
    items = [
        VocabularyItem.from_record({"id": "1", "answer": "Hund", "translations": {"en": "dog"}}),
        VocabularyItem.from_record({"id": "2", "answer": "Katze"}),
    ]

    assert not MatchBoard(items).has_content


def test_selecting_same_card_twice_deselects(translated_items):
    board = MatchBoard(translated_items, rng=random.Random(1))

    assert board.select(MatchSide.LEFT, "w1") is SelectionOutcome.SELECTED
    assert board.selected_left == "w1"
    assert board.select(MatchSide.LEFT, "w1") is SelectionOutcome.SELECTED
    assert board.selected_left is None


def test_matched_pair_is_permanent(translated_items):
    board = MatchBoard(translated_items, rng=random.Random(1))
    board.select(MatchSide.LEFT, "w1")

    assert board.select(MatchSide.RIGHT, "w1") is SelectionOutcome.MATCHED
    assert board.select(MatchSide.LEFT, "w1") is SelectionOutcome.IGNORED
    assert board.select(MatchSide.RIGHT, "w1") is SelectionOutcome.IGNORED
    assert board.current_page.matched == ["w1"]
    assert board.mismatch is False


def test_cards_from_later_pages_are_ignored(translated_items):
    board = MatchBoard(translated_items, rng=random.Random(1))

    assert board.select(MatchSide.LEFT, "w6") is SelectionOutcome.IGNORED


def test_format_translations():
    item = VocabularyItem.from_record(
        {"id": "1", "answer": "Hund", "translations": [{"locale": "en", "value": "dog"}, {"locale": "tr", "value": "köpek"}]}
    )
    other = VocabularyItem.from_record({"id": "2", "answer": "Hund", "translations": {"fr": "chien", "es": "perro"}})

    assert format_translations(item) == "EN: dog · TR: köpek"
    assert format_translations(other) == "FR: chien / ES: perro"


def test_mismatch_flashes_then_clears(match_session, clock):
    match_session.select_match_card("left", "w1")
    result = match_session.select_match_card("right", "w2")

    assert result.snapshot["match"]["mismatch"] is True
    assert result.snapshot["pending_timer"]["kind"] == "mismatch_cooldown"
    assert result.snapshot["feedback"] == "incorrect"

    clock.advance(0.5)
    assert match_session.tick().snapshot["match"]["mismatch"] is True

    clock.advance(0.5)
    snapshot = match_session.tick().snapshot
    assert snapshot["match"]["mismatch"] is False
    assert snapshot["match"]["selected_left"] is None
    assert snapshot["match"]["selected_right"] is None
    assert snapshot["match"]["matched"] == []


def test_new_selection_cancels_cooldown_and_keeps_pair(match_session):
    match_session.select_match_card("left", "w1")
    match_session.select_match_card("right", "w2")

    result = match_session.select_match_card("left", "w3")

    assert result.snapshot["match"]["selected_left"] == "w3"
    assert result.snapshot["match"]["selected_right"] == "w2"
    assert result.snapshot["match"]["mismatch"] is True
    assert result.snapshot["pending_timer"]["kind"] == "mismatch_cooldown"


def test_fixing_one_side_after_mismatch_makes_the_match(match_session, clock):
    match_session.select_match_card("left", "w1")
    match_session.select_match_card("right", "w2")
    clock.advance(0.2)

    result = match_session.select_match_card("right", "w1")

    assert "w1" in result.snapshot["match"]["matched"]
    assert result.snapshot["match"]["selected_left"] is None
    assert result.snapshot["match"]["selected_right"] is None
    assert result.snapshot["match"]["mismatch"] is False
    assert result.snapshot["feedback"] == "correct"
    assert result.snapshot["pending_timer"] is None


def test_pages_advance_after_pause_and_phase_completes(match_session, clock):
    for item_id in ["w1", "w2", "w3", "w4", "w5"]:
        match_session.select_match_card(MatchSide.LEFT, item_id)
        result = match_session.select_match_card(MatchSide.RIGHT, item_id)

    assert result.snapshot["pending_timer"]["kind"] == "page_advance"
    assert match_session.match.page_index == 0

    clock.advance(1)
    assert match_session.tick().snapshot["match"]["page_index"] == 1

    match_session.select_match_card(MatchSide.LEFT, "w6")
    result = match_session.select_match_card(MatchSide.RIGHT, "w6")

    assert match_session.phase is Phase.COMPLETE
    assert SessionCompleted(deck_id="deck") in result.events


def test_hint_force_matches_one_pair(match_session):
    result = match_session.reveal_hint()

    assert result.accepted is True
    assert result.snapshot["match"]["matched_pairs"] == 1
    assert result.snapshot["progress"] == round(1 / 6, 4)


def test_unknown_side_is_rejected(match_session):
    assert match_session.select_match_card("middle", "w1").accepted is False
