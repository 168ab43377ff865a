from datetime import datetime, timezone

from vocab_drill.core.drill import (
    AttemptRecorded,
    AttemptStat,
    DrillSession,
    ItemMastered,
    Phase,
    SessionCompleted,
    SessionTiming,
    Verdict,
    VocabularyItem,
)


def finish_introduction(session: DrillSession) -> None:
    for _ in range(len(session.items)):
        session.next_item()
    assert session.phase is Phase.RECALL


def recall_everything(session: DrillSession) -> list:
    events = []
    while session.phase is Phase.RECALL:
        item = session.current_item
        events.extend(session.submit_guess(item.id, item.answer).events)
    return events


def test_introduce_walks_items_then_opens_recall(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)

    assert session.phase is Phase.INTRODUCE
    snapshot = session.snapshot()
    assert snapshot["current_item"]["answer"] == "eins"

    result = session.next_item()
    assert result.snapshot["cursor"] == 1

    finish_introduction(session)
    snapshot = session.snapshot()
    assert snapshot["phase"] == "recall"
    assert "answer" not in snapshot["current_item"]


def test_seven_word_deck_without_pairs_completes_after_recall(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)
    seen_phases = {session.phase}
    finish_introduction(session)

    completions = 0
    for index, item in enumerate(bare_items, 1):
        seen_phases.add(session.phase)
        assert session.current_item.id == item.id
        result = session.submit_guess(item.id, item.answer)
        completions += sum(isinstance(event, SessionCompleted) for event in result.events)
        if index < len(bare_items):
            assert session.phase is Phase.RECALL
    seen_phases.add(session.phase)

    assert session.is_complete
    assert completions == 1
    assert Phase.MATCH not in seen_phases
    assert Phase.DIALOGUE not in seen_phases


def test_correct_guess_records_attempt_and_mastery(bare_items, clock):
    moment = datetime(2024, 5, 1, tzinfo=timezone.utc)
    session = DrillSession("deck", bare_items, clock=clock, now=lambda: moment)
    finish_introduction(session)

    result = session.submit_guess("b1", "eins")

    assert result.classification.verdict is Verdict.CORRECT
    assert result.events == [AttemptRecorded(item_id="b1", correct=True, at=moment), ItemMastered(item_id="b1")]
    assert session.stats["b1"] == AttemptStat(attempts=1, successes=1, last_attempt_at=moment)
    assert session.current_item.id == "b2"


def test_wrong_guess_counts_attempt_and_keeps_item(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)
    finish_introduction(session)

    result = session.submit_guess("b1", "Auto")

    assert result.classification.verdict is Verdict.INCORRECT
    assert [type(event) for event in result.events] == [AttemptRecorded]
    assert session.stats["b1"].attempts == 1
    assert session.stats["b1"].successes == 0
    assert session.current_item.id == "b1"
    assert result.snapshot["feedback"] == "incorrect"


def test_near_miss_is_not_an_attempt(clock):
    items = [VocabularyItem.from_record({"id": "1", "answer": "der Hund"})]
    session = DrillSession("deck", items, clock=clock)
    finish_introduction(session)

    result = session.submit_guess("1", "Hund")

    assert result.classification.verdict is Verdict.ALMOST
    assert result.events == []
    assert result.correction.highlight == "der"
    assert session.stats["1"].attempts == 0
    assert result.snapshot["correction"]["highlight"] == "der"


def test_mastered_item_is_not_counted_twice(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)
    finish_introduction(session)
    session.submit_guess("b1", "eins")

    result = session.submit_guess("b1", "eins")

    assert result.accepted is False
    assert result.classification.verdict is Verdict.CORRECT
    assert result.events == []
    assert session.stats["b1"].successes == 1


def test_malformed_guess_is_an_ordinary_failed_attempt(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)
    finish_introduction(session)

    result = session.submit_guess("b1", None)

    assert result.classification.verdict is Verdict.INCORRECT
    assert session.stats["b1"].attempts == 1


def test_recall_starts_at_first_unlearned_item(bare_items, clock):
    stats = {"b1": AttemptStat(attempts=3, successes=2), "b2": AttemptStat(attempts=1, successes=1)}
    session = DrillSession("deck", bare_items, stats=stats, clock=clock)

    finish_introduction(session)

    assert session.current_item.id == "b3"
    assert session.snapshot()["stats"]["b1"] == {"attempts": 3, "successes": 2}


def test_returning_learner_still_drills_every_item(bare_items, clock):
    stats = {item.id: AttemptStat(attempts=1, successes=1) for item in bare_items}
    session = DrillSession("deck", bare_items, stats=stats, clock=clock)
    finish_introduction(session)

    assert session.current_item.id == "b1"
    session.submit_guess("b1", "eins")
    assert session.phase is Phase.RECALL


def test_hint_reveals_letters_until_exhausted(clock):
    items = [VocabularyItem.from_record({"id": "1", "answer": "Hund"})]
    session = DrillSession("deck", items, clock=clock)
    finish_introduction(session)

    hints = [session.reveal_hint().hint for _ in range(4)]
    exhausted = session.reveal_hint()

    assert hints == ["H", "Hu", "Hun", "Hund"]
    assert exhausted.accepted is False
    assert exhausted.snapshot["hint_available"] is False
    assert exhausted.snapshot["current_item"]["hint"] == "Hund"


def test_completion_is_reported_once(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)
    finish_introduction(session)
    events = recall_everything(session)

    assert sum(isinstance(event, SessionCompleted) for event in events) == 1
    assert session.advance_phase_if_complete().events == []
    assert session.submit_guess("b1", "eins").events == []
    assert session.advance_phase_if_complete().snapshot["complete"] is True


def test_empty_deck_completes_immediately(clock):
    session = DrillSession("deck", [], clock=clock)

    assert session.is_complete
    assert session.advance_phase_if_complete().events == [SessionCompleted(deck_id="deck")]
    assert session.advance_phase_if_complete().events == []


def test_items_without_answer_are_dropped(clock):
    items = [
        VocabularyItem.from_record({"id": "1", "answer": "Hund"}),
        VocabularyItem.from_record({"id": "2", "answer": "  "}),
        VocabularyItem.from_record({"id": "3"}),
        VocabularyItem.from_record({"id": "1", "answer": "Katze"}),
    ]

    session = DrillSession("deck", items, clock=clock)

    assert [item.id for item in session.items] == ["1"]


def test_completed_deck_resumes_at_last_phase(translated_items, greeting_dialogues, clock, rng):
    with_dialogues = DrillSession(
        "deck", translated_items, dialogues=greeting_dialogues, already_complete=True, clock=clock, rng=rng
    )
    with_pairs = DrillSession("deck", translated_items, already_complete=True, clock=clock, rng=rng)

    assert with_dialogues.phase is Phase.DIALOGUE
    assert with_pairs.phase is Phase.MATCH
    assert with_dialogues.drain_events() == []


def test_completed_deck_finishing_again_emits_nothing(bare_items, clock):
    session = DrillSession("deck", bare_items, already_complete=True, clock=clock)

    assert session.phase is Phase.RECALL
    events = recall_everything(session)

    assert session.is_complete
    assert not any(isinstance(event, SessionCompleted) for event in events)


def test_guess_outside_recall_is_ignored(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)

    result = session.submit_guess("b1", "eins")

    assert result.accepted is False
    assert session.phase is Phase.INTRODUCE
    assert session.stats["b1"].attempts == 0


def test_progress_follows_the_current_phase(bare_items, clock):
    session = DrillSession("deck", bare_items, clock=clock)
    assert session.snapshot()["progress"] == round(1 / 7, 4)

    finish_introduction(session)
    session.submit_guess("b1", "eins")
    assert session.snapshot()["progress"] == round(1 / 7, 4)

    recall_everything(session)
    assert session.snapshot()["progress"] == 1.0


def test_timing_can_be_built_from_settings():
    class Config:
        DRILL_MISMATCH_COOLDOWN_MS = 100
        DRILL_PAGE_ADVANCE_MS = 200
        DRILL_DIALOGUE_ADVANCE_MS = 300

    assert SessionTiming.from_settings(Config) == SessionTiming(100, 200, 300)
