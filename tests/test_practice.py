import random

from vocab_drill.core.drill import AttemptRecorded, PracticeRound, Verdict, VocabularyItem


def make_round(items, clock, seed=5):
    return PracticeRound(items, advance_ms=1000, clock=clock, rng=random.Random(seed))


def test_practice_uses_only_translated_words(translated_items, bare_items, clock):
    practice = make_round(translated_items + bare_items, clock)

    assert {item.id for item in practice.items} == {item.id for item in translated_items}


def test_correct_answer_records_success_and_moves_on(translated_items, clock):
    practice = make_round(translated_items, clock)
    first = practice.current

    result = practice.submit(first.answer)

    assert result.classification.verdict is Verdict.CORRECT
    assert [type(event) for event in result.events] == [AttemptRecorded]
    assert result.events[0].correct is True
    assert result.snapshot["pending_timer"] == "practice_advance"

    clock.advance(1)
    practice.tick()
    assert practice.current.id != first.id


def test_wrong_answer_reveals_word_and_copy_is_not_a_success(translated_items, clock):
    practice = make_round(translated_items, clock)
    item = practice.current

    wrong = practice.submit("Fahrrad")
    copied = practice.submit(item.answer)

    assert wrong.classification.verdict is Verdict.INCORRECT
    assert wrong.hint == item.answer
    assert wrong.events[0].correct is False
    assert copied.classification.verdict is Verdict.CORRECT
    assert copied.events == []


def test_near_miss_records_nothing(clock):
    items = [VocabularyItem.from_record({"id": "1", "answer": "der Hund", "translations": {"en": "dog"}})]
    practice = make_round(items, clock)

    result = practice.submit("Hund")

    assert result.classification.verdict is Verdict.ALMOST
    assert result.events == []
    assert result.correction.highlight == "der"


def test_skip_never_repeats_previous_word(translated_items, clock):
    practice = make_round(translated_items, clock)

    for _ in range(20):
        previous = practice.current.id
        practice.skip()
        assert practice.current.id != previous


def test_practice_hint_reveals_letters(clock):
    items = [VocabularyItem.from_record({"id": "1", "answer": "Hund", "translations": {"en": "dog"}})]
    practice = make_round(items, clock)

    assert practice.reveal_hint().hint == "H"
    assert practice.reveal_hint().hint == "Hu"
    assert practice.snapshot()["hint"] == "Hu"


def test_empty_practice_has_no_word(bare_items, clock):
    practice = make_round(bare_items, clock)

    assert practice.current is None
    assert practice.submit("eins").accepted is False
