from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from vocab_drill.core.drill import AttemptRecorded, DialogueCompleted, ItemMastered, SessionCompleted
from vocab_drill.db.models import DeckCompletion, UserVocabularyStat
from vocab_drill.services.deck import DeckService
from vocab_drill.services.progress import ProgressService
from vocab_drill.utils.cache import CacheBackend
from vocab_drill.utils.exceptions import DeckNotFoundError, ProgressError

MOMENT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_record_attempt_upserts_counters(db_session, greetings_deck):
    service = ProgressService(db_session)
    entry = greetings_deck.entries[0]

    service.record_attempt(learner_id="ada", entry_id=entry.id, correct=False, at=MOMENT)
    stat = service.record_attempt(learner_id="ada", entry_id=entry.id, correct=True, at=MOMENT)

    assert (stat.attempts, stat.successes) == (2, 1)
    assert db_session.query(UserVocabularyStat).count() == 1
    assert service.get_stats(learner_id="ada", entry_ids=[entry.id])[str(entry.id)].successes == 1
    assert service.get_stats(learner_id="grace", entry_ids=[entry.id]) == {}


def test_apply_events_writes_attempts_and_completion(db_session, greetings_deck):
    service = ProgressService(db_session)
    first, second = greetings_deck.entries[:2]
    events = [
        AttemptRecorded(item_id=str(first.id), correct=True, at=MOMENT),
        ItemMastered(item_id=str(first.id)),
        AttemptRecorded(item_id=str(second.id), correct=False, at=MOMENT),
        DialogueCompleted(dialogue_id="1"),
        SessionCompleted(deck_id=str(greetings_deck.id)),
    ]

    written = service.apply_events(learner_id="ada", deck_id=greetings_deck.id, events=events)

    assert written == 3
    assert service.is_complete(learner_id="ada", deck_id=greetings_deck.id)
    stats = service.get_stats(learner_id="ada", entry_ids=[first.id, second.id])
    assert stats[str(first.id)].successes == 1
    assert stats[str(second.id)].attempts == 1


def test_marking_complete_twice_keeps_one_row(db_session, greetings_deck):
    service = ProgressService(db_session)

    service.mark_complete(learner_id="ada", deck_id=greetings_deck.id)
    service.mark_complete(learner_id="ada", deck_id=greetings_deck.id)

    assert db_session.query(DeckCompletion).count() == 1


def test_storage_failure_raises_progress_error(db_session, greetings_deck, monkeypatch):
    service = ProgressService(db_session)

    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)

    with pytest.raises(ProgressError) as excinfo:
        service.apply_events(
            learner_id="ada",
            deck_id=greetings_deck.id,
            events=[AttemptRecorded(item_id=str(greetings_deck.entries[0].id), correct=True, at=MOMENT)],
        )
    assert excinfo.value.details["events"] == 1


def test_deck_progress_summary(db_session, greetings_deck):
    service = ProgressService(db_session)
    entry = greetings_deck.entries[0]
    service.record_attempt(learner_id="ada", entry_id=entry.id, correct=True, at=MOMENT)

    summary = service.deck_progress(learner_id="ada", deck=greetings_deck)

    assert summary["entry_count"] == 3
    assert summary["learned_count"] == 1
    assert summary["ratio"] == round(1 / 3, 4)
    assert summary["completed"] is False
    assert [row["word"] for row in summary["entries"]] == ["der Morgen", "der Tag", "die Nacht"]


def test_deck_service_loads_and_caches_deck(db_session, greetings_deck):
    cache = CacheBackend()
    service = DeckService(db_session, cache=cache)

    deck = service.load_deck("greetings")

    assert [item.answer for item in deck.items] == ["der Morgen", "der Tag", "die Nacht"]
    assert deck.items[0].translation_for("en") == "morning"
    assert deck.dialogues[0].answers == ("Morgen",)
    assert len(cache) == 1

    service.invalidate("greetings")
    assert len(cache) == 0


def test_deck_service_unknown_slug(db_session):
    with pytest.raises(DeckNotFoundError):
        DeckService(db_session, cache=CacheBackend()).load_deck("missing")


def test_deck_catalogue_counts(db_session, greetings_deck, empty_deck):
    decks = DeckService(db_session).list_decks()

    assert [(deck["slug"], deck["entry_count"], deck["dialogue_count"]) for deck in decks] == [
        ("empty", 0, 0),
        ("greetings", 3, 1),
    ]
