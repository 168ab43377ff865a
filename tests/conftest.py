"""Pytest fixtures for engine and API tests."""

import random
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vocab_drill.api.deps import get_db, get_drill_service
from vocab_drill.config import settings
from vocab_drill.core.drill import DialogueExercise, Translation, VocabularyItem
from vocab_drill.db import models  # noqa: F401  # Imported for side effects
from vocab_drill.db.base import Base
from vocab_drill.db.models import (
    DeckCompletion,
    DialogueExercise as DialogueExerciseModel,
    UserVocabularyStat,
    VocabularyDeck,
    VocabularyEntry,
)
from vocab_drill.main import create_app
from vocab_drill.services.drill_service import DrillService
from vocab_drill.utils.cache import cache_backend


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def advance_ms(self, milliseconds: int) -> None:
        self.now += milliseconds / 1000.0


def make_item(item_id: str, answer: str, **translations: str) -> VocabularyItem:
    return VocabularyItem(
        id=item_id,
        answer=answer,
        translations=tuple(Translation(locale=locale, text=text) for locale, text in translations.items()),
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(7)


@pytest.fixture()
def translated_items() -> list[VocabularyItem]:
    words = [
        ("der Hund", "dog", "köpek"),
        ("die Katze", "cat", "kedi"),
        ("das Haus", "house", "ev"),
        ("können", "can", "yapabilmek"),
        ("die Mutter", "mother", "anne"),
        ("der Apfel", "apple", "elma"),
    ]
    return [make_item(f"w{index}", answer, en=en, tr=tr) for index, (answer, en, tr) in enumerate(words, 1)]


@pytest.fixture()
def bare_items() -> list[VocabularyItem]:
    answers = ["eins", "zwei", "drei", "vier", "fünf", "sechs", "sieben"]
    return [make_item(f"b{index}", answer) for index, answer in enumerate(answers, 1)]


@pytest.fixture()
def greeting_dialogues() -> list[DialogueExercise]:
    return [
        DialogueExercise.create(
            "d1",
            lines=[("A", "Guten ___!"), ("B", "Guten ___, wie geht's?")],
            answers=["Morgen", "Tag"],
            options=["Morgen", "Tag", "Abend"],
        ),
        DialogueExercise.create(
            "d2",
            lines=[("A", "Gute ___!")],
            answers=["Nacht"],
            options=["Nacht", "Woche"],
        ),
    ]


@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    tables = [
        VocabularyDeck.__table__,
        VocabularyEntry.__table__,
        DialogueExerciseModel.__table__,
        UserVocabularyStat.__table__,
        DeckCompletion.__table__,
    ]
    Base.metadata.create_all(bind=engine, tables=tables)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(tables)))


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for model in (DeckCompletion, UserVocabularyStat, DialogueExerciseModel, VocabularyEntry, VocabularyDeck):
            db.query(model).delete()
        db.commit()
        db.close()


@pytest.fixture(autouse=True)
def clear_cache() -> Generator[None, None, None]:
    cache_backend.clear()
    try:
        yield
    finally:
        cache_backend.clear()


@pytest.fixture()
def drill_service(clock: FakeClock) -> DrillService:
    return DrillService(config=settings, clock=clock, rng_factory=lambda: random.Random(3))


@pytest.fixture()
def client(db_session: Session, drill_service: DrillService) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_drill_service] = lambda: drill_service
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def async_client(db_session: Session) -> AsyncGenerator["httpx.AsyncClient", None]:
    import httpx

    app = create_app()

    async def override_get_db() -> AsyncGenerator[Session, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def greetings_deck(db_session: Session) -> VocabularyDeck:
    deck = VocabularyDeck(slug="greetings", title="Greetings", language="de")
    deck.entries = [
        VocabularyEntry(
            position=index,
            word=word,
            translations=[{"locale": "en", "text": en}, {"locale": "tr", "text": tr}],
        )
        for index, (word, en, tr) in enumerate(
            [
                ("der Morgen", "morning", "sabah"),
                ("der Tag", "day", "gün"),
                ("die Nacht", "night", "gece"),
            ]
        )
    ]
    deck.dialogues = [
        DialogueExerciseModel(
            order=0,
            lines=[{"speaker": "A", "text": "Guten ___!"}],
            answers=["Morgen"],
            options=["Morgen", "Abend"],
        )
    ]
    db_session.add(deck)
    db_session.commit()
    return deck


@pytest.fixture()
def empty_deck(db_session: Session) -> VocabularyDeck:
    deck = VocabularyDeck(slug="empty", title="Empty", language="de")
    db_session.add(deck)
    db_session.commit()
    return deck
