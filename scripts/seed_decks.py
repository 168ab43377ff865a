"""Seed a vocabulary deck (and optional dialogues) from CSV and JSON files."""
from __future__ import annotations

import csv
import json
import sys
from pathlib import Path
from sqlalchemy.orm import Session

sys.path.append(str(Path(__file__).resolve().parent.parent))

from vocab_drill.db.models.vocabulary import DialogueExercise, VocabularyDeck, VocabularyEntry
from vocab_drill.db.session import SessionLocal

TRANSLATION_LOCALES = ("en", "tr")


def read_translations(row: dict[str, str]) -> list[dict[str, str]]:
    """Collect the non-empty translation columns of a CSV row."""

    translations = []
    for locale in TRANSLATION_LOCALES:
        text = (row.get(locale) or "").strip()
        if text:
            translations.append({"locale": locale, "text": text})
    return translations


def get_or_create_deck(db: Session, slug: str, title: str, language: str) -> VocabularyDeck:
    deck = db.query(VocabularyDeck).filter(VocabularyDeck.slug == slug).first()
    if deck is None:
        deck = VocabularyDeck(slug=slug, title=title, language=language)
        db.add(deck)
        db.flush()
    return deck


def load_deck_from_csv(
    csv_path: str,
    *,
    slug: str,
    title: str | None = None,
    language: str = "de",
    dialogues_path: str | None = None,
) -> int:
    """Load words (columns ``de`` or ``answer``, ``en``, ``tr``) into a deck."""

    db: Session = SessionLocal()
    loaded = 0

    try:
        deck = get_or_create_deck(db, slug, title or slug.replace("-", " ").title(), language)
        existing = {
            word for (word,) in db.query(VocabularyEntry.word).filter(VocabularyEntry.deck_id == deck.id)
        }
        position = len(existing)

        with open(csv_path, "r", encoding="utf-8") as file:
            reader = csv.DictReader(file)

            for row in reader:
                word = (row.get("de") or row.get("answer") or "").strip()
                if not word or word in existing:
                    continue

                db.add(
                    VocabularyEntry(
                        deck_id=deck.id,
                        position=position,
                        word=word,
                        translations=read_translations(row),
                        audio_url=row.get("audio_url") or None,
                    )
                )
                existing.add(word)
                position += 1
                loaded += 1

        if dialogues_path:
            with open(dialogues_path, "r", encoding="utf-8") as file:
                dialogues = json.load(file)
            for order, dialogue in enumerate(dialogues):
                db.add(
                    DialogueExercise(
                        deck_id=deck.id,
                        order=dialogue.get("order", order),
                        lines=dialogue.get("lines", []),
                        answers=dialogue.get("answers", []),
                        options=dialogue.get("options", []),
                    )
                )
            print(f"Loaded {len(dialogues)} dialogues")

        db.commit()
        return loaded

    except Exception as exc:  # pragma: no cover - CLI feedback
        db.rollback()
        print(f"Error loading deck: {exc}")
        raise
    finally:
        db.close()


def generate_sample_files(output_dir: Path | None = None) -> tuple[Path, Path]:
    """Write a small greetings deck and one dialogue for local testing."""

    sample_words = [
        ["de", "en", "tr"],
        ["Hallo", "hello", "merhaba"],
        ["Guten Morgen", "good morning", "günaydın"],
        ["Guten Tag", "good day", "iyi günler"],
        ["Guten Abend", "good evening", "iyi akşamlar"],
        ["Gute Nacht", "good night", "iyi geceler"],
        ["Willkommen", "welcome", "hoş geldiniz"],
        ["Tschüss", "bye", "hoşça kal"],
        ["Auf Wiedersehen", "goodbye", "güle güle"],
        ["Bis später", "see you later", "sonra görüşürüz"],
    ]
    sample_dialogues = [
        {
            "lines": [
                {"speaker": "Anna", "text": "___, Herr Weber!"},
                {"speaker": "Herr Weber", "text": "Hallo Anna. ___!"},
            ],
            "answers": ["Guten Morgen", "Willkommen"],
            "options": ["Guten Morgen", "Willkommen", "Gute Nacht", "Tschüss"],
        },
    ]

    output_dir = output_dir or Path(".")
    csv_path = output_dir / "deck_greetings_sample.csv"
    json_path = output_dir / "deck_greetings_dialogues.json"

    with open(csv_path, "w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerows(sample_words)
    with open(json_path, "w", encoding="utf-8") as file:
        json.dump(sample_dialogues, file, ensure_ascii=False, indent=2)

    print(f"Sample files generated: {csv_path}, {json_path}")
    return csv_path, json_path


if __name__ == "__main__":  # pragma: no cover - CLI execution
    import argparse

    parser = argparse.ArgumentParser(description="Seed a vocabulary deck")
    parser.add_argument("--csv", type=str, help="Path to CSV file")
    parser.add_argument("--slug", type=str, help="Deck slug")
    parser.add_argument("--title", type=str, help="Deck title")
    parser.add_argument("--language", type=str, default="de", help="Language code")
    parser.add_argument("--dialogues", type=str, help="Path to a JSON list of dialogues")
    parser.add_argument(
        "--generate-sample",
        action="store_true",
        help="Generate sample CSV and dialogue files",
    )

    args = parser.parse_args()

    if args.generate_sample:
        generate_sample_files()
    elif args.csv and args.slug:
        count = load_deck_from_csv(
            args.csv,
            slug=args.slug,
            title=args.title,
            language=args.language,
            dialogues_path=args.dialogues,
        )
        print(f"Successfully loaded {count} words")
    else:
        parser.error("Please specify --csv and --slug, or --generate-sample")
