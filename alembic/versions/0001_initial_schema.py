"""Create deck, dialogue and learner progress tables"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "vocabulary_decks",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("language", sa.String(length=10), server_default=sa.text("'de'"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
    )
    op.create_index("ix_vocabulary_decks_slug", "vocabulary_decks", ["slug"], unique=True)

    op.create_table(
        "vocabulary_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "deck_id",
            sa.Integer(),
            sa.ForeignKey("vocabulary_decks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("word", sa.String(length=255), nullable=False),
        sa.Column("translations", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("audio_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
        sa.UniqueConstraint("deck_id", "word", name="uq_vocabulary_entries_deck_word"),
    )
    op.create_index("ix_vocabulary_entries_deck_id", "vocabulary_entries", ["deck_id"], unique=False)

    op.create_table(
        "dialogue_exercises",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "deck_id",
            sa.Integer(),
            sa.ForeignKey("vocabulary_decks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("lines", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("answers", postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column("options", postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
    )
    op.create_index("ix_dialogue_exercises_deck_id", "dialogue_exercises", ["deck_id"], unique=False)

    op.create_table(
        "user_vocabulary_stats",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("learner_id", sa.String(length=64), nullable=False),
        sa.Column(
            "entry_id",
            sa.Integer(),
            sa.ForeignKey("vocabulary_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("attempts", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("successes", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("last_attempt_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
        sa.UniqueConstraint("learner_id", "entry_id", name="uq_user_vocabulary_stats_learner_entry"),
    )
    op.create_index("ix_user_vocabulary_stats_learner_id", "user_vocabulary_stats", ["learner_id"], unique=False)
    op.create_index("ix_user_vocabulary_stats_entry_id", "user_vocabulary_stats", ["entry_id"], unique=False)

    op.create_table(
        "deck_completions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("learner_id", sa.String(length=64), nullable=False),
        sa.Column(
            "deck_id",
            sa.Integer(),
            sa.ForeignKey("vocabulary_decks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
        sa.UniqueConstraint("learner_id", "deck_id", name="uq_deck_completions_learner_deck"),
    )
    op.create_index("ix_deck_completions_learner_id", "deck_completions", ["learner_id"], unique=False)
    op.create_index("ix_deck_completions_deck_id", "deck_completions", ["deck_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_deck_completions_deck_id", table_name="deck_completions")
    op.drop_index("ix_deck_completions_learner_id", table_name="deck_completions")
    op.drop_table("deck_completions")

    op.drop_index("ix_user_vocabulary_stats_entry_id", table_name="user_vocabulary_stats")
    op.drop_index("ix_user_vocabulary_stats_learner_id", table_name="user_vocabulary_stats")
    op.drop_table("user_vocabulary_stats")

    op.drop_index("ix_dialogue_exercises_deck_id", table_name="dialogue_exercises")
    op.drop_table("dialogue_exercises")

    op.drop_index("ix_vocabulary_entries_deck_id", table_name="vocabulary_entries")
    op.drop_table("vocabulary_entries")

    op.drop_index("ix_vocabulary_decks_slug", table_name="vocabulary_decks")
    op.drop_table("vocabulary_decks")
