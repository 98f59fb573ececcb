"""engagement tables

Revision ID: 5b1e7c3a9d20
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "5b1e7c3a9d20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Upgrade schema."""
    # Таблицы users, posts, mcq_questions создаются только если модуль развернут отдельно
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("mobile", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("profile_image", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_mobile"), "users", ["mobile"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("post_type", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_posts")),
    )
    op.create_index(op.f("ix_posts_post_type"), "posts", ["post_type"], unique=False)

    op.create_table(
        "mcq_questions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_mcq_questions")),
    )

    op.create_table(
        "user_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=True),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("metadata", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_events_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_events")),
    )
    op.create_index(op.f("ix_user_events_id"), "user_events", ["id"], unique=False)
    op.create_index("ix_user_events_user_id_created_at", "user_events", ["user_id", "created_at"], unique=False)
    op.create_index("ix_user_events_user_id_event_type", "user_events", ["user_id", "event_type"], unique=False)

    op.create_table(
        "user_scores",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("total_score", sa.Integer(), nullable=False),
        sa.Column("weekly_score", sa.Integer(), nullable=False),
        sa.Column("monthly_score", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_scores_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_user_scores")),
    )

    op.create_table(
        "score_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("period", sa.String(length=16), nullable=False),
        sa.Column("period_date", sa.Date(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_score_history_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_score_history")),
        sa.UniqueConstraint("user_id", "period", "period_date", name="uq_score_history_user_period_date"),
    )
    op.create_index(op.f("ix_score_history_id"), "score_history", ["id"], unique=False)
    op.create_index(op.f("ix_score_history_user_id"), "score_history", ["user_id"], unique=False)

    op.create_table(
        "daily_digest_engagements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("card_id", sa.String(length=64), nullable=False),
        sa.Column("card_type", sa.String(length=32), nullable=False),
        sa.Column("engagement_type", sa.String(length=32), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_daily_digest_engagements_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_daily_digest_engagements")),
    )
    op.create_index(op.f("ix_daily_digest_engagements_id"), "daily_digest_engagements", ["id"], unique=False)
    op.create_index("ix_daily_digest_engagements_user_id_date", "daily_digest_engagements", ["user_id", "date"], unique=False)
    op.create_index("ix_daily_digest_engagements_user_id_card_id_date", "daily_digest_engagements", ["user_id", "card_id", "date"], unique=False)

    op.create_table(
        "daily_engagement_statuses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_present", sa.Boolean(), nullable=False),
        sa.Column("card_view_count", sa.Integer(), nullable=False),
        sa.Column("mcq_attempt_count", sa.Integer(), nullable=False),
        sa.Column("mcq_correct_count", sa.Integer(), nullable=False),
        sa.Column("mcq_accuracy", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("total_engagement_duration", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_daily_engagement_statuses_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_daily_engagement_statuses")),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_engagement_statuses_user_id_date"),
    )
    op.create_index(op.f("ix_daily_engagement_statuses_id"), "daily_engagement_statuses", ["id"], unique=False)
    op.create_index(
        "ix_daily_engagement_statuses_user_id_date_is_present",
        "daily_engagement_statuses", ["user_id", "date", "is_present"], unique=False,
    )

    op.create_table(
        "user_badge_statuses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("current_badge", sa.String(length=32), nullable=True),
        sa.Column("days_active", sa.Integer(), nullable=False),
        sa.Column("last_calculated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_badge_statuses_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_badge_statuses")),
        sa.UniqueConstraint("user_id", name=op.f("uq_user_badge_statuses_user_id")),
    )
    op.create_index(op.f("ix_user_badge_statuses_id"), "user_badge_statuses", ["id"], unique=False)

    op.create_table(
        "badges",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("criteria", JSONType, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_badges")),
        sa.UniqueConstraint("name", name=op.f("uq_badges_name")),
    )
    op.create_index(op.f("ix_badges_id"), "badges", ["id"], unique=False)

    op.create_table(
        "user_badges",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("badge_id", sa.Integer(), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_badges_user_id_users"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["badge_id"], ["badges.id"], name=op.f("fk_user_badges_badge_id_badges"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_badges")),
        sa.UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_id_badge_id"),
    )
    op.create_index(op.f("ix_user_badges_id"), "user_badges", ["id"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_notifications_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notifications")),
    )
    op.create_index(op.f("ix_notifications_id"), "notifications", ["id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("notifications")
    op.drop_table("user_badges")
    op.drop_table("badges")
    op.drop_table("user_badge_statuses")
    op.drop_table("daily_engagement_statuses")
    op.drop_table("daily_digest_engagements")
    op.drop_table("score_history")
    op.drop_table("user_scores")
    op.drop_table("user_events")
    op.drop_table("mcq_questions")
    op.drop_table("posts")
    op.drop_table("users")
