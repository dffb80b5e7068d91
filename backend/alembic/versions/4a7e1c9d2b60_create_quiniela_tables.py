"""create quiniela tables

Revision ID: 4a7e1c9d2b60
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM

from alembic import op

# revision identifiers, used by Alembic.
revision: str | None = "4a7e1c9d2b60"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

account_type_enum = ENUM("REGULAR", "ADMIN", name="account_type", create_type=False)
leaderboard_snapshot_kind_enum = ENUM(
    "LIVE", "FINAL", name="leaderboard_snapshot_kind", create_type=False
)


def _id_column() -> sa.Column:
    return sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False)


def _created_column(name: str = "created") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    account_type_enum.create(op.get_bind(), checkfirst=True)
    leaderboard_snapshot_kind_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        _created_column(),
        sa.Column("account_type", account_type_enum, server_default="REGULAR", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "competitions",
        _id_column(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=True),
        _created_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_competitions_id"), "competitions", ["id"], unique=False)
    op.create_index(op.f("ix_competitions_external_id"), "competitions", ["external_id"], unique=False)

    op.create_table(
        "seasons",
        _id_column(),
        sa.Column("competition_id", sa.BigInteger(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("competition_id", "year"),
    )
    op.create_index(op.f("ix_seasons_id"), "seasons", ["id"], unique=False)
    op.create_index(op.f("ix_seasons_competition_id"), "seasons", ["competition_id"], unique=False)

    op.create_table(
        "pools",
        _id_column(),
        sa.Column("tenant_id", sa.BigInteger(), nullable=False),
        sa.Column("season_id", sa.BigInteger(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rule_set", sa.JSON(), nullable=False),
        sa.Column("is_retired", sa.Boolean(), server_default="f", nullable=False),
        _created_column(),
        sa.ForeignKeyConstraint(["season_id"], ["seasons.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "slug"),
    )
    op.create_index(op.f("ix_pools_id"), "pools", ["id"], unique=False)
    op.create_index(op.f("ix_pools_tenant_id"), "pools", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_pools_season_id"), "pools", ["season_id"], unique=False)

    op.create_table(
        "matches",
        _id_column(),
        sa.Column("season_id", sa.BigInteger(), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("kickoff_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("lock_override", sa.Boolean(), nullable=True),
        sa.Column("result_recorded_at", sa.DateTime(timezone=True), nullable=True),
        _created_column(),
        sa.ForeignKeyConstraint(["season_id"], ["seasons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_matches_id"), "matches", ["id"], unique=False)
    op.create_index(op.f("ix_matches_season_id"), "matches", ["season_id"], unique=False)
    op.create_index(op.f("ix_matches_kickoff_at"), "matches", ["kickoff_at"], unique=False)
    op.create_index("ix_matches_season_id_round", "matches", ["season_id", "round"], unique=False)

    op.create_table(
        "registrations",
        _id_column(),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("pool_id", sa.BigInteger(), nullable=False),
        _created_column("joined_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["pool_id"], ["pools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "pool_id"),
    )
    op.create_index(op.f("ix_registrations_id"), "registrations", ["id"], unique=False)
    op.create_index(op.f("ix_registrations_user_id"), "registrations", ["user_id"], unique=False)
    op.create_index(op.f("ix_registrations_pool_id"), "registrations", ["pool_id"], unique=False)

    op.create_table(
        "predictions",
        _id_column(),
        sa.Column("pool_id", sa.BigInteger(), nullable=False),
        sa.Column("match_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=False),
        sa.Column("away_score", sa.Integer(), nullable=False),
        _created_column("submitted_at"),
        sa.Column("points", sa.Integer(), nullable=True),
        sa.Column("scored_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["pool_id"], ["pools.id"]),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("pool_id", "match_id", "user_id"),
        sa.CheckConstraint("home_score BETWEEN 0 AND 99", name="ck_predictions_home_score_range"),
        sa.CheckConstraint("away_score BETWEEN 0 AND 99", name="ck_predictions_away_score_range"),
    )
    op.create_index(op.f("ix_predictions_id"), "predictions", ["id"], unique=False)
    op.create_index(op.f("ix_predictions_pool_id"), "predictions", ["pool_id"], unique=False)
    op.create_index(op.f("ix_predictions_match_id"), "predictions", ["match_id"], unique=False)
    op.create_index(op.f("ix_predictions_user_id"), "predictions", ["user_id"], unique=False)

    op.create_table(
        "competition_standings",
        _id_column(),
        sa.Column("competition_id", sa.BigInteger(), nullable=False),
        sa.Column("season_id", sa.BigInteger(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("refresh_claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["season_id"], ["seasons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("competition_id", "season_id"),
    )
    op.create_index(op.f("ix_competition_standings_id"), "competition_standings", ["id"], unique=False)
    op.create_index(
        op.f("ix_competition_standings_competition_id"),
        "competition_standings",
        ["competition_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_competition_standings_season_id"), "competition_standings", ["season_id"], unique=False
    )
    op.create_index(
        op.f("ix_competition_standings_fetched_at"), "competition_standings", ["fetched_at"], unique=False
    )

    op.create_table(
        "prizes",
        _id_column(),
        sa.Column("pool_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("rank_from", sa.Integer(), nullable=False),
        sa.Column("rank_to", sa.Integer(), nullable=False),
        _created_column(),
        sa.ForeignKeyConstraint(["pool_id"], ["pools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("rank_from >= 1 AND rank_to >= rank_from", name="ck_prizes_rank_range"),
    )
    op.create_index(op.f("ix_prizes_id"), "prizes", ["id"], unique=False)
    op.create_index(op.f("ix_prizes_pool_id"), "prizes", ["pool_id"], unique=False)

    op.create_table(
        "awards",
        _id_column(),
        sa.Column("pool_id", sa.BigInteger(), nullable=False),
        sa.Column("prize_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("rank_from", sa.Integer(), nullable=False),
        sa.Column("rank_to", sa.Integer(), nullable=False),
        _created_column("awarded_at"),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notified", sa.Boolean(), server_default="f", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("voided_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["pool_id"], ["pools.id"]),
        sa.ForeignKeyConstraint(["prize_id"], ["prizes.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_awards_id"), "awards", ["id"], unique=False)
    op.create_index(op.f("ix_awards_pool_id"), "awards", ["pool_id"], unique=False)
    op.create_index(op.f("ix_awards_prize_id"), "awards", ["prize_id"], unique=False)
    op.create_index(op.f("ix_awards_user_id"), "awards", ["user_id"], unique=False)
    op.create_index(
        "ux_awards_pool_prize_user_active",
        "awards",
        ["pool_id", "prize_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("voided_at IS NULL"),
    )

    op.create_table(
        "leaderboard_snapshots",
        _id_column(),
        sa.Column("pool_id", sa.BigInteger(), nullable=False),
        sa.Column("kind", leaderboard_snapshot_kind_enum, nullable=False),
        sa.Column("entries", sa.JSON(), nullable=False),
        _created_column(),
        sa.ForeignKeyConstraint(["pool_id"], ["pools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_leaderboard_snapshots_id"), "leaderboard_snapshots", ["id"], unique=False)
    op.create_index(
        op.f("ix_leaderboard_snapshots_pool_id"), "leaderboard_snapshots", ["pool_id"], unique=False
    )

    op.create_table(
        "score_audits",
        _id_column(),
        sa.Column("pool_id", sa.BigInteger(), nullable=False),
        sa.Column("rule_snapshot", sa.JSON(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        _created_column("run_at"),
        sa.ForeignKeyConstraint(["pool_id"], ["pools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_score_audits_id"), "score_audits", ["id"], unique=False)
    op.create_index(op.f("ix_score_audits_pool_id"), "score_audits", ["pool_id"], unique=False)


def downgrade() -> None:
    for table in (
        "score_audits",
        "leaderboard_snapshots",
        "awards",
        "prizes",
        "competition_standings",
        "predictions",
        "registrations",
        "matches",
        "pools",
        "seasons",
        "competitions",
        "users",
    ):
        op.drop_table(table)

    leaderboard_snapshot_kind_enum.drop(op.get_bind(), checkfirst=True)
    account_type_enum.drop(op.get_bind(), checkfirst=True)
