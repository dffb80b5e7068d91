from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import declarative_base  # type: ignore[attr-defined]
from sqlalchemy.sql.sqltypes import JSON, BigInteger, Boolean, DateTime, Enum, Text

Base = declarative_base()
metadata = Base.metadata
DateTimeTZ = DateTime(timezone=True)

users = Table(
    "users",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("email", String, nullable=False, index=True, unique=True),
    Column("name", String, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column(
        "account_type",
        Enum(
            "REGULAR",
            "ADMIN",
            name="account_type",
        ),
        nullable=False,
        server_default="REGULAR",
    ),
)

competitions = Table(
    "competitions",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("external_id", String, nullable=True, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

seasons = Table(
    "seasons",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("competition_id", BigInteger, ForeignKey("competitions.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("year", Integer, nullable=False),
    Column("ends_at", DateTimeTZ, nullable=True),
    UniqueConstraint("competition_id", "year"),
)

pools = Table(
    "pools",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("tenant_id", BigInteger, nullable=False, index=True),
    Column("season_id", BigInteger, ForeignKey("seasons.id"), index=True, nullable=False),
    Column("slug", String, nullable=False),
    Column("name", String, nullable=False),
    Column("rule_set", JSON, nullable=False),
    Column("is_retired", Boolean, nullable=False, server_default="f"),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    UniqueConstraint("tenant_id", "slug"),
)

matches = Table(
    "matches",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("season_id", BigInteger, ForeignKey("seasons.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("round", Integer, nullable=False),
    Column("kickoff_at", DateTimeTZ, nullable=False, index=True),
    Column("home_score", Integer, nullable=True),
    Column("away_score", Integer, nullable=True),
    Column("lock_override", Boolean, nullable=True),
    Column("result_recorded_at", DateTimeTZ, nullable=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Index("ix_matches_season_id_round", "season_id", "round"),
)

registrations = Table(
    "registrations",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("user_id", BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("pool_id", BigInteger, ForeignKey("pools.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("joined_at", DateTimeTZ, nullable=False, server_default=func.now()),
    UniqueConstraint("user_id", "pool_id"),
)

predictions = Table(
    "predictions",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("pool_id", BigInteger, ForeignKey("pools.id"), index=True, nullable=False),
    Column("match_id", BigInteger, ForeignKey("matches.id"), index=True, nullable=False),
    Column("user_id", BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("home_score", Integer, nullable=False),
    Column("away_score", Integer, nullable=False),
    Column("submitted_at", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("points", Integer, nullable=True),
    Column("scored_at", DateTimeTZ, nullable=True),
    UniqueConstraint("pool_id", "match_id", "user_id"),
    CheckConstraint("home_score BETWEEN 0 AND 99", name="ck_predictions_home_score_range"),
    CheckConstraint("away_score BETWEEN 0 AND 99", name="ck_predictions_away_score_range"),
)

competition_standings = Table(
    "competition_standings",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("competition_id", BigInteger, ForeignKey("competitions.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("season_id", BigInteger, ForeignKey("seasons.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("payload", JSON, nullable=False),
    Column("fetched_at", DateTimeTZ, nullable=False, index=True),
    Column("refresh_claimed_at", DateTimeTZ, nullable=True),
    UniqueConstraint("competition_id", "season_id"),
)

prizes = Table(
    "prizes",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("pool_id", BigInteger, ForeignKey("pools.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("title", String, nullable=False),
    Column("rank_from", Integer, nullable=False),
    Column("rank_to", Integer, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    CheckConstraint("rank_from >= 1 AND rank_to >= rank_from", name="ck_prizes_rank_range"),
)

awards = Table(
    "awards",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("pool_id", BigInteger, ForeignKey("pools.id"), index=True, nullable=False),
    Column("prize_id", BigInteger, ForeignKey("prizes.id"), index=True, nullable=False),
    Column("user_id", BigInteger, ForeignKey("users.id"), index=True, nullable=False),
    Column("rank", Integer, nullable=False),
    Column("rank_from", Integer, nullable=False),
    Column("rank_to", Integer, nullable=False),
    Column("awarded_at", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("delivered_at", DateTimeTZ, nullable=True),
    Column("notified", Boolean, nullable=False, server_default="f"),
    Column("notes", Text, nullable=True),
    Column("voided_at", DateTimeTZ, nullable=True),
    Index(
        "ux_awards_pool_prize_user_active",
        "pool_id",
        "prize_id",
        "user_id",
        unique=True,
        postgresql_where=text("voided_at IS NULL"),
    ),
)

leaderboard_snapshots = Table(
    "leaderboard_snapshots",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("pool_id", BigInteger, ForeignKey("pools.id", ondelete="CASCADE"), index=True, nullable=False),
    Column(
        "kind",
        Enum(
            "LIVE",
            "FINAL",
            name="leaderboard_snapshot_kind",
        ),
        nullable=False,
    ),
    Column("entries", JSON, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

score_audits = Table(
    "score_audits",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("pool_id", BigInteger, ForeignKey("pools.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("rule_snapshot", JSON, nullable=False),
    Column("details", JSON, nullable=False),
    Column("run_at", DateTimeTZ, nullable=False, server_default=func.now()),
)
