from enum import auto

from heliclockter import datetime_utc

from quiniela.models.db.shared import BaseModelORM
from quiniela.utils.id_types import AwardId, LeaderboardSnapshotId, PoolId, PrizeId, UserId
from quiniela.utils.types import EnumAutoStr


class Prize(BaseModelORM):
    id: PrizeId
    pool_id: PoolId
    title: str
    rank_from: int
    rank_to: int

    def covers_rank(self, rank: int) -> bool:
        return self.rank_from <= rank <= self.rank_to


class AwardInsertable(BaseModelORM):
    pool_id: PoolId
    prize_id: PrizeId
    user_id: UserId
    rank: int
    rank_from: int
    rank_to: int
    awarded_at: datetime_utc
    notified: bool = False


class Award(AwardInsertable):
    id: AwardId
    delivered_at: datetime_utc | None = None
    notes: str | None = None
    voided_at: datetime_utc | None = None


class LeaderboardSnapshotKind(EnumAutoStr):
    FINAL = auto()


class LeaderboardSnapshot(BaseModelORM):
    id: LeaderboardSnapshotId
    pool_id: PoolId
    kind: LeaderboardSnapshotKind
    created: datetime_utc
