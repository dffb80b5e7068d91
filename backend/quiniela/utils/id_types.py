from typing import NewType

AwardId = NewType("AwardId", int)
CompetitionId = NewType("CompetitionId", int)
LeaderboardSnapshotId = NewType("LeaderboardSnapshotId", int)
MatchId = NewType("MatchId", int)
PoolId = NewType("PoolId", int)
PredictionId = NewType("PredictionId", int)
PrizeId = NewType("PrizeId", int)
RegistrationId = NewType("RegistrationId", int)
SeasonId = NewType("SeasonId", int)
StandingsId = NewType("StandingsId", int)
TenantId = NewType("TenantId", int)
UserId = NewType("UserId", int)
